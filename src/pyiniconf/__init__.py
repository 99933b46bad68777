# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2026/10/18 14:00:03
# @Author : Kariko Lin

import logging

from .export import IniJsonHandler, IniYamlHandler, export_store, import_store
from .model import IniContractViolation, IniDocument, IniLine
from .parser import IniParser
from .store import IniStore, open
from .typed import IniConfigFile

__all__ = [
    'IniStore', 'IniConfigFile', 'IniContractViolation', 'open',
    'IniDocument', 'IniLine', 'IniParser',
    'IniJsonHandler', 'IniYamlHandler', 'export_store', 'import_store'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
