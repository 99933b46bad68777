# -*- encoding: utf-8 -*-
# @File   : export.py
# @Time   : 2026/10/18 17:12:45
# @Author : Kariko Lin

"""Swap a whole INI file with a YAML / JSON snapshot.

The snapshot is a plain `{section: {key: value}}` mapping; pairs outside any
section live under `''`. Comments and layout are not carried over.
"""

import json
import logging

import yaml

from .abstract import FileHandler
from .consts import FALLBACK_CODEC
from .store import IniStore

IniSnapshot = dict[str, dict[str, str]]


class SnapshotHandler(FileHandler[IniSnapshot]):
    def __init__(self, filename: str, encoding: str = FALLBACK_CODEC) -> None:
        super().__init__(filename)
        self._codec = encoding

    @staticmethod
    def _normalize(src: object) -> IniSnapshot:
        # yaml may turn `foo: 42` into an int, keep everything str.
        if not isinstance(src, dict):
            raise ValueError(f'snapshot root must be a mapping, not {src!r}')
        ret: IniSnapshot = {}
        for sect, pairs in src.items():
            ret[str(sect) if sect is not None else ''] = {
                str(k): '' if v is None else str(v)
                for k, v in (pairs or {}).items()
            }
        return ret


class IniJsonHandler(SnapshotHandler):
    def read(self) -> IniSnapshot:
        with open(self._fn, 'r', encoding=self._codec) as fp:
            return self._normalize(json.load(fp))

    def write(self, instance: IniSnapshot, indent: int = 2) -> None:
        with open(self._fn, 'w', encoding=self._codec) as fp:
            json.dump(instance, fp, ensure_ascii=False, indent=indent)


class IniYamlHandler(SnapshotHandler):
    def read(self) -> IniSnapshot:
        with open(self._fn, 'r', encoding=self._codec) as fp:
            return self._normalize(yaml.safe_load(fp) or {})

    def write(self, instance: IniSnapshot) -> None:
        with open(self._fn, 'w', encoding=self._codec) as fp:
            yaml.safe_dump(instance, fp, allow_unicode=True, sort_keys=False)


def export_store(store: IniStore, handler: SnapshotHandler) -> bool:
    """Dump what `store` currently holds on disk.

    Returns `False` if the INI file couldn't be read.
    """
    snapshot: IniSnapshot = {}

    def collect(section: str, key: str, value: str) -> bool:
        snapshot.setdefault(section, {}).setdefault(key, value)
        return True

    if not store.browse(collect):
        return False
    handler.write(snapshot)
    return True


def import_store(store: IniStore, handler: SnapshotHandler) -> bool:
    """`put_string()` every pair of the snapshot into `store`.

    One rewrite per pair. Returns `True` only if all of them succeeded.
    """
    ok = True
    for sect, pairs in handler.read().items():
        for k, v in pairs.items():
            if not store.put_string(sect, k, v):
                logging.error(f'Import stopped short at [{sect}] {k}')
                ok = False
    return ok
