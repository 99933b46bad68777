# -*- encoding: utf-8 -*-
# @File   : typed.py
# @Time   : 2026/10/18 16:30:52
# @Author : Kariko Lin

"""One `get()` and one `put()` for every value type.

The type of `default` (or of `value`) picks the accessor:

    ```python
    with IniConfigFile('myConfig.ini') as ini:
        ini.get('MySection', 'DoubleValue', 0.0)   # -> float
        ini.get('MySection', 'LongValue', 0)       # -> int
        ini.get('MySection', 'StringValue')        # -> str
        ini.put('MySection', 'Flag', True)         # written as 1
    ```
"""

from os import PathLike
from types import TracebackType
from typing import TypeVar

from .consts import BUFFER_SIZE, FALLBACK_CODEC
from .store import IniStore

T = TypeVar('T', str, int, float, bool)


class IniConfigFile:
    def __init__(
        self,
        filename: str | PathLike[str],
        encoding: str = FALLBACK_CODEC,
        bufsize: int = BUFFER_SIZE
    ) -> None:
        self._ini = IniStore(filename, encoding, bufsize)

    @property
    def store(self) -> IniStore:
        return self._ini

    def __enter__(self) -> 'IniConfigFile':
        self._ini.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None
    ) -> None:
        self._ini.__exit__(exc_type, exc, tb)

    def close(self) -> None:
        self._ini.close()

    def get(
        self, section: str | None, key: str, default: T = ''
    ) -> T:
        # bool first, it is an int as well.
        match default:
            case bool():
                return self._ini.get_bool(section, key, default)
            case int():
                return self._ini.get_long(section, key, default)
            case float():
                return self._ini.get_double(section, key, default)
            case _:
                return self._ini.get_string(section, key, default)

    def put(
        self,
        section: str | None,
        key: str | None,
        value: str | int | float | bool | None
    ) -> bool:
        """`True` on success. `key=None` erases the section."""
        match value:
            case bool():
                return self._ini.put_string(
                    section, key, '1' if value else '0')
            case int():
                return self._ini.put_long(section, key, value)
            case float():
                return self._ini.put_double(section, key, value)
            case _:
                return self._ini.put_string(section, key, value)

    def get_section(self, idx: int) -> str:
        return self._ini.get_section(idx)

    def get_key(self, section: str | None, idx: int) -> str:
        return self._ini.get_key(section, idx)

    def remove_key(self, section: str | None, key: str | None) -> None:
        self._ini.remove_key(section, key)
