# -*- encoding: utf-8 -*-
# @File   : store.py
# @Time   : 2026/10/18 15:47:03
# @Author : Kariko Lin

"""Typed get/put access to one INI file.

Every call goes back to the disk: reads scan the whole file, writes
re-materialise it and swap it in atomically. Nothing is cached, so a store
always sees what is on disk right now.

    ```python
    with IniStore('Example.ini') as ini:
        foo = ini.get_int('Example', 'foo', -1)
        ini.put_string('Example', 'bar', 'hello world ')
    ```

There is no locking. Reading from several places at once is fine; writing
while anybody else touches the same file is not (the temp file name is fixed,
`~Example.ini`). Serialise writers yourself.
"""

import logging
import re
import warnings
from collections.abc import Callable, Iterator
from os import PathLike
from types import TracebackType

from .consts import (
    BUFFER_SIZE, FALLBACK_CODEC, FALSE_MARKS, NUMBER_READ_SIZE,
    NUMBER_WRITE_SIZE, TRUE_MARKS
)
from .model import (
    IniContractViolation, IniDocument, check_key, check_value, is_top_level
)
from .parser import IniParser

__all__ = ['IniStore', 'open']

_INT_PREFIX = re.compile(r'\s*([+-]?\d+)')
_HEX_PREFIX = re.compile(r'\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)')
_FLOAT_PREFIX = re.compile(
    r'\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?'
    r'|inf(?:inity)?|nan))',
    re.IGNORECASE)


def parse_int(text: str) -> int:
    """`atoi()`: leading decimal digits, else 0."""
    if (m := _INT_PREFIX.match(text)) is None:
        return 0
    return int(m.group(1))


def parse_long(text: str) -> int:
    """Like `parse_int`, but text whose second char is `x`/`X` is read as
    hexadecimal (`0x1F`). `-0x10` is not: its second char is `0`, so it
    reads as decimal `-0`."""
    if text[1:2] not in ('x', 'X'):
        return parse_int(text)
    if (m := _HEX_PREFIX.match(text)) is None:
        return 0
    value = int(m.group(2), 16)
    return -value if m.group(1) == '-' else value


def parse_double(text: str) -> float:
    """`strtod()`: longest leading float, else 0.0."""
    if (m := _FLOAT_PREFIX.match(text)) is None:
        return 0.0
    return float(m.group(1))


def _truncate(value: str, bufsize: int) -> str:
    # one slot goes to the terminator, as in the C buffers.
    if len(value) < bufsize:
        return value
    warnings.warn(
        f'Value "{value[:16]}..." ({len(value)} chars) truncated '
        f'to {bufsize - 1} chars.')
    return value[:bufsize - 1]


class IniStore:
    """Accessor layer bound to a single INI file path.

    Args:
        filename: the INI file. It doesn't have to exist yet.
        encoding: codec used to read, and to write new files.
            Files that can't be decoded with it are sniffed by `chardet`.
        bufsize: size of string results, terminator slot included;
            longer values are truncated to `bufsize - 1` chars.
    """

    def __init__(
        self,
        filename: str | PathLike[str],
        encoding: str = FALLBACK_CODEC,
        bufsize: int = BUFFER_SIZE
    ) -> None:
        if filename is None:
            raise IniContractViolation('filename is required')
        if bufsize <= 0:
            raise IniContractViolation(f'invalid buffer size {bufsize}')
        self.__parser = IniParser(filename, encoding)
        self.__bufsize = bufsize
        self.__closed = False

    @property
    def filename(self) -> str:
        return self.__parser.filename

    @property
    def closed(self) -> bool:
        return self.__closed

    def __require_open(self) -> None:
        if self.__closed:
            raise IniContractViolation(f'{self!r} used after close()')

    def __enter__(self) -> 'IniStore':
        self.__require_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None
    ) -> None:
        if not self.__closed:
            self.close()

    def __repr__(self) -> str:
        return '<IniStore %s%s>' % (
            self.filename, ' (closed)' if self.__closed else '')

    def close(self) -> None:
        """Invalidate the store. Closing twice is a contract violation."""
        self.__require_open()
        self.__closed = True

    # -- reading --

    def _load(self) -> IniDocument | None:
        try:
            return self.__parser.read()
        except OSError as e:
            logging.warning(f'Unable to read {self.filename}: {e}')
            return None

    def get_string(
        self,
        section: str | None,
        key: str,
        default: str | None = '',
        bufsize: int | None = None
    ) -> str:
        """Value of `key` in `section` (`None`/`''`: outside any section).

        `default` is returned unchanged when the key, or the whole file, is
        missing. Found values are truncated to `bufsize - 1` chars.
        """
        self.__require_open()
        if key is None:
            raise IniContractViolation('key is required')
        if bufsize is None:
            bufsize = self.__bufsize
        if bufsize <= 0:
            raise IniContractViolation(f'invalid buffer size {bufsize}')

        doc = self._load()
        value = None if doc is None else doc.get(section, key)
        if value is None:
            return '' if default is None else default
        return _truncate(value, bufsize)

    def __get_number(self, section: str | None, key: str) -> str:
        return self.get_string(section, key, '', NUMBER_READ_SIZE)

    def get_int(self, section: str | None, key: str, default: int = 0) -> int:
        self.__require_open()
        text = self.__get_number(section, key)
        return default if not text else parse_int(text)

    def get_long(
        self, section: str | None, key: str, default: int = 0
    ) -> int:
        self.__require_open()
        text = self.__get_number(section, key)
        return default if not text else parse_long(text)

    def get_double(
        self, section: str | None, key: str, default: float = 0.0
    ) -> float:
        self.__require_open()
        text = self.__get_number(section, key)
        return default if not text else parse_double(text)

    def get_bool(
        self, section: str | None, key: str, default: bool = False
    ) -> bool:
        """`1`/`y`/`t`... is true, `0`/`n`/`f`... is false (first char,
        any case); anything else gives `default`."""
        self.__require_open()
        text = self.get_string(section, key, '', NUMBER_READ_SIZE).lower()
        if text.startswith(TRUE_MARKS):
            return True
        if text.startswith(FALSE_MARKS):
            return False
        return default

    # -- enumerating --

    def get_section(self, idx: int) -> str:
        """Name of the `idx`-th distinct section, `''` past the end.

        Scans the file on every call:

            ```python
            idx = 0
            while section := ini.get_section(idx):
                idx += 1
            ```
        """
        self.__require_open()
        if idx < 0:
            raise IniContractViolation(f'negative index {idx}')
        doc = self._load()
        names = [] if doc is None else doc.section_names()
        if idx >= len(names):
            return ''
        return _truncate(names[idx], self.__bufsize)

    def get_key(self, section: str | None, idx: int) -> str:
        """Name of the `idx`-th key of `section`, `''` past the end."""
        self.__require_open()
        if idx < 0:
            raise IniContractViolation(f'negative index {idx}')
        doc = self._load()
        names = [] if doc is None else doc.key_names(section)
        if idx >= len(names):
            return ''
        return _truncate(names[idx], self.__bufsize)

    def sections(self) -> Iterator[str]:
        idx = 0
        while name := self.get_section(idx):
            yield name
            idx += 1

    def keys(self, section: str | None) -> Iterator[str]:
        idx = 0
        while name := self.get_key(section, idx):
            yield name
            idx += 1

    def browse(self, callback: Callable[[str, str, str], object]) -> bool:
        """Call `callback(section, key, value)` for every pair, in file
        order, until it returns something falsy. Top level pairs come with
        `section=''`.

        Returns `False` only when the file can't be read.
        """
        self.__require_open()
        doc = self._load()
        if doc is None:
            return False
        for section, key, value in doc.entries():
            if not callback(section or '', key, value):
                break
        return True

    # -- writing --

    def put_string(
        self, section: str | None, key: str | None, value: str | None
    ) -> bool:
        """Insert or replace one pair and rewrite the file.

        - `value=None` deletes the pair.
        - `key=None` or `''` erases the whole `section`.

        Returns `False` (file untouched) when reading or rewriting fails.
        """
        self.__require_open()
        if key:
            check_key(key)
        if value is not None:
            check_value(value)
        if not is_top_level(section) and (
                '\n' in section or '\r' in section or ']' in section):
            raise IniContractViolation(f'invalid section name {section!r}')

        doc = self._load()
        if doc is None:
            return False
        changed = (doc.erase_section(section) if not key
                   else doc.put(section, key, value))
        if not changed:
            logging.debug(
                f'{self.filename}: [{section or ""}] {key} unchanged')
            return True
        return self.__parser.write(doc)

    def put_long(self, section: str | None, key: str, value: int) -> bool:
        self.__require_open()
        return self.put_string(
            section, key, ('%d' % value)[:NUMBER_WRITE_SIZE - 1])

    put_int = put_long

    def put_double(
        self, section: str | None, key: str, value: float
    ) -> bool:
        self.__require_open()
        return self.put_string(
            section, key, ('%e' % value)[:NUMBER_WRITE_SIZE - 1])

    def remove_key(self, section: str | None, key: str | None) -> None:
        """Same as `put_string(section, key, None)`, result dropped."""
        self.put_string(section, key, None)


def open(
    filename: str | PathLike[str],
    encoding: str = FALLBACK_CODEC,
    bufsize: int = BUFFER_SIZE
) -> IniStore:
    return IniStore(filename, encoding, bufsize)
