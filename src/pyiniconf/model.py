# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2026/10/18 14:20:37
# @Author : Kariko Lin

"""
Line-preserving INI document.

Unlike a plain `dict` of dicts, an `IniDocument` remembers *every* physical
line of the file (comments, blank lines, junk), so that a single put/remove
rewrites the file without touching anything else.

    ```ini
    top = level        ; section is None
    [Example]
    ; comment
    foo = 42
    ```
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace

from .consts import (
    COMMENT_MARKS, DELIMITERS, ESCAPE, FALLBACK_CODEC, QUOTE, LineKind
)


class IniContractViolation(Exception):
    """Programming error: closed store, missing key, bad buffer size...

    Never raised for I/O problems, and never caught by this package.
    """
    pass


def is_top_level(section: str | None) -> bool:
    return section is None or section == ''


def _has_loose_comment(text: str) -> bool:
    # "a ;b" would be cut on read, "a;b" would not.
    for i in range(1, len(text)):
        if text[i] in COMMENT_MARKS and text[i - 1].isspace():
            return True
    return False


def quote_value(value: str) -> str:
    """Wrap `value` in double quotes when reading it back would lose
    something; otherwise return it untouched."""
    if (
        value != value.strip()
        or (len(value) >= 2 and value[0] == QUOTE and value[-1] == QUOTE)
        or value[:1] in COMMENT_MARKS
        or _has_loose_comment(value)
    ):
        return QUOTE + value.replace(QUOTE, ESCAPE + QUOTE) + QUOTE
    return value


def escape_key(key: str) -> str:
    # the escape char goes first, or it would double the others.
    key = key.replace(ESCAPE, ESCAPE * 2)
    for i in DELIMITERS:
        key = key.replace(i, ESCAPE + i)
    return key


def check_key(key: str) -> None:
    if '\n' in key or '\r' in key:
        raise IniContractViolation(f'line break in key {key!r}')
    if key != key.strip():
        raise IniContractViolation(f'key {key!r} has surrounding whitespace')
    if key and (key[0] in COMMENT_MARKS or key[0] == '['):
        raise IniContractViolation(
            f'key {key!r} would be read back as a comment or a section')


def check_value(value: str) -> None:
    if '\n' in value or '\r' in value:
        raise IniContractViolation(f'line break in value {value!r}')


@dataclass(frozen=True)
class IniLine:
    kind: LineKind
    raw: str
    # section name for SECTION lines
    name: str | None = None
    key: str | None = None
    value: str | None = None
    # everything before the value, e.g. "key = "
    head: str = ''

    @classmethod
    def header(cls, section: str) -> 'IniLine':
        return cls(LineKind.SECTION, f'[{section}]', name=section)

    @classmethod
    def pair(cls, key: str, value: str) -> 'IniLine':
        head = escape_key(key) + DELIMITERS[0]
        return cls(LineKind.ENTRY, head + quote_value(value),
                   key=key, value=value, head=head)

    @classmethod
    def blank(cls) -> 'IniLine':
        return cls(LineKind.BLANK, '')

    def with_value(self, value: str) -> 'IniLine':
        """Same key and spacing, new value. A trailing comment is dropped."""
        return replace(self, raw=self.head + quote_value(value), value=value)


class IniDocument(Sequence[IniLine]):
    """An INI file as an ordered list of `IniLine`s.

    Sections are never stored; they are derived by `walk()`ing the lines.
    A section may be declared more than once, lookups always stop at the
    first match.
    """

    def __init__(
        self,
        lines: Sequence[IniLine] | None = None,
        encoding: str = FALLBACK_CODEC
    ) -> None:
        self._lines: list[IniLine] = list(lines or [])
        self.encoding = encoding

    def __getitem__(self, idx):
        return self._lines[idx]

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return '<IniDocument { .lines = %d, .encoding = %s }>' % (
            len(self._lines), self.encoding)

    def walk(self) -> Iterator[tuple[str | None, int, IniLine]]:
        """Yield `(section, index, line)`; `section` is `None` before the
        first header, and a header line belongs to the section it opens."""
        section: str | None = None
        for idx, line in enumerate(self._lines):
            if line.kind is LineKind.SECTION:
                section = line.name
            yield section, idx, line

    def entries(self) -> Iterator[tuple[str | None, str, str]]:
        for section, _, line in self.walk():
            if line.kind is LineKind.ENTRY:
                yield section, line.key, line.value

    def find(self, section: str | None, key: str) -> int | None:
        top = is_top_level(section)
        for sect, idx, line in self.walk():
            if line.kind is not LineKind.ENTRY or line.key != key:
                continue
            if (sect is None) if top else (sect == section):
                return idx
        return None

    def get(self, section: str | None, key: str) -> str | None:
        idx = self.find(section, key)
        return None if idx is None else self._lines[idx].value

    def section_names(self) -> list[str]:
        # `[]` has no name to return, skip it.
        ret: dict[str, None] = {}
        for line in self._lines:
            if line.kind is LineKind.SECTION and line.name:
                ret.setdefault(line.name, None)
        return list(ret)

    def key_names(self, section: str | None) -> list[str]:
        top = is_top_level(section)
        ret: dict[str, None] = {}
        for sect, key, _ in self.entries():
            if (sect is None) if top else (sect == section):
                ret.setdefault(key, None)
        return list(ret)

    def __insert_point(self, section: str | None) -> int | None:
        """Where a new pair of `section` goes; `None` if no such section."""
        top = is_top_level(section)
        start = 0 if top else None
        last_entry = None
        for sect, idx, line in self.walk():
            if line.kind is LineKind.SECTION:
                if start is not None:
                    break  # end of the first block
                if not top and sect == section:
                    start = idx + 1
                continue
            if start is not None and line.kind is LineKind.ENTRY:
                last_entry = idx
        if start is None:
            return None
        return start if last_entry is None else last_entry + 1

    def put(self, section: str | None, key: str, value: str | None) -> bool:
        """Insert, replace or (with `value=None`) delete one pair.

        Returns `True` if the document changed.
        """
        idx = self.find(section, key)
        if value is None:
            if idx is None:
                return False
            del self._lines[idx]
            return True
        if idx is not None:
            if self._lines[idx].value == value:
                return False
            self._lines[idx] = self._lines[idx].with_value(value)
            return True

        pos = self.__insert_point(section)
        if pos is not None:
            self._lines.insert(pos, IniLine.pair(key, value))
            return True
        # brand new section goes to the end.
        if self._lines and self._lines[-1].kind is not LineKind.BLANK:
            self._lines.append(IniLine.blank())
        self._lines.append(IniLine.header(section))
        self._lines.append(IniLine.pair(key, value))
        return True

    def erase_section(self, section: str | None) -> bool:
        """Drop every block of `section`, header and comments included.
        For the top level only the pairs go, there is no header."""
        top = is_top_level(section)
        keep = [
            line for sect, _, line in self.walk()
            if not (
                (sect is None and line.kind is LineKind.ENTRY) if top
                else sect == section
            )
        ]
        changed = len(keep) != len(self._lines)
        self._lines = keep
        return changed

    def dumps(self, terminator: str = '\n') -> str:
        if not self._lines:
            return ''
        return terminator.join(i.raw for i in self._lines) + terminator
