# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2026/10/18 15:01:26
# @Author : Kariko Lin

"""Parse-on-read and rewrite-on-write of a single INI file.

Line rules:

- `; ...` and `# ...` (leading whitespace allowed) are comments.
- `[name]` opens a section, `name` is taken verbatim; text after `]` is
  ignored.
- `key = value` or `key: value`, split on the first `=`/`:` that is not
  escaped by `\\`. `\\\\` in a key is one literal backslash.
- a `;` or `#` *preceded by whitespace* and outside double quotes starts a
  trailing comment. `url=http://a/#top` keeps its `#`.
- `"..."` around a value is stripped, `\\"` inside becomes `"`.

Anything else is kept as-is and written back untouched.
"""

import logging
import os
from io import StringIO, TextIOBase
from os import PathLike
from os.path import join, split
from re import compile as regex

import chardet

from .abstract import FileHandler
from .consts import (
    CODEC_CONFIDENCE, COMMENT_MARKS, DELIMITERS, ESCAPE, FALLBACK_CODEC,
    LINE_TERMINATOR, QUOTE, TEMP_PREFIX, LineKind
)
from .model import IniDocument, IniLine


def _find_delimiter(text: str) -> int:
    i = 0
    while i < len(text):
        if text[i] == ESCAPE:
            i += 2  # whatever follows is literal
            continue
        if text[i] in DELIMITERS:
            return i
        i += 1
    return -1


_KEY_ESCAPES = regex(r"\\([\\=:])")


def _unescape_key(key: str) -> str:
    return _KEY_ESCAPES.sub(r"\1", key)


def strip_comment(text: str) -> str:
    """Cut a trailing comment off the value part of a line."""
    in_quote = False
    i = 0
    while i < len(text):
        c = text[i]
        if c == ESCAPE and text[i + 1:i + 2] == QUOTE:
            i += 2
            continue
        if c == QUOTE:
            in_quote = not in_quote
        elif (c in COMMENT_MARKS and not in_quote
              and i > 0 and text[i - 1].isspace()):
            return text[:i]
        i += 1
    return text


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == QUOTE and text[-1] == QUOTE:
        return text[1:-1].replace(ESCAPE + QUOTE, QUOTE)
    return text


def parse_line(raw: str) -> IniLine:
    stripped = raw.strip()
    if not stripped:
        return IniLine(LineKind.BLANK, raw)
    if stripped[0] in COMMENT_MARKS:
        return IniLine(LineKind.COMMENT, raw)
    if stripped[0] == '[':
        end = stripped.find(']', 1)
        if end < 0:
            return IniLine(LineKind.OTHER, raw)
        return IniLine(LineKind.SECTION, raw, name=stripped[1:end])

    pos = _find_delimiter(raw)
    if pos < 0:
        return IniLine(LineKind.OTHER, raw)
    key = _unescape_key(raw[:pos].strip())
    if not key:
        return IniLine(LineKind.OTHER, raw)
    rest = raw[pos + 1:]
    lead = len(rest) - len(rest.lstrip())
    return IniLine(
        LineKind.ENTRY, raw,
        key=key,
        value=unquote(strip_comment(rest)),
        head=raw[:pos + 1] + rest[:lead])


class IniParser(FileHandler[IniDocument]):
    def __init__(
        self,
        filename: str | PathLike[str],
        encoding: str = FALLBACK_CODEC
    ) -> None:
        super().__init__(filename)
        self._codec = encoding

    @property
    def temp_filename(self) -> str:
        """`~name.ini` beside the target. Fixed, not unique per call."""
        folder, base = split(self._fn)
        return join(folder, TEMP_PREFIX + base)

    @staticmethod
    def readstream(
        buf: TextIOBase, encoding: str = FALLBACK_CODEC
    ) -> IniDocument:
        """读取解码好的字符串流。

        如没有特殊需求，直接调用`self.read()`便是。
        """
        lines: list[IniLine] = []
        for i in buf:
            if not lines:
                i = i.lstrip('\ufeff')
            lines.append(parse_line(i.rstrip('\r\n')))
        return IniDocument(lines, encoding)

    def _decode_file(self) -> tuple[StringIO, str]:
        with open(self._fn, 'rb') as fp:
            raw = fp.read()

        guess = chardet.detect(raw)
        codec = guess.get('encoding')
        if codec is None or guess.get('confidence', 0) < CODEC_CONFIDENCE:
            codec = FALLBACK_CODEC

        # latin-1 never fails.
        try:
            buf = raw.decode(codec)
        except (UnicodeDecodeError, LookupError):
            codec = 'latin-1'
            buf = raw.decode(codec)
        logging.debug(f'{self._fn} decoded as {codec}')
        return StringIO(buf), codec

    def read(self) -> IniDocument:
        """Read the whole file. A missing file is an empty document.

        Other `OSError`s propagate.
        """
        try:
            with open(self._fn, 'r', encoding=self._codec) as fp:
                return self.readstream(fp, self._codec)
        except FileNotFoundError:
            return IniDocument(encoding=self._codec)
        except UnicodeDecodeError:
            return self.readstream(*self._decode_file())

    def write(self, instance: IniDocument) -> bool:
        """Write `instance` to the temp file, then rename it over the target.

        Returns `False` on any failure; the target is left untouched and the
        temp file is removed.
        """
        tmp = self.temp_filename
        try:
            with open(tmp, 'w', encoding=instance.encoding, newline='') as fp:
                fp.write(instance.dumps(LINE_TERMINATOR))
            os.replace(tmp, self._fn)
        except (OSError, UnicodeEncodeError) as e:
            logging.error(f'Unable to rewrite {self._fn}: {e}')
            self.__drop_temp(tmp)
            return False
        return True

    @staticmethod
    def __drop_temp(tmp: str) -> None:
        try:
            os.remove(tmp)
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.warning(f'Temp file {tmp} left behind: {e}')

    def __str__(self) -> str:
        return 'INI file: ' + super().__str__() + f' ({self._codec})'
