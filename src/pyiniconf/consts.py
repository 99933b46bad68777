# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2026/10/18 14:05:40
# @Author : Kariko Lin

from enum import Enum

# same as INICONFIGFILE_BUFFERSIZE, terminator included.
BUFFER_SIZE = 4096
# scratch buffers for numeric conversion.
NUMBER_READ_SIZE = 64
NUMBER_WRITE_SIZE = 32

COMMENT_MARKS = (';', '#')
DELIMITERS = ('=', ':')
ESCAPE = '\\'
QUOTE = '"'

TEMP_PREFIX = '~'
LINE_TERMINATOR = '\n'
FALLBACK_CODEC = 'utf-8'
# below this `chardet` guess is ignored.
CODEC_CONFIDENCE = 0.8

TRUE_MARKS = ('1', 'y', 't')
FALSE_MARKS = ('0', 'n', 'f')


class LineKind(str, Enum):
    BLANK = 'blank'
    COMMENT = 'comment'
    SECTION = 'section'
    ENTRY = 'entry'
    OTHER = 'other'  # no delimiter, kept as-is.
