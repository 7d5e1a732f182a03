# coding: utf-8

"""glog2json.reader extracts header items from IWEF lines,
the default line format of glog::

    [IWEF]mmdd hh:mm:ss.uuuuuu threadid file:line] msg

The severity marker and the timestamp have fixed width,
so the reader skips them by position.
The other items are scanned with their delimiters.
"""

import re
from collections import namedtuple

from . import _common

# severity marker (1) + mmdd hh:mm:ss.uuuuuu (20) + space (1)
HEADER_OFFSET = 22

_SPACE = 32
_COLON = 58
_RBRACKET = 93
_LINE_END = b"\n"

_re_line_number = re.compile(rb"[+-]?[0-9]+")

IWEFHeader = namedtuple("IWEFHeader", ["threadid", "file", "line", "message"])
IWEFHeader.__doc__ = """Items extracted from an IWEF line.
threadid, file and message are bytes, line is int."""


class IWEFReader:
    """Read cursor over the bytes of one IWEF line.

    Every move of the cursor is bounds-checked.
    Reading beyond the data raises :class:`~_common.MalformedHeader`.

    Args:
        data (bytes): A log line.
        position (int, optional): Initial read offset.
    """

    def __init__(self, data, position=HEADER_OFFSET):
        self._data = data
        self._pos = position

    @property
    def position(self):
        return self._pos

    def _fail(self, reason):
        msg = "{0} at offset {1}: {2!r}".format(
            reason, self._pos, _common._abbreviate(self._data))
        raise _common.MalformedHeader(msg)

    def skip(self):
        """Advance the cursor by one byte."""
        if self._pos >= len(self._data):
            self._fail("unexpected end of line")
        self._pos += 1

    def skip_all_space(self):
        """Advance the cursor over a run of spaces.
        At least one other byte must follow the spaces."""
        while True:
            if self._pos >= len(self._data):
                self._fail("unexpected end of line")
            if self._data[self._pos] != _SPACE:
                return
            self._pos += 1

    def bytes_up_to(self, delim):
        """Read bytes up to (not including) a delimiter.
        The cursor stops on the delimiter.

        Args:
            delim (int): Delimiter byte value.

        Returns:
            bytes
        """
        if self._pos > len(self._data):
            self._fail("unexpected end of line")
        end = self._data.find(bytes((delim,)), self._pos)
        if end < 0:
            self._fail("delimiter {0!r} not found".format(chr(delim)))
        start = self._pos
        self._pos = end
        return self._data[start:end]

    def bytes_up_to_line_end(self):
        """Read all remaining bytes without the line feed code.
        The cursor is not moved."""
        rest = self._data[self._pos:]
        if rest.endswith(_LINE_END):
            rest = rest[:-len(_LINE_END)]
        return rest


def parse_line_number(raw):
    """Parse the line number part of a header in base 10.

    Raises:
        LineNumberParseFailure
    """
    if _re_line_number.fullmatch(raw) is None:
        string = raw.decode("ascii", errors="replace")
        msg = "invalid line number: {0!r}".format(string)
        raise _common.LineNumberParseFailure(msg, raw=string)
    return int(raw)


def parse_iwef(data):
    """Extract header items from an IWEF line.

    The severity marker is not checked here;
    see :func:`~severity.classify`.

    Args:
        data (bytes): A log line, usually with line feed code.

    Returns:
        :class:`IWEFHeader`

    Raises:
        MalformedHeader: The line is shorter than the timestamp part,
            or some delimiters are missing.
        LineNumberParseFailure: The line number is not an integer.
    """
    if len(data) <= HEADER_OFFSET:
        msg = "line too short for IWEF header ({0} bytes): {1!r}".format(
            len(data), _common._abbreviate(data))
        raise _common.MalformedHeader(msg)

    r = IWEFReader(data)
    r.skip_all_space()
    threadid = r.bytes_up_to(_SPACE)
    r.skip()  # space
    filename = r.bytes_up_to(_COLON)
    r.skip()  # :
    line = parse_line_number(r.bytes_up_to(_RBRACKET))
    r.skip()  # ]
    r.skip()  # space
    return IWEFHeader(threadid, filename, line, r.bytes_up_to_line_end())
