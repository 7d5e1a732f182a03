# coding: utf-8

import codecs
import datetime
import logging
import socket
from collections.abc import Mapping

_logger = logging.getLogger(__name__)

# keys of the serialized event
KEY_SOURCE_HOST = "@source_host"
KEY_TIMESTAMP = "@timestamp"
KEY_FIELDS = "@fields"
KEY_MESSAGE = "message"

# keys in @fields
KEY_LEVEL = "level"
KEY_THREADID = "threadid"
KEY_FILE = "file"
KEY_LINE = "line"
KEY_STACK = "stack"


class ConverterDefinitionError(Exception):
    """ConverterDefinitionError is raised when the given configuration
    is inappropriate (e.g., extra fields that are not a mapping).
    """
    pass


class LogConvertFailure(Exception):
    """Base class of errors raised while converting one log line.

    If you want to pass lines that cannot be converted,
    use try-except with this exception.
    """
    pass


class MalformedHeader(LogConvertFailure):
    """MalformedHeader is raised when the header of an IWEF line
    cannot be scanned: the line is empty or too short,
    an expected delimiter is missing, or a str line
    cannot be encoded in the converter encoding.
    """
    pass


class LineNumberParseFailure(LogConvertFailure):
    """LineNumberParseFailure is raised when the line number part
    of an IWEF header is not an integer.

    Attributes:
        raw (str): the substring that failed to parse.
    """

    def __init__(self, msg, raw=None):
        super().__init__(msg)
        self.raw = raw


class SerializationFailure(LogConvertFailure):
    """SerializationFailure is raised when an event cannot be
    encoded into JSON (or decoded from it).
    """
    pass


def _abbreviate(line, size=50):
    if len(line) > size:
        return line[:size]
    return line


def _system_clock():
    return datetime.datetime.now().astimezone()


class EventConverter:
    """Converter from glog lines to logstash JSON events.

    One conversion classifies the line by its first byte.
    Lines starting with a severity marker (I, W, E or F) are
    IWEF lines, and their header is extracted into event fields:

    * level (INFO, WARNING, ERROR or FATAL)
    * threadid
    * file
    * line (int)

    followed by the message part. Other lines are kept as is
    in the message (including the line feed code).
    The stack trace, if given and not empty, is added as "stack" field.
    At last, every item of extra_fields is merged into the fields.
    Extra fields overwrite the header fields of the same key.

    Example:
        >>> conv = EventConverter(host="test.here.com")
        >>> event = conv.process_line(b"I0512 10:23:45.123456   7 main.go:42] hello world\\n")
        >>> event.fields
        {'level': 'INFO', 'threadid': '7', 'file': 'main.go', 'line': 42}
        >>> event.message
        'hello world'
        >>> conv.convert(b"I0512 10:23:45.123456   7 main.go:42] hello world\\n")
        b'{"@source_host":"test.here.com","@timestamp":"2013-10-24T09:30:46.947024+02:00",...'

    Conversions hold no state, so they can run concurrently.
    extra_fields is kept by reference and only read in conversions;
    if you update it while conversions may be running,
    guard it with your own lock.

    Args:
        host (str, optional): Source host of the events.
            Defaults to the result of socket.gethostname().
        extra_fields (dict, optional): Fields added to every event.
        clock (callable, optional): Function that returns
            the current time in datetime.datetime (timezone aware).
            Defaults to local time.
        encoding (str, optional): Encoding of the input lines.
    """

    def __init__(self, host: str = None, extra_fields: Mapping = None,
                 clock=None, encoding: str = "utf-8"):
        if extra_fields is None:
            extra_fields = dict()
        elif not isinstance(extra_fields, Mapping):
            raise ConverterDefinitionError(
                "extra_fields must be a mapping, not {0}".format(
                    type(extra_fields).__name__))
        for key in extra_fields:
            if not isinstance(key, str):
                msg = "extra field keys must be str: {0!r}".format(key)
                raise ConverterDefinitionError(msg)
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ConverterDefinitionError(
                "unknown encoding: {0}".format(encoding)) from e

        self.host = host if host is not None else socket.gethostname()
        self.extra_fields = extra_fields
        self.clock = clock if clock is not None else _system_clock
        self.encoding = encoding

    def _to_bytes(self, data):
        if isinstance(data, str):
            try:
                return data.encode(self.encoding)
            except UnicodeEncodeError as e:
                msg = "cannot encode line in {0}: {1!r}".format(
                    self.encoding, _abbreviate(data))
                raise MalformedHeader(msg) from e
        return bytes(data)

    def _to_str(self, data):
        return data.decode(self.encoding, errors="replace")

    def process_line(self, line, stack=None):
        """Convert a log line into a :class:`~event.LogEvent`.

        Args:
            line (bytes or str): A log line, usually with line feed code.
            stack (bytes or str, optional): Stack trace related to the line.

        Returns:
            :class:`~event.LogEvent`

        Raises:
            MalformedHeader: The header of an IWEF line cannot be scanned.
            LineNumberParseFailure: The line number is not an integer.
        """
        from .event import LogEvent
        from .reader import parse_iwef
        from .severity import classify

        data = self._to_bytes(line)
        if len(data) == 0:
            raise MalformedHeader("empty line")

        event = LogEvent()
        level = classify(data[0])
        if level is None:
            _logger.debug("unclassified line: %r", _abbreviate(data))
            event.message = self._to_str(data)
        else:
            _logger.debug("%s line: %r", level, _abbreviate(data))
            header = parse_iwef(data)
            event.fields[KEY_LEVEL] = level
            event.fields[KEY_THREADID] = self._to_str(header.threadid)
            event.fields[KEY_FILE] = self._to_str(header.file)
            event.fields[KEY_LINE] = header.line
            if stack:
                event.fields[KEY_STACK] = self._to_str(self._to_bytes(stack))
            event.message = self._to_str(header.message)

        event.fields.update(self.extra_fields)
        event.source_host = self.host
        event.timestamp = self.clock()
        return event

    def convert(self, line, stack=None):
        """Convert a log line into a logstash JSON event.

        Args:
            line (bytes or str): A log line, usually with line feed code.
            stack (bytes or str, optional): Stack trace related to the line.

        Returns:
            bytes: JSON event encoded in UTF-8.

        Raises:
            LogConvertFailure: The line cannot be converted
                (see :meth:`process_line`), or the event cannot be
                serialized (:class:`SerializationFailure`).
        """
        return self.process_line(line, stack).to_json()

    def write(self, line):
        """Same as :meth:`convert` without stack trace."""
        return self.convert(line)

    def write_with_stack(self, line, stack):
        """Same as :meth:`convert`."""
        return self.convert(line, stack)


def init_converter(host=None, extra_fields=None, clock=None, encoding="utf-8"):
    """Generate :class:`EventConverter` object.

    If no arguments are given, the converter uses the hostname
    of this machine, no extra fields, and local time.

    Args:
        host (str, optional): Source host of the events.
        extra_fields (dict, optional): Fields added to every event.
        clock (callable, optional): Function returning current datetime.
        encoding (str, optional): Encoding of the input lines.
    """
    return EventConverter(host=host, extra_fields=extra_fields,
                          clock=clock, encoding=encoding)
