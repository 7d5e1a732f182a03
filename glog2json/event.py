# coding: utf-8

import datetime
import json
import re

from . import _common

_KEY_SOURCE_HOST = _common.KEY_SOURCE_HOST
_KEY_TIMESTAMP = _common.KEY_TIMESTAMP
_KEY_FIELDS = _common.KEY_FIELDS
_KEY_MESSAGE = _common.KEY_MESSAGE

_re_fraction = re.compile(r"\.(\d+)")

# event attribute names for each JSON key
_ATTRIBUTES = {
    _KEY_SOURCE_HOST: "source_host",
    _KEY_TIMESTAMP: "timestamp",
    _KEY_FIELDS: "fields",
    _KEY_MESSAGE: "message",
}


class LogEvent:
    """Structured event converted from one log line.

    LogEvent is serialized into logstash JSON format::

        {
           "@source_host": "test.here.com",
           "@timestamp": "2013-10-24T09:30:46.947024+02:00",
           "@fields": {
              "level": "INFO",
              "threadid": "400004",
              "file": "file.go",
              "line": 10
           },
           "message": "hello"
        }

    Args:
        source_host (str, optional): Host that emitted the line.
        timestamp (datetime.datetime, optional): Time of the conversion.
            Naive datetimes are regarded as local time when serialized.
        fields (dict, optional): Header items and extra fields.
        message (str, optional): Message part of the line.
    """

    def __init__(self, source_host="", timestamp=None, fields=None, message=""):
        self.source_host = source_host
        self.timestamp = timestamp
        self.fields = fields if fields is not None else dict()
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, LogEvent):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "LogEvent(source_host={0!r}, timestamp={1!r}, fields={2!r}, message={3!r})".format(
            self.source_host, self.timestamp, self.fields, self.message)

    def to_dict(self):
        """Get the event as dict with the keys of logstash JSON format.
        The timestamp is kept in datetime.datetime."""
        return {_KEY_SOURCE_HOST: self.source_host,
                _KEY_TIMESTAMP: self.timestamp,
                _KEY_FIELDS: self.fields,
                _KEY_MESSAGE: self.message}

    def to_json(self):
        """Serialize the event.

        Returns:
            bytes: JSON text encoded in UTF-8.

        Raises:
            SerializationFailure: Some fields cannot be represented in JSON
                (e.g., sets, objects, or NaN).
        """
        d = self.to_dict()
        d[_KEY_TIMESTAMP] = format_timestamp(self.timestamp)
        try:
            d[_KEY_FIELDS] = dict(sorted(self.fields.items()))
            text = json.dumps(d, ensure_ascii=False, allow_nan=False,
                              separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise _common.SerializationFailure(
                "cannot serialize event: {0}".format(e)) from e
        return text.encode("utf-8")

    @classmethod
    def from_json(cls, data):
        """Deserialize an event from logstash JSON format.

        Keys are matched case-insensitively if not exactly matched.
        Unknown keys are ignored.

        Args:
            data (bytes or str): JSON text.

        Returns:
            :class:`LogEvent`

        Raises:
            SerializationFailure: The input is not a JSON object
                in the expected shape.
        """
        try:
            obj = json.loads(data)
        except ValueError as e:
            raise _common.SerializationFailure(
                "invalid JSON: {0}".format(e)) from e
        if not isinstance(obj, dict):
            raise _common.SerializationFailure(
                "event must be a JSON object, not {0}".format(type(obj).__name__))

        event = cls()
        for key, value in obj.items():
            attr = _lookup_attribute(key)
            if attr is None:
                continue
            if attr == "timestamp":
                value = parse_timestamp(value)
            elif attr == "fields":
                if value is None:
                    value = dict()
                elif not isinstance(value, dict):
                    raise _common.SerializationFailure(
                        "{0} must be a JSON object".format(_KEY_FIELDS))
            elif value is None:
                value = ""
            elif not isinstance(value, str):
                raise _common.SerializationFailure(
                    "{0} must be a string".format(key))
            setattr(event, attr, value)
        return event


def _lookup_attribute(key):
    try:
        return _ATTRIBUTES[key]
    except KeyError:
        pass
    folded = key.casefold()
    for name, attr in _ATTRIBUTES.items():
        if name.casefold() == folded:
            return attr
    return None


def format_timestamp(dt):
    """Format datetime.datetime in RFC3339 (None as is)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat()


def parse_timestamp(string):
    """Parse RFC3339 timestamp string into datetime.datetime.

    Raises:
        SerializationFailure
    """
    if string is None:
        return None
    if not isinstance(string, str):
        raise _common.SerializationFailure(
            "{0} must be a string".format(_KEY_TIMESTAMP))
    # fromisoformat before python 3.11 accepts neither "Z"
    # nor fractions other than 3 or 6 digits (e.g., nanoseconds)
    if string.endswith(("Z", "z")):
        string = string[:-1] + "+00:00"
    string = _re_fraction.sub(_fix_fraction, string, count=1)
    try:
        return datetime.datetime.fromisoformat(string)
    except ValueError as e:
        raise _common.SerializationFailure(
            "invalid {0}: {1!r}".format(_KEY_TIMESTAMP, string)) from e


def _fix_fraction(mo):
    return "." + mo.group(1)[:6].ljust(6, "0")
