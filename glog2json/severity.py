# coding: utf-8

"""glog2json.severity classifies log lines by their severity marker,
the first character of glog lines."""

import enum


class Severity(str, enum.Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


# severity marker (byte value) -> level name
_MARKERS = {
    ord("I"): Severity.INFO.value,
    ord("W"): Severity.WARNING.value,
    ord("E"): Severity.ERROR.value,
    ord("F"): Severity.FATAL.value,
}


def classify(marker):
    """Get the level name of a severity marker.

    Args:
        marker (int or str): First byte of a log line
            (an int, as given by indexing bytes) or a one-character string.

    Returns:
        str: One of "INFO", "WARNING", "ERROR" and "FATAL".
        None if the marker is not a severity marker (unclassified line).
    """
    if isinstance(marker, str):
        if len(marker) != 1:
            return None
        marker = ord(marker)
    return _MARKERS.get(marker)
