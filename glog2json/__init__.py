# coding: utf-8

__version__ = '0.1.0'

from ._common import EventConverter, init_converter
from ._common import (ConverterDefinitionError, LogConvertFailure, MalformedHeader,
                      LineNumberParseFailure, SerializationFailure)
from .event import LogEvent
from .load import load_from_script, load_from_config
from .severity import Severity, classify
