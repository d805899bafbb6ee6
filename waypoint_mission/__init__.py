"""
Waypoint Mission

Converts CSV waypoint missions into binary mission files.
"""

from .errors import (
    MissionError,
    FormatError,
    RecordLengthError,
    EnumValueError,
    ParseError,
    ActionError,
    ValidationError,
    InvalidMission,
)
from .mission import Mission, MissionConfig, ingest, encode, read_csv, read_csv_file

__version__ = "0.1.0"

__all__ = [
    'MissionError',
    'FormatError',
    'RecordLengthError',
    'EnumValueError',
    'ParseError',
    'ActionError',
    'ValidationError',
    'InvalidMission',
    'Mission',
    'MissionConfig',
    'ingest',
    'encode',
    'read_csv',
    'read_csv_file',
]
