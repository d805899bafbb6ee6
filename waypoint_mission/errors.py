"""
Mission conversion errors

All ingestion failures derive from MissionError so callers can abort
the whole conversion with a single except clause.
"""

from typing import List, Optional


class MissionError(Exception):
    """Base class for mission conversion errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.row: Optional[int] = None

    def at_row(self, row: int) -> 'MissionError':
        """Attach the zero-based row index the error was raised for"""
        self.row = row
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.row is not None:
            return f"row {self.row}: {message}"
        return message


class FormatError(MissionError):
    """Record layout or enumeration code is not what the format expects"""
    pass


class RecordLengthError(FormatError):
    """Record has the wrong number of fields"""

    def __init__(self, actual: int, expected: int):
        super().__init__(
            f"Incorrect length of record, got {actual} but expected {expected}"
        )
        self.actual = actual
        self.expected = expected


class EnumValueError(FormatError):
    """Numeric code has no matching enumeration member"""

    def __init__(self, enum_name: str, value: int):
        super().__init__(f"Could not convert {value} to {enum_name}")
        self.enum_name = enum_name
        self.value = value


class ParseError(MissionError):
    """Field does not hold a valid numeric literal"""

    def __init__(self, index: int, literal: str, type_name: str):
        super().__init__(f"Field #{index}: cannot parse {literal!r} as {type_name}")
        self.index = index
        self.literal = literal
        self.type_name = type_name


class ActionError(MissionError):
    """Unknown waypoint action type"""

    def __init__(self, action_type: int):
        super().__init__(f"Invalid action type {action_type}")
        self.action_type = action_type


class ValidationError(MissionError):
    """Raised when mission validation fails"""

    def __init__(self, errors: List[str]):
        super().__init__(f"Invalid mission: {'; '.join(errors)}")
        self.errors = errors


InvalidMission = ValidationError
