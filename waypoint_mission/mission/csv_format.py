"""
CSV waypoint ingestion

Reads waypoint rows (46 fields each) into a Mission. Rows carry the
waypoint pose, 15 action slots, altitude mode, speed, an optional POI
and photo intervals.

Field layout:
    0  latitude         (f64)     38 altitude mode        (i16)
    1  longitude        (f64)     39 speed                (f32)
    2  altitude         (f32)     40 POI latitude         (f64)
    3  heading          (f32)     41 POI longitude        (f64)
    4  curve size       (f32)     42 POI altitude         (f32)
    5  rotation dir     (i32)     43 POI altitude mode    (i16)
    6  gimbal mode      (i32)     44 photo time interval  (f32)
    7  gimbal pitch     (i32)     45 photo dist interval  (f32)
    8..37 action slots, (type i32, param i32) pairs
"""

import csv
import logging
import math
import re
import struct
from dataclasses import replace
from pathlib import Path
from typing import IO, Iterable, List, Optional, Sequence, Tuple, Union

from ..errors import MissionError, ParseError, RecordLengthError
from .models import (
    MAX_ACTIONS,
    POI,
    Action,
    AltitudeMode,
    Coordinate,
    GimbalPitchMode,
    Mission,
    MissionConfig,
    Waypoint,
    enum_from_code,
    photo_interval_from,
)

logger = logging.getLogger(__name__)

RECORD_LENGTH = 46

ACTIONS_OFFSET = 8
ACTIONS_END = ACTIONS_OFFSET + MAX_ACTIONS * 2

# Field indices
LATITUDE = 0
LONGITUDE = 1
ALTITUDE = 2
HEADING = 3
CURVE_SIZE = 4
ROTATION_DIR = 5
GIMBAL_MODE = 6
GIMBAL_PITCH_ANGLE = 7
ALTITUDE_MODE = ACTIONS_END
SPEED = ACTIONS_END + 1
POI_LATITUDE = ACTIONS_END + 2
POI_LONGITUDE = ACTIONS_END + 3
POI_ALTITUDE = ACTIONS_END + 4
POI_ALTITUDE_MODE = ACTIONS_END + 5
PHOTO_TIME_INTERVAL = ACTIONS_END + 6
PHOTO_DISTANCE_INTERVAL = ACTIONS_END + 7

# Signed integer widths
INT_RANGES = {
    "i16": (-2 ** 15, 2 ** 15 - 1),
    "i32": (-2 ** 31, 2 ** 31 - 1),
}

_FLOAT32 = struct.Struct('>f')

# Plain ASCII literals only, no whitespace, underscores or other digits
INT_LITERAL = re.compile(r"[+-]?[0-9]+")
FLOAT_LITERAL = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def to_float32(value: float) -> float:
    """Round a float to float32 precision"""
    return _FLOAT32.unpack(_FLOAT32.pack(value))[0]


def _float(literal: str) -> float:
    if not FLOAT_LITERAL.fullmatch(literal):
        raise ValueError(literal)
    return float(literal)


def parse_f64(record: Sequence[str], index: int) -> float:
    """Parse a coordinate, which must be finite"""
    literal = record[index]
    try:
        value = _float(literal)
    except ValueError:
        raise ParseError(index, literal, "f64") from None
    if not math.isfinite(value):
        raise ParseError(index, literal, "f64")
    return value


def parse_f32(record: Sequence[str], index: int) -> float:
    """Parse a float and round it to float32 precision"""
    literal = record[index]
    try:
        return to_float32(_float(literal))
    except (ValueError, OverflowError):
        raise ParseError(index, literal, "f32") from None


def parse_int(record: Sequence[str], index: int, type_name: str = "i32") -> int:
    literal = record[index]
    low, high = INT_RANGES[type_name]
    if not INT_LITERAL.fullmatch(literal):
        raise ParseError(index, literal, type_name)
    value = int(literal)
    if not low <= value <= high:
        raise ParseError(index, literal, type_name)
    return value


def parse_actions(record: Sequence[str]) -> List[Action]:
    """Decode the action slots of a record, dropping empty ones"""
    actions = []
    for slot in range(MAX_ACTIONS):
        offset = ACTIONS_OFFSET + slot * 2
        action_type = parse_int(record, offset)
        param = parse_int(record, offset + 1)

        action = Action.from_slot(action_type, param)
        if action is not None:
            actions.append(action)
    return actions


class PoiRegistry:
    """
    POIs in first-discovery order

    POIs are deduplicated by exact value equality with a linear scan,
    so indices never move once handed out.
    """

    def __init__(self):
        self._pois: List[POI] = []

    def resolve(self, poi: POI) -> int:
        """
        Get the index of a POI, adding it if not seen before

        Returns:
            Index into the POI list
        """
        for index, known in enumerate(self._pois):
            if known == poi:
                return index

        self._pois.append(poi)
        logger.debug(f"New POI #{len(self._pois) - 1}: {poi}")
        return len(self._pois) - 1

    @property
    def pois(self) -> List[POI]:
        return list(self._pois)

    def __len__(self) -> int:
        return len(self._pois)


def parse_record(record: Sequence[str]) -> Tuple[Waypoint, Optional[POI]]:
    """
    Parse one record into a waypoint and its POI candidate

    The waypoint has no POI index yet; the caller resolves it.

    Raises:
        RecordLengthError: If the record does not have 46 fields
        ParseError: If a field is not a valid number
        EnumValueError: If a mode code is out of range
        ActionError: If an action type is unknown
    """
    if len(record) != RECORD_LENGTH:
        raise RecordLengthError(len(record), RECORD_LENGTH)

    latitude = parse_f64(record, LATITUDE)
    longitude = parse_f64(record, LONGITUDE)
    altitude = parse_f32(record, ALTITUDE)
    heading = parse_f32(record, HEADING)
    curve_size = parse_f32(record, CURVE_SIZE)
    rotation_dir = parse_int(record, ROTATION_DIR)
    gimbal_mode = parse_int(record, GIMBAL_MODE)
    gimbal_pitch_angle = parse_int(record, GIMBAL_PITCH_ANGLE)
    altitude_mode = parse_int(record, ALTITUDE_MODE, "i16")
    speed = parse_f32(record, SPEED)
    poi_latitude = parse_f64(record, POI_LATITUDE)
    poi_longitude = parse_f64(record, POI_LONGITUDE)
    poi_altitude = parse_f32(record, POI_ALTITUDE)
    poi_altitude_mode = parse_int(record, POI_ALTITUDE_MODE, "i16")
    photo_time_interval = parse_f32(record, PHOTO_TIME_INTERVAL)
    photo_distance_interval = parse_f32(record, PHOTO_DISTANCE_INTERVAL)

    waypoint = Waypoint(
        coordinate=Coordinate(latitude, longitude),
        altitude=altitude,
        heading=heading,
        curve_size=curve_size,
        rotation_dir=rotation_dir,
        gimbal_mode=enum_from_code(GimbalPitchMode, gimbal_mode),
        gimbal_pitch_angle=gimbal_pitch_angle,
        altitude_mode=enum_from_code(AltitudeMode, altitude_mode),
        speed=speed,
        actions=parse_actions(record),
        photo_interval=photo_interval_from(photo_time_interval, photo_distance_interval),
    )

    poi_altitude_mode = enum_from_code(AltitudeMode, poi_altitude_mode)

    poi = None
    if poi_latitude != 0 and poi_longitude != 0 and poi_altitude != 0:
        poi = POI(poi_latitude, poi_longitude, poi_altitude, poi_altitude_mode)

    return waypoint, poi


def ingest(rows: Iterable[Sequence[str]],
           config: Optional[MissionConfig] = None) -> Mission:
    """
    Build a mission from waypoint rows

    Rows are processed in order and the first bad row aborts the whole
    conversion. Waypoints with a POI get their heading replaced by the
    bearing towards it.

    Args:
        rows: Records of 46 string fields
        config: Mission settings (defaults if None)

    Returns:
        Validated Mission

    Raises:
        MissionError: On the first malformed row or an invalid mission
    """
    waypoints: List[Waypoint] = []
    registry = PoiRegistry()

    for row_index, record in enumerate(rows):
        try:
            waypoint, poi = parse_record(record)
        except MissionError as e:
            e.at_row(row_index)
            raise

        if poi is not None:
            waypoint = replace(
                waypoint,
                poi_index=registry.resolve(poi),
                heading=to_float32(waypoint.coordinate.heading_towards(poi.coordinate)),
            )

        waypoints.append(waypoint)

    logger.debug(f"Parsed {len(waypoints)} waypoints, {len(registry)} POIs")

    return Mission(waypoints, registry.pois,
                   config if config is not None else MissionConfig())


def _non_empty(reader: Iterable[List[str]]) -> Iterable[List[str]]:
    for record in reader:
        if record:
            yield record


def read_csv(stream: IO[str],
             config: Optional[MissionConfig] = None,
             has_header: bool = True) -> Mission:
    """
    Read a mission from a CSV stream

    Args:
        stream: Open text stream
        config: Mission settings (defaults if None)
        has_header: Skip the first line as column names

    Returns:
        Validated Mission
    """
    reader = csv.reader(stream)
    if has_header:
        next(reader, None)
    return ingest(_non_empty(reader), config)


def read_csv_file(path: Union[str, Path],
                  config: Optional[MissionConfig] = None,
                  has_header: bool = True) -> Mission:
    """Read a mission from a CSV file"""
    with open(path, newline='') as f:
        mission = read_csv(f, config, has_header)
    logger.info(f"Loaded mission from {path}: {len(mission.waypoints)} waypoints")
    return mission
