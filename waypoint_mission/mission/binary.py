"""
Binary mission encoder

Serializes a Mission into the version 11 binary mission file layout.
All values are big-endian.

Layout:
    header (magic, modes, speeds, repeat, version, padding)
    waypoint count + waypoint records with their actions
    POI count + POI positions
    waypoint altitude modes and POI references
    POI altitude modes
    three constant words
    global photo interval + one photo interval per waypoint
"""

import logging
import struct
from typing import Optional

from .models import DistanceInterval, Mission, PhotoInterval, TimeInterval

logger = logging.getLogger(__name__)

# File signature
MISSION_MAGIC = 1818454125

# Written regardless of MissionConfig.version
FORMAT_VERSION = 11

HEADER_PADDING = 10

# Constant words between the POI section and the photo intervals
TRAILER_CONSTANTS = (8, 8, 0)

CRUISING_SPEED_RANGE = (-15.0, 15.0)
RC_SPEED_RANGE = (2.0, 15.0)

NO_INTERVAL = -1.0
NO_POI = -1

INT32_MAX = 2 ** 31 - 1

# Pre-compiled record layouts
HEADER = struct.Struct('>iiiiffih')
WAYPOINT = struct.Struct('>fiffhhddfiiii')
ACTION = struct.Struct('>ii')
POI_POSITION = struct.Struct('>ddf')
WAYPOINT_ALTITUDE = struct.Struct('>hfi')
POI_ALTITUDE = struct.Struct('>hf')
INTERVAL = struct.Struct('>ff')


def clamp(value: float, low: float, high: float) -> float:
    """Force value into [low, high]"""
    return max(low, min(high, value))


def _count(n: int, what: str) -> int:
    if n > INT32_MAX:
        raise OverflowError(f"Number of {what} must fit in int32, got {n}")
    return n


def _interval(interval: Optional[PhotoInterval]) -> bytes:
    if isinstance(interval, TimeInterval):
        return INTERVAL.pack(interval.seconds, NO_INTERVAL)
    if isinstance(interval, DistanceInterval):
        return INTERVAL.pack(NO_INTERVAL, interval.meters)
    return INTERVAL.pack(NO_INTERVAL, NO_INTERVAL)


def encode(mission: Mission) -> bytes:
    """
    Encode a mission to the binary mission format

    Args:
        mission: Validated mission

    Returns:
        Encoded file contents

    Raises:
        OverflowError: If a count does not fit in int32
    """
    config = mission.config
    waypoints = mission.waypoints
    pois = mission.pois

    buf = bytearray()

    buf += HEADER.pack(
        MISSION_MAGIC,
        config.heading_mode,
        config.finish_action,
        config.path_mode,
        clamp(config.cruising_speed, *CRUISING_SPEED_RANGE),
        clamp(config.rc_speed, *RC_SPEED_RANGE),
        config.n_repeat,
        FORMAT_VERSION,
    )
    buf += bytes(HEADER_PADDING)

    buf += struct.pack('>i', _count(len(waypoints), "waypoints"))
    for waypoint in waypoints:
        buf += WAYPOINT.pack(
            waypoint.altitude,
            waypoint.turn_mode,
            waypoint.heading,
            waypoint.speed,
            waypoint.stay_time,
            waypoint.max_reach_time,
            waypoint.coordinate.latitude,
            waypoint.coordinate.longitude,
            waypoint.curve_size,
            waypoint.gimbal_mode,
            waypoint.gimbal_pitch_angle,
            _count(len(waypoint.actions), "waypoint actions"),
            waypoint.repeat_actions,
        )
        for action in waypoint.actions:
            buf += ACTION.pack(*action.code_and_param())

    buf += struct.pack('>i', _count(len(pois), "POIs"))
    for poi in pois:
        buf += POI_POSITION.pack(poi.latitude, poi.longitude, poi.altitude)

    for waypoint in waypoints:
        poi_index = NO_POI if waypoint.poi_index is None else waypoint.poi_index
        buf += WAYPOINT_ALTITUDE.pack(
            waypoint.altitude_mode,
            waypoint.altitude,
            _count(poi_index, "POI index"),
        )

    for poi in pois:
        buf += POI_ALTITUDE.pack(poi.altitude_mode, poi.altitude)

    buf += struct.pack('>iii', *TRAILER_CONSTANTS)

    buf += _interval(config.photo_interval)
    for waypoint in waypoints:
        buf += _interval(waypoint.photo_interval)

    logger.debug(f"Encoded mission: {len(waypoints)} waypoints, "
                 f"{len(pois)} POIs, {len(buf)} bytes")
    return bytes(buf)
