"""
Mission module

Waypoint mission model, CSV ingestion and binary encoding.
"""

from .models import (
    Action,
    ActionType,
    StayForAction,
    TakePhotoAction,
    StartRecordingAction,
    StopRecordingAction,
    RotateAircraftAction,
    TiltCameraAction,
    TimeInterval,
    DistanceInterval,
    PhotoInterval,
    HeadingMode,
    FinishAction,
    PathMode,
    GimbalPitchMode,
    AltitudeMode,
    Coordinate,
    POI,
    Waypoint,
    MissionConfig,
    Mission,
)
from .csv_format import ingest, read_csv, read_csv_file, PoiRegistry
from .binary import encode

__all__ = [
    # Actions
    'Action',
    'ActionType',
    'StayForAction',
    'TakePhotoAction',
    'StartRecordingAction',
    'StopRecordingAction',
    'RotateAircraftAction',
    'TiltCameraAction',
    # Photo intervals
    'TimeInterval',
    'DistanceInterval',
    'PhotoInterval',
    # Enumerations
    'HeadingMode',
    'FinishAction',
    'PathMode',
    'GimbalPitchMode',
    'AltitudeMode',
    # Mission
    'Coordinate',
    'POI',
    'Waypoint',
    'MissionConfig',
    'Mission',
    # Ingestion / encoding
    'ingest',
    'read_csv',
    'read_csv_file',
    'PoiRegistry',
    'encode',
]
