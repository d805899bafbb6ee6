"""
Mission models

Waypoints, points of interest and mission-wide settings that make up a
waypoint mission, plus the validating Mission aggregate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from ..errors import ActionError, EnumValueError, ValidationError
from ..utils.geo import bearing, haversine_distance, wrap_angle_180

# Maximum number of action slots per waypoint
MAX_ACTIONS = 15

# Action type code meaning "empty slot"
NO_ACTION = -1


class HeadingMode(IntEnum):
    """Aircraft heading behaviour between waypoints"""
    AUTO = 0
    INITIAL = 1
    MANUAL = 2
    CUSTOM = 3


class FinishAction(IntEnum):
    """What the aircraft does after the last waypoint"""
    NONE = 0
    RTH = 1
    LAND = 2
    BACK_TO_FIRST = 3
    REVERSE = 4


class PathMode(IntEnum):
    """Path shape between waypoints"""
    STRAIGHT_LINES = 0
    CURVED_TURNS = 1


class GimbalPitchMode(IntEnum):
    """Gimbal pitch control at a waypoint"""
    DISABLED = 0
    FOCUS_POI = 1
    INTERPOLATE = 2


class AltitudeMode(IntEnum):
    """Reference for altitude values"""
    ABSOLUTE = 0
    ABOVE_GROUND = 1


E = TypeVar('E', bound=IntEnum)


def enum_from_code(enum_cls: Type[E], code: int) -> E:
    """
    Convert a numeric code to an enumeration member

    Raises:
        EnumValueError: If no member has that code
    """
    try:
        return enum_cls(code)
    except ValueError:
        raise EnumValueError(enum_cls.__name__, code) from None


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in degrees"""
    latitude: float
    longitude: float

    def heading_towards(self, other: Coordinate) -> float:
        """Initial great-circle bearing to another coordinate (-180 to 180)"""
        return wrap_angle_180(
            bearing(self.latitude, self.longitude, other.latitude, other.longitude)
        )

    def distance_to(self, other: Coordinate) -> float:
        """Great-circle distance in meters"""
        return haversine_distance(self.latitude, self.longitude,
                                  other.latitude, other.longitude)


class ActionType(IntEnum):
    """Waypoint action codes"""
    STAY_FOR = 0
    TAKE_PHOTO = 1
    START_RECORDING = 2
    STOP_RECORDING = 3
    ROTATE_AIRCRAFT = 4
    TILT_CAMERA = 5


@dataclass(frozen=True)
class Action(ABC):
    """Base class for all waypoint actions"""

    @property
    @abstractmethod
    def action_type(self) -> ActionType:
        """Return the action type"""
        pass

    @property
    def param(self) -> int:
        """Integer parameter stored next to the action code"""
        return 0

    def code_and_param(self) -> Tuple[int, int]:
        return int(self.action_type), self.param

    @classmethod
    @abstractmethod
    def from_param(cls, param: int) -> 'Action':
        """Create action from its integer parameter"""
        pass

    @staticmethod
    def from_slot(action_type: int, param: int) -> Optional['Action']:
        """
        Decode one (type, param) action slot

        Returns:
            Action instance, or None for an empty slot

        Raises:
            ActionError: If the type code is unknown
        """
        if action_type == NO_ACTION:
            return None

        action_cls = ACTION_CLASSES.get(action_type)
        if action_cls is None:
            raise ActionError(action_type)
        return action_cls.from_param(param)


@dataclass(frozen=True)
class StayForAction(Action):
    """Hover at the waypoint"""
    seconds: float

    @property
    def action_type(self) -> ActionType:
        return ActionType.STAY_FOR

    @property
    def param(self) -> int:
        # Stored as milliseconds
        return round(self.seconds * 1000)

    @classmethod
    def from_param(cls, param: int) -> 'StayForAction':
        return cls(seconds=param / 1000.0)


@dataclass(frozen=True)
class TakePhotoAction(Action):
    """Trigger camera shutter"""

    @property
    def action_type(self) -> ActionType:
        return ActionType.TAKE_PHOTO

    @classmethod
    def from_param(cls, param: int) -> 'TakePhotoAction':
        return cls()


@dataclass(frozen=True)
class StartRecordingAction(Action):
    """Start video recording"""

    @property
    def action_type(self) -> ActionType:
        return ActionType.START_RECORDING

    @classmethod
    def from_param(cls, param: int) -> 'StartRecordingAction':
        return cls()


@dataclass(frozen=True)
class StopRecordingAction(Action):
    """Stop video recording"""

    @property
    def action_type(self) -> ActionType:
        return ActionType.STOP_RECORDING

    @classmethod
    def from_param(cls, param: int) -> 'StopRecordingAction':
        return cls()


@dataclass(frozen=True)
class RotateAircraftAction(Action):
    """Yaw the aircraft to an angle"""
    angle: int

    @property
    def action_type(self) -> ActionType:
        return ActionType.ROTATE_AIRCRAFT

    @property
    def param(self) -> int:
        return self.angle

    @classmethod
    def from_param(cls, param: int) -> 'RotateAircraftAction':
        return cls(angle=param)


@dataclass(frozen=True)
class TiltCameraAction(Action):
    """Pitch the gimbal to an angle"""
    angle: int

    @property
    def action_type(self) -> ActionType:
        return ActionType.TILT_CAMERA

    @property
    def param(self) -> int:
        return self.angle

    @classmethod
    def from_param(cls, param: int) -> 'TiltCameraAction':
        return cls(angle=param)


# Action code mapping
ACTION_CLASSES: Dict[int, Type[Action]] = {
    ActionType.STAY_FOR: StayForAction,
    ActionType.TAKE_PHOTO: TakePhotoAction,
    ActionType.START_RECORDING: StartRecordingAction,
    ActionType.STOP_RECORDING: StopRecordingAction,
    ActionType.ROTATE_AIRCRAFT: RotateAircraftAction,
    ActionType.TILT_CAMERA: TiltCameraAction,
}


@dataclass(frozen=True)
class TimeInterval:
    """Take a photo every N seconds"""
    seconds: float


@dataclass(frozen=True)
class DistanceInterval:
    """Take a photo every N meters"""
    meters: float


PhotoInterval = Union[TimeInterval, DistanceInterval]


def photo_interval_from(time_s: float, distance_m: float) -> Optional[PhotoInterval]:
    """
    Pick the photo interval from a time and a distance value

    Values <= 0 are unset. Time wins when both are set.
    """
    if time_s > 0:
        return TimeInterval(time_s)
    if distance_m > 0:
        return DistanceInterval(distance_m)
    return None


@dataclass(frozen=True)
class POI:
    """Point of interest, compared by value"""
    latitude: float
    longitude: float
    altitude: float
    altitude_mode: AltitudeMode = AltitudeMode.ABSOLUTE

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class Waypoint:
    """One waypoint of the flight path"""
    coordinate: Coordinate
    altitude: float
    heading: float                  # degrees, -180 to 180
    curve_size: float = 0.0
    rotation_dir: int = 0
    gimbal_mode: GimbalPitchMode = GimbalPitchMode.DISABLED
    gimbal_pitch_angle: int = 0
    altitude_mode: AltitudeMode = AltitudeMode.ABSOLUTE
    speed: float = 0.0
    poi_index: Optional[int] = None  # index into Mission.pois
    actions: Tuple[Action, ...] = ()
    photo_interval: Optional[PhotoInterval] = None
    turn_mode: int = 0
    stay_time: int = 3
    max_reach_time: int = 0
    repeat_actions: int = 1

    def __post_init__(self):
        object.__setattr__(self, "actions", tuple(self.actions))


@dataclass
class MissionConfig:
    """Mission-wide settings"""
    heading_mode: HeadingMode = HeadingMode.MANUAL
    finish_action: FinishAction = FinishAction.RTH
    path_mode: PathMode = PathMode.STRAIGHT_LINES
    cruising_speed: float = 8.0     # m/s, clamped to -15..15 when encoded
    rc_speed: float = 14.0          # m/s, clamped to 2..15 when encoded
    n_repeat: int = 1
    version: int = 11               # always written as 11
    photo_interval: Optional[PhotoInterval] = None


class Mission:
    """
    Complete waypoint mission

    Waypoints and POIs are fixed at construction. Only the config can
    be changed afterwards.
    """

    def __init__(self,
                 waypoints: Iterable[Waypoint],
                 pois: Iterable[POI],
                 config: Optional[MissionConfig] = None):
        """
        Create and validate a mission

        Raises:
            ValidationError: If a waypoint references a missing POI
        """
        self._waypoints: Tuple[Waypoint, ...] = tuple(waypoints)
        self._pois: Tuple[POI, ...] = tuple(pois)
        self._config = config if config is not None else MissionConfig()

        errors = self.validate()
        if errors:
            raise ValidationError(errors)

    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return self._waypoints

    @property
    def pois(self) -> Tuple[POI, ...]:
        return self._pois

    @property
    def config(self) -> MissionConfig:
        return self._config

    def validate(self) -> List[str]:
        """
        Validate POI references

        Returns:
            List of validation error messages (empty if valid)
        """
        # TODO: range checks for coordinates, heading, speeds and gimbal angles
        errors = []
        for i, waypoint in enumerate(self._waypoints):
            index = waypoint.poi_index
            if index is not None and not 0 <= index < len(self._pois):
                errors.append(
                    f"Waypoint {i}: POI index {index} out of range "
                    f"({len(self._pois)} POIs)"
                )
        return errors

    def to_binary(self) -> bytes:
        """Encode to the binary mission format"""
        from .binary import encode
        return encode(self)

    @property
    def action_count(self) -> int:
        """Total number of waypoint actions"""
        return sum(len(wp.actions) for wp in self._waypoints)

    @property
    def path_length(self) -> float:
        """Straight-line length of the waypoint path in meters"""
        return sum(
            a.coordinate.distance_to(b.coordinate)
            for a, b in zip(self._waypoints, self._waypoints[1:])
        )

    def get_summary(self) -> Dict[str, Any]:
        """Get mission summary for display"""
        return {
            "waypoint_count": len(self._waypoints),
            "poi_count": len(self._pois),
            "action_count": self.action_count,
            "path_length_m": round(self.path_length, 1),
            "heading_mode": self._config.heading_mode.name,
            "finish_action": self._config.finish_action.name,
        }

    def __repr__(self) -> str:
        return (f"Mission(waypoints={len(self._waypoints)}, "
                f"pois={len(self._pois)}, config={self._config!r})")
