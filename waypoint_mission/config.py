"""
Configuration management for waypoint mission tools

All parameters are configurable and can be overridden via:
1. A YAML file (default: ~/.config/waypoint-mission/config.yaml)
2. Environment variables (prefixed with WAYPOINT_)
3. Command line arguments
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from .mission.models import (
    FinishAction,
    HeadingMode,
    MissionConfig,
    PathMode,
    photo_interval_from,
)

DEFAULT_CONFIG_PATH = Path("~/.config/waypoint-mission/config.yaml")


@dataclass
class MissionSection:
    """Mission-wide settings applied to converted missions"""
    heading_mode: str = "MANUAL"        # AUTO, INITIAL, MANUAL, CUSTOM
    finish_action: str = "RTH"          # NONE, RTH, LAND, BACK_TO_FIRST, REVERSE
    path_mode: str = "STRAIGHT_LINES"   # STRAIGHT_LINES, CURVED_TURNS
    cruising_speed: float = 8.0         # m/s
    rc_speed: float = 14.0              # m/s
    repeat: int = 1

    # Mission photo interval, <= 0 means unset
    photo_time_interval: float = 0.0       # seconds
    photo_distance_interval: float = 0.0   # meters

    def to_mission_config(self) -> MissionConfig:
        """
        Build the MissionConfig for these settings

        Raises:
            ValueError: If a mode name is unknown
        """
        try:
            heading_mode = HeadingMode[self.heading_mode.upper()]
            finish_action = FinishAction[self.finish_action.upper()]
            path_mode = PathMode[self.path_mode.upper()]
        except KeyError as e:
            raise ValueError(f"Unknown mission setting {e}") from None

        return MissionConfig(
            heading_mode=heading_mode,
            finish_action=finish_action,
            path_mode=path_mode,
            cruising_speed=float(self.cruising_speed),
            rc_speed=float(self.rc_speed),
            n_repeat=int(self.repeat),
            photo_interval=photo_interval_from(
                float(self.photo_time_interval),
                float(self.photo_distance_interval),
            ),
        )


@dataclass
class ApiSection:
    """Mission cloud service"""
    base_url: str = "https://parse.litchiapi.com"
    app_id: str = "APjd97yuFQ9TUiIIKgDiqzczon1z2339RxINQe6g"
    username: str = ""
    password: str = ""
    timeout: float = 30.0               # seconds


@dataclass
class LoggingSection:
    """Logging configuration"""
    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    """Main configuration container"""

    mission: MissionSection = field(default_factory=MissionSection)
    api: ApiSection = field(default_factory=ApiSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    SECTIONS = ('mission', 'api', 'logging')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load configuration from YAML file and environment"""
        config = cls()

        path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        path = path.expanduser()

        if path.exists():
            with open(path, 'r') as f:
                yaml_config = yaml.safe_load(f)
                if yaml_config:
                    config._update_from_dict(yaml_config)
        elif config_path:
            raise FileNotFoundError(f"Config file not found: {config_path}")

        config._update_from_env()

        return config

    def _update_from_dict(self, d: dict):
        """Update config from dictionary (e.g., YAML)"""
        for section_name, section_data in d.items():
            if section_name in self.SECTIONS and isinstance(section_data, dict):
                section = getattr(self, section_name)
                for key, value in section_data.items():
                    if hasattr(section, key):
                        setattr(section, key, value)

    def _update_from_env(self):
        """Override config from environment variables"""
        prefix = "WAYPOINT_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                # Parse WAYPOINT_SECTION_KEY format
                parts = key[len(prefix):].lower().split("_", 1)
                if len(parts) == 2:
                    section_name, param_name = parts
                    if section_name in self.SECTIONS:
                        section = getattr(self, section_name)
                        if hasattr(section, param_name):
                            current_value = getattr(section, param_name)
                            if isinstance(current_value, bool):
                                setattr(section, param_name, value.lower() in ('true', '1', 'yes'))
                            elif isinstance(current_value, int):
                                setattr(section, param_name, int(value))
                            elif isinstance(current_value, float):
                                setattr(section, param_name, float(value))
                            else:
                                setattr(section, param_name, value)

    def save(self, config_path: str):
        """Save current configuration to YAML file"""
        data = {}
        for section_name in self.SECTIONS:
            section = getattr(self, section_name)
            data[section_name] = {k: v for k, v in section.__dict__.items()}

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False)
