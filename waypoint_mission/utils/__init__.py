"""
Utility modules
"""

from .geo import bearing, haversine_distance, wrap_angle_180
from .logger import setup_logging

__all__ = ['bearing', 'haversine_distance', 'wrap_angle_180', 'setup_logging']
