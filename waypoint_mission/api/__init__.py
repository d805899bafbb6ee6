"""
Mission cloud service client
"""

from .client import (
    MissionApiClient,
    SessionData,
    RemoteMission,
    ApiError,
    ApiConnectionError,
    AuthError,
    HTTPError,
    ResponseFormatError,
)

__all__ = [
    'MissionApiClient',
    'SessionData',
    'RemoteMission',
    'ApiError',
    'ApiConnectionError',
    'AuthError',
    'HTTPError',
    'ResponseFormatError',
]
