"""
HTTP client for the mission cloud service

Logs in, uploads encoded missions and manages the stored missions of
the account through the Parse REST API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..config import ApiSection
from ..mission.binary import encode
from ..mission.models import Coordinate, Mission

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error talking to the mission service"""
    pass


class ApiConnectionError(ApiError):
    """Service could not be reached"""
    pass


class AuthError(ApiError):
    """Login rejected"""
    pass


class HTTPError(ApiError):
    """Non-success HTTP status"""

    def __init__(self, status: int, body: str):
        super().__init__(f"HTTP error (code: {status}): {body}")
        self.status = status
        self.body = body


class ResponseFormatError(ApiError):
    """Response is missing expected fields"""

    def __init__(self, message: str, body: Any):
        super().__init__(f"Response format error: {message} ({body})")
        self.body = body


@dataclass
class SessionData:
    """Logged in user"""
    object_id: str
    username: str
    email: str
    name: str
    email_verified: bool
    session_token: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionData':
        try:
            return cls(
                object_id=data["objectId"],
                username=data["username"],
                email=data.get("email", ""),
                name=data.get("name", ""),
                email_verified=bool(data.get("emailVerified", False)),
                session_token=data["sessionToken"],
            )
        except KeyError as e:
            raise ResponseFormatError(f"login response has no {e}", data) from None


@dataclass
class RemoteMission:
    """Mission stored in the service"""
    object_id: str
    name: str
    location: Coordinate
    user_id: str
    file_name: str
    file_url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RemoteMission':
        try:
            return cls(
                object_id=data["objectId"],
                name=data["name"],
                location=Coordinate(data["location"]["latitude"],
                                    data["location"]["longitude"]),
                user_id=data["user"]["objectId"],
                file_name=data["file"]["name"],
                file_url=data["file"]["url"],
            )
        except (KeyError, TypeError) as e:
            raise ResponseFormatError(f"invalid mission entry: {e}", data) from None


class MissionApiClient:
    """Client for the mission cloud service"""

    def __init__(self, settings: Optional[ApiSection] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            settings: Service URL, app id and timeout
            session: requests session to use (new one if None)
        """
        self.settings = settings or ApiSection()
        self.base_url = self.settings.base_url.rstrip('/')
        self.timeout = self.settings.timeout

        self.session = session or requests.Session()
        self.session.headers["X-Parse-Application-Id"] = self.settings.app_id

        self.user: Optional[SessionData] = None

    def _request(self, method: str, endpoint: str,
                 authenticated: bool = True, **kwargs) -> requests.Response:
        """Send a request and map transport errors"""
        headers = kwargs.pop("headers", {})
        if authenticated:
            if self.user is None:
                raise AuthError("Not logged in")
            headers["X-Parse-Session-Token"] = self.user.session_token

        try:
            return self.session.request(
                method,
                f"{self.base_url}{endpoint}",
                headers=headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.ConnectionError as e:
            raise ApiConnectionError(f"Cannot connect to {self.base_url}: {e}") from e
        except requests.exceptions.Timeout as e:
            raise ApiConnectionError("Request timeout") from e

    @staticmethod
    def _check(response: requests.Response) -> requests.Response:
        if not response.ok:
            raise HTTPError(response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError:
            raise ResponseFormatError("response is not JSON", response.text) from None

    def login(self, username: str, password: str) -> SessionData:
        """
        Authenticate and keep the session token

        Raises:
            AuthError: If the credentials are rejected
        """
        logger.debug(f"Logging in as {username}")
        response = self._request(
            "POST", "/parse/login", authenticated=False,
            json={"username": username, "password": password},
        )
        if not response.ok:
            raise AuthError(f"Authentication error: {response.text}")

        self.user = SessionData.from_dict(self._json(response))
        logger.info(f"Logged in as {self.user.username}")
        return self.user

    def upload(self, mission: Mission, name: str) -> str:
        """
        Upload a mission

        Args:
            mission: Mission to encode and upload
            name: Mission name shown in the app

        Returns:
            Object id of the created mission
        """
        logger.debug("Uploading mission binary")
        response = self._check(self._request(
            "POST", "/parse/files/mission",
            headers={"Content-Type": "application/octet-stream"},
            data=encode(mission),
        ))
        mission_file = self._json(response)
        if "name" not in mission_file or "url" not in mission_file:
            raise ResponseFormatError("file upload has no name/url", mission_file)

        if mission.waypoints:
            location = mission.waypoints[0].coordinate
        else:
            location = Coordinate(0.0, 0.0)

        payload = {
            "ACL": {
                self.user.object_id: {"read": True, "write": True},
            },
            "location": {
                "__type": "GeoPoint",
                "latitude": location.latitude,
                "longitude": location.longitude,
            },
            "name": name,
            "user": {
                "__type": "Pointer",
                "className": "_User",
                "objectId": self.user.object_id,
            },
            "file": {
                "__type": "File",
                "name": mission_file["name"],
                "url": mission_file["url"],
            },
        }

        logger.debug("Creating mission object")
        created = self._json(self._check(
            self._request("POST", "/parse/classes/Mission", json=payload)
        ))

        object_id = created.get("objectId")
        if not isinstance(object_id, str):
            raise ResponseFormatError("Response has no objectId", created)

        logger.info(f"Uploaded mission '{name}' ({object_id})")
        return object_id

    def missions(self) -> List[RemoteMission]:
        """List missions of the logged in user"""
        query = {
            "where": {
                "user": {
                    "__type": "Pointer",
                    "className": "_User",
                    "objectId": self.user.object_id if self.user else "",
                }
            }
        }
        data = self._json(self._check(
            self._request("GET", "/parse/classes/Mission", json=query)
        ))

        results = data.get("results")
        if not isinstance(results, list):
            raise ResponseFormatError("response should have results array field", data)

        return [RemoteMission.from_dict(item) for item in results]

    def delete_mission(self, object_id: str):
        """Delete a stored mission"""
        logger.debug(f"Deleting mission {object_id}")
        self._check(self._request("DELETE", f"/parse/classes/Mission/{object_id}"))

    def sync_devices(self):
        """Ask the service to push missions to the user's devices"""
        logger.debug("Synchronizing devices")
        self._check(self._request("POST", "/parse/functions/syncMyDevices"))
