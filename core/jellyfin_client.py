"""
Jellyfin API client.

Thin pass-through over the Jellyfin HTTP API: authentication, catalog
browsing and playback-state reports. No caching and no retries; every
call goes to the server and every failure propagates as raised by requests.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from error_handling import NotAuthenticatedError
from utils.constants import (
    __version__,
    CLIENT_NAME,
    DEVICE_NAME,
    ITEM_TYPE_SERIES,
)


@dataclass(frozen=True)
class ClientInfo:
    """Identity this client announces to the server."""
    device_id: str
    client_name: str = CLIENT_NAME
    device_name: str = DEVICE_NAME
    version: str = __version__


@dataclass(frozen=True)
class Credentials:
    """Result of a successful login. Immutable; a new client carries it."""
    access_token: str
    user_id: str
    user_name: str = ""
    server_id: str = ""

    @classmethod
    def from_auth_result(cls, data: Dict[str, Any]) -> "Credentials":
        user = data.get("User") or {}
        return cls(
            access_token=data.get("AccessToken") or "",
            user_id=user.get("Id") or "",
            user_name=user.get("Name") or "",
            server_id=data.get("ServerId") or "",
        )


def authorization_header(client_info: ClientInfo, token: Optional[str] = None) -> str:
    """Build the MediaBrowser authorization header value."""
    value = (
        f'MediaBrowser Client="{client_info.client_name}", '
        f'Device="{client_info.device_name}", '
        f'DeviceId="{client_info.device_id}", '
        f'Version="{client_info.version}"'
    )
    if token:
        value += f', Token="{token}"'
    return value


class JellyfinClient:
    """Client bound to one server address, optionally carrying credentials."""

    def __init__(self, address: str, client_info: ClientInfo,
                 credentials: Optional[Credentials] = None,
                 session: Optional[requests.Session] = None):
        self.address = address.rstrip("/")
        self.client_info = client_info
        self.credentials = credentials
        self.session = session or requests.Session()

    def __repr__(self):
        user = self.credentials.user_name if self.credentials else None
        return f"<JellyfinClient {self.address} user={user!r}>"

    @property
    def is_authenticated(self) -> bool:
        return self.credentials is not None

    def _require_credentials(self, operation: str) -> Credentials:
        if self.credentials is None:
            raise NotAuthenticatedError(operation)
        return self.credentials

    def _headers(self) -> Dict[str, str]:
        token = self.credentials.access_token if self.credentials else None
        return {
            "Accept": "application/json",
            "Authorization": authorization_header(self.client_info, token),
        }

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.address}{path}"
        logging.debug(f"GET {url} params={params}")
        response = self.session.get(url, params=params, headers=self._headers())
        response.raise_for_status()
        return response.json()

    def _post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        url = f"{self.address}{path}"
        logging.debug(f"POST {url}")
        response = self.session.post(url, json=payload, headers=self._headers())
        response.raise_for_status()
        return response

    # ---- authentication ----

    def authenticate(self, username: str, password: str) -> "JellyfinClient":
        """
        Log in with username and password.

        Returns:
            A new JellyfinClient carrying the resulting Credentials. The
            client this is called on is left unauthenticated.

        Raises:
            requests.HTTPError / requests.RequestException from the server,
            untransformed (bad credentials, disabled account, network failure).
        """
        logging.info(f"Authenticating '{username}' against {self.address}")
        response = self._post("/Users/AuthenticateByName", {"Username": username, "Pw": password})
        credentials = Credentials.from_auth_result(response.json())
        logging.info(f"Successfully authenticated as: {credentials.user_name or username}")
        return replace_credentials(self, credentials)

    # ---- catalog ----

    def search_shows(self, term: str) -> List[Dict[str, Any]]:
        """Search hints for series matching a free-text term."""
        self._require_credentials("search shows")
        data = self._get("/Search/Hints", {
            "searchTerm": term,
            "includeItemTypes": ITEM_TYPE_SERIES,
        })
        return data.get("SearchHints") or []

    def list_seasons(self, show_id: str) -> List[Dict[str, Any]]:
        self._require_credentials("list seasons")
        data = self._get(f"/Shows/{show_id}/Seasons")
        return data.get("Items") or []

    def list_episodes(self, show_id: str, season_id: str) -> List[Dict[str, Any]]:
        self._require_credentials("list episodes")
        data = self._get(f"/Shows/{show_id}/Episodes", {"seasonId": season_id})
        return data.get("Items") or []

    def get_episode(self, episode_id: str) -> Dict[str, Any]:
        """Full item record, including MediaSources, MediaStreams and UserData."""
        credentials = self._require_credentials("fetch episode")
        return self._get(f"/Users/{credentials.user_id}/Items/{episode_id}")

    # ---- playback state ----

    def report_playback_progress(self, payload: Dict[str, Any]) -> None:
        self._require_credentials("report playback progress")
        self._post("/Sessions/Playing/Progress", payload)

    def report_playback_stopped(self, payload: Dict[str, Any]) -> None:
        self._require_credentials("report playback stopped")
        self._post("/Sessions/Playing/Stopped", payload)


def replace_credentials(client: JellyfinClient, credentials: Optional[Credentials]) -> JellyfinClient:
    """Copy of client bound to the same address and HTTP session with other credentials."""
    return JellyfinClient(
        client.address,
        client.client_info,
        credentials=credentials,
        session=client.session,
    )
