"""Remote replica backed by a private GitHub Gist."""

import json
import logging
from typing import Any, Dict, Optional

import requests

from ..auth.provider import GITHUB_API_BASE, AuthProvider
from ..core.errors import AuthError, DecodeError, NetworkError
from ..models.record import Record
from .remote_store import HandleStore, MemoryHandleStore, RemoteReplicaStore

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "memo.json"
GIST_DESCRIPTION = "Memo App Data"


class GistRemoteStore(RemoteReplicaStore):
    """Store the Record as one file of a private gist.

    The gist id is the remote-object handle. It is persisted through a
    HandleStore, dropped when the gist turns out to be deleted, and replaced
    when a write has to recreate the gist.
    """

    def __init__(
        self,
        auth: AuthProvider,
        handles: Optional[HandleStore] = None,
        api_base: str = GITHUB_API_BASE,
        filename: str = DEFAULT_FILENAME,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize gist store.

        Args:
            auth: Provider of the GitHub token
            handles: Persistence for the gist id
            api_base: GitHub REST API base URL
            filename: Gist file holding the record
            timeout: HTTP timeout in seconds
            session: Optional requests session
        """
        self.auth = auth
        self.handles = handles or MemoryHandleStore()
        self.api_base = api_base.rstrip("/")
        self.filename = filename
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def gist_id(self) -> Optional[str]:
        """Currently known gist id."""
        return self.handles.get()

    def is_authenticated(self) -> bool:
        """Check whether the auth provider holds a token."""
        return self.auth.is_authenticated()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        token = self.auth.get_token()
        if not token:
            raise AuthError("Not authenticated")
        return {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _request(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> requests.Response:
        headers = self._headers()
        try:
            response = self.session.request(
                method,
                f"{self.api_base}{path}",
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(f"GitHub rejected the token ({response.status_code})")
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if not response.ok:
            raise NetworkError(
                f"GitHub API error: {response.status_code}", response.status_code
            )

    # ------------------------------------------------------------------
    # Replica operations
    # ------------------------------------------------------------------

    def read(self) -> Optional[Record]:
        """Read the record from the gist.

        Returns:
            The Record, or None if no gist (or no memo file) exists

        Raises:
            AuthError: If no token is available or GitHub rejects it
            NetworkError: On transport failures and unexpected statuses
            DecodeError: If the gist file does not hold a valid record
        """
        self._headers()

        if self.gist_id is None:
            self._discover_gist()
        gist_id = self.gist_id
        if gist_id is None:
            logger.debug("No remote gist yet")
            return None

        response = self._request("GET", f"/gists/{gist_id}")
        if response.status_code == 404:
            logger.info("Gist %s was deleted, forgetting it", gist_id)
            self.handles.clear()
            return None
        self._raise_for_status(response)

        gist = response.json()
        file = (gist.get("files") or {}).get(self.filename)
        if not file:
            logger.info("Gist %s has no %s file", gist_id, self.filename)
            return None

        content = file.get("content")
        if file.get("truncated") and file.get("raw_url"):
            content = self._fetch_raw(file["raw_url"])
        if content is None:
            raise DecodeError(f"Gist file {self.filename} has no content")
        return Record.from_json(content)

    def write(self, record: Record) -> None:
        """Write the record, creating the gist on first use.

        Raises:
            AuthError: If no token is available or GitHub rejects it
            NetworkError: On transport failures and unexpected statuses
        """
        content = json.dumps(record.to_payload(), indent=2, ensure_ascii=False)
        gist_id = self.gist_id

        if gist_id is None:
            self._create_gist(content)
            return

        response = self._request(
            "PATCH",
            f"/gists/{gist_id}",
            {"files": {self.filename: {"content": content}}},
        )
        if response.status_code == 404:
            logger.info("Gist %s vanished, recreating it", gist_id)
            self.handles.clear()
            self._create_gist(content)
            return
        self._raise_for_status(response)
        logger.debug("Updated gist %s (revision=%d)", gist_id, record.revision)

    def _create_gist(self, content: str) -> None:
        response = self._request(
            "POST",
            "/gists",
            {
                "description": GIST_DESCRIPTION,
                "public": False,
                "files": {self.filename: {"content": content}},
            },
        )
        self._raise_for_status(response)
        gist_id = response.json()["id"]
        self.handles.set(gist_id)
        logger.info("Created gist %s", gist_id)

    def _discover_gist(self) -> None:
        """Adopt the first of the user's gists that holds the memo file."""
        response = self._request("GET", "/gists")
        self._raise_for_status(response)

        for gist in response.json():
            if self.filename in (gist.get("files") or {}):
                self.handles.set(gist["id"])
                logger.info("Found existing gist %s", gist["id"])
                return

    def _fetch_raw(self, url: str) -> str:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        self._raise_for_status(response)
        return response.text
