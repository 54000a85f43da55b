"""Auth providers supplying the capability token for the remote store."""

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests

from ..core.errors import AuthError, NetworkError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_OAUTH_BASE = "https://github.com"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"


class AuthProvider(ABC):
    """Source of the opaque token gating remote access."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Return the current token or None."""

    def is_authenticated(self) -> bool:
        """Check whether a token is present. No network I/O."""
        return bool(self.get_token())


class StaticAuthProvider(AuthProvider):
    """Provider holding a token in memory."""

    def __init__(self, token: Optional[str] = None) -> None:
        """Initialize with an optional token."""
        self.token = token

    def get_token(self) -> Optional[str]:
        """Return the token."""
        return self.token


class TokenFileAuthProvider(AuthProvider):
    """GitHub token persisted in a JSON file.

    An environment token (``MEMO_SYNC_GITHUB_TOKEN``) takes precedence over
    the file and is never written to disk.
    """

    def __init__(
        self,
        token_file: Path,
        env_token: Optional[str] = None,
        api_base: str = GITHUB_API_BASE,
        oauth_base: str = GITHUB_OAUTH_BASE,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        on_logout: Optional[Callable[[], None]] = None,
    ) -> None:
        """Initialize token file provider.

        Args:
            token_file: Path of the JSON token file
            env_token: Token supplied through the environment
            api_base: GitHub REST API base URL
            oauth_base: GitHub OAuth base URL (device flow endpoints)
            session: Optional requests session
            timeout: HTTP timeout in seconds
            on_logout: Callback run after logout (e.g. forget remote handle)
        """
        self.token_file = Path(token_file)
        self.env_token = env_token if env_token is not None else os.getenv(
            "MEMO_SYNC_GITHUB_TOKEN"
        )
        self.api_base = api_base.rstrip("/")
        self.oauth_base = oauth_base.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.on_logout = on_logout
        self._token: Optional[str] = None
        self._load_token()

    def _load_token(self) -> None:
        """Load a previously saved token from the token file."""
        if not self.token_file.exists():
            logger.debug("No token file at %s", self.token_file)
            return

        try:
            with open(self.token_file, "r", encoding="utf-8") as file:
                data = json.load(file)
            self._token = data.get("accessToken") or None
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.warning("Failed to load token file %s: %s", self.token_file, e)
            self._token = None

    def _save_token(self) -> None:
        """Write the current token to the token file."""
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "accessToken": self._token,
            "savedAt": datetime.now(timezone.utc).isoformat(),
        }
        with open(self.token_file, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=2)
        try:
            os.chmod(self.token_file, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.token_file)
        logger.info("Token saved to %s", self.token_file)

    def get_token(self) -> Optional[str]:
        """Return the environment token, else the saved one."""
        return self.env_token or self._token

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Check a token against ``GET /user``.

        Returns:
            The GitHub user document

        Raises:
            AuthError: If GitHub rejects the token
            NetworkError: If GitHub cannot be reached
        """
        try:
            response = self.session.get(
                f"{self.api_base}/user",
                headers={
                    "Authorization": f"token {token}",
                    "Accept": "application/vnd.github.v3+json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Token verification failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError("Invalid token")
        if not response.ok:
            raise NetworkError(
                f"GitHub API error: {response.status_code}", response.status_code
            )
        return response.json()

    def login_with_token(self, token: str, verify: bool = True) -> None:
        """Store a personal access token (needs the ``gist`` scope).

        Args:
            token: The token
            verify: Whether to validate it against GitHub first
        """
        token = token.strip()
        if not token:
            raise AuthError("Authentication cancelled: empty token")
        if verify:
            user = self.verify_token(token)
            logger.info("Authenticated as %s", user.get("login", "<unknown>"))
        self._token = token
        self._save_token()

    def login_with_device_flow(
        self,
        client_id: str,
        scope: str = "gist",
        notify: Optional[Callable[[str, str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Authenticate through the GitHub OAuth device flow.

        Args:
            client_id: OAuth app client ID
            scope: Requested scopes
            notify: Called with (verification_uri, user_code) for the user
            sleep: Sleep function used between polls

        Raises:
            AuthError: If the flow is denied, fails or expires
            NetworkError: If GitHub cannot be reached
        """
        if not client_id:
            raise AuthError("GitHub client ID is not configured")

        device = self._post_form(
            f"{self.oauth_base}/login/device/code",
            {"client_id": client_id, "scope": scope},
            "Failed to request a device code",
        )

        if notify is not None:
            notify(device["verification_uri"], device["user_code"])

        expires_at = time.monotonic() + float(device.get("expires_in") or 900)
        interval = float(device.get("interval") or 5)
        grant = {
            "client_id": client_id,
            "device_code": device["device_code"],
            "grant_type": DEVICE_GRANT_TYPE,
        }

        while time.monotonic() < expires_at:
            data = self._post_form(
                f"{self.oauth_base}/login/oauth/access_token",
                grant,
                "Failed to obtain an access token",
            )

            if data.get("access_token"):
                self._token = data["access_token"]
                self._save_token()
                logger.info("Device flow login completed")
                return

            error = data.get("error")
            if error == "authorization_pending":
                sleep(interval)
                continue
            if error == "slow_down":
                interval += 5
                sleep(interval)
                continue

            raise AuthError(data.get("error_description") or error or "Unknown error")

        raise AuthError("Authentication timed out")

    def _post_form(self, url: str, data: Dict[str, str], failure: str) -> Any:
        try:
            response = self.session.post(
                url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{failure}: {e}") from e
        if not response.ok:
            raise AuthError(f"{failure} ({response.status_code})")
        return response.json()

    def logout(self) -> None:
        """Forget the saved token and the cached remote handle."""
        self._token = None
        if self.token_file.exists():
            self.token_file.unlink()
            logger.info("Removed token file")
        if self.on_logout is not None:
            self.on_logout()
        if self.env_token:
            logger.warning(
                "MEMO_SYNC_GITHUB_TOKEN is set, still authenticated after logout"
            )
