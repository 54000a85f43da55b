"""Configuration management for the memo-sync application."""

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from . import __version__
from .models.record import (
    DEFAULT_LIMIT_TYPE,
    DEFAULT_LIMIT_VALUE,
    LimitType,
    MemoSettings,
)

SCHEMA_VERSION = 1


def _load_env() -> None:
    """Load a .env file from the config directory or the working directory."""
    config_env = Path.home() / ".memo-sync" / ".env"
    if config_env.exists():
        load_dotenv(config_env)
    else:
        load_dotenv(find_dotenv(usecwd=True))


class Config:
    """Application configuration."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        """Initialize configuration from environment variables.

        Args:
            base_dir: Directory for default data files (defaults to ~/.memo-sync)
        """
        _load_env()
        base_dir = Path(base_dir) if base_dir else Path.home() / ".memo-sync"

        # Local replica
        self.database_path = Path(
            os.getenv("MEMO_SYNC_DATABASE_PATH", str(base_dir / "memo.db"))
        )

        # GitHub authentication
        self.token_file = Path(
            os.getenv("MEMO_SYNC_TOKEN_FILE", str(base_dir / "auth.json"))
        )
        self.github_token = os.getenv("MEMO_SYNC_GITHUB_TOKEN") or None
        self.github_client_id = os.getenv("MEMO_SYNC_GITHUB_CLIENT_ID", "")
        self.github_scopes = os.getenv("MEMO_SYNC_GITHUB_SCOPES", "gist")

        # Remote replica
        self.github_api_base = os.getenv(
            "MEMO_SYNC_GITHUB_API_BASE", "https://api.github.com"
        )
        self.github_oauth_base = os.getenv(
            "MEMO_SYNC_GITHUB_OAUTH_BASE", "https://github.com"
        )
        self.gist_filename = os.getenv("MEMO_SYNC_GIST_FILENAME", "memo.json")
        self.http_timeout = float(os.getenv("MEMO_SYNC_HTTP_TIMEOUT", "10"))

        # Sync scheduling
        self.debounce_seconds = float(os.getenv("MEMO_SYNC_DEBOUNCE_SECONDS", "2.0"))

        # Input limit defaults for new records
        self.default_limit_type = LimitType(
            os.getenv("MEMO_SYNC_DEFAULT_LIMIT_TYPE", DEFAULT_LIMIT_TYPE).upper()
        )
        self.default_limit_value = int(
            os.getenv("MEMO_SYNC_DEFAULT_LIMIT_VALUE", str(DEFAULT_LIMIT_VALUE))
        )

        # Provenance
        self.app_version = __version__
        self.schema_version = SCHEMA_VERSION

        self._ensure_directories()

    @property
    def default_settings(self) -> MemoSettings:
        """Settings given to a freshly initialized record."""
        return MemoSettings(
            limit_type=self.default_limit_type, limit_value=self.default_limit_value
        )

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.parent.mkdir(parents=True, exist_ok=True)


def get_config() -> Config:
    """Get application configuration."""
    return Config()
