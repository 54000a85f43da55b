"""Application wiring for the CLI.

Builds the local store, remote store, auth provider, sync engine, push
scheduler and memo service from configuration and hands them to commands
as one ``MemoSyncApp`` object.
"""

import logging
from typing import Optional

from ...auth.provider import AuthProvider, TokenFileAuthProvider
from ...config import Config
from ...core.sync import DebouncedPushScheduler, SyncEngine, SyncResult
from ...database import DatabaseService
from ...services import MemoService
from ...stores import (
    DatabaseHandleStore,
    GistRemoteStore,
    LocalReplicaStore,
    RemoteReplicaStore,
    SqliteLocalStore,
)

logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when the application cannot be wired up."""

    pass


class MemoSyncApp:
    """Container for the services one CLI invocation works with."""

    def __init__(
        self,
        local_store: LocalReplicaStore,
        remote_store: RemoteReplicaStore,
        auth: Optional[AuthProvider] = None,
        config: Optional[Config] = None,
        debounce_seconds: float = 2.0,
    ) -> None:
        """Initialize application.

        Args:
            local_store: Local replica
            remote_store: Remote replica
            auth: Auth provider used by login/logout
            config: Application configuration
            debounce_seconds: Push debounce window
        """
        self.local_store = local_store
        self.remote_store = remote_store
        self.auth = auth
        self.config = config
        self.engine = SyncEngine(local_store, remote_store)
        self.scheduler = DebouncedPushScheduler(self.engine, delay=debounce_seconds)
        self.memo = MemoService(local_store, self.engine, self.scheduler)

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "MemoSyncApp":
        """Build the application backed by SQLite and a GitHub Gist.

        Raises:
            InitializationError: If the local database cannot be opened
        """
        if config is None:
            config = Config()

        try:
            db_service = DatabaseService(db_path=config.database_path)
        except Exception as e:
            logger.exception("Database initialization failed")
            raise InitializationError(f"Database initialization failed: {e}") from e

        handles = DatabaseHandleStore(db_service)
        auth = TokenFileAuthProvider(
            config.token_file,
            env_token=config.github_token or "",
            api_base=config.github_api_base,
            oauth_base=config.github_oauth_base,
            timeout=config.http_timeout,
            on_logout=handles.clear,
        )
        remote = GistRemoteStore(
            auth,
            handles=handles,
            api_base=config.github_api_base,
            filename=config.gist_filename,
            timeout=config.http_timeout,
        )
        local = SqliteLocalStore(
            db_service,
            app_version=config.app_version,
            schema_version=config.schema_version,
            default_settings=config.default_settings,
        )
        return cls(
            local,
            remote,
            auth=auth,
            config=config,
            debounce_seconds=config.debounce_seconds,
        )

    def start(self) -> SyncResult:
        """Run startup reconciliation."""
        return self.engine.reconcile_on_startup()
