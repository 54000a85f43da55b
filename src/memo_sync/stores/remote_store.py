"""Remote replica store contract and an in-memory implementation."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..core.errors import AuthError, MemoSyncError, NetworkError
from ..database.service import DatabaseService
from ..models.record import Record

logger = logging.getLogger(__name__)

HANDLE_KEY = "gist_id"


class RemoteReplicaStore(ABC):
    """Contract for the capability-gated remote replica.

    ``read`` and ``write`` raise AuthError / NetworkError and never retry.
    A remote object deleted underneath reads as absent.
    """

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Check locally whether a capability token is present."""

    @abstractmethod
    def read(self) -> Optional[Record]:
        """Read the remote record, or None if the object does not exist."""

    @abstractmethod
    def write(self, record: Record) -> None:
        """Create or update the remote record."""

    def exists(self) -> bool:
        """Best-effort existence probe. Errors read as False."""
        try:
            return self.read() is not None
        except MemoSyncError as e:
            logger.debug("Remote existence probe failed: %s", e)
            return False


class HandleStore(ABC):
    """Persistence for the remote object identifier."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """Return the stored handle, if any."""

    @abstractmethod
    def set(self, handle: str) -> None:
        """Persist a new handle."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the handle."""


class DatabaseHandleStore(HandleStore):
    """Remote handle kept next to the local record in SQLite."""

    def __init__(self, db_service: DatabaseService, key: str = HANDLE_KEY) -> None:
        """Initialize handle store.

        Args:
            db_service: Database service instance
            key: Row key holding the handle
        """
        self.db_service = db_service
        self.key = key

    def get(self) -> Optional[str]:
        """Return the stored handle, if any."""
        return self.db_service.get_blob(self.key)

    def set(self, handle: str) -> None:
        """Persist a new handle."""
        self.db_service.set_blob(self.key, handle)

    def clear(self) -> None:
        """Forget the handle."""
        self.db_service.delete_blob(self.key)


class MemoryHandleStore(HandleStore):
    """Remote handle kept in memory."""

    def __init__(self, handle: Optional[str] = None) -> None:
        """Initialize with an optional starting handle."""
        self.handle = handle

    def get(self) -> Optional[str]:
        """Return the handle."""
        return self.handle

    def set(self, handle: str) -> None:
        """Replace the handle."""
        self.handle = handle

    def clear(self) -> None:
        """Forget the handle."""
        self.handle = None


class MemoryRemoteStore(RemoteReplicaStore):
    """Remote replica simulated in memory.

    Objects are addressed by handle like a real object store, so external
    deletion and re-creation can be exercised. Failures are injected with
    ``fail_reads`` / ``fail_writes`` (an exception instance to raise).
    """

    def __init__(
        self,
        authenticated: bool = True,
        handles: Optional[HandleStore] = None,
    ) -> None:
        """Initialize the in-memory remote.

        Args:
            authenticated: Whether a capability token is present
            handles: Handle persistence (defaults to in-memory)
        """
        self.authenticated = authenticated
        self.handles = handles or MemoryHandleStore()
        self.objects: Dict[str, str] = {}
        self.fail_reads: Optional[Exception] = None
        self.fail_writes: Optional[Exception] = None
        self.reads = 0
        self.writes: List[Record] = []
        self._next_id = 1

    def is_authenticated(self) -> bool:
        """Return the configured authentication flag."""
        return self.authenticated

    def _check_auth(self) -> None:
        if not self.authenticated:
            raise AuthError("Not authenticated")

    def read(self) -> Optional[Record]:
        """Read the record behind the current handle."""
        self._check_auth()
        self.reads += 1
        if self.fail_reads is not None:
            raise self.fail_reads

        handle = self.handles.get()
        if handle is None:
            return None

        raw = self.objects.get(handle)
        if raw is None:
            logger.info("Remote object %s no longer exists, forgetting handle", handle)
            self.handles.clear()
            return None
        return Record.from_json(raw)

    def write(self, record: Record) -> None:
        """Update the current object or create a new one."""
        self._check_auth()
        if self.fail_writes is not None:
            raise self.fail_writes

        handle = self.handles.get()
        if handle is None or handle not in self.objects:
            handle = f"obj-{self._next_id}"
            self._next_id += 1
            self.handles.set(handle)
            logger.info("Created remote object %s", handle)

        self.objects[handle] = record.to_json()
        self.writes.append(record)

    # Test helpers ------------------------------------------------------

    def seed(self, record: Record) -> None:
        """Place a record remotely without counting it as a write."""
        handle = self.handles.get()
        if handle is None:
            handle = f"obj-{self._next_id}"
            self._next_id += 1
            self.handles.set(handle)
        self.objects[handle] = record.to_json()

    def delete_remote(self) -> None:
        """Delete all remote objects, keeping the (now stale) handle."""
        self.objects.clear()

    def go_offline(self) -> None:
        """Make every read and write fail with a NetworkError."""
        self.fail_reads = NetworkError("Network is unreachable")
        self.fail_writes = NetworkError("Network is unreachable")

    def go_online(self) -> None:
        """Clear injected failures."""
        self.fail_reads = None
        self.fail_writes = None

    @property
    def stored(self) -> Optional[Record]:
        """Record currently behind the handle, without side effects."""
        handle = self.handles.get()
        if handle is None or handle not in self.objects:
            return None
        return Record.from_json(self.objects[handle])
