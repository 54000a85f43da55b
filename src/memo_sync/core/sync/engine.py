"""Sync engine: keeps the local and remote replicas of the Record converged.

The engine runs one operation at a time and never starts timers; callers
(see ``scheduler.DebouncedPushScheduler``) own the timing policy. Every
store-level error is caught at the engine boundary, moves the engine to
ERROR and leaves the local replica as the source of truth.

State machine::

    IDLE ──> SYNCING ──> SYNCED
                │  └───> IDLE    (unauthenticated / nothing to do)
                └──────> ERROR   (store failure)
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ...models.record import Record, utc_now
from ...stores.local_store import LocalReplicaStore
from ...stores.remote_store import RemoteReplicaStore
from ..errors import MemoSyncError, NetworkError
from .conflict_resolver import describe_resolution, resolve

logger = logging.getLogger(__name__)

StatusListener = Callable[["SyncStatus", "SyncStatus"], None]


class SyncStatus(str, Enum):
    """Observable state of the sync engine."""

    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"


class SyncAction(str, Enum):
    """What a sync operation did to the replicas."""

    NO_ACTION = "no_action"  # Replicas already agree
    INITIALIZED = "initialized"  # Created the zero-state record
    PUSHED = "pushed"  # Local copy written to remote
    PULLED = "pulled"  # Remote copy adopted locally
    SKIPPED = "skipped"  # Remote not contacted


@dataclass
class SyncResult:
    """Outcome of a reconcile or pull operation.

    ``success`` is False when the remote could not be read or written;
    ``error`` then holds the exception so the caller can tell the user.
    ``record`` is the best available local snapshot.
    """

    success: bool
    action: SyncAction
    record: Optional[Record] = None
    error: Optional[Exception] = None

    def __bool__(self) -> bool:
        """Truthiness follows ``success``."""
        return self.success

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of the operation."""
        summary: Dict[str, Any] = {
            "success": self.success,
            "action": self.action.value,
        }
        if self.record is not None:
            summary["revision"] = self.record.revision
        if self.error is not None:
            summary["error"] = str(self.error)
        return summary


def _same_version(a: Record, b: Record) -> bool:
    return (
        a.revision == b.revision
        and a.body_updated_at == b.body_updated_at
        and a.body == b.body
        and a.settings == b.settings
    )


class SyncEngine:
    """Orchestrates read / compare / resolve / write across both replicas."""

    def __init__(
        self,
        local_store: LocalReplicaStore,
        remote_store: RemoteReplicaStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize sync engine.

        Args:
            local_store: Local replica (source of truth when offline)
            remote_store: Remote replica
            clock: Source of "now" for sync stamps (defaults to UTC now)
        """
        self.local_store = local_store
        self.remote_store = remote_store
        self.clock = clock or utc_now

        self._status = SyncStatus.IDLE
        self._lock = threading.RLock()
        self._listeners: List[StatusListener] = []
        self._ready = False

        self.last_synced_at: Optional[datetime] = None
        self.last_error: Optional[Exception] = None
        self.is_offline = False

    # ------------------------------------------------------------------
    # Status surface
    # ------------------------------------------------------------------

    @property
    def status(self) -> SyncStatus:
        """Current engine state."""
        return self._status

    @property
    def is_ready(self) -> bool:
        """Whether startup reconciliation has run in this session."""
        return self._ready

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback invoked with (old, new) on status changes."""
        self._listeners.append(listener)

    def _set_status(self, status: SyncStatus) -> None:
        old = self._status
        self._status = status
        if old == status:
            return
        logger.debug("Sync status: %s -> %s", old.value, status.value)
        for listener in list(self._listeners):
            try:
                listener(old, status)
            except Exception:
                logger.exception("Sync status listener failed")

    def _succeeded(self) -> None:
        self.last_synced_at = self.clock()
        self.last_error = None
        self.is_offline = False
        self._set_status(SyncStatus.SYNCED)

    def _failed(self, error: Exception, context: str) -> None:
        self.last_error = error
        if isinstance(error, NetworkError):
            self.is_offline = True
        if isinstance(error, MemoSyncError):
            logger.warning("%s: %s", context, error)
        else:
            logger.exception("%s: unexpected error", context)
        self._set_status(SyncStatus.ERROR)

    def snapshot(self) -> Dict[str, Any]:
        """Get a summary of the engine state."""
        return {
            "status": self._status.value,
            "ready": self._ready,
            "offline": self.is_offline,
            "authenticated": self.remote_store.is_authenticated(),
            "needs_sync": self.needs_sync(),
            "last_synced_at": (
                self.last_synced_at.isoformat() if self.last_synced_at else None
            ),
            "last_error": str(self.last_error) if self.last_error else None,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _push(self, record: Record) -> Record:
        """Write ``record`` remotely, then stamp and persist it locally."""
        self.remote_store.write(record)
        stamped = record.mark_synced(self.clock())
        self.local_store.save(stamped)
        return stamped

    def _last_known_local(self) -> Optional[Record]:
        try:
            return self.local_store.load()
        except Exception:
            logger.exception("Local store unreadable")
            return None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def reconcile_on_startup(self) -> SyncResult:
        """Converge both replicas at session start.

        Returns:
            SyncResult whose record is the converged (or, on failure, the
            local) Record
        """
        with self._lock:
            self._set_status(SyncStatus.SYNCING)
            try:
                return self._reconcile()
            except Exception as e:
                self._failed(e, "Startup reconciliation failed")
                return SyncResult(
                    success=False,
                    action=SyncAction.NO_ACTION,
                    record=self._last_known_local(),
                    error=e,
                )
            finally:
                self._ready = True

    def _reconcile(self) -> SyncResult:
        if not self.remote_store.is_authenticated():
            local = self.local_store.load()
            action = SyncAction.SKIPPED
            if local is None:
                local = self.local_store.initialize()
                action = SyncAction.INITIALIZED
            logger.info("Remote not authenticated, working locally")
            self._set_status(SyncStatus.IDLE)
            return SyncResult(success=True, action=action, record=local)

        local = self.local_store.load()
        try:
            remote = self.remote_store.read()
        except Exception as e:
            self._failed(e, "Remote read failed during startup")
            if local is None:
                local = self.local_store.initialize()
            return SyncResult(
                success=False, action=SyncAction.NO_ACTION, record=local, error=e
            )

        if local is None and remote is None:
            fresh = self.local_store.initialize()
            record = self._push(fresh)
            logger.info("Initialized both replicas")
            self._succeeded()
            return SyncResult(
                success=True, action=SyncAction.INITIALIZED, record=record
            )

        if local is not None and remote is None:
            record = self._push(local)
            logger.info("Remote missing, pushed local (revision=%d)", local.revision)
            self._succeeded()
            return SyncResult(success=True, action=SyncAction.PUSHED, record=record)

        if local is None and remote is not None:
            self.local_store.save(remote)
            logger.info("Local missing, adopted remote (revision=%d)", remote.revision)
            self._succeeded()
            return SyncResult(success=True, action=SyncAction.PULLED, record=remote)

        if _same_version(local, remote):
            record = local
            if record.has_unsynced_changes():
                record = record.mark_synced(self.clock())
                self.local_store.save(record)
            logger.info("Replicas already in sync (revision=%d)", local.revision)
            self._succeeded()
            return SyncResult(
                success=True, action=SyncAction.NO_ACTION, record=record
            )

        logger.info("Startup conflict: %s", describe_resolution(local, remote))
        winner = resolve(local, remote)
        if winner is local:
            record = self._push(local)
            action = SyncAction.PUSHED
        else:
            self.local_store.save(remote)
            record = remote
            action = SyncAction.PULLED

        self._succeeded()
        return SyncResult(success=True, action=action, record=record)

    def push_local_to_remote(self) -> bool:
        """Send the local record to the remote replica.

        A remote copy that is strictly newer is adopted locally instead, so
        a stale local write never clobbers it.

        Returns:
            True if the replicas converged, False otherwise
        """
        with self._lock:
            self._set_status(SyncStatus.SYNCING)
            try:
                if not self.remote_store.is_authenticated() or not self._ready:
                    logger.debug("Push skipped (authenticated/ready check failed)")
                    self._set_status(SyncStatus.IDLE)
                    return False

                local = self.local_store.load()
                if local is None:
                    logger.debug("Push skipped, no local record")
                    self._set_status(SyncStatus.IDLE)
                    return False

                remote: Optional[Record] = None
                try:
                    remote = self.remote_store.read()
                except Exception as e:
                    logger.warning(
                        "Remote read before push failed, pushing anyway: %s", e
                    )

                if remote is not None and resolve(local, remote) is remote:
                    logger.info(
                        "Push superseded: %s", describe_resolution(local, remote)
                    )
                    self.local_store.save(remote)
                    self._succeeded()
                    return True

                self._push(local)
                logger.info("Pushed local record (revision=%d)", local.revision)
                self._succeeded()
                return True

            except Exception as e:
                self._failed(e, "Push to remote failed")
                return False

    def pull_remote_to_local(self) -> SyncResult:
        """Refresh the local replica from the remote one.

        Returns:
            SyncResult; ``success`` is False when unauthenticated, when the
            remote is absent, or when the remote could not be read
        """
        with self._lock:
            self._set_status(SyncStatus.SYNCING)
            try:
                if not self.remote_store.is_authenticated():
                    self._set_status(SyncStatus.IDLE)
                    return SyncResult(
                        success=False,
                        action=SyncAction.SKIPPED,
                        record=self.local_store.load(),
                    )

                remote = self.remote_store.read()
                if remote is None:
                    logger.info("Nothing to pull, remote is absent")
                    self._set_status(SyncStatus.IDLE)
                    return SyncResult(
                        success=False,
                        action=SyncAction.NO_ACTION,
                        record=self.local_store.load(),
                    )

                local = self.local_store.load()
                if local is None:
                    winner = remote
                else:
                    logger.debug("Pull: %s", describe_resolution(local, remote))
                    winner = resolve(local, remote)
                self.local_store.save(winner)

                self._succeeded()
                action = SyncAction.PULLED if winner is remote else SyncAction.NO_ACTION
                return SyncResult(success=True, action=action, record=winner)

            except Exception as e:
                self._failed(e, "Pull from remote failed")
                return SyncResult(
                    success=False,
                    action=SyncAction.NO_ACTION,
                    record=self._last_known_local(),
                    error=e,
                )

    def needs_sync(self) -> bool:
        """Check whether the local record holds unsynced local changes."""
        record = self.local_store.load()
        if record is None:
            return False
        return record.has_unsynced_changes()
