"""Application service for editing the memo and its settings.

Every local mutation goes through here: the body is validated by the
input limiter, the Record is mutated (revision + 1), saved to the local
replica, and the scheduler is told so a push follows.
"""

import logging
from typing import Any, Dict, Optional

from ..core.sync.engine import SyncEngine
from ..core.sync.scheduler import DebouncedPushScheduler
from ..models.record import LimitType, MemoSettings, Record
from ..stores.local_store import LocalReplicaStore
from .input_limiter import InputLimiter

logger = logging.getLogger(__name__)


class MemoService:
    """Service for local memo mutations."""

    def __init__(
        self,
        local_store: LocalReplicaStore,
        engine: Optional[SyncEngine] = None,
        scheduler: Optional[DebouncedPushScheduler] = None,
    ) -> None:
        """Initialize memo service.

        Args:
            local_store: Local replica
            engine: Sync engine (for status reporting)
            scheduler: Push scheduler notified after each mutation
        """
        self.local_store = local_store
        self.engine = engine
        self.scheduler = scheduler

    def current(self) -> Record:
        """Return the local record, creating it on first run."""
        record = self.local_store.load()
        if record is None:
            record = self.local_store.initialize()
        return record

    def _commit(self, record: Record) -> Record:
        self.local_store.save(record)
        if self.scheduler is not None:
            self.scheduler.notify_change()
        return record

    def edit(self, text: str) -> Record:
        """Replace the memo body.

        Text over the configured limit is truncated. An edit that leaves
        the body unchanged is not a mutation.

        Returns:
            The record now stored locally
        """
        record = self.current()
        limiter = InputLimiter.from_settings(record.settings)
        if limiter.is_exceeded(text):
            logger.info(
                "Truncating memo to %d %s",
                limiter.limit_value,
                limiter.limit_type.value,
            )
            text = limiter.truncate(text)

        if text == record.body:
            logger.debug("Edit leaves memo unchanged")
            return record

        updated = record.with_body(text)
        logger.info("Memo edited (revision=%d)", updated.revision)
        return self._commit(updated)

    def change_limit(self, limit_type: LimitType, limit_value: int) -> Record:
        """Change the input limit and truncate the body if it no longer fits.

        Raises:
            ValueError: If the limit value is not positive
        """
        if limit_value <= 0:
            raise ValueError(f"Limit value must be positive, got {limit_value}")

        record = self.current()
        settings = MemoSettings(limit_type=limit_type, limit_value=limit_value)
        if settings == record.settings:
            return record

        updated = record.with_settings(settings)
        limiter = InputLimiter.from_settings(settings)
        if limiter.is_exceeded(updated.body):
            updated = updated.with_body(limiter.truncate(updated.body))

        logger.info(
            "Limit changed to %s %d (revision=%d)",
            settings.limit_type.value,
            settings.limit_value,
            updated.revision,
        )
        return self._commit(updated)

    def wipe(self) -> Record:
        """Delete the local record and recreate it at revision 0."""
        if self.scheduler is not None:
            self.scheduler.cancel()
        self.local_store.clear()
        record = self.local_store.initialize()
        logger.info("Local memo wiped")
        return record

    def status_summary(self) -> Dict[str, Any]:
        """Get a summary of the memo and sync state."""
        record = self.current()
        limiter = InputLimiter.from_settings(record.settings)
        summary: Dict[str, Any] = {
            "revision": record.revision,
            "length": limiter.calculate_usage(record.body),
            "limit_type": record.settings.limit_type.value,
            "limit_value": record.settings.limit_value,
            "remaining": limiter.remainder(record.body),
            "updated_at": record.body_updated_at.isoformat(),
            "last_modified_by": record.last_modified_by.value,
            "record_last_synced_at": (
                record.last_synced_at.isoformat() if record.last_synced_at else None
            ),
        }
        if self.engine is not None:
            summary["sync"] = self.engine.snapshot()
        return summary
