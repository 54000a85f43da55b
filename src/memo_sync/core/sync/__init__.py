"""Synchronization module.

Handles conflict resolution, the sync engine state machine and debounced
push scheduling.
"""

from .conflict_resolver import (
    ResolutionReason,
    describe_resolution,
    explain,
    resolve,
)
from .engine import SyncAction, SyncEngine, SyncResult, SyncStatus
from .scheduler import DebouncedPushScheduler

__all__ = [
    # Conflict resolution
    "resolve",
    "explain",
    "describe_resolution",
    "ResolutionReason",
    # Engine
    "SyncEngine",
    "SyncResult",
    "SyncStatus",
    "SyncAction",
    # Scheduling
    "DebouncedPushScheduler",
]
