"""Models for the memo-sync application."""

from .record import (
    LimitType,
    MemoContent,
    MemoSettings,
    ModifiedBy,
    Record,
    RecordMeta,
    SyncMetadata,
    utc_now,
)

__all__ = [
    "Record",
    "RecordMeta",
    "MemoContent",
    "MemoSettings",
    "SyncMetadata",
    "LimitType",
    "ModifiedBy",
    "utc_now",
]
