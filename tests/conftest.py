"""Shared fixtures for memo-sync tests."""

from datetime import datetime, timedelta, timezone

import pytest

from memo_sync.models import (
    MemoContent,
    MemoSettings,
    ModifiedBy,
    Record,
    RecordMeta,
    SyncMetadata,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _make_record(
    body="",
    revision=0,
    updated_at=T0,
    last_synced_at=None,
    modified_by=ModifiedBy.LOCAL,
    settings=None,
):
    return Record(
        meta=RecordMeta(schema_version=1, app_version="1.0.0", created_at=T0),
        memo=MemoContent(content=body, updated_at=updated_at),
        settings=settings or MemoSettings(),
        sync=SyncMetadata(
            last_synced_at=last_synced_at,
            last_modified_by=modified_by,
            revision=revision,
        ),
    )


@pytest.fixture
def t0():
    """Fixed base time."""
    return T0


@pytest.fixture
def make_record():
    """Factory for records with explicit sync metadata."""
    return _make_record


@pytest.fixture
def sync_time():
    """Fixed 'now' used by engine clocks, one hour after T0."""
    return T0 + timedelta(hours=1)
