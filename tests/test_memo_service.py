"""Tests for the memo service."""

from unittest.mock import Mock

import pytest

from memo_sync.core.errors import StorageError
from memo_sync.core.sync import DebouncedPushScheduler, SyncEngine
from memo_sync.models import LimitType, MemoSettings, ModifiedBy
from memo_sync.services import MemoService
from memo_sync.stores import MemoryLocalStore, MemoryRemoteStore


@pytest.fixture
def local():
    """Empty in-memory local replica."""
    return MemoryLocalStore(app_version="1.0.0")


@pytest.fixture
def scheduler():
    """Mock push scheduler."""
    return Mock(spec=DebouncedPushScheduler)


@pytest.fixture
def service(local, scheduler):
    """Memo service without an engine."""
    return MemoService(local, scheduler=scheduler)


class TestEdit:
    """Test body edits."""

    def test_current_initializes(self, service, local):
        """Test the first access creates the zero-state record."""
        record = service.current()

        assert record.revision == 0
        assert local.load() == record

    def test_current_keeps_unreadable_record(self, service, local, make_record):
        """Test a read failure propagates and keeps the stored record."""
        record = make_record(body="precious", revision=7)
        local.save(record)
        local.fail_reads = True

        with pytest.raises(StorageError):
            service.current()

        local.fail_reads = False
        assert local.load() == record

    def test_edit_bumps_revision_and_schedules_push(self, service, local, scheduler):
        """Test an edit is saved locally and announced."""
        record = service.edit("hello")

        assert record.body == "hello"
        assert record.revision == 1
        assert record.last_modified_by == ModifiedBy.LOCAL
        assert local.load() == record
        scheduler.notify_change.assert_called_once()

    def test_unchanged_text_is_not_a_mutation(self, service, scheduler):
        """Test re-saving the same text keeps the revision."""
        service.edit("same")
        scheduler.reset_mock()

        record = service.edit("same")

        assert record.revision == 1
        scheduler.notify_change.assert_not_called()

    def test_edit_truncates_to_limit(self, local, scheduler, make_record):
        """Test text over the limit is cut before it is stored."""
        local.save(
            make_record(settings=MemoSettings(limit_type=LimitType.CHAR, limit_value=5))
        )
        service = MemoService(local, scheduler=scheduler)

        record = service.edit("abcdefgh")

        assert record.body == "abcde"

    def test_successive_edits(self, service):
        """Test each edit increments the revision once."""
        for i, text in enumerate(["a", "ab", "abc"], start=1):
            assert service.edit(text).revision == i


class TestChangeLimit:
    """Test settings changes."""

    def test_change_limit(self, service, scheduler):
        """Test a new limit is a synced mutation."""
        service.edit("short")

        record = service.change_limit(LimitType.BYTE, 50)

        expected = MemoSettings(limit_type=LimitType.BYTE, limit_value=50)
        assert record.settings == expected
        assert record.revision == 2
        assert record.body == "short"
        assert scheduler.notify_change.call_count == 2

    def test_change_limit_truncates_body(self, service):
        """Test a tighter limit truncates the stored body."""
        service.edit("abcdefghij")

        record = service.change_limit(LimitType.CHAR, 4)

        assert record.body == "abcd"
        assert record.revision == 3

    def test_same_limit_is_noop(self, service, scheduler):
        """Test setting the current limit changes nothing."""
        before = service.current()

        record = service.change_limit(LimitType.CHAR, 200)

        assert record == before
        scheduler.notify_change.assert_not_called()

    def test_invalid_limit(self, service):
        """Test non-positive values are rejected."""
        with pytest.raises(ValueError):
            service.change_limit(LimitType.CHAR, 0)


class TestWipeAndStatus:
    """Test wipe and status summary."""

    def test_wipe(self, service, local, scheduler):
        """Test wipe resets to revision 0 and cancels pending pushes."""
        service.edit("secret")

        record = service.wipe()

        assert record.revision == 0
        assert record.body == ""
        assert local.load() == record
        scheduler.cancel.assert_called_once()

    def test_status_summary_without_engine(self, service):
        """Test the summary describes the local record."""
        service.edit("hello")

        summary = service.status_summary()

        assert summary["revision"] == 1
        assert summary["length"] == 5
        assert summary["remaining"] == 195
        assert summary["limit_type"] == "CHAR"
        assert summary["last_modified_by"] == "local"
        assert summary["record_last_synced_at"] is None
        assert "sync" not in summary


class TestWithEngine:
    """Test the service wired to a real engine and scheduler."""

    def test_edit_then_flush_reaches_remote(self, local):
        """Test the edit path ends with the remote updated."""
        remote = MemoryRemoteStore()
        engine = SyncEngine(local, remote)
        scheduler = DebouncedPushScheduler(
            engine, delay=60, timer_factory=lambda d, cb: Mock()
        )
        service = MemoService(local, engine, scheduler)
        engine.reconcile_on_startup()

        service.edit("synced text")
        assert engine.needs_sync()
        assert scheduler.flush() is True

        assert remote.stored.body == "synced text"
        assert remote.stored.revision == 1
        summary = service.status_summary()
        assert summary["sync"]["status"] == "synced"
        assert summary["sync"]["needs_sync"] is False
