"""Tests for local replica stores."""

import pytest

from memo_sync.core.errors import StorageError
from memo_sync.database import Base, DatabaseService
from memo_sync.models import LimitType, MemoSettings
from memo_sync.stores import MemoryLocalStore, SqliteLocalStore
from memo_sync.stores.local_store import RECORD_KEY


@pytest.fixture
def db_service(tmp_path):
    """Create a temporary database service."""
    service = DatabaseService(tmp_path / "test.db")
    yield service
    service.close()


@pytest.fixture(params=["sqlite", "memory"])
def store(request, db_service):
    """Each local store implementation."""
    if request.param == "sqlite":
        return SqliteLocalStore(db_service, app_version="1.0.0")
    return MemoryLocalStore(app_version="1.0.0")


def _corrupt(store, raw):
    if isinstance(store, SqliteLocalStore):
        store.db_service.set_blob(RECORD_KEY, raw)
    else:
        store.put_raw(raw)


class TestLocalReplicaStore:
    """Behaviour shared by every local store."""

    def test_load_empty(self, store):
        """Test an empty store loads as absent."""
        assert store.load() is None
        assert not store.exists()

    def test_save_and_load(self, store, make_record):
        """Test the record is read back unchanged."""
        record = make_record(body="hello", revision=4)

        store.save(record)

        assert store.load() == record
        assert store.exists()

    def test_save_replaces_whole_record(self, store, make_record):
        """Test a later save fully replaces the earlier one."""
        store.save(make_record(body="old", revision=1))
        newer = make_record(body="new", revision=2)

        store.save(newer)

        assert store.load() == newer

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '{"memo": {}}'])
    def test_corrupt_data_loads_as_absent(self, store, raw):
        """Test undecodable data is treated as no record."""
        _corrupt(store, raw)

        assert store.load() is None

    def test_missing_settings_get_defaults(self, store):
        """Test a stored document without settings loads with defaults."""
        _corrupt(
            store,
            '{"memo": {"content": "x", "updatedAt": "2024-01-01T00:00:00Z"},'
            ' "sync": {"revision": 2, "lastModifiedBy": "local"}}',
        )

        record = store.load()

        assert record is not None
        assert record.settings == MemoSettings()
        assert record.revision == 2

    def test_initialize(self, store):
        """Test the zero-state record is created and persisted."""
        record = store.initialize()

        assert record.revision == 0
        assert record.body == ""
        assert record.app_version == "1.0.0"
        assert store.load() == record

    def test_initialize_uses_default_settings(self):
        """Test configured defaults are applied to new records."""
        settings = MemoSettings(limit_type=LimitType.BYTE, limit_value=32)
        store = MemoryLocalStore(default_settings=settings)

        assert store.initialize().settings == settings

    def test_clear(self, store, make_record):
        """Test clearing removes the record."""
        store.save(make_record(body="x"))

        store.clear()

        assert store.load() is None


class TestStorageFailures:
    """Test failure reporting."""

    def test_memory_write_failure(self, make_record):
        """Test a failing write raises and keeps the previous record."""
        store = MemoryLocalStore()
        first = make_record(body="kept")
        store.save(first)
        store.fail_writes = True

        with pytest.raises(StorageError):
            store.save(make_record(body="lost", revision=1))

        assert store.load() == first

    def test_sqlite_failure(self, db_service, make_record):
        """Test a broken database raises on both save and load."""
        store = SqliteLocalStore(db_service)
        Base.metadata.drop_all(bind=db_service.engine)

        with pytest.raises(StorageError):
            store.save(make_record())
        with pytest.raises(StorageError):
            store.load()

    def test_read_failure_is_not_absence(self, make_record):
        """Test an unreadable store raises instead of reading as empty."""
        store = MemoryLocalStore()
        record = make_record(body="precious", revision=7)
        store.save(record)
        store.fail_reads = True

        with pytest.raises(StorageError):
            store.load()

        store.fail_reads = False
        assert store.load() == record
