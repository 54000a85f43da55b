"""Tests for the database service."""

import pytest

from memo_sync.core.errors import StorageError
from memo_sync.database import Base, DatabaseService


@pytest.fixture
def db_service(tmp_path):
    """Create a temporary database service."""
    service = DatabaseService(tmp_path / "test.db")
    yield service
    service.close()


class TestDatabaseService:
    """Test DatabaseService blob operations."""

    def test_creates_schema(self, tmp_path):
        """Test a new database file gets the blob table."""
        service = DatabaseService(tmp_path / "nested" / "memo.db")

        assert (tmp_path / "nested" / "memo.db").exists()
        assert service.is_initialized()
        service.close()

    def test_get_missing_blob(self, db_service):
        """Test reading an unknown key returns None."""
        assert db_service.get_blob("missing") is None

    def test_set_and_get_blob(self, db_service):
        """Test a stored value is read back."""
        db_service.set_blob("memo_data", '{"a": 1}')

        assert db_service.get_blob("memo_data") == '{"a": 1}'

    def test_set_blob_replaces_value(self, db_service):
        """Test writing a key twice keeps one row with the last value."""
        db_service.set_blob("gist_id", "first")
        db_service.set_blob("gist_id", "second")

        assert db_service.get_blob("gist_id") == "second"
        assert db_service.get_statistics() == {"blobs": 1}

    def test_delete_blob(self, db_service):
        """Test deleting a key, and deleting it again."""
        db_service.set_blob("gist_id", "abc")

        db_service.delete_blob("gist_id")
        db_service.delete_blob("gist_id")

        assert db_service.get_blob("gist_id") is None

    def test_values_survive_reopen(self, tmp_path):
        """Test data persists across service instances."""
        path = tmp_path / "memo.db"
        first = DatabaseService(path)
        first.set_blob("memo_data", "persisted")
        first.close()

        second = DatabaseService(path)
        assert second.get_blob("memo_data") == "persisted"
        second.close()

    def test_errors_become_storage_errors(self, db_service):
        """Test SQLAlchemy failures surface as StorageError."""
        Base.metadata.drop_all(bind=db_service.engine)

        assert not db_service.is_initialized()
        with pytest.raises(StorageError):
            db_service.set_blob("memo_data", "x")
        with pytest.raises(StorageError):
            db_service.get_blob("memo_data")
