"""Local replica store: durable, always-available storage of the Record."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..core.errors import DecodeError, StorageError
from ..database.service import DatabaseService
from ..models.record import MemoSettings, Record

logger = logging.getLogger(__name__)

RECORD_KEY = "memo_data"


class LocalReplicaStore(ABC):
    """Contract for the local replica.

    ``load`` reads missing or corrupt data as absent and raises StorageError
    when the store itself cannot be read.
    ``save`` replaces the whole record atomically or raises StorageError.
    """

    def __init__(
        self,
        app_version: str = "",
        schema_version: int = 1,
        default_settings: Optional[MemoSettings] = None,
    ) -> None:
        """Initialize the store.

        Args:
            app_version: Version written into records created by ``initialize``
            schema_version: Schema version written by ``initialize``
            default_settings: Settings for records created by ``initialize``
        """
        self.app_version = app_version
        self.schema_version = schema_version
        self.default_settings = default_settings or MemoSettings()

    @abstractmethod
    def _read_raw(self) -> Optional[str]:
        """Return the stored serialized record or None."""

    @abstractmethod
    def _write_raw(self, raw: str) -> None:
        """Replace the stored serialized record."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored record."""

    def load(self) -> Optional[Record]:
        """Load the stored record.

        Returns:
            The Record, or None if nothing is stored or the data is corrupt

        Raises:
            StorageError: If the store cannot be read
        """
        raw = self._read_raw()
        if raw is None:
            return None

        try:
            return Record.from_json(raw)
        except DecodeError as e:
            logger.warning("Ignoring corrupt local record: %s", e)
            return None

    def save(self, record: Record) -> None:
        """Persist the full record.

        Raises:
            StorageError: If the record could not be written
        """
        self._write_raw(record.to_json())
        logger.debug(
            "Saved local record (revision=%d, %d chars)",
            record.revision,
            len(record.body),
        )

    def initialize(self) -> Record:
        """Create, persist and return the zero-state record."""
        record = Record.create_initial(
            app_version=self.app_version,
            schema_version=self.schema_version,
            settings=self.default_settings,
        )
        self.save(record)
        logger.info("Initialized local record")
        return record

    def exists(self) -> bool:
        """Check whether a loadable record is stored."""
        return self.load() is not None


class SqliteLocalStore(LocalReplicaStore):
    """Local replica kept in the SQLite database."""

    def __init__(
        self,
        db_service: DatabaseService,
        key: str = RECORD_KEY,
        app_version: str = "",
        schema_version: int = 1,
        default_settings: Optional[MemoSettings] = None,
    ) -> None:
        """Initialize SQLite store.

        Args:
            db_service: Database service instance
            key: Row key holding the record
            app_version: Version written into new records
            schema_version: Schema version written into new records
            default_settings: Settings for new records
        """
        super().__init__(app_version, schema_version, default_settings)
        self.db_service = db_service
        self.key = key

    def _read_raw(self) -> Optional[str]:
        return self.db_service.get_blob(self.key)

    def _write_raw(self, raw: str) -> None:
        self.db_service.set_blob(self.key, raw)

    def clear(self) -> None:
        """Delete the stored record."""
        self.db_service.delete_blob(self.key)
        logger.info("Cleared local record")


class MemoryLocalStore(LocalReplicaStore):
    """Local replica held in process memory.

    Stores the serialized JSON so that load/save go through the same
    encoding as the SQLite store.
    """

    def __init__(
        self,
        app_version: str = "",
        schema_version: int = 1,
        default_settings: Optional[MemoSettings] = None,
    ) -> None:
        """Initialize the in-memory store."""
        super().__init__(app_version, schema_version, default_settings)
        self._data: Dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False

    def _read_raw(self) -> Optional[str]:
        if self.fail_reads:
            raise StorageError("Local store is not readable")
        return self._data.get(RECORD_KEY)

    def _write_raw(self, raw: str) -> None:
        if self.fail_writes:
            raise StorageError("Local store is not writable")
        self._data[RECORD_KEY] = raw

    def put_raw(self, raw: str) -> None:
        """Store a raw string as-is (for simulating corrupt data)."""
        self._data[RECORD_KEY] = raw

    def clear(self) -> None:
        """Drop the stored record."""
        self._data.pop(RECORD_KEY, None)
