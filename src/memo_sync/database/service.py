"""Database service for the local replica's key/value blobs."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.errors import StorageError
from .models import Base, ReplicaBlob

logger = logging.getLogger(__name__)


class DatabaseService:
    """Service for database operations and transaction management."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.memo-sync/memo.db
        """
        if db_path is None:
            db_path = Path.home() / ".memo-sync" / "memo.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        db_exists = self.db_path.exists()

        db_url = f"sqlite:///{self.db_path}"
        self.engine = create_engine(db_url, echo=False)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        logger.info("Database initialized at: %s", self.db_path)

        if not db_exists or not self.is_initialized():
            logger.info("New database detected, initializing schema...")
            self.init_db()

    def init_db(self) -> None:
        """Initialize database schema."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            SQLAlchemy Session object

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    def is_initialized(self) -> bool:
        """Check if the blob table exists and a session can be opened."""
        try:
            if not inspect(self.engine).has_table(ReplicaBlob.__tablename__):
                logger.debug("Table %s missing", ReplicaBlob.__tablename__)
                return False

            with self.SessionLocal() as session:
                session.execute(select(1))

            return True
        except SQLAlchemyError as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Blob Operations
    # =========================================================================

    def get_blob(self, key: str) -> Optional[str]:
        """Get the value stored under ``key``.

        Args:
            key: Fixed identifier of the value

        Returns:
            Stored string, or None if nothing is stored

        Raises:
            StorageError: If the database cannot be read
        """
        try:
            with self.get_session() as session:
                blob = session.get(ReplicaBlob, key)
                return blob.value if blob is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

    def set_blob(self, key: str, value: str) -> None:
        """Replace the value stored under ``key`` in a single transaction.

        Args:
            key: Fixed identifier of the value
            value: New value

        Raises:
            StorageError: If the write fails (the previous value is kept)
        """
        try:
            with self.get_session() as session, session.begin():
                session.merge(
                    ReplicaBlob(
                        key=key,
                        value=value,
                        updated_at=datetime.now(timezone.utc).replace(tzinfo=None),
                    )
                )
            logger.debug("Stored '%s' (%d bytes)", key, len(value))
        except SQLAlchemyError as e:
            logger.error("Failed to store '%s': %s", key, e)
            raise StorageError(f"Failed to store '{key}': {e}") from e

    def delete_blob(self, key: str) -> None:
        """Delete the value stored under ``key`` if present.

        Raises:
            StorageError: If the delete fails
        """
        try:
            with self.get_session() as session, session.begin():
                session.execute(delete(ReplicaBlob).where(ReplicaBlob.key == key))
            logger.debug("Deleted '%s'", key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete '{key}': {e}") from e

    def get_statistics(self) -> dict[str, int]:
        """Get database statistics.

        Returns:
            Dictionary with the number of stored blobs
        """
        with self.get_session() as session:
            keys = session.scalars(select(ReplicaBlob.key)).all()
            return {"blobs": len(keys)}

    def close(self) -> None:
        """Dispose the engine and its connection pool."""
        self.engine.dispose()
