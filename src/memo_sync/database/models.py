"""SQLAlchemy database models for the local replica."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ReplicaBlob(Base):
    """A serialized value stored under a fixed key.

    Holds the memo record (``memo_data``) and small bits of replica state
    such as the remote object handle (``gist_id``). Each value is replaced
    wholesale; there are no partial updates.
    """

    __tablename__ = "replica_blobs"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ReplicaBlob(key='{self.key}', size={len(self.value)})>"
