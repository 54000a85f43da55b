"""Record model: the single versioned unit kept in sync between replicas.

The serialized shape is the nested JSON document shared by both replicas::

    {
        "meta": {"schemaVersion": 1, "appVersion": "1.0.0", "createdAt": "..."},
        "memo": {"content": "...", "updatedAt": "..."},
        "settings": {"limitType": "CHAR", "limitValue": 200},
        "sync": {"lastSyncedAt": null, "lastModifiedBy": "local", "revision": 0}
    }

Records are immutable. Local mutations return a new Record with the
revision bumped; adopting a remote copy keeps it exactly as read.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..core.errors import DecodeError

DEFAULT_LIMIT_TYPE = "CHAR"
DEFAULT_LIMIT_VALUE = 200


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class LimitType(str, Enum):
    """How the input limit counts the body length."""

    CHAR = "CHAR"  # Unicode code points
    BYTE = "BYTE"  # UTF-8 bytes


class ModifiedBy(str, Enum):
    """Which replica produced the last mutation."""

    LOCAL = "local"
    REMOTE = "cloud"


class _Section(BaseModel):
    """Base for record sections: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class RecordMeta(_Section):
    """Provenance metadata. Written, never used for conflict resolution."""

    schema_version: int = 1
    app_version: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        """Normalize to UTC."""
        return _as_utc(v)


class MemoContent(_Section):
    """The memo body and the time it last changed."""

    content: str = ""
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("updated_at")
    @classmethod
    def validate_updated_at(cls, v: datetime) -> datetime:
        """Normalize to UTC."""
        return _as_utc(v)


class MemoSettings(_Section):
    """Input length policy, synchronized together with the body."""

    limit_type: LimitType = LimitType(DEFAULT_LIMIT_TYPE)
    limit_value: int = Field(default=DEFAULT_LIMIT_VALUE, gt=0)


class SyncMetadata(_Section):
    """Revision counter and sync bookkeeping."""

    last_synced_at: Optional[datetime] = None
    last_modified_by: ModifiedBy = ModifiedBy.LOCAL
    revision: int = Field(default=0, ge=0)

    @field_validator("last_synced_at")
    @classmethod
    def validate_last_synced_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Normalize to UTC."""
        if v is None:
            return v
        return _as_utc(v)

    @field_validator("revision", mode="before")
    @classmethod
    def validate_revision(cls, v: Any) -> Any:
        """Treat a null revision as zero, like a missing one."""
        return 0 if v is None else v


class Record(_Section):
    """A full replica of the memo document."""

    meta: RecordMeta = Field(default_factory=RecordMeta)
    memo: MemoContent = Field(default_factory=MemoContent)
    settings: MemoSettings = Field(default_factory=MemoSettings)
    sync: SyncMetadata = Field(default_factory=SyncMetadata)

    @field_validator("settings", mode="before")
    @classmethod
    def validate_settings(cls, v: Any) -> Any:
        """Fall back to default settings for documents written without them."""
        return MemoSettings() if v is None else v

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def body(self) -> str:
        """Memo text."""
        return self.memo.content

    @property
    def body_updated_at(self) -> datetime:
        """Timestamp of the last body or settings mutation."""
        return self.memo.updated_at

    @property
    def revision(self) -> int:
        """Local mutation counter."""
        return self.sync.revision

    @property
    def last_modified_by(self) -> ModifiedBy:
        """Replica that produced the last mutation."""
        return self.sync.last_modified_by

    @property
    def last_synced_at(self) -> Optional[datetime]:
        """Time of the last successful reconciliation, if any."""
        return self.sync.last_synced_at

    @property
    def schema_version(self) -> int:
        """Schema version of the document."""
        return self.meta.schema_version

    @property
    def app_version(self) -> str:
        """Version of the application that created the document."""
        return self.meta.app_version

    # ------------------------------------------------------------------
    # Construction and mutation
    # ------------------------------------------------------------------

    @classmethod
    def create_initial(
        cls,
        app_version: str,
        schema_version: int = 1,
        settings: Optional[MemoSettings] = None,
        now: Optional[datetime] = None,
    ) -> "Record":
        """Create the zero-state record used on first run.

        Args:
            app_version: Application version written into the metadata
            schema_version: Document schema version
            settings: Initial settings (defaults to CHAR / 200)
            now: Creation time (defaults to current UTC time)

        Returns:
            Record with revision 0, empty body and no sync timestamp
        """
        now = _as_utc(now) if now else utc_now()
        return cls(
            meta=RecordMeta(
                schema_version=schema_version, app_version=app_version, created_at=now
            ),
            memo=MemoContent(content="", updated_at=now),
            settings=settings or MemoSettings(),
            sync=SyncMetadata(
                last_synced_at=None, last_modified_by=ModifiedBy.LOCAL, revision=0
            ),
        )

    def _touched(self, now: Optional[datetime]) -> datetime:
        # body_updated_at never moves backwards on a replica
        now = _as_utc(now) if now else utc_now()
        return max(now, self.memo.updated_at)

    def _local_sync(self) -> SyncMetadata:
        return self.sync.model_copy(
            update={
                "revision": self.sync.revision + 1,
                "last_modified_by": ModifiedBy.LOCAL,
            }
        )

    def with_body(self, body: str, now: Optional[datetime] = None) -> "Record":
        """Return a copy carrying a locally edited body.

        Args:
            body: New memo text, already validated by the input limiter
            now: Mutation time (defaults to current UTC time)

        Returns:
            New Record with revision + 1 and lastModifiedBy LOCAL
        """
        return self.model_copy(
            update={
                "memo": MemoContent(content=body, updated_at=self._touched(now)),
                "sync": self._local_sync(),
            }
        )

    def with_settings(
        self, settings: MemoSettings, now: Optional[datetime] = None
    ) -> "Record":
        """Return a copy carrying locally changed settings.

        The body timestamp is refreshed as well so that the change is seen
        as unsynced.
        """
        return self.model_copy(
            update={
                "memo": self.memo.model_copy(
                    update={"updated_at": self._touched(now)}
                ),
                "settings": settings,
                "sync": self._local_sync(),
            }
        )

    def mark_synced(self, now: Optional[datetime] = None) -> "Record":
        """Return a copy stamped as reconciled at ``now``.

        The stamp is never earlier than ``body_updated_at``.
        """
        stamp = _as_utc(now) if now else utc_now()
        stamp = max(stamp, self.memo.updated_at)
        return self.model_copy(
            update={"sync": self.sync.model_copy(update={"last_synced_at": stamp})}
        )

    def has_unsynced_changes(self) -> bool:
        """Check whether a local mutation has not reached the remote yet."""
        if self.sync.last_modified_by != ModifiedBy.LOCAL:
            return False
        if self.sync.last_synced_at is None:
            return True
        return self.memo.updated_at > self.sync.last_synced_at

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON-compatible wire/storage document."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_payload(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_payload(cls, data: Any) -> "Record":
        """Build a Record from a decoded document.

        Raises:
            DecodeError: If the document does not describe a valid Record
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
        if not isinstance(data.get("memo"), dict):
            raise DecodeError("Document has no memo section")
        if not isinstance(data.get("memo", {}).get("content"), str):
            raise DecodeError("Memo content must be a string")

        # updatedAt breaks revision ties, so it must never default to "now"
        memo = data["memo"]
        if "updatedAt" not in memo and "updated_at" not in memo:
            meta = data.get("meta")
            created_at = None
            if isinstance(meta, dict):
                created_at = meta.get("createdAt", meta.get("created_at"))
            if created_at is None:
                raise DecodeError("Memo has neither updatedAt nor meta.createdAt")
            data = {**data, "memo": {**memo, "updatedAt": created_at}}

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Invalid record document: {e}") from e

    @classmethod
    def from_json(cls, raw: str) -> "Record":
        """Parse a JSON string into a Record.

        Raises:
            DecodeError: If the string is not valid JSON or not a valid Record
        """
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Malformed record JSON: {e}") from e
        return cls.from_payload(data)
