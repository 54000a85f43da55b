"""Replica stores: the local and remote copies of the Record."""

from .gist_store import GistRemoteStore
from .local_store import LocalReplicaStore, MemoryLocalStore, SqliteLocalStore
from .remote_store import (
    DatabaseHandleStore,
    HandleStore,
    MemoryHandleStore,
    MemoryRemoteStore,
    RemoteReplicaStore,
)

__all__ = [
    # Local replica
    "LocalReplicaStore",
    "SqliteLocalStore",
    "MemoryLocalStore",
    # Remote replica
    "RemoteReplicaStore",
    "GistRemoteStore",
    "MemoryRemoteStore",
    # Remote handles
    "HandleStore",
    "DatabaseHandleStore",
    "MemoryHandleStore",
]
