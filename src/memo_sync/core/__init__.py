"""Core business logic modules for memo-sync.

This package contains the synchronization logic:
- errors: error taxonomy shared by stores and engine
- sync: conflict resolution, sync engine and push scheduling
"""

from .errors import AuthError, DecodeError, MemoSyncError, NetworkError, StorageError

__all__ = [
    "MemoSyncError",
    "AuthError",
    "NetworkError",
    "StorageError",
    "DecodeError",
]
