"""Error taxonomy shared by the replica stores and the sync engine."""


class MemoSyncError(Exception):
    """Base class for all memo-sync errors."""

    pass


class AuthError(MemoSyncError):
    """Missing or rejected capability token. Never retried automatically."""

    pass


class NetworkError(MemoSyncError):
    """Transport failure or timeout while talking to the remote store."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize network error.

        Args:
            message: Human readable description
            status_code: HTTP status code when the failure came from a response
        """
        super().__init__(message)
        self.status_code = status_code


class StorageError(MemoSyncError):
    """Local persistence failure. The previously stored value stays intact."""

    pass


class DecodeError(MemoSyncError, ValueError):
    """Persisted data could not be decoded into a Record."""

    pass
