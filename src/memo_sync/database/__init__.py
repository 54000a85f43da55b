"""Database package for the local replica.

Contains the pure database layer (models and service). Record encoding and
the replica store contract live in ``memo_sync.stores``.
"""

from .models import Base, ReplicaBlob
from .service import DatabaseService

__all__ = [
    "Base",
    "ReplicaBlob",
    "DatabaseService",
]
