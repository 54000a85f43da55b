"""Application services for memo-sync."""

from .input_limiter import InputLimiter
from .memo_service import MemoService

__all__ = ["InputLimiter", "MemoService"]
