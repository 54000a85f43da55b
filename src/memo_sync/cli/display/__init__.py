"""CLI display and formatting utilities."""

from .formatters import display_record, display_status, display_sync_result

__all__ = [
    "display_record",
    "display_status",
    "display_sync_result",
]
