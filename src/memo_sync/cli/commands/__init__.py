"""CLI command modules."""

from .auth import login_command, logout_command
from .init import InitializationError, MemoSyncApp
from .memo import edit_command, limit_command, show_command, wipe_command
from .sync import pull_command, push_command, status_command, sync_command

__all__ = [
    "MemoSyncApp",
    "InitializationError",
    "show_command",
    "edit_command",
    "limit_command",
    "wipe_command",
    "sync_command",
    "push_command",
    "pull_command",
    "status_command",
    "login_command",
    "logout_command",
]
