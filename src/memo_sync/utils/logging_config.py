"""Logging setup for memo-sync.

Console output goes to stderr so that ``memo-sync show`` can be piped. Every
handler carries a filter that masks GitHub tokens, since request headers and
device-flow responses pass through debug logging.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(location)-28s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(location)-28s %(message)s"

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"

QUIET_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "urllib3",
    "requests",
)

# Header form (``Authorization: token x`` / ``Bearer x``) and GitHub token prefixes
_TOKEN_PATTERN = re.compile(
    r"(Authorization:\s*(?:token|bearer)\s+|\bgh[pousr]_)[A-Za-z0-9_.\-]+",
    re.IGNORECASE,
)


def redact_tokens(text: str) -> str:
    """Replace GitHub token values in ``text`` with ``***``."""
    return _TOKEN_PATTERN.sub(r"\1***", text)


class LogFormatter(logging.Formatter):
    """Formatter with a ``location`` field (file:line) and optional colors."""

    def __init__(self, fmt: str, datefmt: str, colored: bool = False) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        record.location = f"{record.filename}:{record.lineno}"
        if not self.colored:
            return super().format(record)

        levelname = record.levelname
        color = LEVEL_COLORS.get(levelname, RESET)
        record.levelname = f"{color}{levelname:<8}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class TokenRedactingFilter(logging.Filter):
    """Mask GitHub tokens in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        LogFormatter(CONSOLE_FORMAT, "%H:%M:%S", colored=sys.stderr.isatty())
    )
    return handler


def _file_handler(
    path: Path, level: int, max_bytes: int, backup_count: int
) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(LogFormatter(FILE_FORMAT, "%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Install handlers on the root logger, replacing any existing ones.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file
        console_output: Whether to log to stderr
        max_file_size: Size in bytes at which the log file rotates
        backup_count: Number of rotated files to keep
    """
    level = _parse_level(log_level)
    handlers = []
    if console_output:
        handlers.append(_console_handler(level))
    if log_file:
        handlers.append(_file_handler(log_file, level, max_file_size, backup_count))

    redactor = TokenRedactingFilter()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.addFilter(redactor)
        root.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.debug("Logging at %s", logging.getLevelName(level))
    if log_file:
        logger.info("Writing log file %s", log_file)


def set_log_level(level: str) -> None:
    """Change the level of the root logger, its handlers and memo_sync loggers."""
    numeric_level = _parse_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)

    for name in list(logging.root.manager.loggerDict):
        if name == "memo_sync" or name.startswith("memo_sync."):
            logging.getLogger(name).setLevel(numeric_level)

    # DEBUG on the root would otherwise let SQL and HTTP chatter through
    if numeric_level <= logging.DEBUG:
        configure_third_party_loggers()


def configure_third_party_loggers(level: int = logging.WARNING) -> None:
    """Raise noisy library loggers to ``level``."""
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level)
