"""Command-line interface for the memo-sync application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    InitializationError,
    MemoSyncApp,
    edit_command,
    limit_command,
    login_command,
    logout_command,
    pull_command,
    push_command,
    show_command,
    status_command,
    sync_command,
    wipe_command,
)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str]) -> None:
    """Memo sync tool.

    Keeps one memo in sync between this machine and a private GitHub Gist.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    # Tests hand in a prepared app through ``obj``
    if ctx.obj is None:
        try:
            ctx.obj = MemoSyncApp.from_config()
        except InitializationError as e:
            raise click.ClickException(str(e))


# Register commands
cli.add_command(show_command)
cli.add_command(edit_command)
cli.add_command(limit_command)
cli.add_command(wipe_command)
cli.add_command(sync_command)
cli.add_command(push_command)
cli.add_command(pull_command)
cli.add_command(status_command)
cli.add_command(login_command)
cli.add_command(logout_command)


if __name__ == "__main__":
    cli()
