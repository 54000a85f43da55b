"""Memo editing commands."""

import logging

import click
from rich.console import Console

from ...core.errors import MemoSyncError
from ...models import LimitType
from ..display import display_record, display_sync_result
from .init import MemoSyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("show")
@click.option("--sync", "sync_first", is_flag=True, help="Reconcile with gist first")
@click.pass_obj
def show_command(app: MemoSyncApp, sync_first: bool) -> None:
    """Print the memo."""
    if sync_first:
        result = app.start()
        display_sync_result(result)
    try:
        record = app.memo.current()
    except MemoSyncError as e:
        raise click.ClickException(f"Could not read memo: {e}")
    display_record(record)


@click.command("edit")
@click.argument("text")
@click.option("--no-push", is_flag=True, help="Only save locally")
@click.pass_obj
def edit_command(app: MemoSyncApp, text: str, no_push: bool) -> None:
    """Replace the memo with TEXT (truncated to the input limit)."""
    if not no_push:
        display_sync_result(app.start())

    try:
        record = app.memo.edit(text)
    except MemoSyncError as e:
        raise click.ClickException(f"Could not save memo: {e}")

    if len(record.body) < len(text):
        console.print(
            f"[yellow]⚠️  Truncated to {record.settings.limit_value} "
            f"{record.settings.limit_type.value}[/yellow]"
        )
    console.print(f"[green]✓ Saved (revision {record.revision})[/green]")

    if no_push:
        app.scheduler.cancel()
        return

    if app.scheduler.flush():
        console.print("[green]✓ Pushed to gist[/green]")
    elif app.engine.is_ready and app.remote_store.is_authenticated():
        console.print("[yellow]⚠️  Push failed, memo kept locally[/yellow]")


@click.command("limit")
@click.argument("limit_type", type=click.Choice(["CHAR", "BYTE"], case_sensitive=False))
@click.argument("limit_value", type=click.IntRange(min=1))
@click.pass_obj
def limit_command(app: MemoSyncApp, limit_type: str, limit_value: int) -> None:
    """Set the input limit to LIMIT_VALUE characters or bytes."""
    display_sync_result(app.start())
    try:
        record = app.memo.change_limit(LimitType(limit_type.upper()), limit_value)
    except (MemoSyncError, ValueError) as e:
        raise click.ClickException(f"Could not change limit: {e}")

    console.print(
        f"[green]✓ Limit set to {record.settings.limit_value} "
        f"{record.settings.limit_type.value}[/green]"
    )
    app.scheduler.flush()


@click.command("wipe")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def wipe_command(app: MemoSyncApp, yes: bool) -> None:
    """Delete the local memo and start over at revision 0."""
    if not yes:
        click.confirm("Delete the local memo? The gist copy is kept.", abort=True)
    try:
        app.memo.wipe()
    except MemoSyncError as e:
        raise click.ClickException(f"Could not wipe memo: {e}")
    console.print("[green]✓ Local memo wiped[/green]")
