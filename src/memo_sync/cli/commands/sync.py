"""Sync commands: reconcile, push, pull and status."""

import logging

import click
from rich.console import Console

from ...core.errors import MemoSyncError
from ..display import display_record, display_status, display_sync_result
from .init import MemoSyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("sync")
@click.pass_obj
def sync_command(app: MemoSyncApp) -> None:
    """Reconcile the local memo with the gist."""
    console.print("\n[bold blue]🔄 Syncing memo...[/bold blue]")
    result = app.start()
    display_sync_result(result)
    if result.record is not None:
        display_record(result.record)
    if not result.success and result.error is not None:
        raise click.ClickException("Sync failed")


@click.command("push")
@click.pass_obj
def push_command(app: MemoSyncApp) -> None:
    """Push the local memo to the gist."""
    if not app.remote_store.is_authenticated():
        raise click.ClickException("Not logged in. Run 'memo-sync login' first.")

    start = app.start()
    if not start.success and start.error is not None:
        raise click.ClickException(f"Sync failed: {start.error}")

    if not app.engine.push_local_to_remote():
        raise click.ClickException(f"Push failed: {app.engine.last_error}")
    console.print("[green]✓ Memo pushed[/green]")


@click.command("pull")
@click.pass_obj
def pull_command(app: MemoSyncApp) -> None:
    """Refresh the local memo from the gist."""
    if not app.remote_store.is_authenticated():
        raise click.ClickException("Not logged in. Run 'memo-sync login' first.")

    result = app.engine.pull_remote_to_local()
    display_sync_result(result)
    if result.record is not None:
        display_record(result.record)
    if result.error is not None:
        raise click.ClickException("Pull failed")


@click.command("status")
@click.pass_obj
def status_command(app: MemoSyncApp) -> None:
    """Show memo and sync status (no network access)."""
    try:
        summary = app.memo.status_summary()
    except MemoSyncError as e:
        raise click.ClickException(f"Could not read memo: {e}")
    display_status(summary)
