"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...core.sync import SyncAction, SyncResult
from ...models import Record

console = Console()
logger = logging.getLogger(__name__)

_ACTION_MESSAGES = {
    SyncAction.NO_ACTION: "Already in sync",
    SyncAction.INITIALIZED: "Initialized memo",
    SyncAction.PUSHED: "Pushed local memo to gist",
    SyncAction.PULLED: "Pulled memo from gist",
    SyncAction.SKIPPED: "Not logged in, working locally",
}


def display_record(record: Record) -> None:
    """Display the memo body with its revision."""
    title = f"Memo (revision {record.revision})"
    console.print(Panel(record.body or "[dim](empty)[/dim]", title=title))


def display_sync_result(result: SyncResult) -> None:
    """Display the outcome of a reconcile or pull.

    Args:
        result: Sync result from the engine
    """
    if result.success:
        message = _ACTION_MESSAGES.get(result.action, result.action.value)
        console.print(f"[green]✓ {message}[/green]")
    elif result.error is not None:
        console.print(f"[red]✗ Sync failed: {result.error}[/red]")
        console.print("[yellow]Local memo kept as is[/yellow]")
    else:
        message = _ACTION_MESSAGES.get(result.action, "Nothing to pull")
        console.print(f"[yellow]⚠️  {message}[/yellow]")


def display_status(summary: Dict[str, Any]) -> None:
    """Display memo and sync status.

    Args:
        summary: Dictionary from ``MemoService.status_summary``
    """
    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Revision", str(summary["revision"]))
    table.add_row(
        "Length",
        f"{summary['length']} / {summary['limit_value']} {summary['limit_type']}",
    )
    table.add_row("Updated", summary["updated_at"])
    table.add_row("Last modified by", summary["last_modified_by"])
    table.add_row("Last synced", summary["record_last_synced_at"] or "never")

    sync = summary.get("sync")
    if sync:
        table.add_row(
            "Logged in", "yes" if sync["authenticated"] else "[yellow]no[/yellow]"
        )
        table.add_row(
            "Needs sync", "[yellow]yes[/yellow]" if sync["needs_sync"] else "no"
        )

    console.print("\n[bold green]📝 Memo Status[/bold green]")
    console.print(table)
