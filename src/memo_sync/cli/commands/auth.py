"""Login and logout commands."""

import logging
from typing import Optional

import click
from rich.console import Console

from ...auth.provider import TokenFileAuthProvider
from ...core.errors import MemoSyncError
from ..display import display_sync_result
from .init import MemoSyncApp

console = Console()
logger = logging.getLogger(__name__)


def _token_provider(app: MemoSyncApp) -> TokenFileAuthProvider:
    if not isinstance(app.auth, TokenFileAuthProvider):
        raise click.ClickException("Login is not supported with this configuration")
    return app.auth


def _show_device_code(verification_uri: str, user_code: str) -> None:
    console.print(
        f"\nOpen [bold]{verification_uri}[/bold] and enter the code "
        f"[bold yellow]{user_code}[/bold yellow]\n"
    )


@click.command("login")
@click.option("--token", help="GitHub personal access token with the gist scope")
@click.option("--device", is_flag=True, help="Use the GitHub device flow")
@click.option("--no-verify", is_flag=True, help="Store the token without checking it")
@click.pass_obj
def login_command(
    app: MemoSyncApp, token: Optional[str], device: bool, no_verify: bool
) -> None:
    """Log in to GitHub and reconcile the memo with the gist."""
    auth = _token_provider(app)

    try:
        if device:
            client_id = app.config.github_client_id if app.config else ""
            scopes = app.config.github_scopes if app.config else "gist"
            auth.login_with_device_flow(
                client_id, scope=scopes, notify=_show_device_code
            )
        else:
            if not token:
                token = click.prompt("GitHub token", hide_input=True)
            auth.login_with_token(token, verify=not no_verify)
    except MemoSyncError as e:
        raise click.ClickException(f"Login failed: {e}")

    console.print("[green]✓ Logged in[/green]")
    display_sync_result(app.start())


@click.command("logout")
@click.pass_obj
def logout_command(app: MemoSyncApp) -> None:
    """Forget the GitHub token. The local memo is kept."""
    auth = _token_provider(app)
    auth.logout()
    console.print("[green]✓ Logged out, local memo kept[/green]")
    if auth.is_authenticated():
        console.print(
            "[yellow]MEMO_SYNC_GITHUB_TOKEN is still set, so syncing stays "
            "enabled. Unset it to stop syncing.[/yellow]"
        )
