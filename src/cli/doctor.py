"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return False, str(exc)
    return True, f"HTTP {response.status_code}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    config = settings.client_config()

    table = Table(title="Blockstack Demo Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if config.is_configured:
        table.add_row("Credentials", "OK", f"app_id={config.app_id}")
    else:
        table.add_row("Credentials", "MISSING", "Run `doctor setup` or set BLOCKSTACK_APP_ID/BLOCKSTACK_APP_SECRET")
    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    # Connectivity (best-effort, no credentials sent)
    ok_http, detail_http = _check_http(settings.api_base_url, settings)
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not config.is_configured:
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive credential setup (stored in the user config .env)."""

    settings = AppSettings()

    app_id = typer.prompt("App id", default=settings.app_id or "", show_default=bool(settings.app_id)).strip()
    app_secret = typer.prompt("App secret", hide_input=True, confirmation_prompt=False).strip()
    base_url = typer.prompt("API base URL", default=settings.api_base_url, show_default=True).strip()

    if not app_id or not app_secret:
        raise typer.BadParameter("app id and app secret are required")

    env_path = write_user_env_vars(
        {
            "BLOCKSTACK_APP_ID": app_id,
            "BLOCKSTACK_APP_SECRET": app_secret,
            "BLOCKSTACK_API_BASE_URL": base_url or None,
        }
    )

    _console.print(f"[green]Saved credentials to:[/green] {env_path}")
