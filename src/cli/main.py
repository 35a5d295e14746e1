"""CLI entry point (typer).

Each command maps to one client operation. The CLI only parses arguments,
renders results and picks the exit code; request building and error
classification stay in the client.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.blockstack_client import BlockstackClient
from adapters.json_exporter import export_result_json
from cli import doctor
from cli.ui_components import (
    build_failure_panel,
    build_json_panel,
    build_profiles_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import ApiFailure, ApiResult, ApiSuccess
from core.services.background import BackgroundRunner
from core.services.lookup_service import lookup_in_background

app = typer.Typer(no_args_is_help=True, help="Demo client for the Blockstack/Onename name registry.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@dataclass
class CliState:
    settings: AppSettings
    as_json: bool = False
    output: Path | None = None


def make_client(settings: AppSettings) -> BlockstackClient:
    return BlockstackClient.from_settings(settings)


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
    root.setLevel(level.upper())


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        state = CliState(settings=AppSettings())
        ctx.obj = state
    return state


def _parse_profile(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--profile is not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise typer.BadParameter("--profile must be a JSON object")
    return value


def _emit(state: CliState, result: ApiResult, *, title: str) -> None:
    if state.output is not None:
        path = export_result_json(result=result, output_path=state.output)
        _err_console.print(f"[green]Saved result to:[/green] {path}")

    if state.as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2, sort_keys=True))
    elif isinstance(result, ApiFailure):
        _console.print(build_failure_panel(result))
    else:
        _console.print(build_json_panel(result.data, title=title))

    if isinstance(result, ApiFailure):
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    app_id: Optional[str] = typer.Option(None, "--app-id", help="Overrides BLOCKSTACK_APP_ID."),
    app_secret: Optional[str] = typer.Option(None, "--app-secret", help="Overrides BLOCKSTACK_APP_SECRET."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the result to a JSON file."),
) -> None:
    settings = AppSettings()
    updates = {k: v for k, v in {"app_id": app_id, "app_secret": app_secret}.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)

    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = CliState(settings=settings, as_json=as_json, output=output)


@app.command(name="lookup")
def lookup_cmd(
    ctx: typer.Context,
    users: list[str] = typer.Argument(..., help="Usernames, space or comma separated."),
) -> None:
    """Look up users and list the ones that resolved to a profile."""

    state = _state(ctx)
    client = make_client(state.settings)

    with BackgroundRunner(max_workers=state.settings.max_workers) as runner:
        future = lookup_in_background(runner, client, users)
        if state.as_json:
            outcome = future.result()
        else:
            with _console.status("Looking up users..."):
                outcome = future.result()

    if state.output is not None or state.as_json:
        result: ApiResult = outcome.failure or ApiSuccess(data=outcome.profiles, status_code=outcome.status_code)
        _emit(state, result, title="Users")
        return

    if outcome.failure is not None:
        _console.print(outcome.message, style="red", markup=False)
        _console.print(build_failure_panel(outcome.failure))
        raise typer.Exit(code=1)

    if outcome.message:
        _console.print(outcome.message, style="yellow", markup=False)
        return

    print_banner(_console)
    _console.print(build_profiles_table(outcome))
    if outcome.missing:
        _console.print(f"Not found: {', '.join(outcome.missing)}", style="dim", markup=False)


@app.command()
def search(ctx: typer.Context, query: str = typer.Argument(..., help="Free-text query.")) -> None:
    """Search users by free text."""

    state = _state(ctx)
    _emit(state, make_client(state.settings).search_users(query), title="Search")


@app.command()
def register(
    ctx: typer.Context,
    username: str = typer.Argument(...),
    recipient_address: str = typer.Argument(..., help="Bitcoin address that will own the name."),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile as a JSON object."),
) -> None:
    """Register a username."""

    state = _state(ctx)
    result = make_client(state.settings).register_user(username, recipient_address, _parse_profile(profile))
    _emit(state, result, title="Register")


@app.command()
def update(
    ctx: typer.Context,
    username: str = typer.Argument(...),
    profile: str = typer.Option(..., "--profile", help="New profile as a JSON object."),
    owner_pubkey: str = typer.Option(..., "--owner-pubkey", help="Public key of the current owner."),
) -> None:
    """Request an unsigned profile-update transaction."""

    state = _state(ctx)
    parsed = _parse_profile(profile) or {}
    _emit(state, make_client(state.settings).update_user(username, parsed, owner_pubkey), title="Update")


@app.command()
def transfer(
    ctx: typer.Context,
    username: str = typer.Argument(...),
    transfer_address: str = typer.Argument(..., help="Bitcoin address of the new owner."),
    owner_pubkey: str = typer.Option(..., "--owner-pubkey", help="Public key of the current owner."),
) -> None:
    """Request an unsigned name-transfer transaction."""

    state = _state(ctx)
    result = make_client(state.settings).transfer_user(username, transfer_address, owner_pubkey)
    _emit(state, result, title="Transfer")


@app.command()
def broadcast(ctx: typer.Context, signed_hex: str = typer.Argument(..., help="Signed transaction (hex).")) -> None:
    """Broadcast a signed transaction."""

    state = _state(ctx)
    _emit(state, make_client(state.settings).broadcast_transaction(signed_hex), title="Broadcast")


@app.command()
def unspents(ctx: typer.Context, address: str = typer.Argument(...)) -> None:
    """List unspent outputs of a Bitcoin address."""

    state = _state(ctx)
    _emit(state, make_client(state.settings).get_unspent_outputs(address), title="Unspent outputs")


@app.command()
def names(ctx: typer.Context, address: str = typer.Argument(...)) -> None:
    """List names owned by a Bitcoin address."""

    state = _state(ctx)
    _emit(state, make_client(state.settings).get_names_owned_by_address(address), title="Names")


@app.command()
def dkim(ctx: typer.Context, domain: str = typer.Argument(...)) -> None:
    """Fetch the DKIM public key record of a domain."""

    state = _state(ctx)
    _emit(state, make_client(state.settings).get_dkim_public_key(domain), title="DKIM")


def run() -> None:
    app()
