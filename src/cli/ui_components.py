"""Rich renderables shared by the CLI commands."""

from __future__ import annotations

import json
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from core.domain.models import ApiFailure
from core.services.lookup_service import LookupOutcome


def print_banner(console: Console) -> None:
    """Print the welcome banner. Not shown with `--json` or `--output`."""

    title = Text("Blockstack Demo", style="bold cyan")
    subtitle = Text("Name registry lookup • Search • Registration", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _profile_summary(profile: Any) -> str:
    if not isinstance(profile, dict):
        return ""
    inner = profile.get("profile", profile)
    if isinstance(inner, dict):
        name = inner.get("name")
        if isinstance(name, dict) and isinstance(name.get("formatted"), str):
            return name["formatted"]
        if isinstance(name, str):
            return name
        bio = inner.get("bio")
        if isinstance(bio, str):
            return bio
    return ""


def build_profiles_table(outcome: LookupOutcome) -> Table:
    """Table with one row per found user."""

    table = Table(title="Users")
    table.add_column("Username", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Fields", style="dim")
    for username, profile in outcome.profiles.items():
        fields = ", ".join(sorted(profile.keys())) if isinstance(profile, dict) else ""
        table.add_row(username, _profile_summary(profile), fields)
    return table


def build_json_panel(data: Any, *, title: str = "Response") -> Panel:
    """Pretty-printed JSON payload."""

    text = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True)
    return Panel(Syntax(text, "json", word_wrap=True), title=title, border_style="green")


def build_failure_panel(failure: ApiFailure) -> Panel:
    body = Text()
    body.append(failure.message + "\n")
    body.append(f"\nKind: {failure.kind.value}", style="dim")
    if failure.status_code is not None:
        body.append(f"\nStatus: {failure.status_code}", style="dim")
    return Panel(body, title=Text("Request failed", style="bold red"), border_style="red")
