"""User lookup use case.

This module holds the flow a front end runs when a user types a list of
names: normalize the input, look the names up, keep the entries that
resolved to a profile, and produce the message to show. Keeping it here
leaves rendering and progress display to the entry point (CLI, tests,
future UIs) while the logic stays reusable.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from core.domain.models import ApiFailure, ApiResult
from core.interfaces.client import RegistryClient
from core.services.background import BackgroundRunner
from core.urls import normalize_identifiers

GENERIC_FAILURE_MESSAGE = "There was an error executing your request..."


@dataclass
class LookupHooks:
    """Optional callbacks for UI layers (progress)."""

    started: Callable[[list[str]], None] | None = None
    finished: Callable[["LookupOutcome"], None] | None = None


@dataclass
class LookupOutcome:
    """Output of a lookup invocation."""

    query: str
    usernames: list[str]
    profiles: dict[str, Any] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    failure: ApiFailure | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str | None:
        """Message for the user, or None when there is something to list."""

        if self.failure is not None:
            return GENERIC_FAILURE_MESSAGE
        if not self.profiles:
            return f'No users matching "{self.query}" were found.'
        return None


def _query_text(raw: str | Iterable[str]) -> str:
    return raw if isinstance(raw, str) else ",".join(raw)


def build_outcome(raw: str | Iterable[str], usernames: list[str], result: ApiResult) -> LookupOutcome:
    """Turn a `lookup_profiles` result into a `LookupOutcome`."""

    outcome = LookupOutcome(query=_query_text(raw), usernames=usernames, status_code=result.status_code)
    if isinstance(result, ApiFailure):
        outcome.failure = result
        return outcome

    profiles = result.data if isinstance(result.data, dict) else {}
    outcome.profiles = dict(profiles)
    outcome.missing = [name for name in usernames if name not in profiles]
    return outcome


def lookup(
    client: RegistryClient,
    raw: str | Iterable[str],
    *,
    hooks: LookupHooks | None = None,
) -> LookupOutcome:
    """Run the lookup flow synchronously."""

    hooks = hooks or LookupHooks()
    raw = raw if isinstance(raw, str) else list(raw)
    usernames = normalize_identifiers(raw)
    if hooks.started:
        hooks.started(usernames)

    outcome = build_outcome(raw, usernames, client.lookup_profiles(usernames))

    if hooks.finished:
        hooks.finished(outcome)
    return outcome


def lookup_in_background(
    runner: BackgroundRunner,
    client: RegistryClient,
    raw: str | Iterable[str],
    *,
    on_done: Callable[[LookupOutcome], None] | None = None,
) -> Future[LookupOutcome]:
    """Dispatch `lookup` on a worker and deliver the outcome to `on_done`."""

    raw = raw if isinstance(raw, str) else list(raw)
    return runner.submit(lookup, client, raw, on_done=on_done)
