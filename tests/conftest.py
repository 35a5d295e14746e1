"""Shared fixtures: settings without env files and a recording mock transport."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from adapters.blockstack_client import BlockstackClient
from core.config import AppSettings
from core.domain.models import ClientConfig

BASE_URL = "https://api.example.test/v1"

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request and counts `close` calls."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []
        self.closed = 0

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def close(self) -> None:
        self.closed += 1

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def json_handler(payload: object, status_code: int = 200) -> Handler:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return _handler


def fail_handler(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected network call: {request.method} {request.url}")


@pytest.fixture
def settings(monkeypatch) -> AppSettings:
    for key in ("BLOCKSTACK_APP_ID", "BLOCKSTACK_APP_SECRET", "BLOCKSTACK_API_BASE_URL"):
        monkeypatch.delenv(key, raising=False)
    return AppSettings(_env_file=None, api_base_url=BASE_URL)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(app_id="app-id", app_secret="app-secret")


@pytest.fixture
def make_client(settings, config):
    """Build a client wired to a `RecordingTransport` around `handler`."""

    def _make(
        handler: Handler = fail_handler,
        *,
        client_config: ClientConfig | None | str = "default",
    ) -> tuple[BlockstackClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        cfg = config if client_config == "default" else client_config
        return BlockstackClient(cfg, settings=settings, transport=transport), transport

    return _make
