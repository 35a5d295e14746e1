"""httpx client builder for registry calls."""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.models import ClientConfig


def build_client(
    settings: AppSettings | None = None,
    *,
    config: ClientConfig | None = None,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with the configured timeout and auth headers.

    The caller owns the client and uses it as a context manager, one client
    per request.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    auth = None
    if config is not None and config.is_configured:
        auth = httpx.BasicAuth(str(config.app_id), str(config.app_secret))

    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        auth=auth,
        transport=transport,
    )
