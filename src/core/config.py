"""Settings loaded from `BLOCKSTACK_*` environment variables and `.env` files."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import ClientConfig

DEFAULT_API_BASE_URL = "https://api.onename.com/v1"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "blockstack-demo"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "blockstack-demo"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "blockstack-demo"
    return Path.home() / ".config" / "blockstack-demo"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env file.

    Existing keys not present in `values` are preserved; `None` values are skipped.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# blockstack-demo user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application settings.

    Environment variables win over `.env` files; the user `.env` written by
    `doctor setup` wins over the project `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOCKSTACK_",
        extra="ignore",
        case_sensitive=False,
        # Later files override earlier ones.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    app_id: str | None = Field(
        default=None,
        description="App id issued by the Onename API.",
    )
    app_secret: str | None = Field(
        default=None,
        description="App secret issued by the Onename API.",
    )
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        min_length=8,
        description="Base URL of the name-registry API (without trailing slash).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="blockstack-demo/0.1 (+https://local)",
        min_length=1,
        description="User-Agent sent with every request.",
    )

    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Worker threads used to run calls off the caller's thread.",
    )
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="WARNING",
        description="Root log level for the CLI.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    def client_config(self) -> ClientConfig:
        """Build the immutable credentials object handed to a client instance."""

        return ClientConfig(app_id=self.app_id, app_secret=self.app_secret)
