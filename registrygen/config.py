"""Environment-driven settings for registrygen."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import ConfigError

DEFAULT_HOST = "https://raw.githubusercontent.com"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Settings shared by every command."""

    github_token: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    host: str = DEFAULT_HOST
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            github_token=env.get("GITHUB_TOKEN") or None,
            github_api_url=env.get("REGISTRYGEN_GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            host=env.get("REGISTRYGEN_HOST") or DEFAULT_HOST,
            http_timeout=_as_timeout(env.get("REGISTRYGEN_HTTP_TIMEOUT")),
        )


def _as_timeout(value: str | None) -> float:
    if not value:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"REGISTRYGEN_HTTP_TIMEOUT must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"REGISTRYGEN_HTTP_TIMEOUT must be positive, got {value!r}")
    return timeout
