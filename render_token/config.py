"""Process configuration for render token signing and delivery links."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

SECRET_ENV = "RENDER_SECRET"
BASE_URL_ENVS = ("RENDER_BASE_URL", "NEXT_PUBLIC_BASE_URL")
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_EXPIRY_MS = 60_000


class ConfigurationError(RuntimeError):
    """Deployment misconfiguration; not recoverable per request."""


def resolve_secret(secret_key: str | None = None) -> bytes:
    """Return the signing secret as bytes, preferring an explicit value over the environment."""
    secret = secret_key if secret_key is not None else os.getenv(SECRET_ENV)
    if not secret:
        raise ConfigurationError(f"{SECRET_ENV} environment variable is required")
    return secret.encode("utf-8")


def resolve_base_url(base_url: str | None = None) -> str:
    if base_url is None:
        for name in BASE_URL_ENVS:
            base_url = os.getenv(name)
            if base_url:
                break
    return (base_url or DEFAULT_BASE_URL).rstrip("/")


@dataclass(frozen=True)
class RenderTokenSettings:
    """Signing and delivery settings, loaded once and injected into components."""

    secret_key: str
    base_url: str = DEFAULT_BASE_URL
    expiry_ms: int = DEFAULT_EXPIRY_MS
    max_clock_skew_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.secret_key:
            raise ConfigurationError("render token secret must not be empty")
        if self.expiry_ms <= 0:
            raise ConfigurationError(f"expiry_ms must be positive, got {self.expiry_ms}")
        if self.max_clock_skew_ms is not None and self.max_clock_skew_ms < 0:
            raise ConfigurationError(f"max_clock_skew_ms must be >= 0, got {self.max_clock_skew_ms}")

    @classmethod
    def from_env(cls) -> "RenderTokenSettings":
        """Build settings from the process environment.

        ``RENDER_SECRET`` is required. The base URL comes from ``RENDER_BASE_URL``,
        then ``NEXT_PUBLIC_BASE_URL``, then ``http://localhost:3000``.
        """
        secret = resolve_secret().decode("utf-8")
        return cls(secret_key=secret, base_url=resolve_base_url())
