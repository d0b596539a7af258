"""Delivery URL composition and process-wide default token components."""

from __future__ import annotations

import threading
from typing import Any, Optional
from urllib.parse import quote, urlencode

from .config import RenderTokenSettings, resolve_base_url
from .token.issuer import TokenIssuer
from .token.types import Tier, TokenPayload
from .token.verifier import TokenVerifier

RENDER_PATH = "render"


class RenderUrlBuilder:
    """Compose an issuer with the render endpoint to produce directly fetchable links."""

    def __init__(self, issuer: TokenIssuer, *, base_url: str | None = None) -> None:
        self.issuer = issuer
        self.base_url = resolve_base_url(base_url)

    def build_url(
        self,
        scope_id: str,
        resource_id: str,
        tier: Tier | str = Tier.STANDARD,
        *,
        include_scale: bool = False,
    ) -> str:
        token = self.issuer.issue(scope_id, resource_id, tier)
        query = {"token": token}
        if include_scale:
            query["scale"] = str(Tier.parse(tier).scale_factor)
        path = "/".join(quote(part, safe="") for part in (RENDER_PATH, scope_id, resource_id))
        return f"{self.base_url}/{path}?{urlencode(query)}"


_lock = threading.Lock()
_settings: Optional[RenderTokenSettings] = None
_issuer: Optional[TokenIssuer] = None
_verifier: Optional[TokenVerifier] = None
_builder: Optional[RenderUrlBuilder] = None


def _defaults() -> tuple[TokenIssuer, TokenVerifier, RenderUrlBuilder]:
    global _settings, _issuer, _verifier, _builder
    with _lock:
        if _builder is None:
            _settings = RenderTokenSettings.from_env()
            _issuer = TokenIssuer(secret_key=_settings.secret_key)
            _verifier = TokenVerifier(
                secret_key=_settings.secret_key,
                expiry_ms=_settings.expiry_ms,
                max_clock_skew_ms=_settings.max_clock_skew_ms,
            )
            _builder = RenderUrlBuilder(_issuer, base_url=_settings.base_url)
        assert _issuer is not None and _verifier is not None
        return _issuer, _verifier, _builder


def reset_defaults() -> None:
    """Forget the lazily loaded settings so the next call re-reads the environment."""
    global _settings, _issuer, _verifier, _builder
    with _lock:
        _settings = _issuer = _verifier = _builder = None


def create_render_token(scope_id: str, resource_id: str, tier: Tier | str = Tier.STANDARD) -> str:
    return _defaults()[0].issue(scope_id, resource_id, tier)


def verify_render_token(token: Any) -> TokenPayload | None:
    return _defaults()[1].verify(token)


def get_render_url(scope_id: str, resource_id: str, tier: Tier | str = Tier.STANDARD) -> str:
    return _defaults()[2].build_url(scope_id, resource_id, tier)
