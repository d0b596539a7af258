"""Demo render endpoint consuming tokens produced by :class:`RenderUrlBuilder`."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, unquote, urlsplit

import structlog

from render_token.token import TokenVerifier

logger = structlog.get_logger(__name__)

# Letter page at 72 dpi.
CANVAS_WIDTH = 612
CANVAS_HEIGHT = 792

INVALID_LINK_MESSAGE = "link invalid or expired, please request a new one"


class RenderEndpoint:
    """Access control for ``/render/{scope_id}/{resource_id}?token=...``."""

    def __init__(self, verifier: TokenVerifier) -> None:
        self.verifier = verifier

    def handle(self, scope_id: str, resource_id: str, *, token: str | None = None, scale: str | None = None) -> dict:
        if not token:
            return {"status": 401, "error": "missing render token"}

        result = self.verifier.check(token)
        if result.payload is None:
            logger.info("render_request_rejected", scope_id=scope_id, resource_id=resource_id, reason=result.reason)
            return {"status": 401, "error": INVALID_LINK_MESSAGE}

        payload = result.payload
        if payload.scope_id != scope_id or payload.resource_id != resource_id:
            logger.warning(
                "render_token_resource_mismatch",
                scope_id=scope_id,
                resource_id=resource_id,
                token_scope_id=payload.scope_id,
                token_resource_id=payload.resource_id,
            )
            return {"status": 403, "error": "token does not match requested page"}

        scale_factor = _parse_scale(scale, default=payload.tier.scale_factor)
        return {
            "status": 200,
            "scope_id": payload.scope_id,
            "resource_id": payload.resource_id,
            "tier": payload.tier.value,
            "scale": scale_factor,
            "width": round(CANVAS_WIDTH * scale_factor),
            "height": round(CANVAS_HEIGHT * scale_factor),
        }

    def handle_url(self, url: str) -> dict:
        """Route a full render URL through :meth:`handle`."""
        parts = urlsplit(url)
        segments = [unquote(s) for s in parts.path.strip("/").split("/")]
        if len(segments) != 3 or segments[0] != "render":
            return {"status": 404, "error": "not found"}
        query = parse_qs(parts.query)
        return self.handle(
            segments[1],
            segments[2],
            token=_first(query, "token"),
            scale=_first(query, "scale"),
        )


def _first(query: dict[str, list[str]], key: str) -> Any:
    values = query.get(key)
    return values[0] if values else None


def _parse_scale(raw: str | None, *, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value != value or value <= 0 or value == float("inf"):
        return default
    return value
