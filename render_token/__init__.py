"""Render token package.

Signed, short-lived access tokens binding a render request to one resource and
one quality tier, plus helpers to build delivery URLs carrying them.
"""

from .config import ConfigurationError, RenderTokenSettings
from .token import RejectionReason, Tier, TokenIssuer, TokenPayload, TokenVerifier, VerificationResult
from .urls import RenderUrlBuilder, create_render_token, get_render_url, verify_render_token

__all__ = [
    "ConfigurationError",
    "RenderTokenSettings",
    "RejectionReason",
    "Tier",
    "TokenIssuer",
    "TokenPayload",
    "TokenVerifier",
    "VerificationResult",
    "RenderUrlBuilder",
    "create_render_token",
    "get_render_url",
    "verify_render_token",
]
