"""Render token issuance and verification."""

from .issuer import TokenIssuer
from .types import IssuedToken, RejectionReason, Tier, TokenPayload, VerificationResult
from .verifier import TokenVerifier

__all__ = [
    "TokenIssuer",
    "TokenVerifier",
    "IssuedToken",
    "RejectionReason",
    "Tier",
    "TokenPayload",
    "VerificationResult",
]
