"""Render token verification with a fixed expiry window."""

from __future__ import annotations

import json
from typing import Any

import structlog

from ..config import DEFAULT_EXPIRY_MS, resolve_secret
from ..utils.time import Clock, epoch_millis
from .codec import MalformedTokenError, decode_token, sign, signatures_match
from .types import RejectionReason, TokenPayload, VerificationResult

logger = structlog.get_logger(__name__)


class TokenVerifier:
    """Verify signed render tokens and report why a token was refused."""

    def __init__(
        self,
        *,
        secret_key: str | None = None,
        expiry_ms: int = DEFAULT_EXPIRY_MS,
        max_clock_skew_ms: int | None = None,
        clock: Clock = epoch_millis,
    ) -> None:
        self._secret = resolve_secret(secret_key)
        self.expiry_ms = expiry_ms
        self.max_clock_skew_ms = max_clock_skew_ms
        self._clock = clock

    def verify(self, token: Any) -> TokenPayload | None:
        """Return the payload of a valid token, or ``None`` for every kind of rejection."""
        return self.check(token).payload

    def check(self, token: Any) -> VerificationResult:
        """Verify ``token`` and return a typed result.

        The reason is meant for logs and internal retry decisions. It should not be
        echoed to whoever presented the token.
        """
        try:
            data, provided_sig = decode_token(token)
        except MalformedTokenError as exc:
            logger.warning("render_token_malformed", error=str(exc))
            return VerificationResult(False, RejectionReason.MALFORMED)

        if not signatures_match(provided_sig, sign(self._secret, data)):
            logger.warning("render_token_signature_mismatch")
            return VerificationResult(False, RejectionReason.SIGNATURE_INVALID)

        try:
            payload = TokenPayload.from_wire(json.loads(data))
        except ValueError as exc:
            logger.warning("render_token_malformed", error=str(exc))
            return VerificationResult(False, RejectionReason.MALFORMED)

        age = self._clock() - payload.issued_at_millis
        if age > self.expiry_ms:
            logger.warning("render_token_expired", age=age, max_age=self.expiry_ms)
            return VerificationResult(False, RejectionReason.EXPIRED)

        if self.max_clock_skew_ms is not None and age < -self.max_clock_skew_ms:
            logger.warning("render_token_from_future", age=age, max_skew=self.max_clock_skew_ms)
            return VerificationResult(False, RejectionReason.NOT_YET_VALID)

        return VerificationResult(True, payload=payload)
