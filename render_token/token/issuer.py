"""HMAC-backed render token issuer."""

from __future__ import annotations

from ..config import resolve_secret
from ..utils.time import Clock, epoch_millis
from .codec import canonical_json, encode_token, sign
from .types import IssuedToken, Tier, TokenPayload


class TokenIssuer:
    """Issue compact signed tokens granting short-lived access to one rendered resource."""

    def __init__(self, *, secret_key: str | None = None, clock: Clock = epoch_millis) -> None:
        self._secret = resolve_secret(secret_key)
        self._clock = clock

    def issue(self, scope_id: str, resource_id: str, tier: Tier | str = Tier.STANDARD) -> str:
        return self.issue_payload(scope_id, resource_id, tier).token

    def issue_payload(self, scope_id: str, resource_id: str, tier: Tier | str = Tier.STANDARD) -> IssuedToken:
        """Sign a fresh payload stamped with the issuer's clock."""
        if not isinstance(scope_id, str) or not scope_id:
            raise ValueError("scope_id must be a non-empty string")
        if not isinstance(resource_id, str) or not resource_id:
            raise ValueError("resource_id must be a non-empty string")

        payload = TokenPayload(
            scope_id=scope_id,
            resource_id=resource_id,
            issued_at_millis=self._clock(),
            tier=Tier.parse(tier),
        )
        data = canonical_json(payload.to_wire())
        token = encode_token(data, sign(self._secret, data))
        return IssuedToken(token=token, payload=payload)
