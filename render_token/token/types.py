"""Render token datatypes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

_WIRE_FIELDS = ("issuedAtMillis", "resourceId", "scopeId", "tier")


class Tier(str, Enum):
    """Rendering quality tier carried by a token."""

    STANDARD = "standard"
    PRO = "pro"

    @classmethod
    def parse(cls, value: "Tier | str") -> "Tier":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            expected = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown tier {value!r}. Expected one of: {expected}.") from None

    @property
    def scale_factor(self) -> float:
        """Device scale relative to 72 dpi; pro renders at 300 dpi."""
        return 4.17 if self is Tier.PRO else 1.0


class RejectionReason(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"


@dataclass(frozen=True)
class TokenPayload:
    """The signed unit: which resource, at which tier, issued when."""

    scope_id: str
    resource_id: str
    issued_at_millis: int
    tier: Tier

    def to_wire(self) -> Dict[str, Any]:
        return {
            "scopeId": self.scope_id,
            "resourceId": self.resource_id,
            "issuedAtMillis": self.issued_at_millis,
            "tier": self.tier.value,
        }

    @classmethod
    def from_wire(cls, data: Any) -> "TokenPayload":
        """Build a payload from decoded JSON, rejecting anything structurally off."""
        if not isinstance(data, dict):
            raise ValueError("payload must be a JSON object")
        if tuple(sorted(data)) != _WIRE_FIELDS:
            raise ValueError(f"payload fields must be exactly {', '.join(_WIRE_FIELDS)}")

        scope_id = data["scopeId"]
        resource_id = data["resourceId"]
        issued_at = data["issuedAtMillis"]
        if not isinstance(scope_id, str) or not scope_id:
            raise ValueError("scopeId must be a non-empty string")
        if not isinstance(resource_id, str) or not resource_id:
            raise ValueError("resourceId must be a non-empty string")
        if isinstance(issued_at, bool) or not isinstance(issued_at, int):
            raise ValueError("issuedAtMillis must be an integer")
        if not isinstance(data["tier"], str):
            raise ValueError("tier must be a string")
        return cls(
            scope_id=scope_id,
            resource_id=resource_id,
            issued_at_millis=issued_at,
            tier=Tier.parse(data["tier"]),
        )


@dataclass(frozen=True)
class IssuedToken:
    token: str
    payload: TokenPayload


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    reason: RejectionReason | None = None
    payload: TokenPayload | None = None
