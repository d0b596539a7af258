"""Wire encoding for render tokens.

A token is the URL-safe, unpadded base64 encoding of ``<json>.<hex hmac>``. The
signature is always the suffix after the last ``.``; the JSON part may contain
dots inside string values.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
from hashlib import sha256
from typing import Any, Dict, Tuple

SEPARATOR = "."


class MalformedTokenError(ValueError):
    """Token bytes could not be decoded into a payload/signature pair."""


def canonical_json(value: Dict[str, Any]) -> str:
    """Return stable compact JSON with sorted keys."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def sign(secret: bytes, data: str) -> str:
    """HMAC-SHA256 hex digest over the exact UTF-8 bytes of ``data``."""
    return hmac.new(secret, data.encode("utf-8"), sha256).hexdigest()


def signatures_match(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def encode_token(data: str, signature: str) -> str:
    raw = f"{data}{SEPARATOR}{signature}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_token(token: Any) -> Tuple[str, str]:
    """Reverse :func:`encode_token`, returning ``(data, signature)``."""
    if not isinstance(token, str) or not token:
        raise MalformedTokenError("token must be a non-empty string")
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        decoded = raw.decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise MalformedTokenError(f"token is not valid base64url: {exc}") from exc

    data, sep, signature = decoded.rpartition(SEPARATOR)
    if not sep:
        raise MalformedTokenError("token has no signature separator")
    return data, signature
