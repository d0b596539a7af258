import base64
import json

import pytest

from render_token import ConfigurationError, RejectionReason, Tier, TokenIssuer, TokenVerifier
from render_token.token.codec import canonical_json, encode_token, sign

SECRET = "unit-secret"
T0 = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def _decode(token: str) -> str:
    return base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)).decode("utf-8")


def _encode(raw: str) -> str:
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def _pair(clock: FakeClock, secret: str = SECRET) -> tuple[TokenIssuer, TokenVerifier]:
    return TokenIssuer(secret_key=secret, clock=clock), TokenVerifier(secret_key=secret, clock=clock)


def test_round_trip_preserves_fields() -> None:
    issuer = TokenIssuer(secret_key=SECRET)
    verifier = TokenVerifier(secret_key=SECRET)
    for tier in Tier:
        payload = verifier.verify(issuer.issue("scope-a", "item.with.dots", tier))
        assert payload is not None
        assert payload.scope_id == "scope-a"
        assert payload.resource_id == "item.with.dots"
        assert payload.tier is tier


def test_issued_at_uses_clock() -> None:
    clock = FakeClock()
    issuer, _ = _pair(clock)
    issued = issuer.issue_payload("fam-1", "page-1")
    assert issued.payload.issued_at_millis == T0
    assert issued.payload.tier is Tier.STANDARD


def test_concrete_scenario() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    token = issuer.issue("fam-123", "page-7", "pro")

    data, _, signature = _decode(token).rpartition(".")
    assert json.loads(data) == {
        "scopeId": "fam-123",
        "resourceId": "page-7",
        "tier": "pro",
        "issuedAtMillis": T0,
    }
    assert signature == sign(SECRET.encode("utf-8"), data)

    clock.now = T0 + 10_000
    assert verifier.verify(token) is not None

    clock.now = T0 + 65_000
    result = verifier.check(token)
    assert result.valid is False
    assert result.reason is RejectionReason.EXPIRED
    assert result.payload is None


def test_token_is_url_safe_without_padding() -> None:
    token = TokenIssuer(secret_key=SECRET).issue("fam/1+2", "page?=3", Tier.PRO)
    assert "=" not in token
    assert set(token) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


@pytest.mark.parametrize(
    ("age", "valid"),
    [(0, True), (59_999, True), (60_000, True), (60_001, False)],
)
def test_expiry_boundary(age: int, valid: bool) -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    token = issuer.issue("fam-1", "page-1")
    clock.now = T0 + age
    result = verifier.check(token)
    assert result.valid is valid
    if not valid:
        assert result.reason is RejectionReason.EXPIRED


def test_signature_tamper_rejected() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    data, _, signature = _decode(issuer.issue("fam-1", "page-1")).rpartition(".")
    for i, ch in enumerate(signature):
        flipped = "0" if ch != "0" else "1"
        forged = _encode(f"{data}.{signature[:i]}{flipped}{signature[i + 1:]}")
        result = verifier.check(forged)
        assert result.reason is RejectionReason.SIGNATURE_INVALID
        assert verifier.verify(forged) is None


def test_payload_tamper_rejected() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    data, _, signature = _decode(issuer.issue("fam-1", "page-1")).rpartition(".")
    for i, ch in enumerate(data):
        replacement = "x" if ch != "x" else "y"
        forged = _encode(f"{data[:i]}{replacement}{data[i + 1:]}.{signature}")
        assert verifier.verify(forged) is None


def test_retargeted_payload_rejected() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    data, _, signature = _decode(issuer.issue("fam-1", "page-1", "standard")).rpartition(".")
    upgraded = data.replace('"tier":"standard"', '"tier":"pro"')
    assert verifier.check(_encode(f"{upgraded}.{signature}")).reason is RejectionReason.SIGNATURE_INVALID


def test_secret_sensitivity() -> None:
    clock = FakeClock()
    token = TokenIssuer(secret_key="secret-a", clock=clock).issue("fam-1", "page-1")
    verifier = TokenVerifier(secret_key="secret-b", clock=clock)
    assert verifier.check(token).reason is RejectionReason.SIGNATURE_INVALID


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not a token",
        "!!!!",
        "a",
        _encode("no separator here"),
        _encode("{}"),
        "éè",
        base64.urlsafe_b64encode(b"\xff\xfe.abc").decode("ascii").rstrip("="),
        None,
        12345,
    ],
)
def test_malformed_input_rejected_without_raising(token) -> None:
    verifier = TokenVerifier(secret_key=SECRET)
    result = verifier.check(token)
    assert result.valid is False
    assert result.reason is RejectionReason.MALFORMED
    assert verifier.verify(token) is None


def test_truncated_token_rejected() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    token = issuer.issue("fam-1", "page-1")
    for cut in (1, 2, 5, len(token) // 2, len(token) - 1):
        assert verifier.verify(token[:cut]) is None


def test_validly_signed_but_structurally_wrong_payload_is_malformed() -> None:
    secret = SECRET.encode("utf-8")
    verifier = TokenVerifier(secret_key=SECRET, clock=FakeClock())
    bad_payloads = [
        {"scopeId": "fam-1", "resourceId": "page-1", "issuedAtMillis": T0},
        {"scopeId": "fam-1", "resourceId": "page-1", "issuedAtMillis": "now", "tier": "pro"},
        {"scopeId": "fam-1", "resourceId": "page-1", "issuedAtMillis": True, "tier": "pro"},
        {"scopeId": "", "resourceId": "page-1", "issuedAtMillis": T0, "tier": "pro"},
        {"scopeId": "fam-1", "resourceId": "page-1", "issuedAtMillis": T0, "tier": "ultra"},
        {"scopeId": "fam-1", "resourceId": "page-1", "issuedAtMillis": T0, "tier": "pro", "admin": True},
    ]
    for body in bad_payloads:
        data = canonical_json(body)
        result = verifier.check(encode_token(data, sign(secret, data)))
        assert result.reason is RejectionReason.MALFORMED

    data = "[1, 2, 3]"
    assert verifier.check(encode_token(data, sign(secret, data))).reason is RejectionReason.MALFORMED


def test_future_token_accepted_by_default() -> None:
    clock = FakeClock()
    issuer, verifier = _pair(clock)
    token = issuer.issue("fam-1", "page-1")
    clock.now = T0 - 600_000
    assert verifier.verify(token) is not None


def test_clock_skew_bound_rejects_far_future_tokens() -> None:
    clock = FakeClock()
    issuer = TokenIssuer(secret_key=SECRET, clock=clock)
    verifier = TokenVerifier(secret_key=SECRET, max_clock_skew_ms=5_000, clock=clock)
    token = issuer.issue("fam-1", "page-1")

    clock.now = T0 - 5_000
    assert verifier.check(token).valid is True

    clock.now = T0 - 5_001
    assert verifier.check(token).reason is RejectionReason.NOT_YET_VALID


def test_custom_expiry_window() -> None:
    clock = FakeClock()
    issuer = TokenIssuer(secret_key=SECRET, clock=clock)
    verifier = TokenVerifier(secret_key=SECRET, expiry_ms=1_000, clock=clock)
    token = issuer.issue("fam-1", "page-1")
    clock.now = T0 + 1_001
    assert verifier.check(token).reason is RejectionReason.EXPIRED


@pytest.mark.parametrize(
    ("scope_id", "resource_id", "tier"),
    [("", "page-1", "standard"), ("fam-1", "", "standard"), ("fam-1", "page-1", "ultra"), (None, "page-1", "pro")],
)
def test_issue_rejects_bad_arguments(scope_id, resource_id, tier) -> None:
    with pytest.raises(ValueError):
        TokenIssuer(secret_key=SECRET).issue(scope_id, resource_id, tier)


def test_missing_secret_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RENDER_SECRET", raising=False)
    with pytest.raises(ConfigurationError):
        TokenIssuer()
    with pytest.raises(ConfigurationError):
        TokenVerifier()


def test_secret_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RENDER_SECRET", "env-secret")
    token = TokenIssuer().issue("fam-1", "page-1")
    assert TokenVerifier(secret_key="env-secret").verify(token) is not None
