from __future__ import annotations

import base64
import json
from datetime import timedelta

import pytest
from freezegun import freeze_time

from brokerdesk.errors import InvalidToken
from brokerdesk.services.token_service import TokenService

SECRET = "unit-test-secret-with-at-least-32-bytes!!"


def _svc(ttl: timedelta = timedelta(minutes=60), secret: str = SECRET, issuer: str = "brokerdesk-backend") -> TokenService:
    return TokenService(secret=secret, ttl=ttl, issuer=issuer)


def _b64(obj: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")


def _swap_header(token: str, header: dict) -> str:
    _, payload_b, sig_b = token.split(".")
    return f"{_b64(header)}.{payload_b}.{sig_b}"


def test_issue_then_validate_round_trips_identity():
    svc = _svc()
    token = svc.issue("user-1", "jane@brokerdesk.io", "broker")

    assert token.count(".") == 2
    claims = svc.validate(token)
    assert claims.user_id == "user-1"
    assert claims.email == "jane@brokerdesk.io"
    assert claims.role == "broker"
    assert claims.issuer == "brokerdesk-backend"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=60)
    assert claims.not_before == claims.issued_at


def test_token_expires_exactly_at_ttl():
    svc = _svc(ttl=timedelta(seconds=60))
    with freeze_time("2026-03-01 12:00:00") as frozen:
        token = svc.issue("user-1", "jane@brokerdesk.io", "broker")
        assert svc.validate(token).user_id == "user-1"

        frozen.tick(timedelta(seconds=59))
        assert svc.validate(token).user_id == "user-1"

        frozen.tick(timedelta(seconds=1))
        with pytest.raises(InvalidToken) as exc:
            svc.validate(token)
        assert exc.value.message == "token expired"


def test_tampered_payload_fails_signature():
    svc = _svc()
    token = svc.issue("user-1", "jane@brokerdesk.io", "broker")
    header_b, _, sig_b = token.split(".")
    forged_payload = _b64({"user_id": "user-2", "sub": "user-2", "role": "admin"})

    with pytest.raises(InvalidToken) as exc:
        svc.validate(f"{header_b}.{forged_payload}.{sig_b}")
    assert exc.value.message == "invalid signature"


def test_token_signed_with_other_secret_is_rejected():
    token = _svc(secret="another-secret-that-is-also-32-bytes-long").issue("user-1", "a@b.io", "broker")
    with pytest.raises(InvalidToken):
        _svc().validate(token)


@pytest.mark.parametrize("alg", ["none", "RS256", "ES256", None])
def test_non_hmac_algorithms_are_rejected_before_verification(alg):
    svc = _svc()
    token = svc.issue("user-1", "jane@brokerdesk.io", "broker")
    header = {"typ": "JWT"}
    if alg is not None:
        header["alg"] = alg

    with pytest.raises(InvalidToken) as exc:
        svc.validate(_swap_header(token, header))
    assert exc.value.message == f"unexpected signing method: {alg}"


@pytest.mark.parametrize("raw", ["", "not-a-token", "a.b", "a.b.c"])
def test_malformed_tokens_are_rejected(raw):
    with pytest.raises(InvalidToken):
        _svc().validate(raw)


def test_wrong_issuer_is_rejected():
    token = _svc(issuer="someone-else").issue("user-1", "jane@brokerdesk.io", "broker")
    with pytest.raises(InvalidToken) as exc:
        _svc().validate(token)
    assert exc.value.message == "invalid issuer"


def test_refresh_reissues_with_later_expiry():
    svc = _svc(ttl=timedelta(minutes=10))
    with freeze_time("2026-03-01 12:00:00") as frozen:
        first = svc.validate(svc.issue("user-1", "jane@brokerdesk.io", "broker"))

        frozen.tick(timedelta(minutes=5))
        second = svc.validate(svc.refresh(first))

    assert second.user_id == first.user_id
    assert second.role == first.role
    assert second.expires_at - first.expires_at == timedelta(minutes=5)


def test_constructor_refuses_empty_secret_and_non_hmac_algorithm():
    with pytest.raises(ValueError):
        TokenService(secret="", ttl=timedelta(minutes=1), issuer="x")
    with pytest.raises(ValueError):
        TokenService(secret=SECRET, ttl=timedelta(minutes=1), issuer="x", algorithm="RS256")
