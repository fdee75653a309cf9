"""Tests for session token issuance and verification"""
import pytest
from jose import jwt

from mssp_console.core.exceptions import Unauthenticated
from mssp_console.core.principal import Principal, Role
from mssp_console.core.sessions import SessionIssuer

from conftest import FakeClock

EIGHT_HOURS = 8 * 60 * 60


@pytest.fixture
def issuer(clock: FakeClock) -> SessionIssuer:
    return SessionIssuer(secret="unit-test-secret", algorithm="HS256", lifetime_seconds=EIGHT_HOURS, clock=clock)


def test_issue_binds_username_role_and_expiry(issuer: SessionIssuer, clock: FakeClock):
    token = issuer.issue(Principal("alice", Role.ADMIN))

    claims = jwt.get_unverified_claims(token)
    assert claims["username"] == "alice"
    assert claims["role"] == "admin"
    assert claims["type"] == "session"
    assert claims["iat"] == int(clock.now)
    assert claims["exp"] == int(clock.now) + EIGHT_HOURS


def test_decode_round_trip(issuer: SessionIssuer):
    token = issuer.issue(Principal("root", Role.SUPERADMIN))
    assert issuer.decode(token) == Principal("root", Role.SUPERADMIN)


def test_token_valid_one_second_before_expiry(issuer: SessionIssuer, clock: FakeClock):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    clock.advance(EIGHT_HOURS - 1)
    assert issuer.decode(token).username == "alice"


def test_token_expires_exactly_at_eight_hours(issuer: SessionIssuer, clock: FakeClock):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    clock.advance(EIGHT_HOURS)

    with pytest.raises(Unauthenticated) as exc_info:
        issuer.decode(token)
    assert exc_info.value.clear_cookie is True


def test_tampered_token_is_rejected(issuer: SessionIssuer):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    claims = jwt.get_unverified_claims(token)
    claims["role"] = "superadmin"
    forged = jwt.encode(claims, "some-other-secret", algorithm="HS256")

    with pytest.raises(Unauthenticated) as exc_info:
        issuer.decode(forged)
    assert exc_info.value.clear_cookie is True


def test_garbage_token_is_rejected(issuer: SessionIssuer):
    with pytest.raises(Unauthenticated):
        issuer.decode("not-a-jwt")


def test_unknown_role_claim_is_rejected(issuer: SessionIssuer, clock: FakeClock):
    token = jwt.encode(
        {"username": "mallory", "role": "owner", "type": "session", "exp": int(clock.now) + 60},
        "unit-test-secret",
        algorithm="HS256",
    )
    with pytest.raises(Unauthenticated):
        issuer.decode(token)


def test_setup_ticket_is_not_a_session(issuer: SessionIssuer):
    ticket = issuer.issue_setup_ticket(Principal("alice", Role.ADMIN))

    with pytest.raises(Unauthenticated):
        issuer.decode(ticket)
    assert issuer.decode_setup_ticket(ticket) == Principal("alice", Role.ADMIN)


def test_session_is_not_a_setup_ticket(issuer: SessionIssuer):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    with pytest.raises(Unauthenticated):
        issuer.decode_setup_ticket(token)
