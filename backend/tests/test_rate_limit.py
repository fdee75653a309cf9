"""Tests for login and MFA-setup rate limiting"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from mssp_console.config import settings
from mssp_console.middleware.rate_limit import limiter

LOGIN_LIMIT = int(settings.RATE_LIMIT_LOGIN.split("/")[0])

BAD_LOGIN = {"username": "alice", "password": "wrong", "role": "admin"}
TOO_MANY = {"success": False, "message": "Too many requests. Please try again later."}


@pytest.fixture
def rate_limited(client: TestClient) -> Generator[TestClient, None, None]:
    """The shared client with the limiter switched on and its counters empty"""
    limiter.reset()
    limiter.enabled = True
    try:
        yield client
    finally:
        limiter.enabled = False
        limiter.reset()


def test_login_is_rate_limited(rate_limited: TestClient):
    statuses = [rate_limited.post("/api/auth/login", json=BAD_LOGIN).status_code for _ in range(LOGIN_LIMIT)]
    assert statuses == [401] * LOGIN_LIMIT

    response = rate_limited.post("/api/auth/login", json=BAD_LOGIN)
    assert response.status_code == 429
    assert response.json() == TOO_MANY


def test_forwarded_for_header_does_not_reset_login_limit(rate_limited: TestClient):
    for i in range(LOGIN_LIMIT):
        rate_limited.post("/api/auth/login", json=BAD_LOGIN, headers={"X-Forwarded-For": f"10.0.0.{i}"})

    response = rate_limited.post("/api/auth/login", json=BAD_LOGIN, headers={"X-Forwarded-For": "10.0.1.1"})
    assert response.status_code == 429
    assert response.json() == TOO_MANY


def test_setup_mfa_is_rate_limited(rate_limited: TestClient):
    body = {"username": "alice", "role": "admin"}
    for _ in range(LOGIN_LIMIT):
        assert rate_limited.post("/api/auth/setup-mfa", json=body).status_code == 401

    response = rate_limited.post("/api/auth/setup-mfa", json=body)
    assert response.status_code == 429
    assert response.json()["success"] is False


def test_limiter_disabled_by_default_in_tests(client: TestClient):
    statuses = {client.post("/api/auth/login", json=BAD_LOGIN).status_code for _ in range(LOGIN_LIMIT + 2)}
    assert statuses == {401}
