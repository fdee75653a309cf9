"""Pytest configuration and fixtures"""
import os

# Must be set before mssp_console.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPERADMIN_USERNAME", "root")
os.environ.setdefault("SUPERADMIN_PASSWORD", "root-password")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from typing import Callable, Generator, List, NamedTuple

import pyotp
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from mssp_console.api.deps import get_session_issuer
from mssp_console.core.sessions import SessionIssuer
from mssp_console.database import Base, get_db
from mssp_console.main import app

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SUPERADMIN = ("root", "root-password")


class FakeClock:
    """Callable clock for token issuance/expiry tests"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class LoggedIn(NamedTuple):
    client: TestClient
    secret: str
    backup_codes: List[str]


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def make_client(db: Session, clock: FakeClock) -> Generator[Callable[[], TestClient], None, None]:
    """Factory for independent clients (separate cookie jars) sharing one database"""

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    issuer = SessionIssuer(clock=clock)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_issuer] = lambda: issuer

    clients: List[TestClient] = []

    def _make() -> TestClient:
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


def enroll_and_login(client: TestClient, username: str, password: str, role: str) -> LoggedIn:
    """Password login → MFA enrollment → TOTP login; leaves the session cookie on ``client``"""
    first = client.post("/api/auth/login", json={"username": username, "password": password, "role": role})
    assert first.status_code == 200, first.text
    assert first.json()["requireMFASetup"] is True

    setup = client.post("/api/auth/setup-mfa", json={"username": username, "role": role})
    assert setup.status_code == 200, setup.text
    body = setup.json()

    code = pyotp.TOTP(body["secret"]).now()
    final = client.post(
        "/api/auth/login",
        json={"username": username, "password": password, "role": role, "totpCode": code},
    )
    assert final.status_code == 200, final.text
    assert client.cookies.get("token")
    return LoggedIn(client=client, secret=body["secret"], backup_codes=body["backupCodes"])


def cookie_cleared(response, name: str = "token") -> bool:
    """True if the response deletes the named cookie"""
    return any(
        header.startswith(f"{name}=") and "Max-Age=0" in header
        for header in response.headers.get_list("set-cookie")
    )


@pytest.fixture
def superadmin(make_client) -> LoggedIn:
    """A client holding a fully authenticated superadmin session"""
    return enroll_and_login(make_client(), SUPERADMIN[0], SUPERADMIN[1], "superadmin")


@pytest.fixture
def sample_admin_data() -> dict:
    return {
        "username": "alice",
        "password": "p1",
        "name": "Alice Doe",
        "email": "alice@example.com",
        "organization": "Acme SOC",
        "city": "Austin",
        "state": "TX",
    }


@pytest.fixture
def provisioned_admin(superadmin: LoggedIn, sample_admin_data: dict) -> dict:
    """Admin 'alice' / 'p1' provisioned by the superadmin; returns the admin record"""
    response = superadmin.client.post("/api/admin/admins", json=sample_admin_data)
    assert response.status_code == 201, response.text
    return response.json()["admin"]
