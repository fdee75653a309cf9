"""Tests for the authorization gate and role checks"""
import pytest
from sqlalchemy.orm import Session

from mssp_console.api.deps import require_role
from mssp_console.core.credentials import CredentialStore
from mssp_console.core.exceptions import AccountBlocked, Forbidden, Unauthenticated
from mssp_console.core.gate import authenticate, check_exact_role, check_role
from mssp_console.core.principal import Principal, Role
from mssp_console.core.records import AdminRecordStore
from mssp_console.core.secret_store import SecretStore, admin_password_key
from mssp_console.core.sessions import SessionIssuer
from mssp_console.utils.hashing import hash_password

from conftest import FakeClock


@pytest.fixture
def records(db: Session) -> AdminRecordStore:
    return AdminRecordStore(db)


@pytest.fixture
def credentials(db: Session, records: AdminRecordStore) -> CredentialStore:
    return CredentialStore(records, SecretStore(db))


@pytest.fixture
def issuer(clock: FakeClock) -> SessionIssuer:
    return SessionIssuer(secret="gate-secret", clock=clock)


@pytest.fixture
def alice(records: AdminRecordStore, db: Session):
    admin = records.create_admin("alice", "Alice Doe", "alice@example.com", "Acme", "Austin", "TX")
    SecretStore(db).set(admin_password_key("alice"), hash_password("p1"))
    return admin


def test_missing_token_is_unauthenticated(issuer: SessionIssuer, credentials: CredentialStore):
    with pytest.raises(Unauthenticated) as exc_info:
        authenticate(None, issuer, credentials)
    assert exc_info.value.clear_cookie is False


def test_valid_admin_session(issuer: SessionIssuer, credentials: CredentialStore, alice):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    assert authenticate(token, issuer, credentials) == Principal("alice", Role.ADMIN)


def test_blocked_admin_session_is_rejected(
    issuer: SessionIssuer, credentials: CredentialStore, records: AdminRecordStore, alice
):
    token = issuer.issue(Principal("alice", Role.ADMIN))
    records.set_blocked(alice.id, True)

    with pytest.raises(AccountBlocked) as exc_info:
        authenticate(token, issuer, credentials)
    assert exc_info.value.clear_cookie is True
    assert exc_info.value.status_code == 403

    records.set_blocked(alice.id, False)
    assert authenticate(token, issuer, credentials).username == "alice"


def test_superadmin_session_skips_block_lookup(issuer: SessionIssuer, credentials: CredentialStore, records):
    # An admin record that happens to share the superadmin's name does not affect it
    admin = records.create_admin("root", "root", "root@example.com", "Acme", "Austin", "TX")
    records.set_blocked(admin.id, True)

    token = issuer.issue(Principal("root", Role.SUPERADMIN))
    assert authenticate(token, issuer, credentials).role == Role.SUPERADMIN


def test_is_blocked_matches_email_and_name(credentials: CredentialStore, records: AdminRecordStore, alice):
    records.set_blocked(alice.id, True)
    assert credentials.is_blocked("alice") is True
    assert credentials.is_blocked("alice@example.com") is True
    assert credentials.is_blocked("Alice Doe") is True
    assert credentials.is_blocked("someone-else") is False


def test_verify_password(credentials: CredentialStore, alice):
    assert credentials.verify_password("alice", "p1", Role.ADMIN) is True
    assert credentials.verify_password("alice", "wrong", Role.ADMIN) is False
    assert credentials.verify_password("nobody", "p1", Role.ADMIN) is False
    # Admin credentials never satisfy the superadmin role
    assert credentials.verify_password("alice", "p1", Role.SUPERADMIN) is False
    assert credentials.verify_password("root", "root-password", Role.SUPERADMIN) is True


def test_check_role_is_ordered():
    superadmin = Principal("root", Role.SUPERADMIN)
    admin = Principal("alice", Role.ADMIN)

    assert check_role(superadmin, Role.ADMIN) == superadmin
    assert check_role(admin, Role.ADMIN) == admin
    with pytest.raises(Forbidden):
        check_role(admin, Role.SUPERADMIN)


def test_check_exact_role_admits_only_that_role():
    superadmin = Principal("root", Role.SUPERADMIN)
    admin = Principal("alice", Role.ADMIN)

    assert check_exact_role(superadmin, Role.SUPERADMIN) == superadmin
    with pytest.raises(Forbidden):
        check_exact_role(admin, Role.SUPERADMIN)
    with pytest.raises(Forbidden):
        check_exact_role(superadmin, Role.ADMIN)


def test_is_blocked_prefers_username_over_other_admins_name(credentials: CredentialStore, records: AdminRecordStore):
    # alice's display name equals bob's username; bob's own record must decide
    alice = records.create_admin("alice", "bob", "alice@example.com", "Acme", "Austin", "TX")
    bob = records.create_admin("bob", "Bob Roe", "bob@example.com", "Acme", "Austin", "TX")

    records.set_blocked(bob.id, True)
    assert credentials.is_blocked("bob") is True

    records.set_blocked(bob.id, False)
    records.set_blocked(alice.id, True)
    assert credentials.is_blocked("bob") is False
    assert credentials.is_blocked("alice") is True


def test_blocked_admin_session_rejected_despite_name_collision(
    issuer: SessionIssuer, credentials: CredentialStore, records: AdminRecordStore
):
    records.create_admin("alice", "bob", "alice@example.com", "Acme", "Austin", "TX")
    bob = records.create_admin("bob", "Bob Roe", "bob@example.com", "Acme", "Austin", "TX")
    token = issuer.issue(Principal("bob", Role.ADMIN))

    records.set_blocked(bob.id, True)
    with pytest.raises(AccountBlocked):
        authenticate(token, issuer, credentials)


def test_require_role_dependency_is_ordered():
    admin_min = require_role(Role.ADMIN)
    superadmin_min = require_role(Role.SUPERADMIN)

    assert admin_min(principal=Principal("root", Role.SUPERADMIN)).role == Role.SUPERADMIN
    assert admin_min(principal=Principal("alice", Role.ADMIN)).role == Role.ADMIN
    with pytest.raises(Forbidden):
        superadmin_min(principal=Principal("alice", Role.ADMIN))
    assert admin_min.__name__ != superadmin_min.__name__
