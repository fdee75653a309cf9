"""Tests for the encrypted secret store"""
from cryptography.fernet import Fernet
from sqlalchemy.orm import Session

from mssp_console.core.secret_store import SecretStore, mfa_secret_key
from mssp_console.models.secret import SecretEntry

from conftest import TestingSessionLocal


def test_get_missing_key_returns_none(db: Session):
    store = SecretStore(db)
    assert store.get("MFA_SECRET_nobody") is None
    assert store.exists("MFA_SECRET_nobody") is False


def test_set_then_get(db: Session):
    store = SecretStore(db)
    store.set("ADMIN_PASSWORD_alice", "hash-1")
    assert store.get("ADMIN_PASSWORD_alice") == "hash-1"

    store.set("ADMIN_PASSWORD_alice", "hash-2")
    assert store.get("ADMIN_PASSWORD_alice") == "hash-2"


def test_values_are_encrypted_at_rest(db: Session):
    """The raw column never holds the plaintext"""
    store = SecretStore(db, fernet=Fernet(Fernet.generate_key()))
    store.set(mfa_secret_key("alice"), "JBSWY3DPEHPK3PXP")

    row = db.query(SecretEntry).filter(SecretEntry.key == mfa_secret_key("alice")).one()
    assert "JBSWY3DPEHPK3PXP" not in row.value
    assert row.version == 1


def test_compare_and_set_absent_is_write_once(db: Session):
    store = SecretStore(db)
    assert store.compare_and_set("MFA_SECRET_alice", None, "first") is True
    assert store.compare_and_set("MFA_SECRET_alice", None, "second") is False
    assert store.get("MFA_SECRET_alice") == "first"


def test_compare_and_set_requires_matching_value(db: Session):
    store = SecretStore(db)
    store.set("MFA_BACKUP_alice", "a,b,c")

    assert store.compare_and_set("MFA_BACKUP_alice", "a,b", "b") is False
    assert store.get("MFA_BACKUP_alice") == "a,b,c"

    assert store.compare_and_set("MFA_BACKUP_alice", "a,b,c", "b,c") is True
    assert store.get("MFA_BACKUP_alice") == "b,c"


def test_compare_and_set_missing_key_fails(db: Session):
    store = SecretStore(db)
    assert store.compare_and_set("MFA_BACKUP_ghost", "x", "y") is False
    assert store.get("MFA_BACKUP_ghost") is None


def test_compare_and_set_loses_to_concurrent_writer(db: Session):
    """A writer holding a stale read cannot overwrite a newer value"""
    store = SecretStore(db)
    store.set("MFA_BACKUP_alice", "a,b")
    stale = store.get("MFA_BACKUP_alice")

    other_session = TestingSessionLocal()
    try:
        other = SecretStore(other_session)
        assert other.compare_and_set("MFA_BACKUP_alice", "a,b", "b") is True
    finally:
        other_session.close()

    assert store.compare_and_set("MFA_BACKUP_alice", stale, "b") is False
    assert store.get("MFA_BACKUP_alice") == "b"


def test_delete(db: Session):
    store = SecretStore(db)
    store.set("ADMIN_PASSWORD_bob", "hash")
    store.delete("ADMIN_PASSWORD_bob")
    assert store.get("ADMIN_PASSWORD_bob") is None
