"""Encrypted key/value secret store with compare-and-set.

Holds per-user authentication material that the console creates at runtime:

    ADMIN_PASSWORD_<username>   bcrypt hash set at provisioning
    MFA_SECRET_<username>       base32 TOTP secret, written once at enrollment
    MFA_BACKUP_<username>       comma-separated SHA-256 digests of unused backup codes

Values are Fernet-encrypted at rest. Every write bumps the row ``version``;
``compare_and_set`` is a single conditional UPDATE on that version, so a
read-modify-write on one key is atomic without any cross-key locking.
"""
import base64
import hashlib
from datetime import datetime
from typing import Optional

from cryptography.fernet import Fernet
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mssp_console.config import settings
from mssp_console.models.secret import SecretEntry
from mssp_console.utils.hashing import constant_time_equals
from mssp_console.utils.logger import logger

_fernet: Optional[Fernet] = None


def admin_password_key(username: str) -> str:
    return f"ADMIN_PASSWORD_{username}"


def mfa_secret_key(username: str) -> str:
    return f"MFA_SECRET_{username}"


def mfa_backup_key(username: str) -> str:
    return f"MFA_BACKUP_{username}"


def get_fernet() -> Fernet:
    """Return the process-wide Fernet instance, initialising on first call.

    Uses SECRET_STORE_KEY when configured. Otherwise a key is derived from
    JWT_SECRET, which means rotating JWT_SECRET makes stored secrets unreadable.
    """
    global _fernet
    if _fernet is None:
        if settings.SECRET_STORE_KEY:
            _fernet = Fernet(settings.SECRET_STORE_KEY.encode())
        else:
            logger.warning(
                "SECRET_STORE_KEY not set, deriving the secret store key from JWT_SECRET. "
                "Set SECRET_STORE_KEY (Fernet.generate_key()) to decouple them."
            )
            digest = hashlib.sha256(settings.JWT_SECRET.encode()).digest()
            _fernet = Fernet(base64.urlsafe_b64encode(digest))
    return _fernet


class SecretStore:
    """get / set / delete / compare_and_set over the ``secrets`` table."""

    def __init__(self, db: Session, fernet: Optional[Fernet] = None):
        self.db = db
        self.fernet = fernet or get_fernet()

    def _encrypt(self, value: str) -> str:
        return self.fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def _decrypt(self, token: str) -> str:
        return self.fernet.decrypt(token.encode("ascii")).decode("utf-8")

    def _read(self, key: str):
        # Column select bypasses the identity map so every read sees committed state
        return self.db.execute(
            select(SecretEntry.value, SecretEntry.version).where(SecretEntry.key == key)
        ).first()

    def get(self, key: str) -> Optional[str]:
        row = self._read(key)
        if row is None:
            return None
        return self._decrypt(row.value)

    def exists(self, key: str) -> bool:
        return self._read(key) is not None

    def set(self, key: str, value: str) -> None:
        """Unconditionally write ``value`` under ``key``."""
        while True:
            result = self.db.execute(
                update(SecretEntry)
                .where(SecretEntry.key == key)
                .values(
                    value=self._encrypt(value),
                    version=SecretEntry.version + 1,
                    updated_at=datetime.utcnow(),
                )
            )
            if result.rowcount == 1:
                self.db.commit()
                return
            try:
                self.db.add(SecretEntry(key=key, value=self._encrypt(value), version=1))
                self.db.commit()
                return
            except IntegrityError:
                # Inserted concurrently; retry as an update
                self.db.rollback()

    def delete(self, key: str) -> None:
        self.db.query(SecretEntry).filter(SecretEntry.key == key).delete()
        self.db.commit()

    def compare_and_set(self, key: str, expected: Optional[str], new: str) -> bool:
        """Write ``new`` only if the current value equals ``expected``.

        ``expected=None`` means the key must not exist yet. Returns ``False``
        when the stored value differs or another writer got there first.
        """
        if expected is None:
            try:
                self.db.add(SecretEntry(key=key, value=self._encrypt(new), version=1))
                self.db.commit()
                return True
            except IntegrityError:
                self.db.rollback()
                return False

        row = self._read(key)
        if row is None or not constant_time_equals(self._decrypt(row.value), expected):
            self.db.rollback()
            return False

        result = self.db.execute(
            update(SecretEntry)
            .where(SecretEntry.key == key, SecretEntry.version == row.version)
            .values(
                value=self._encrypt(new),
                version=row.version + 1,
                updated_at=datetime.utcnow(),
            )
        )
        self.db.commit()
        return result.rowcount == 1
