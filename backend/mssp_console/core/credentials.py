"""Credential store: password checks and live blocked status"""
from typing import Optional

from mssp_console.config import Settings, settings as default_settings
from mssp_console.core.principal import Role
from mssp_console.core.records import AdminRecordStore
from mssp_console.core.secret_store import SecretStore, admin_password_key
from mssp_console.utils.hashing import constant_time_equals, hash_password, verify_password

_dummy_hash: Optional[str] = None


def _get_dummy_hash() -> str:
    # Compared against when a username has no stored hash, so unknown users cost the same bcrypt check
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("unknown-user-placeholder")
    return _dummy_hash


class CredentialStore:
    """Resolves (username, role) to a password check and blocked status.

    Never raises for unknown usernames; every miss is just ``False``.
    """

    def __init__(self, records: AdminRecordStore, secrets: SecretStore, config: Settings = default_settings):
        self.records = records
        self.secrets = secrets
        self.config = config

    def verify_password(self, username: str, password: str, role: Role) -> bool:
        if role == Role.SUPERADMIN:
            user_ok = constant_time_equals(username, self.config.SUPERADMIN_USERNAME)
            password_ok = constant_time_equals(password, self.config.SUPERADMIN_PASSWORD)
            return user_ok and password_ok

        if role != Role.ADMIN:
            return False

        legacy_ok = False
        if self.config.ADMIN_USERNAME and self.config.ADMIN_PASSWORD:
            legacy_user = constant_time_equals(username, self.config.ADMIN_USERNAME)
            legacy_password = constant_time_equals(password, self.config.ADMIN_PASSWORD)
            legacy_ok = legacy_user and legacy_password

        stored_hash = self.secrets.get(admin_password_key(username))
        provisioned_ok = verify_password(password, stored_hash or _get_dummy_hash()) and stored_hash is not None

        return legacy_ok or provisioned_ok

    def is_blocked(self, identifier: str) -> bool:
        """True only for a matching admin record flagged as blocked.

        Unknown identifiers (including the superadmin, which has no record) are not blocked.
        """
        admin = self.records.find_admin_by_identifier(identifier)
        return bool(admin.blocked) if admin else False
