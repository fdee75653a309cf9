"""TOTP enrollment and verification.

Implements RFC 6238 TOTP through ``pyotp`` (30 second step) plus single-use
backup codes. Backup codes are shown to the user once and stored only as
SHA-256 digests; redeeming one removes its digest through a compare-and-set
so the same code can never authenticate twice.
"""
import base64
import io
import secrets
import time
from typing import Callable, List, NamedTuple

import pyotp
import qrcode

from mssp_console.config import settings
from mssp_console.core.exceptions import MfaAlreadyEnrolled
from mssp_console.core.records import AdminRecordStore
from mssp_console.core.secret_store import SecretStore, mfa_backup_key, mfa_secret_key
from mssp_console.utils.hashing import hash_backup_code
from mssp_console.utils.logger import logger

# Attempts at the backup-code compare-and-set before giving up under contention
_MAX_CAS_ATTEMPTS = 5


class Enrollment(NamedTuple):
    provisioning_uri: str
    secret: str
    backup_codes: List[str]


def generate_backup_codes(count: int = 10) -> List[str]:
    """Return ``count`` codes of 8 uppercase hex characters (4 random bytes each)."""
    return [secrets.token_hex(4).upper() for _ in range(count)]


def generate_qr_code_data_uri(uri: str) -> str:
    """Render a provisioning URI as a base64 PNG data URI."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    b64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{b64}"


class MfaEnrollmentService:
    def __init__(
        self,
        secret_store: SecretStore,
        records: AdminRecordStore,
        issuer: str = settings.MFA_ISSUER,
        backup_code_count: int = settings.MFA_BACKUP_CODE_COUNT,
    ):
        self.secret_store = secret_store
        self.records = records
        self.issuer = issuer
        self.backup_code_count = backup_code_count

    def enroll(self, username: str) -> Enrollment:
        """Create the TOTP secret and backup codes for ``username``.

        The secret is write-once: if one already exists, ``MfaAlreadyEnrolled``
        is raised and nothing is changed.
        """
        secret = pyotp.random_base32()  # 32 base32 chars = 160 bits
        if not self.secret_store.compare_and_set(mfa_secret_key(username), None, secret):
            logger.warning(
                "MFA enrollment refused, secret already exists",
                extra={"username": username, "action": "mfa_enroll", "outcome": "already_enrolled"},
            )
            raise MfaAlreadyEnrolled()

        backup_codes = generate_backup_codes(self.backup_code_count)
        digests = ",".join(hash_backup_code(code) for code in backup_codes)
        try:
            self.secret_store.set(mfa_backup_key(username), digests)
            # No-op for the superadmin, which has no admin record
            self.records.mark_mfa_enrolled(username, mfa_secret_key(username))
        except Exception:
            logger.error(
                "MFA enrollment failed after the secret was written, withdrawing it",
                extra={"username": username, "action": "mfa_enroll", "outcome": "rolled_back"},
                exc_info=True,
            )
            self._withdraw(username)
            raise

        uri = pyotp.TOTP(secret).provisioning_uri(name=username, issuer_name=self.issuer)

        logger.info(
            f"MFA enrolled for {username}",
            extra={"username": username, "action": "mfa_enroll", "outcome": "enrolled"},
        )
        return Enrollment(provisioning_uri=uri, secret=secret, backup_codes=backup_codes)

    def _withdraw(self, username: str) -> None:
        # Leaves the principal unenrolled so the next login routes to setup again
        self.secret_store.db.rollback()
        self.secret_store.delete(mfa_backup_key(username))
        self.secret_store.delete(mfa_secret_key(username))


class MfaVerifier:
    def __init__(
        self,
        secret_store: SecretStore,
        valid_window: int = settings.MFA_VALID_WINDOW,
        clock: Callable[[], float] = time.time,
    ):
        self.secret_store = secret_store
        self.valid_window = valid_window
        self.clock = clock

    def is_enrolled(self, username: str) -> bool:
        return self.secret_store.exists(mfa_secret_key(username))

    def verify(self, username: str, code: str) -> bool:
        """Accept a TOTP code within the window, else consume a matching backup code."""
        secret = self.secret_store.get(mfa_secret_key(username))
        if not secret:
            return False

        code = (code or "").strip()
        if not code:
            return False

        totp = pyotp.TOTP(secret)
        if totp.verify(code, for_time=int(self.clock()), valid_window=self.valid_window):
            return True

        return self._consume_backup_code(username, code)

    def _consume_backup_code(self, username: str, code: str) -> bool:
        key = mfa_backup_key(username)
        digest = hash_backup_code(code)

        for _ in range(_MAX_CAS_ATTEMPTS):
            current = self.secret_store.get(key)
            if not current:
                return False

            digests = current.split(",")
            if digest not in digests:
                return False

            remaining = ",".join(d for d in digests if d != digest)
            if self.secret_store.compare_and_set(key, current, remaining):
                logger.info(
                    f"Backup code redeemed for {username}",
                    extra={"username": username, "action": "mfa_backup_code", "outcome": "consumed"},
                )
                return True

        logger.warning(
            "Backup code redemption lost every compare-and-set race",
            extra={"username": username, "action": "mfa_backup_code", "outcome": "contention"},
        )
        return False
