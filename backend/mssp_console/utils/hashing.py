"""Hashing helpers for passwords and backup codes"""
import hashlib
import hmac

import bcrypt

from mssp_console.config import settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt for storage"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or password longer than bcrypt accepts
        return False


def constant_time_equals(a: str, b: str) -> bool:
    """Compare two strings without leaking the position of the first difference"""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def hash_backup_code(code: str) -> str:
    """SHA-256 of the normalized (stripped, uppercased) backup code"""
    normalized = code.strip().upper()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
