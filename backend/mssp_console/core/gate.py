"""Authorization gate: per-request session validation and role checks.

Every protected request re-verifies the signed session and, for admins,
re-reads the live ``blocked`` flag. Nothing is cached, so blocking an admin
takes effect on that admin's very next request.
"""
from typing import Optional

from mssp_console.core.credentials import CredentialStore
from mssp_console.core.exceptions import AccountBlocked, Forbidden, Unauthenticated
from mssp_console.core.principal import ROLE_RANK, Principal, Role
from mssp_console.core.sessions import SessionIssuer
from mssp_console.utils.logger import logger


def authenticate(token: Optional[str], issuer: SessionIssuer, credentials: CredentialStore) -> Principal:
    """Resolve a session cookie value to a Principal.

    Raises:
        Unauthenticated: no token, or bad signature / expired (cookie to be cleared).
        AccountBlocked: admin whose record is currently blocked (cookie to be cleared).
    """
    if not token:
        raise Unauthenticated()

    principal = issuer.decode(token)

    if principal.role == Role.ADMIN and credentials.is_blocked(principal.username):
        logger.warning(
            f"Rejected session of blocked admin {principal.username}",
            extra={"username": principal.username, "role": principal.role.value, "action": "authenticate", "outcome": "blocked"},
        )
        raise AccountBlocked()

    return principal


def check_role(principal: Principal, min_role: Role) -> Principal:
    """Ordered check: superadmin satisfies an admin minimum."""
    if ROLE_RANK[principal.role] < ROLE_RANK[min_role]:
        raise Forbidden()
    return principal


def check_exact_role(principal: Principal, role: Role) -> Principal:
    """Exact-match check used by role-specific endpoints; no role stands in for another."""
    if principal.role != role:
        logger.info(
            f"Role '{role.value}' required, caller has '{principal.role.value}'",
            extra={"username": principal.username, "role": principal.role.value, "action": "authorize", "outcome": "forbidden"},
        )
        raise Forbidden()
    return principal
