"""API dependencies for authentication and authorization.

The session travels in an HTTP-only cookie (``SESSION_COOKIE_NAME``).
:func:`get_current_principal` runs the authorization gate on every protected
request; :func:`require_role` and :func:`require_exact_role` layer role
checks on top of it.

Roles
-----
Ordered checks (``require_role``): superadmin > admin.
Superadmin-only endpoints use ``require_exact_role(Role.SUPERADMIN)`` and
admin-workspace endpoints use ``require_exact_role(Role.ADMIN)``: there the
role must match exactly and no other role stands in.
"""
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mssp_console.config import settings
from mssp_console.core.credentials import CredentialStore
from mssp_console.core.gate import authenticate, check_exact_role, check_role
from mssp_console.core.login import LoginService
from mssp_console.core.mfa import MfaEnrollmentService, MfaVerifier
from mssp_console.core.principal import Principal, Role
from mssp_console.core.records import AdminRecordStore
from mssp_console.core.secret_store import SecretStore
from mssp_console.core.sessions import SessionIssuer
from mssp_console.database import get_db

_session_issuer = SessionIssuer()


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------

def get_session_issuer() -> SessionIssuer:
    return _session_issuer


def get_secret_store(db: Session = Depends(get_db)) -> SecretStore:
    return SecretStore(db)


def get_record_store(db: Session = Depends(get_db)) -> AdminRecordStore:
    return AdminRecordStore(db)


def get_credential_store(
    records: AdminRecordStore = Depends(get_record_store),
    secrets: SecretStore = Depends(get_secret_store),
) -> CredentialStore:
    return CredentialStore(records, secrets)


def get_mfa_verifier(secrets: SecretStore = Depends(get_secret_store)) -> MfaVerifier:
    return MfaVerifier(secrets)


def get_enrollment_service(
    secrets: SecretStore = Depends(get_secret_store),
    records: AdminRecordStore = Depends(get_record_store),
) -> MfaEnrollmentService:
    return MfaEnrollmentService(secrets, records)


def get_login_service(
    credentials: CredentialStore = Depends(get_credential_store),
    verifier: MfaVerifier = Depends(get_mfa_verifier),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> LoginService:
    return LoginService(credentials, verifier, issuer)


# ---------------------------------------------------------------------------
# Authorization gate
# ---------------------------------------------------------------------------

def get_current_principal(
    request: Request,
    issuer: SessionIssuer = Depends(get_session_issuer),
    credentials: CredentialStore = Depends(get_credential_store),
) -> Principal:
    """Validate the session cookie and attach the principal to ``request.state``.

    Failures raise :class:`~mssp_console.core.exceptions.AuthError`; the
    exception handler in ``main`` renders them and clears the cookie when needed.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    principal = authenticate(token, issuer, credentials)
    request.state.principal = principal
    return principal


def require_role(min_role: Role) -> Callable:
    """Return a dependency enforcing a minimum role (superadmin satisfies admin).

    Usage::

        @router.get("/clients")
        def endpoint(principal: Principal = Depends(require_role(Role.ADMIN))):
            ...
    """

    def _role_dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        return check_role(principal, min_role)

    # Give FastAPI a unique name so it doesn't collapse distinct dependencies
    _role_dep.__name__ = f"require_role_{min_role.value}"
    return _role_dep


def require_exact_role(role: Role) -> Callable:
    """Return a dependency that admits only ``role`` itself."""

    def _exact_role_dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        return check_exact_role(principal, role)

    _exact_role_dep.__name__ = f"require_exact_role_{role.value}"
    return _exact_role_dep
