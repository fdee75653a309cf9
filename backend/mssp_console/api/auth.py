"""Login, MFA enrollment, logout and session-check endpoints"""
from fastapi import APIRouter, Depends, Request, Response

from mssp_console.api.deps import (
    get_credential_store,
    get_enrollment_service,
    get_login_service,
    get_session_issuer,
)
from mssp_console.config import settings
from mssp_console.core.credentials import CredentialStore
from mssp_console.core.exceptions import AccountBlocked, AuthError, MfaSetupNotAuthorized, Unauthenticated
from mssp_console.core.gate import authenticate
from mssp_console.core.login import LoginOutcome, LoginService
from mssp_console.core.mfa import MfaEnrollmentService, generate_qr_code_data_uri
from mssp_console.core.principal import Role
from mssp_console.core.sessions import (
    SessionIssuer,
    clear_session_cookie,
    clear_setup_cookie,
    set_session_cookie,
    set_setup_cookie,
)
from mssp_console.middleware.monitoring import record_auth_event
from mssp_console.middleware.rate_limit import get_rate_limit, limiter
from mssp_console.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    MfaSetupRequest,
    MfaSetupResponse,
    SessionStatus,
)
from mssp_console.utils.logger import logger

router = APIRouter(prefix="/api/auth", tags=["authentication"])


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------

@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: LoginService = Depends(get_login_service),
) -> LoginResponse:
    """Check the password, then route to MFA enrollment, MFA prompt or a session.

    - No MFA secret yet → ``requireMFASetup`` plus a short-lived enrollment
      cookie; no session is issued.
    - Enrolled but no ``totpCode`` → ``requireMFAToken``.
    - Valid TOTP or unused backup code → session cookie (HTTP-only,
      SameSite=Strict, Secure in production, 8 hour max-age).
    """
    try:
        result = service.login(body.username, body.password, body.role, body.totp_code)
    except AuthError as exc:
        record_auth_event("login", type(exc).__name__)
        raise

    if result.outcome == LoginOutcome.MFA_SETUP_REQUIRED:
        record_auth_event("login", "mfa_setup_required")
        set_setup_cookie(response, result.token)
        return LoginResponse(success=True, message="MFA setup required", require_mfa_setup=True)

    if result.outcome == LoginOutcome.MFA_TOKEN_REQUIRED:
        record_auth_event("login", "mfa_token_required")
        return LoginResponse(success=True, message="MFA token required", require_mfa_token=True)

    record_auth_event("login", "success")
    set_session_cookie(response, result.token)
    clear_setup_cookie(response)
    return LoginResponse(success=True, message="Login successful")


# ---------------------------------------------------------------------------
# POST /setup-mfa
# ---------------------------------------------------------------------------

@router.post("/setup-mfa", response_model=MfaSetupResponse)
@limiter.limit(get_rate_limit("setup_mfa"))
def setup_mfa(
    request: Request,
    response: Response,
    body: MfaSetupRequest,
    issuer: SessionIssuer = Depends(get_session_issuer),
    credentials: CredentialStore = Depends(get_credential_store),
    enrollment: MfaEnrollmentService = Depends(get_enrollment_service),
) -> MfaSetupResponse:
    """Enroll the principal that just passed the password check.

    Requires the enrollment cookie set by ``/login`` for the same username
    and role. Returns the QR code, the base32 secret and 10 backup codes;
    the backup codes are never shown again.
    """
    ticket = request.cookies.get(settings.MFA_SETUP_COOKIE_NAME)
    if not ticket:
        record_auth_event("mfa_setup", "no_ticket")
        raise MfaSetupNotAuthorized()

    try:
        principal = issuer.decode_setup_ticket(ticket)
    except Unauthenticated:
        record_auth_event("mfa_setup", "invalid_ticket")
        raise MfaSetupNotAuthorized()

    if principal.username != body.username or principal.role.value != body.role:
        logger.warning(
            "MFA setup ticket does not match request",
            extra={"username": body.username, "action": "mfa_enroll", "outcome": "ticket_mismatch"},
        )
        record_auth_event("mfa_setup", "ticket_mismatch")
        raise MfaSetupNotAuthorized()

    if principal.role == Role.ADMIN and credentials.is_blocked(principal.username):
        record_auth_event("mfa_setup", "blocked")
        raise AccountBlocked()

    try:
        enrolled = enrollment.enroll(principal.username)
    except AuthError as exc:
        record_auth_event("mfa_setup", type(exc).__name__)
        raise

    record_auth_event("mfa_setup", "success")
    clear_setup_cookie(response)
    return MfaSetupResponse(
        qr_code=generate_qr_code_data_uri(enrolled.provisioning_uri),
        backup_codes=enrolled.backup_codes,
        secret=enrolled.secret,
    )


# ---------------------------------------------------------------------------
# POST /logout, GET /check
# ---------------------------------------------------------------------------

@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    clear_session_cookie(response)
    clear_setup_cookie(response)
    return MessageResponse(message="Logout successful")


@router.get("/check", response_model=SessionStatus, response_model_exclude_none=True)
def check_session(
    request: Request,
    response: Response,
    issuer: SessionIssuer = Depends(get_session_issuer),
    credentials: CredentialStore = Depends(get_credential_store),
) -> SessionStatus:
    """Report whether the current cookie carries a trusted session.

    An invalid, expired or blocked session clears the cookie and reports
    ``authenticated: false`` (with ``blocked: true`` for a blocked admin).
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return SessionStatus(authenticated=False)

    try:
        principal = authenticate(token, issuer, credentials)
    except AuthError as exc:
        clear_session_cookie(response)
        return SessionStatus(authenticated=False, blocked=True if exc.blocked else None)

    return SessionStatus(authenticated=True, role=principal.role.value, username=principal.username)
