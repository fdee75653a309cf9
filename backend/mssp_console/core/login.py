"""Login state machine: password → (enroll | ask for code | verify) → session"""
from enum import Enum
from typing import NamedTuple, Optional

from mssp_console.core.credentials import CredentialStore
from mssp_console.core.exceptions import AccountBlocked, InvalidCredentials, InvalidMfaToken
from mssp_console.core.mfa import MfaVerifier
from mssp_console.core.principal import Principal, Role
from mssp_console.core.sessions import SessionIssuer
from mssp_console.utils.logger import logger


class LoginOutcome(str, Enum):
    MFA_SETUP_REQUIRED = "mfa_setup_required"
    MFA_TOKEN_REQUIRED = "mfa_token_required"
    AUTHENTICATED = "authenticated"


class LoginResult(NamedTuple):
    outcome: LoginOutcome
    principal: Principal
    token: Optional[str] = None     # session token, or enrollment ticket for MFA_SETUP_REQUIRED


class LoginService:
    def __init__(self, credentials: CredentialStore, verifier: MfaVerifier, issuer: SessionIssuer):
        self.credentials = credentials
        self.verifier = verifier
        self.issuer = issuer

    def login(self, username: str, password: str, role: str, totp_code: Optional[str] = None) -> LoginResult:
        """Run one login attempt.

        Raises:
            AccountBlocked: admin record is blocked (checked before the password).
            InvalidCredentials: unknown role, username or wrong password.
            InvalidMfaToken: enrolled principal submitted a code that neither
                matches the TOTP window nor an unused backup code.
        """
        try:
            parsed_role = Role(role)
        except ValueError:
            logger.info("Login rejected, unknown role", extra={"username": username, "action": "login", "outcome": "bad_role"})
            raise InvalidCredentials()

        if parsed_role == Role.ADMIN and self.credentials.is_blocked(username):
            logger.warning(
                f"Blocked admin attempted login: {username}",
                extra={"username": username, "role": parsed_role.value, "action": "login", "outcome": "blocked"},
            )
            raise AccountBlocked()

        if not self.credentials.verify_password(username, password, parsed_role):
            logger.info(
                "Login rejected, invalid credentials",
                extra={"username": username, "role": parsed_role.value, "action": "login", "outcome": "invalid_credentials"},
            )
            raise InvalidCredentials()

        principal = Principal(username=username, role=parsed_role)

        if not self.verifier.is_enrolled(username):
            return LoginResult(LoginOutcome.MFA_SETUP_REQUIRED, principal, self.issuer.issue_setup_ticket(principal))

        if not totp_code:
            return LoginResult(LoginOutcome.MFA_TOKEN_REQUIRED, principal)

        if not self.verifier.verify(username, totp_code):
            logger.info(
                "Login rejected, invalid MFA token",
                extra={"username": username, "role": parsed_role.value, "action": "login", "outcome": "invalid_mfa"},
            )
            raise InvalidMfaToken()

        logger.info(
            f"Issued session for {username} (role={parsed_role.value})",
            extra={"username": username, "role": parsed_role.value, "action": "login", "outcome": "authenticated"},
        )
        return LoginResult(LoginOutcome.AUTHENTICATED, principal, self.issuer.issue(principal))
