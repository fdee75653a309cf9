"""Authentication error taxonomy.

Every error carries the HTTP status it maps to, a stable user-facing message
and whether the session cookie must be cleared when it is returned. Nothing
internal (stack traces, secret material) is ever put into ``message``.
"""
from typing import Optional

from fastapi import status


class AuthError(Exception):
    """Base class for authentication and authorization failures."""

    status_code: int = status.HTTP_401_UNAUTHORIZED
    message: str = "Authentication required"
    clear_cookie: bool = False
    blocked: bool = False

    def __init__(self, message: Optional[str] = None, clear_cookie: Optional[bool] = None):
        if message is not None:
            self.message = message
        if clear_cookie is not None:
            self.clear_cookie = clear_cookie
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    message = "Invalid credentials"


class InvalidMfaToken(AuthError):
    message = "Invalid MFA token"


class AccountBlocked(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Your account has been blocked by the administrator. Please contact support."
    clear_cookie = True
    blocked = True


class Unauthenticated(AuthError):
    message = "Authentication required"


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You are not authorized to perform this action"


class MfaAlreadyEnrolled(AuthError):
    status_code = status.HTTP_409_CONFLICT
    message = "MFA is already set up for this account"


class MfaSetupNotAuthorized(AuthError):
    message = "Sign in with your password before setting up MFA"
