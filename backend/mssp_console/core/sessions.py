"""Session credentials: HS256 signing, verification and cookie binding.

Sessions are stateless: a token is trusted when its signature verifies and
``now < exp``. There is no refresh; expiry forces a full login including MFA.
The same signer also mints the short-lived ticket that lets a principal who
just passed the password check enroll in MFA; a ticket is never accepted as
a session and vice versa (``type`` claim).
"""
import time
import uuid
from typing import Any, Callable, Dict

from fastapi import Response
from jose import JWTError, jwt

from mssp_console.config import settings
from mssp_console.core.exceptions import Unauthenticated
from mssp_console.core.principal import Principal, Role
from mssp_console.utils.logger import logger

SESSION_TOKEN_TYPE = "session"
MFA_SETUP_TOKEN_TYPE = "mfa_setup"


class SessionIssuer:
    def __init__(
        self,
        secret: str = settings.JWT_SECRET,
        algorithm: str = settings.JWT_ALGORITHM,
        lifetime_seconds: int = settings.SESSION_EXPIRE_SECONDS,
        setup_lifetime_seconds: int = settings.MFA_SETUP_EXPIRE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime_seconds = lifetime_seconds
        self.setup_lifetime_seconds = setup_lifetime_seconds
        self.clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _encode(self, principal: Principal, token_type: str, lifetime: int) -> str:
        now = int(self.clock())
        payload: Dict[str, Any] = {
            "sub": principal.username,
            "username": principal.username,
            "role": principal.role.value,
            "type": token_type,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue(self, principal: Principal) -> str:
        """Sign a session token for a fully verified principal."""
        return self._encode(principal, SESSION_TOKEN_TYPE, self.lifetime_seconds)

    def issue_setup_ticket(self, principal: Principal) -> str:
        """Sign a ticket allowing MFA enrollment after a correct password."""
        return self._encode(principal, MFA_SETUP_TOKEN_TYPE, self.setup_lifetime_seconds)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def _decode(self, token: str, token_type: str) -> Principal:
        invalid = Unauthenticated("Invalid authentication", clear_cookie=True)

        try:
            # Expiry is checked below against our own clock
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug(f"JWT decode failed: {exc}")
            raise invalid

        if payload.get("type") != token_type:
            raise invalid

        exp = payload.get("exp")
        if not isinstance(exp, int) or self.clock() >= exp:
            raise Unauthenticated("Session expired", clear_cookie=True)

        try:
            return Principal(username=payload["username"], role=Role(payload["role"]))
        except (KeyError, ValueError):
            raise invalid

    def decode(self, token: str) -> Principal:
        """Verify a session token; raises ``Unauthenticated`` when invalid or expired."""
        return self._decode(token, SESSION_TOKEN_TYPE)

    def decode_setup_ticket(self, token: str) -> Principal:
        return self._decode(token, MFA_SETUP_TOKEN_TYPE)


# ---------------------------------------------------------------------------
# Cookie binding
# ---------------------------------------------------------------------------

def set_session_cookie(response: Response, token: str, max_age: int = settings.SESSION_EXPIRE_SECONDS) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def set_setup_cookie(response: Response, ticket: str) -> None:
    response.set_cookie(
        key=settings.MFA_SETUP_COOKIE_NAME,
        value=ticket,
        max_age=settings.MFA_SETUP_EXPIRE_SECONDS,
        path="/api/auth",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_setup_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.MFA_SETUP_COOKIE_NAME,
        path="/api/auth",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
