"""Rate limiting for credential-guessing endpoints"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from mssp_console.config import settings


def get_identifier(request: Request) -> str:
    """Rate-limit key: the peer address of the connection.

    Client-supplied forwarding headers are ignored; behind a proxy, run uvicorn
    with --proxy-headers and --forwarded-allow-ips so the peer address is the
    real client.
    """
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Rate limit configurations for different endpoints
RATE_LIMITS = {
    "login": settings.RATE_LIMIT_LOGIN,
    "setup_mfa": settings.RATE_LIMIT_LOGIN,
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
