"""Monitoring and observability middleware"""
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from mssp_console.utils.logger import logger


# ===== Prometheus Metrics =====

http_requests_total = Counter(
    "mssp_console_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "mssp_console_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

auth_events_total = Counter(
    "mssp_console_auth_events_total",
    "Authentication and authorization decisions",
    ["event", "outcome"]  # event: login, mfa_setup, session; outcome: success, invalid_credentials, ...
)

admin_block_changes_total = Counter(
    "mssp_console_admin_block_changes_total",
    "Admin block/unblock actions",
    ["blocked"]
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for request metrics, request IDs and slow-request logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        method = request.method
        endpoint = request.url.path

        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            http_requests_total.labels(method=method, endpoint=endpoint, status=500).inc()
            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": endpoint,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise

        status = response.status_code
        duration = time.time() - start_time

        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        if duration > 1.0:
            logger.warning(
                f"Slow request detected: {method} {endpoint}",
                extra={"request_id": request_id, "method": method, "path": endpoint}
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_event(event: str, outcome: str):
    """Record an authentication decision"""
    auth_events_total.labels(event=event, outcome=outcome).inc()


def record_block_change(blocked: bool):
    """Record an admin block toggle"""
    admin_block_changes_total.labels(blocked=str(blocked).lower()).inc()
