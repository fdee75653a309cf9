"""Middleware modules for production-ready features"""
from mssp_console.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_event,
    record_block_change,
)
from mssp_console.middleware.rate_limit import limiter, get_rate_limit

__all__ = [
    "MonitoringMiddleware",
    "record_auth_event",
    "record_block_change",
    "limiter",
    "get_rate_limit",
]
