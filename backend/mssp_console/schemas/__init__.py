"""Pydantic schemas for request/response validation"""
from mssp_console.schemas.admin_user import AdminUserCreate, AdminUserEnvelope, AdminUserResponse, BlockUpdate
from mssp_console.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    MfaSetupRequest,
    MfaSetupResponse,
    SessionStatus,
)
from mssp_console.schemas.client import ClientEnvelope, ClientResponse, ClientWrite

__all__ = [
    "AdminUserCreate",
    "AdminUserEnvelope",
    "AdminUserResponse",
    "BlockUpdate",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "MfaSetupRequest",
    "MfaSetupResponse",
    "SessionStatus",
    "ClientEnvelope",
    "ClientResponse",
    "ClientWrite",
]
