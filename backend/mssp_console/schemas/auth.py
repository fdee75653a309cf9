"""Login / MFA schemas (camelCase on the wire, matching the console UI)"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str = Field(..., description="admin | superadmin")
    totp_code: Optional[str] = Field(None, alias="totpCode", description="TOTP or backup code")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    require_mfa_setup: Optional[bool] = Field(None, alias="requireMFASetup")
    require_mfa_token: Optional[bool] = Field(None, alias="requireMFAToken")


class MfaSetupRequest(BaseModel):
    username: str = Field(..., min_length=1)
    role: str


class MfaSetupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    qr_code: str = Field(..., alias="qrCode", description="PNG data URI of the provisioning URI")
    backup_codes: List[str] = Field(..., alias="backupCodes")
    secret: str


class SessionStatus(BaseModel):
    authenticated: bool
    role: Optional[str] = None
    username: Optional[str] = None
    blocked: Optional[bool] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
