"""AdminUser schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from mssp_console.models.admin_user import AdminUser


class AdminUserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_.@-]+$")
    password: str = Field(..., min_length=1, max_length=72)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    organization: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    state: str = Field(..., min_length=1, max_length=255)


class AdminUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    email: str
    organization: str
    city: str
    state: str
    mfa_enabled: bool
    blocked: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, admin: AdminUser) -> "AdminUserResponse":
        # mfa_secret is a secret-store reference and never leaves the server
        return cls(
            id=admin.id,
            username=admin.username,
            name=admin.name,
            email=admin.email,
            organization=admin.organization,
            city=admin.city,
            state=admin.state,
            mfa_enabled=admin.mfa_secret is not None,
            blocked=admin.blocked,
            created_at=admin.created_at,
        )


class AdminUserEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    admin: AdminUserResponse


class BlockUpdate(BaseModel):
    blocked: StrictBool
