"""AdminUser model: provisioned admin accounts"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from mssp_console.database import Base


class AdminUser(Base):
    """An admin provisioned by the superadmin.

    The superadmin is configured out-of-band (``SUPERADMIN_USERNAME``) and has
    no row here, so it can never be blocked. Password hashes and MFA material
    live in the secret store, keyed by ``username``; ``mfa_secret`` only holds
    the opaque secret-store key once enrollment has happened.
    """

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    organization = Column(String(255), nullable=False)
    city = Column(String(255), nullable=False)
    state = Column(String(255), nullable=False)
    mfa_secret = Column(String(255), nullable=True)     # write-once reference
    blocked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
