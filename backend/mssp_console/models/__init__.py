"""Database models"""
from mssp_console.models.admin_user import AdminUser
from mssp_console.models.client import Client
from mssp_console.models.secret import SecretEntry

__all__ = ["AdminUser", "Client", "SecretEntry"]
