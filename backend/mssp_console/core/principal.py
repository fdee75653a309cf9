"""Roles and the authenticated principal"""
from enum import Enum
from typing import NamedTuple


class Role(str, Enum):
    """Closed set of login roles."""

    ADMIN = "admin"
    SUPERADMIN = "superadmin"


# Ordered ranks for require_role(); superadmin-only endpoints use exact matches instead.
ROLE_RANK = {
    Role.ADMIN: 1,
    Role.SUPERADMIN: 2,
}


class Principal(NamedTuple):
    """Resolved identity attached to a request by the authorization gate."""

    username: str
    role: Role
