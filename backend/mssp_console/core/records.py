"""Admin record store.

Each mutation is a single-row UPDATE committed on its own, so concurrent
block/enroll operations on one admin cannot lose each other's writes.
"""
from typing import List, Optional

from sqlalchemy import case, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mssp_console.models.admin_user import AdminUser


class AdminExistsError(Exception):
    """Raised when provisioning an admin whose username is already taken."""


class AdminRecordStore:
    def __init__(self, db: Session):
        self.db = db

    def list_admins(self) -> List[AdminUser]:
        return self.db.query(AdminUser).order_by(AdminUser.id).all()

    def get_admin(self, admin_id: int) -> Optional[AdminUser]:
        return self.db.query(AdminUser).filter(AdminUser.id == admin_id).first()

    def find_admin_by_identifier(self, identifier: str) -> Optional[AdminUser]:
        """Match an admin by username, falling back to email or display name.

        An exact username match always wins over another record whose email or
        name happens to equal the identifier.
        """
        # Always hit the database; a cached instance could hide a fresh block
        return (
            self.db.query(AdminUser)
            .populate_existing()
            .filter(
                or_(
                    AdminUser.username == identifier,
                    AdminUser.email == identifier,
                    AdminUser.name == identifier,
                )
            )
            .order_by(case((AdminUser.username == identifier, 0), else_=1), AdminUser.id)
            .first()
        )

    def create_admin(
        self,
        username: str,
        name: str,
        email: str,
        organization: str,
        city: str,
        state: str,
    ) -> AdminUser:
        admin = AdminUser(
            username=username,
            name=name,
            email=email,
            organization=organization,
            city=city,
            state=state,
            mfa_secret=None,
            blocked=False,
        )
        self.db.add(admin)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AdminExistsError(username)
        self.db.refresh(admin)
        return admin

    def set_blocked(self, admin_id: int, blocked: bool) -> Optional[AdminUser]:
        result = self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == admin_id)
            .values(blocked=blocked)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount == 0:
            return None
        return self.db.query(AdminUser).populate_existing().filter(AdminUser.id == admin_id).first()

    def mark_mfa_enrolled(self, username: str, secret_ref: str) -> bool:
        """Record the enrollment reference once; later calls are no-ops."""
        result = self.db.execute(
            update(AdminUser)
            .where(AdminUser.username == username, AdminUser.mfa_secret.is_(None))
            .values(mfa_secret=secret_ref)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1
