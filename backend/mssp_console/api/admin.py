"""Admin provisioning, blocking and admin-workspace client management"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mssp_console.api.deps import get_record_store, get_secret_store, require_exact_role
from mssp_console.config import settings
from mssp_console.core.principal import Principal, Role
from mssp_console.core.records import AdminExistsError, AdminRecordStore
from mssp_console.core.secret_store import SecretStore, admin_password_key
from mssp_console.database import get_db
from mssp_console.middleware.monitoring import record_block_change
from mssp_console.models.client import Client
from mssp_console.schemas.admin_user import AdminUserCreate, AdminUserEnvelope, AdminUserResponse, BlockUpdate
from mssp_console.schemas.auth import MessageResponse
from mssp_console.schemas.client import ClientEnvelope, ClientResponse, ClientWrite
from mssp_console.utils.hashing import hash_password
from mssp_console.utils.logger import logger

router = APIRouter(prefix="/api/admin", tags=["admin"])

require_superadmin = require_exact_role(Role.SUPERADMIN)
require_admin = require_exact_role(Role.ADMIN)


# ---------------------------------------------------------------------------
# Admin accounts (superadmin only)
# ---------------------------------------------------------------------------

@router.post("/admins", response_model=AdminUserEnvelope, status_code=status.HTTP_201_CREATED)
def create_admin(
    data: AdminUserCreate,
    records: AdminRecordStore = Depends(get_record_store),
    secrets: SecretStore = Depends(get_secret_store),
    principal: Principal = Depends(require_superadmin),
):
    """
    Provision an admin (superadmin only).

    The admin starts unblocked and without MFA; the first login routes to enrollment.
    """
    if data.username == settings.SUPERADMIN_USERNAME:
        raise HTTPException(status_code=400, detail="Admin already exists")

    try:
        admin = records.create_admin(
            username=data.username,
            name=data.name,
            email=data.email,
            organization=data.organization,
            city=data.city,
            state=data.state,
        )
    except AdminExistsError:
        raise HTTPException(status_code=400, detail="Admin already exists")

    secrets.set(admin_password_key(admin.username), hash_password(data.password))

    logger.info(
        f"Created admin: {admin.username}",
        extra={"admin_id": admin.id, "username": principal.username, "action": "create_admin"},
    )

    return AdminUserEnvelope(
        message="Admin created successfully. They will need to setup MFA on first login.",
        admin=AdminUserResponse.from_record(admin),
    )


@router.get("/admins", response_model=List[AdminUserResponse])
def list_admins(
    records: AdminRecordStore = Depends(get_record_store),
    _: Principal = Depends(require_superadmin),
):
    """List all admins (superadmin only)."""
    return [AdminUserResponse.from_record(admin) for admin in records.list_admins()]


@router.get("/admins/{admin_id}", response_model=AdminUserEnvelope, response_model_exclude_none=True)
def get_admin(
    admin_id: int,
    records: AdminRecordStore = Depends(get_record_store),
    _: Principal = Depends(require_superadmin),
):
    admin = records.get_admin(admin_id)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    return AdminUserEnvelope(admin=AdminUserResponse.from_record(admin))


@router.patch("/admins/{admin_id}/block", response_model=AdminUserEnvelope)
def set_admin_blocked(
    admin_id: int,
    data: BlockUpdate,
    records: AdminRecordStore = Depends(get_record_store),
    principal: Principal = Depends(require_superadmin),
):
    """
    Block or unblock an admin (superadmin only).

    Takes effect immediately: the admin's next request with an existing
    session is rejected as blocked and the cookie is cleared.
    """
    admin = records.set_blocked(admin_id, data.blocked)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    record_block_change(data.blocked)
    logger.info(
        f"Admin {admin.username} {'blocked' if data.blocked else 'unblocked'}",
        extra={"admin_id": admin.id, "username": principal.username, "action": "set_blocked"},
    )

    return AdminUserEnvelope(
        message=f"Admin {'blocked' if data.blocked else 'unblocked'} successfully",
        admin=AdminUserResponse.from_record(admin),
    )


@router.get("/admins/{username}/clients", response_model=List[ClientResponse])
def list_admin_clients(
    username: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_superadmin),
):
    """Clients owned by one admin (superadmin cross-tenant view)."""
    clients = db.query(Client).filter(Client.admin_id == username).order_by(Client.id).all()
    return [ClientResponse.from_record(client) for client in clients]


# ---------------------------------------------------------------------------
# Client management (admin role only, own clients)
# ---------------------------------------------------------------------------

def _get_owned_client(db: Session, client_id: int, principal: Principal) -> Client:
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    if client.admin_id != principal.username:
        raise HTTPException(status_code=403, detail="You are not authorized to modify this client")
    return client


@router.post("/clients", response_model=ClientEnvelope, status_code=status.HTTP_201_CREATED)
def create_client(
    data: ClientWrite,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    client = Client(
        name=data.name,
        url=data.url,
        description=data.description or "",
        graylog=data.graylog,
        log_api=data.log_api,
        admin_id=principal.username,
    )
    db.add(client)
    db.commit()
    db.refresh(client)

    logger.info(
        f"Created client: {client.id}",
        extra={"client_id": client.id, "username": principal.username, "action": "create_client"},
    )
    return ClientEnvelope(client=ClientResponse.from_record(client))


@router.put("/clients/{client_id}", response_model=ClientEnvelope)
def update_client(
    client_id: int,
    data: ClientWrite,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    """Replace name/url; other fields keep their value when omitted."""
    client = _get_owned_client(db, client_id, principal)

    client.name = data.name
    client.url = data.url
    if data.description:
        client.description = data.description
    if data.graylog:
        client.graylog = data.graylog
    if data.log_api:
        client.log_api = data.log_api
    db.commit()
    db.refresh(client)

    logger.info(f"Updated client: {client.id}", extra={"client_id": client.id, "action": "update_client"})
    return ClientEnvelope(client=ClientResponse.from_record(client))


@router.delete("/clients/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    client = _get_owned_client(db, client_id, principal)
    db.delete(client)
    db.commit()

    logger.info(f"Deleted client: {client_id}", extra={"client_id": client_id, "action": "delete_client"})
    return MessageResponse(message="Client deleted successfully")
