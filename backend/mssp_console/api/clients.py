"""Tenant-scoped client read endpoints"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mssp_console.api.deps import require_role
from mssp_console.core.principal import Principal, Role
from mssp_console.database import get_db
from mssp_console.models.client import Client
from mssp_console.schemas.client import ClientResponse

router = APIRouter(prefix="/api/clients", tags=["clients"])

# Ordered check: a superadmin satisfies the admin minimum
require_any_role = require_role(Role.ADMIN)


@router.get("", response_model=List[ClientResponse])
def list_clients(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_any_role),
):
    """Superadmin sees every client; an admin sees only their own."""
    query = db.query(Client)
    if principal.role != Role.SUPERADMIN:
        query = query.filter(Client.admin_id == principal.username)
    return [ClientResponse.from_record(client) for client in query.order_by(Client.id).all()]


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_any_role),
):
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    if principal.role == Role.ADMIN and client.admin_id != principal.username:
        raise HTTPException(status_code=403, detail="You are not authorized to view this client")

    return ClientResponse.from_record(client)
