"""Client schemas"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from mssp_console.models.client import Client


class ClientWrite(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=1024)
    description: Optional[str] = None
    graylog: Optional[Dict[str, Any]] = Field(None, description="{host, streamId, username, password}")
    log_api: Optional[Dict[str, Any]] = Field(None, alias="logApi")


class ClientResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    url: str
    description: str
    graylog: Optional[Dict[str, Any]] = None
    log_api: Optional[Dict[str, Any]] = Field(None, alias="logApi")
    admin_id: str = Field(..., alias="adminId")

    @classmethod
    def from_record(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            url=client.url,
            description=client.description or "",
            graylog=client.graylog,
            log_api=client.log_api,
            admin_id=client.admin_id,
        )


class ClientEnvelope(BaseModel):
    success: bool = True
    client: ClientResponse
