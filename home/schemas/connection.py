"""Pydantic schemas for landlord-tenant connections."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from home.models.connection import ConnectionStatus
from home.schemas.base import Entity


def connection_id(landlord_email: str, tenant_email: str) -> str:
    return f"{landlord_email}_{tenant_email}"


class Connection(Entity):
    landlord_email: str
    tenant_email: str
    status: ConnectionStatus = ConnectionStatus.PENDING
    requested_by: str
    requested_at: datetime
    confirmed_at: Optional[datetime] = None


class ConnectionRequest(BaseModel):
    tenant_email: EmailStr


class ConnectionResponse(BaseModel):
    accept: bool
