"""Landlord-tenant connection model."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy import Enum as EnumType
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel, enum_values


class ConnectionStatus(enum.Enum):
    PENDING = "pending"  # tenant has not answered yet
    CONNECTED = "connected"
    REJECTED = "rejected"


class LandlordTenantConnection(BaseModel):
    __tablename__ = "connections"

    landlord_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tenant_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[ConnectionStatus] = mapped_column(
        EnumType(
            ConnectionStatus,
            name="connection_status",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=ConnectionStatus.PENDING,
    )
    requested_by: Mapped[str] = mapped_column(String(255), nullable=False)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<LandlordTenantConnection(id={self.id}, "
            f"status='{self.status.value}')>"
        )
