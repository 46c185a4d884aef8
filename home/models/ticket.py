"""Ticket model for tracking maintenance requests."""

import enum
from typing import Optional

from sqlalchemy import JSON, Boolean, Float, String, Text
from sqlalchemy import Enum as EnumType
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel, enum_values
from home.models.user import UserRole


class TicketStatus(enum.Enum):
    SUBMITTED = "submitted"
    ASSIGNED = "assigned"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class Ticket(BaseModel):
    __tablename__ = "tickets"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    priority: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[TicketStatus] = mapped_column(
        EnumType(
            TicketStatus,
            name="ticket_status",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=TicketStatus.SUBMITTED,
    )
    submitted_by: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Email of the user who submitted the ticket.",
    )
    submitted_by_role: Mapped[UserRole] = mapped_column(
        EnumType(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )
    assigned_contractor: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    scheduled_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    completed_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ai_diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    messages: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered ticket thread, stored inline.",
    )
    viewed_by_landlord: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, status='{self.status.value}')>"
