"""Job invitation model: a landlord offering an open ticket to one contractor."""

import enum
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy import Enum as EnumType
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel, enum_values


class InvitationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class JobInvitation(BaseModel):
    __tablename__ = "job_invitations"
    __table_args__ = (
        UniqueConstraint("ticket_id", "contractor_id", name="uq_invitation_per_ticket"),
    )

    ticket_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contractor_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contractor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    landlord_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    invited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[InvitationStatus] = mapped_column(
        EnumType(
            InvitationStatus,
            name="invitation_status",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=InvitationStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<JobInvitation(id={self.id}, status='{self.status.value}')>"
