"""Job application model: a contractor asking to take an open ticket."""

import enum
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy import Enum as EnumType
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel, enum_values


class ApplicationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class JobApplication(BaseModel):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("ticket_id", "contractor_id", name="uq_application_per_ticket"),
    )

    ticket_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contractor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    contractor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contractor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[ApplicationStatus] = mapped_column(
        EnumType(
            ApplicationStatus,
            name="application_status",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<JobApplication(id={self.id}, status='{self.status.value}')>"
