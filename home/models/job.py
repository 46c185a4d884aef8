"""Job model: the contractor-facing record created when a ticket is assigned."""

from typing import Optional

from sqlalchemy import JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from home.models.base import BaseModel

JOB_ASSIGNED = "assigned"
JOB_SCHEDULED = "scheduled"
JOB_COMPLETED = "completed"


class Job(BaseModel):
    __tablename__ = "jobs"

    ticket_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Owning ticket; a ticket has at most one job.",
    )
    contractor_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    property_address: Mapped[str] = mapped_column(String(255), nullable=False)
    issue_type: Mapped[str] = mapped_column(String(100), nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=JOB_ASSIGNED
    )
    scheduled_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    scheduled_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    completion_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completion_photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, ticket_id={self.ticket_id}, status='{self.status}')>"
