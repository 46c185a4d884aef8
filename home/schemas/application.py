"""Pydantic schemas for job applications."""

from datetime import datetime

from home.models.application import ApplicationStatus
from home.schemas.base import Entity


class JobApplication(Entity):
    ticket_id: str
    contractor_id: str
    contractor_name: str
    contractor_email: str
    applied_at: datetime
    status: ApplicationStatus = ApplicationStatus.PENDING
