"""Pydantic schemas for job invitations."""

from datetime import datetime

from pydantic import BaseModel

from home.models.invitation import InvitationStatus
from home.schemas.base import Entity


class JobInvitation(Entity):
    ticket_id: str
    contractor_id: str
    contractor_email: str
    landlord_email: str
    invited_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING


class InviteRequest(BaseModel):
    contractor_id: str
