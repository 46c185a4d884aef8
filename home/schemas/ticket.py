"""Pydantic schemas for tickets and their message threads."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from uuid_extensions import uuid7str

from home.models.ticket import TicketStatus
from home.models.user import UserRole
from home.schemas.base import Entity, utcnow


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=uuid7str)
    text: str
    sender_email: str
    sender_name: str
    timestamp: datetime = Field(default_factory=utcnow)


class Ticket(Entity):
    title: str
    description: str
    category: str
    priority: Optional[str] = None
    status: TicketStatus = TicketStatus.SUBMITTED
    submitted_by: str
    submitted_by_role: UserRole
    assigned_to: Optional[str] = None
    assigned_contractor: Optional[str] = None
    scheduled_date: Optional[str] = None
    completed_date: Optional[str] = None
    rating: Optional[float] = None
    ai_diagnosis: Optional[str] = None
    photos: tuple[str, ...] = ()
    messages: tuple[Message, ...] = ()
    viewed_by_landlord: bool = False


class TicketDraft(BaseModel):
    """What a tenant fills in; the submitter comes from the auth context."""

    title: str = ""
    description: str = ""
    category: str = ""
    priority: Optional[str] = None
    photos: list[str] = Field(default_factory=list)
    ai_diagnosis: Optional[str] = None


class ScheduleRequest(BaseModel):
    date: str = Field(..., description="Calendar day, YYYY-MM-DD.")
    time: str = Field(..., description="24-hour HH:MM or 12-hour h:MM AM/PM.")


class AssignRequest(BaseModel):
    contractor_id: str


class MessageCreate(BaseModel):
    text: str = Field(..., min_length=1)
