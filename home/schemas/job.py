"""Pydantic schemas for jobs."""

from typing import Optional

from pydantic import BaseModel, Field

from home.models.job import JOB_ASSIGNED
from home.schemas.base import Entity
from home.schemas.ticket import Ticket


class Job(Entity):
    ticket_id: str
    contractor_id: str
    property_address: str
    issue_type: str
    date: str
    status: str = JOB_ASSIGNED
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    completion_notes: Optional[str] = None
    completion_photos: tuple[str, ...] = ()
    rating: Optional[float] = None


class CompleteJobRequest(BaseModel):
    photos: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class RatingRequest(BaseModel):
    rating: float


class ScheduleResult(BaseModel):
    """A schedule call succeeds even when it overlaps other work that day."""

    ticket: Ticket
    job: Optional[Job] = None
    conflicts: list[Job] = Field(default_factory=list)
