"""Exports all models for easy access."""

from .application import ApplicationStatus, JobApplication
from .base import Base, BaseModel
from .connection import ConnectionStatus, LandlordTenantConnection
from .contractor import Contractor
from .invitation import InvitationStatus, JobInvitation
from .job import JOB_ASSIGNED, JOB_COMPLETED, JOB_SCHEDULED, Job
from .ticket import Ticket, TicketStatus
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Ticket",
    "TicketStatus",
    "Job",
    "JOB_ASSIGNED",
    "JOB_SCHEDULED",
    "JOB_COMPLETED",
    "Contractor",
    "LandlordTenantConnection",
    "ConnectionStatus",
    "JobApplication",
    "ApplicationStatus",
    "JobInvitation",
    "InvitationStatus",
]
