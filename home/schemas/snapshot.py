"""
Immutable snapshot of every entity, and the change set between two snapshots.

Workflow commands take a Snapshot and return the next one; storage backends
load a Snapshot and commit the ChangeSet computed by `diff`.
"""

from dataclasses import dataclass
from typing import Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from home.schemas.application import JobApplication
from home.schemas.base import Entity
from home.schemas.connection import Connection
from home.schemas.contractor import Contractor
from home.schemas.invitation import JobInvitation
from home.schemas.job import Job
from home.schemas.ticket import Ticket
from home.schemas.user import User
from home.utils.exceptions import NotFoundError

E = TypeVar("E", bound=Entity)

# Snapshot field -> storage table.
TABLES: dict[str, str] = {
    "users": "users",
    "tickets": "tickets",
    "jobs": "jobs",
    "contractors": "contractors",
    "connections": "connections",
    "applications": "job_applications",
    "invitations": "job_invitations",
}


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    users: tuple[User, ...] = ()
    tickets: tuple[Ticket, ...] = ()
    jobs: tuple[Job, ...] = ()
    contractors: tuple[Contractor, ...] = ()
    connections: tuple[Connection, ...] = ()
    applications: tuple[JobApplication, ...] = ()
    invitations: tuple[JobInvitation, ...] = ()

    # -- lookups -----------------------------------------------------------

    def find_ticket(self, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in self.tickets if t.id == ticket_id), None)

    def ticket(self, ticket_id: str) -> Ticket:
        ticket = self.find_ticket(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket", ticket_id)
        return ticket

    def job(self, job_id: str) -> Job:
        job = next((j for j in self.jobs if j.id == job_id), None)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job

    def job_for_ticket(self, ticket_id: str) -> Optional[Job]:
        return next((j for j in self.jobs if j.ticket_id == ticket_id), None)

    def find_contractor(self, contractor_id: str) -> Optional[Contractor]:
        return next((c for c in self.contractors if c.id == contractor_id), None)

    def contractor(self, contractor_id: str) -> Contractor:
        contractor = self.find_contractor(contractor_id)
        if contractor is None:
            raise NotFoundError("Contractor", contractor_id)
        return contractor

    def user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((u for u in self.users if u.email.lower() == wanted), None)

    def find_connection(self, connection_id: str) -> Optional[Connection]:
        return next((c for c in self.connections if c.id == connection_id), None)

    def applications_for(self, ticket_id: str) -> list[JobApplication]:
        return [a for a in self.applications if a.ticket_id == ticket_id]

    def invitation(self, invitation_id: str) -> JobInvitation:
        invitation = next((i for i in self.invitations if i.id == invitation_id), None)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        return invitation

    def invitations_for(self, ticket_id: str) -> list[JobInvitation]:
        return [i for i in self.invitations if i.ticket_id == ticket_id]

    # -- copy-on-write -----------------------------------------------------

    def add(self, field: str, entity: Entity) -> "Snapshot":
        current = getattr(self, field)
        if any(e.id == entity.id for e in current):
            raise ValueError(f"{field} already contains {entity.id}")
        return self.model_copy(update={field: current + (entity,)})

    def replace(self, field: str, entity: Entity) -> "Snapshot":
        current = getattr(self, field)
        if not any(e.id == entity.id for e in current):
            raise NotFoundError(field, entity.id)
        return self.model_copy(
            update={field: tuple(entity if e.id == entity.id else e for e in current)}
        )


@dataclass(frozen=True)
class Change:
    table: str
    op: Literal["insert", "update"]
    entity: Entity
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class ChangeSet:
    changes: tuple[Change, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)


def diff(before: Snapshot, after: Snapshot) -> ChangeSet:
    """
    Compute the inserts and updates that turn `before` into `after`.

    Entities are never deleted; a missing id is a programming error.
    """
    changes: list[Change] = []
    for field, table in TABLES.items():
        old_by_id = {e.id: e for e in getattr(before, field)}
        new_ids = set()
        for entity in getattr(after, field):
            new_ids.add(entity.id)
            old = old_by_id.get(entity.id)
            if old is None:
                changes.append(Change(table=table, op="insert", entity=entity))
            elif old != entity:
                changes.append(
                    Change(
                        table=table,
                        op="update",
                        entity=entity,
                        expected_version=old.version,
                    )
                )
        missing = set(old_by_id) - new_ids
        if missing:
            raise ValueError(f"{field} removed from snapshot: {sorted(missing)}")
    return ChangeSet(changes=tuple(changes))
