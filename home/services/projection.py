"""
Role-scoped views over a snapshot.

Everything here is a pure function of its inputs and is recomputed on every
request.
"""

from typing import Iterable, Optional

from home.models.connection import ConnectionStatus
from home.models.ticket import TicketStatus
from home.models.user import UserRole
from home.schemas.connection import Connection
from home.schemas.contractor import Contractor
from home.schemas.invitation import JobInvitation
from home.schemas.job import Job
from home.schemas.ticket import Ticket
from home.schemas.user import User
from home.utils.logging_config import logger


def resolve_contractor_id(
    user: Optional[User], contractors: Iterable[Contractor], allow_fuzzy: bool = True
) -> Optional[str]:
    """
    The contractor record a logged-in contractor acts as.

    Accounts created through sign-up carry an explicit `contractor_id`. Older
    accounts fall back to guessing: exact email, then name or email-prefix
    containment, then the first contractor in the roster. The guess can pick
    the wrong contractor and is only used when `allow_fuzzy` is set.
    """
    if user is None or user.role != UserRole.CONTRACTOR:
        return None
    if user.contractor_id:
        return user.contractor_id
    if not allow_fuzzy:
        return None

    roster = list(contractors)
    email = user.email.lower()
    for contractor in roster:
        if contractor.email and contractor.email.lower() == email:
            return contractor.id

    prefix = email.split("@")[0]
    for contractor in roster:
        name = contractor.name.lower()
        if (user.name and user.name.lower() in name) or (prefix and prefix in name):
            logger.warning(
                f"Resolved contractor {contractor.id} for {user.email} by name"
            )
            return contractor.id

    if roster:
        logger.warning(
            f"No contractor matches {user.email}; falling back to {roster[0].id}"
        )
        return roster[0].id
    return None


def connected_tenant_emails(
    landlord_email: str, connections: Iterable[Connection]
) -> set[str]:
    return {
        c.tenant_email
        for c in connections
        if c.status == ConnectionStatus.CONNECTED and c.landlord_email == landlord_email
    }


def landlords_for_ticket(
    ticket: Ticket, connections: Iterable[Connection]
) -> list[str]:
    """Every landlord connected to the ticket's tenant, in connection order."""
    if ticket.submitted_by_role != UserRole.TENANT:
        return []
    return [
        c.landlord_email
        for c in connections
        if c.tenant_email == ticket.submitted_by
        and c.status == ConnectionStatus.CONNECTED
    ]


def project_tickets(
    user: Optional[User],
    tickets: Iterable[Ticket],
    connections: Iterable[Connection],
    contractors: Iterable[Contractor] = (),
    allow_fuzzy: bool = True,
) -> list[Ticket]:
    if user is None:
        return []

    if user.role == UserRole.TENANT:
        return [
            t
            for t in tickets
            if t.submitted_by == user.email and t.submitted_by_role == UserRole.TENANT
        ]

    if user.role == UserRole.LANDLORD:
        tenants = connected_tenant_emails(user.email, connections)
        return [
            t
            for t in tickets
            if t.submitted_by_role == UserRole.TENANT and t.submitted_by in tenants
        ]

    contractor_id = resolve_contractor_id(user, contractors, allow_fuzzy)
    visible = []
    for t in tickets:
        mine = contractor_id is not None and (
            t.assigned_to == contractor_id or t.assigned_contractor == contractor_id
        )
        open_pool = t.assigned_to is None and t.status == TicketStatus.SUBMITTED
        if mine or open_pool:
            visible.append(t)
    return visible


def project_jobs(
    user: Optional[User],
    jobs: Iterable[Job],
    contractors: Iterable[Contractor] = (),
    allow_fuzzy: bool = True,
) -> list[Job]:
    contractor_id = resolve_contractor_id(user, contractors, allow_fuzzy)
    if contractor_id is None:
        return []
    return [j for j in jobs if j.contractor_id == contractor_id]


def project_invitations(
    user: Optional[User],
    invitations: Iterable[JobInvitation],
    contractors: Iterable[Contractor] = (),
    allow_fuzzy: bool = True,
) -> list[JobInvitation]:
    """Invitations a contractor received, or a landlord sent."""
    if user is None:
        return []
    if user.role == UserRole.LANDLORD:
        return [i for i in invitations if i.landlord_email == user.email]
    contractor_id = resolve_contractor_id(user, contractors, allow_fuzzy)
    if contractor_id is None:
        return []
    return [i for i in invitations if i.contractor_id == contractor_id]
