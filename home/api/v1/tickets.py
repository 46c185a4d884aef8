"""API endpoints for maintenance tickets."""

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow, require_role
from home.models.user import UserRole
from home.schemas.application import JobApplication
from home.schemas.contractor import ContractorMatch
from home.schemas.invitation import InviteRequest, JobInvitation
from home.schemas.job import ScheduleResult
from home.schemas.snapshot import Snapshot
from home.schemas.ticket import (
    AssignRequest,
    Message,
    MessageCreate,
    ScheduleRequest,
    Ticket,
    TicketDraft,
)
from home.schemas.user import User
from home.services import lifecycle
from home.services.matching import rank_with_distance
from home.services.projection import (
    landlords_for_ticket,
    project_tickets,
    resolve_contractor_id,
)
from home.services.scheduling import find_schedule_conflicts
from home.services.workflow import Workflow
from home.settings import settings
from home.utils.exceptions import NotFoundError, PermissionDeniedError
from home.utils.logging_config import logger

router = APIRouter()


def visible_ticket(snapshot: Snapshot, user: User, ticket_id: str) -> Ticket:
    """The ticket if `user` may see it; NotFoundError otherwise."""
    ticket = snapshot.ticket(ticket_id)
    visible = project_tickets(
        user,
        [ticket],
        snapshot.connections,
        snapshot.contractors,
        settings.CONTRACTOR_FUZZY_RESOLUTION,
    )
    if not visible:
        raise NotFoundError("Ticket", ticket_id)
    return ticket


def require_landlord_of(snapshot: Snapshot, user: User, ticket: Ticket) -> None:
    require_role(user, UserRole.LANDLORD)
    if user.email not in landlords_for_ticket(ticket, snapshot.connections):
        raise PermissionDeniedError("Ticket belongs to a tenant you are not connected to")


@router.post("", status_code=201, response_model=Ticket)
async def submit(
    draft: TicketDraft,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    """Tenants report issues; their connected landlords see them in the list."""
    require_role(current_user, UserRole.TENANT)
    return await workflow.run(
        lambda snap, now: lifecycle.submit_ticket(
            snap,
            draft,
            current_user.email,
            UserRole.TENANT,
            now,
            with_diagnosis=settings.AI_DIAGNOSIS_ENABLED,
        ),
        label="submit_ticket",
    )


@router.get("", response_model=list[Ticket])
async def list_tickets(
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[Ticket]:
    snapshot = await workflow.snapshot()
    return project_tickets(
        current_user,
        snapshot.tickets,
        snapshot.connections,
        snapshot.contractors,
        settings.CONTRACTOR_FUZZY_RESOLUTION,
    )


@router.get("/{ticket_id}", response_model=Ticket)
async def read_ticket(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    snapshot = await workflow.snapshot()
    return visible_ticket(snapshot, current_user, ticket_id)


@router.get("/{ticket_id}/matches", response_model=list[ContractorMatch])
async def matching_contractors(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[ContractorMatch]:
    """Contractors serving the tenant's city for this category, best rated first."""
    snapshot = await workflow.snapshot()
    ticket = visible_ticket(snapshot, current_user, ticket_id)
    tenant = snapshot.user_by_email(ticket.submitted_by)
    if tenant is None:
        logger.warning(f"Submitter {ticket.submitted_by} of {ticket_id} has no account")
        return []
    return rank_with_distance(ticket, tenant.city, tenant.state, snapshot.contractors)


@router.post("/{ticket_id}/assign", response_model=Ticket)
async def assign(
    ticket_id: str,
    body: AssignRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    def command(snap: Snapshot, now):
        require_landlord_of(snap, current_user, snap.ticket(ticket_id))
        return lifecycle.assign_contractor(snap, ticket_id, body.contractor_id, now)

    return await workflow.run(command, label="assign_contractor")


@router.post("/{ticket_id}/schedule", response_model=ScheduleResult)
async def schedule(
    ticket_id: str,
    body: ScheduleRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> ScheduleResult:
    def command(snap: Snapshot, now):
        require_landlord_of(snap, current_user, snap.ticket(ticket_id))
        nxt, ticket = lifecycle.schedule_ticket(snap, ticket_id, body.date, body.time, now)
        return nxt, (ticket, nxt.job_for_ticket(ticket_id), nxt.jobs)

    ticket, job, jobs = await workflow.run(command, label="schedule_ticket")
    conflicts = []
    if job is not None:
        conflicts = find_schedule_conflicts(
            jobs, job.contractor_id, job.scheduled_date, job.id
        )
    return ScheduleResult(ticket=ticket, job=job, conflicts=conflicts)


@router.post("/{ticket_id}/messages", status_code=201, response_model=Ticket)
async def post_message(
    ticket_id: str,
    body: MessageCreate,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    def command(snap: Snapshot, now):
        visible_ticket(snap, current_user, ticket_id)
        message = Message(
            text=body.text,
            sender_email=current_user.email,
            sender_name=current_user.name,
            timestamp=now,
        )
        return lifecycle.add_message(snap, ticket_id, message, now)

    return await workflow.run(command, label="add_message")


@router.post("/{ticket_id}/viewed", response_model=Ticket)
async def mark_viewed(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    def command(snap: Snapshot, now):
        require_landlord_of(snap, current_user, snap.ticket(ticket_id))
        return lifecycle.mark_viewed_by_landlord(snap, ticket_id, now)

    return await workflow.run(command, label="mark_viewed_by_landlord")


@router.post("/{ticket_id}/applications", status_code=201, response_model=JobApplication)
async def apply(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> JobApplication:
    require_role(current_user, UserRole.CONTRACTOR)

    def command(snap: Snapshot, now):
        contractor_id = resolve_contractor_id(
            current_user, snap.contractors, settings.CONTRACTOR_FUZZY_RESOLUTION
        )
        if contractor_id is None:
            raise PermissionDeniedError("No contractor profile for this account")
        return lifecycle.apply_to_job(
            snap, ticket_id, contractor_id, current_user.name, current_user.email, now
        )

    return await workflow.run(command, label="apply_to_job")


@router.get("/{ticket_id}/applications", response_model=list[JobApplication])
async def list_applications(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[JobApplication]:
    snapshot = await workflow.snapshot()
    require_landlord_of(snapshot, current_user, snapshot.ticket(ticket_id))
    return snapshot.applications_for(ticket_id)


@router.post("/{ticket_id}/invitations", status_code=201, response_model=JobInvitation)
async def invite(
    ticket_id: str,
    body: InviteRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> JobInvitation:
    """Offer the ticket to a contractor; it is assigned once they accept."""

    def command(snap: Snapshot, now):
        require_landlord_of(snap, current_user, snap.ticket(ticket_id))
        return lifecycle.invite_contractor(
            snap, ticket_id, body.contractor_id, current_user.email, now
        )

    return await workflow.run(command, label="invite_contractor")


@router.get("/{ticket_id}/invitations", response_model=list[JobInvitation])
async def list_invitations(
    ticket_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[JobInvitation]:
    snapshot = await workflow.snapshot()
    require_landlord_of(snapshot, current_user, snapshot.ticket(ticket_id))
    return snapshot.invitations_for(ticket_id)
