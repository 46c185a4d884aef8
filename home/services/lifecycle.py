"""
Ticket lifecycle commands.

Every command takes the current Snapshot, validates its preconditions against
it, and returns the next Snapshot together with the entity the caller cares
about. Nothing is written here: the workflow service commits the difference.

    SUBMITTED --assign--> ASSIGNED --schedule--> SCHEDULED --complete--> COMPLETED

A landlord either assigns directly or invites a contractor, whose acceptance
performs the same assignment.
"""

from datetime import datetime
from typing import Iterable, Optional

from uuid_extensions import uuid7str

from home.models.application import ApplicationStatus
from home.models.connection import ConnectionStatus
from home.models.invitation import InvitationStatus
from home.models.job import JOB_COMPLETED, JOB_SCHEDULED
from home.models.ticket import TicketStatus
from home.models.user import UserRole
from home.schemas.application import JobApplication
from home.schemas.connection import Connection, connection_id
from home.schemas.contractor import Contractor
from home.schemas.invitation import JobInvitation
from home.schemas.job import Job
from home.schemas.snapshot import Snapshot
from home.schemas.ticket import Message, Ticket, TicketDraft
from home.schemas.user import User, UserCreate
from home.services.diagnosis import diagnose
from home.services.scheduling import parse_date, to_24_hour
from home.utils.exceptions import (
    AlreadyAssignedError,
    AlreadyRatedError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from home.utils.logging_config import logger

MIN_RATING = 0.0
MAX_RATING = 5.0


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


# -- tickets -----------------------------------------------------------------


def submit_ticket(
    snapshot: Snapshot,
    draft: TicketDraft,
    submitted_by: str,
    submitted_by_role: UserRole,
    now: datetime,
    with_diagnosis: bool = True,
) -> tuple[Snapshot, Ticket]:
    title = _require(draft.title, "title")
    description = _require(draft.description, "description")
    category = _require(draft.category, "category")
    submitter = _require(submitted_by, "submitted_by")

    ai_diagnosis = draft.ai_diagnosis
    if ai_diagnosis is None and with_diagnosis:
        ai_diagnosis = diagnose(title, description, category).render()

    ticket = Ticket(
        title=title,
        description=description,
        category=category,
        priority=draft.priority,
        status=TicketStatus.SUBMITTED,
        submitted_by=submitter,
        submitted_by_role=submitted_by_role,
        ai_diagnosis=ai_diagnosis,
        photos=tuple(draft.photos),
        created_at=now,
        updated_at=now,
    )
    logger.info(f"Ticket {ticket.id} submitted by {submitter} ({category})")
    return snapshot.add("tickets", ticket), ticket


def add_message(
    snapshot: Snapshot, ticket_id: str, message: Message, now: datetime
) -> tuple[Snapshot, Ticket]:
    ticket = snapshot.ticket(ticket_id)
    updated = ticket.touch(now, messages=ticket.messages + (message,))
    return snapshot.replace("tickets", updated), updated


def mark_viewed_by_landlord(
    snapshot: Snapshot, ticket_id: str, now: datetime
) -> tuple[Snapshot, Ticket]:
    ticket = snapshot.ticket(ticket_id)
    if ticket.status != TicketStatus.SUBMITTED or ticket.viewed_by_landlord:
        return snapshot, ticket
    updated = ticket.touch(now, viewed_by_landlord=True)
    return snapshot.replace("tickets", updated), updated


# -- applications and assignment -----------------------------------------------


def apply_to_job(
    snapshot: Snapshot,
    ticket_id: str,
    contractor_id: str,
    contractor_name: Optional[str],
    contractor_email: Optional[str],
    now: datetime,
) -> tuple[Snapshot, JobApplication]:
    ticket = snapshot.ticket(ticket_id)
    contractor = snapshot.contractor(contractor_id)
    if ticket.assigned_to is not None:
        raise AlreadyAssignedError(f"Ticket {ticket_id} is already assigned")
    if ticket.status != TicketStatus.SUBMITTED:
        raise InvalidTransitionError(
            f"Ticket {ticket_id} is {ticket.status.value}, not open for applications"
        )
    if any(a.contractor_id == contractor_id for a in snapshot.applications_for(ticket_id)):
        raise ValidationError(
            f"Contractor {contractor_id} already applied to ticket {ticket_id}"
        )

    application = JobApplication(
        ticket_id=ticket_id,
        contractor_id=contractor_id,
        contractor_name=contractor_name or contractor.name,
        contractor_email=contractor_email or contractor.email or "",
        applied_at=now,
        created_at=now,
        updated_at=now,
    )
    return snapshot.add("applications", application), application


def assign_contractor(
    snapshot: Snapshot, ticket_id: str, contractor_id: str, now: datetime
) -> tuple[Snapshot, Ticket]:
    """
    Hand an open ticket to a contractor.

    Accepts that contractor's pending application and invitation for the
    ticket; every other pending application or invitation for the same ticket
    is turned down. Creates the ticket's job unless one already exists.
    """
    ticket = snapshot.ticket(ticket_id)
    if ticket.assigned_to is not None:
        raise AlreadyAssignedError(
            f"Ticket {ticket_id} is already assigned to {ticket.assigned_to}"
        )
    if ticket.status != TicketStatus.SUBMITTED:
        raise InvalidTransitionError(
            f"Ticket {ticket_id} is {ticket.status.value}, expected submitted"
        )
    contractor = snapshot.contractor(contractor_id)

    assigned = ticket.touch(
        now,
        assigned_to=contractor.id,
        assigned_contractor=contractor.id,
        status=TicketStatus.ASSIGNED,
        viewed_by_landlord=True,
    )
    nxt = snapshot.replace("tickets", assigned)

    for application in snapshot.applications_for(ticket_id):
        if application.status != ApplicationStatus.PENDING:
            continue
        if application.contractor_id == contractor.id:
            status = ApplicationStatus.ACCEPTED
        else:
            status = ApplicationStatus.REJECTED
        nxt = nxt.replace("applications", application.touch(now, status=status))

    for invitation in snapshot.invitations_for(ticket_id):
        if invitation.status != InvitationStatus.PENDING:
            continue
        if invitation.contractor_id == contractor.id:
            status = InvitationStatus.ACCEPTED
        else:
            status = InvitationStatus.DECLINED
        nxt = nxt.replace("invitations", invitation.touch(now, status=status))

    if snapshot.job_for_ticket(ticket_id) is None:
        job = Job(
            ticket_id=ticket_id,
            contractor_id=contractor.id,
            property_address=ticket.title,
            issue_type=ticket.category,
            date=now.date().isoformat(),
            created_at=now,
            updated_at=now,
        )
        nxt = nxt.add("jobs", job)
        logger.info(f"Job {job.id} created for ticket {ticket_id}")

    logger.info(f"Ticket {ticket_id} assigned to contractor {contractor.id}")
    return nxt, assigned


def invite_contractor(
    snapshot: Snapshot,
    ticket_id: str,
    contractor_id: str,
    landlord_email: str,
    now: datetime,
) -> tuple[Snapshot, JobInvitation]:
    """
    Offer an open ticket to a contractor. Nothing is assigned until the
    contractor accepts; a declined invitation can be sent again.
    """
    ticket = snapshot.ticket(ticket_id)
    if ticket.assigned_to is not None:
        raise AlreadyAssignedError(f"Ticket {ticket_id} is already assigned")
    if ticket.status != TicketStatus.SUBMITTED:
        raise InvalidTransitionError(
            f"Ticket {ticket_id} is {ticket.status.value}, not open for invitations"
        )
    contractor = snapshot.contractor(contractor_id)
    if not contractor.email:
        raise ValidationError(f"Contractor {contractor_id} has no email to invite")
    landlord = _require(landlord_email, "landlord_email").lower()

    existing = next(
        (i for i in snapshot.invitations_for(ticket_id) if i.contractor_id == contractor_id),
        None,
    )
    if existing is None:
        invitation = JobInvitation(
            ticket_id=ticket_id,
            contractor_id=contractor_id,
            contractor_email=contractor.email.lower(),
            landlord_email=landlord,
            invited_at=now,
            created_at=now,
            updated_at=now,
        )
        nxt = snapshot.add("invitations", invitation)
    elif existing.status == InvitationStatus.DECLINED:
        invitation = existing.touch(
            now,
            status=InvitationStatus.PENDING,
            landlord_email=landlord,
            invited_at=now,
        )
        nxt = snapshot.replace("invitations", invitation)
    else:
        raise ValidationError(
            f"Contractor {contractor_id} is already invited to ticket {ticket_id}"
        )

    # An invited ticket is no longer waiting on the landlord.
    nxt, _ = mark_viewed_by_landlord(nxt, ticket_id, now)
    logger.info(f"Contractor {contractor_id} invited to ticket {ticket_id} by {landlord}")
    return nxt, invitation


def _pending_invitation(
    snapshot: Snapshot, invitation_id: str, contractor_id: Optional[str]
) -> JobInvitation:
    invitation = snapshot.invitation(invitation_id)
    if invitation.contractor_id != contractor_id:
        raise PermissionDeniedError("This invitation was sent to another contractor")
    if invitation.status != InvitationStatus.PENDING:
        raise InvalidTransitionError(
            f"Invitation {invitation_id} is already {invitation.status.value}"
        )
    return invitation


def accept_invitation(
    snapshot: Snapshot, invitation_id: str, contractor_id: Optional[str], now: datetime
) -> tuple[Snapshot, Ticket]:
    """Accepting assigns the ticket exactly as `assign_contractor` does."""
    invitation = _pending_invitation(snapshot, invitation_id, contractor_id)
    return assign_contractor(snapshot, invitation.ticket_id, invitation.contractor_id, now)


def decline_invitation(
    snapshot: Snapshot, invitation_id: str, contractor_id: Optional[str], now: datetime
) -> tuple[Snapshot, JobInvitation]:
    invitation = _pending_invitation(snapshot, invitation_id, contractor_id)
    declined = invitation.touch(now, status=InvitationStatus.DECLINED)
    logger.info(f"Invitation {invitation_id} declined by {contractor_id}")
    return snapshot.replace("invitations", declined), declined


# -- scheduling and completion ---------------------------------------------------


def schedule_ticket(
    snapshot: Snapshot, ticket_id: str, date: str, time: str, now: datetime
) -> tuple[Snapshot, Ticket]:
    """
    Set or move the appointment. Valid from ASSIGNED, and again from
    SCHEDULED to change the date or time. The job mirrors the schedule.
    """
    ticket = snapshot.ticket(ticket_id)
    if ticket.status not in (TicketStatus.ASSIGNED, TicketStatus.SCHEDULED):
        raise InvalidTransitionError(
            f"Ticket {ticket_id} is {ticket.status.value}, cannot be scheduled"
        )
    day = parse_date(date).isoformat()
    hhmm = to_24_hour(time)

    scheduled = ticket.touch(
        now, status=TicketStatus.SCHEDULED, scheduled_date=f"{day} {hhmm}"
    )
    nxt = snapshot.replace("tickets", scheduled)

    job = snapshot.job_for_ticket(ticket_id)
    if job is not None:
        nxt = nxt.replace(
            "jobs",
            job.touch(now, scheduled_date=day, scheduled_time=hhmm, status=JOB_SCHEDULED),
        )
    else:
        logger.warning(f"Ticket {ticket_id} scheduled without a job record")
    return nxt, scheduled


def schedule_job(
    snapshot: Snapshot, job_id: str, date: str, time: str, now: datetime
) -> tuple[Snapshot, Job]:
    job = snapshot.job(job_id)
    nxt, _ = schedule_ticket(snapshot, job.ticket_id, date, time, now)
    return nxt, nxt.job(job_id)


def complete_job(
    snapshot: Snapshot,
    job_id: str,
    now: datetime,
    photos: Iterable[str] = (),
    notes: Optional[str] = None,
) -> tuple[Snapshot, Job]:
    """Complete the job and its ticket together; the ticket must be SCHEDULED."""
    job = snapshot.job(job_id)
    ticket = snapshot.ticket(job.ticket_id)
    if ticket.status != TicketStatus.SCHEDULED:
        raise InvalidTransitionError(
            f"Ticket {ticket.id} is {ticket.status.value}, expected scheduled"
        )

    completed_job = job.touch(
        now,
        status=JOB_COMPLETED,
        completion_photos=tuple(photos),
        completion_notes=notes,
    )
    completed_ticket = ticket.touch(
        now, status=TicketStatus.COMPLETED, completed_date=now.date().isoformat()
    )
    nxt = snapshot.replace("jobs", completed_job).replace("tickets", completed_ticket)

    contractor = snapshot.find_contractor(job.contractor_id)
    if contractor is not None:
        nxt = nxt.replace(
            "contractors",
            contractor.touch(now, completed_jobs=contractor.completed_jobs + 1),
        )
    logger.info(f"Job {job_id} completed; ticket {ticket.id} closed")
    return nxt, completed_job


def add_rating(
    snapshot: Snapshot, job_id: str, rating: float, now: datetime
) -> tuple[Snapshot, Job]:
    """
    Rate a completed job once. The contractor's rating becomes the mean of
    all of their rated jobs.
    """
    if not MIN_RATING < rating <= MAX_RATING:
        raise ValidationError(f"Rating must be in ({MIN_RATING}, {MAX_RATING}]")
    job = snapshot.job(job_id)
    ticket = snapshot.ticket(job.ticket_id)
    if ticket.status != TicketStatus.COMPLETED:
        raise InvalidTransitionError(
            f"Ticket {ticket.id} is {ticket.status.value}, only completed work can be rated"
        )
    if ticket.rating is not None or job.rating is not None:
        raise AlreadyRatedError(f"Ticket {ticket.id} has already been rated")

    rated_job = job.touch(now, rating=float(rating))
    nxt = snapshot.replace("jobs", rated_job).replace(
        "tickets", ticket.touch(now, rating=float(rating))
    )

    contractor = snapshot.find_contractor(job.contractor_id)
    if contractor is None:
        logger.error(f"Contractor {job.contractor_id} for job {job_id} not found")
        return nxt, rated_job

    ratings = [
        j.rating
        for j in nxt.jobs
        if j.contractor_id == contractor.id and j.rating is not None
    ] or [float(rating)]
    average = sum(ratings) / len(ratings)
    nxt = nxt.replace("contractors", contractor.touch(now, rating=average))
    logger.info(
        f"Contractor {contractor.id} rating {contractor.rating:.2f} -> {average:.2f} "
        f"from {len(ratings)} ratings"
    )
    return nxt, rated_job


# -- contractors and accounts ----------------------------------------------------


def update_contractor_service(
    snapshot: Snapshot,
    contractor_id: str,
    specialization: Iterable[str],
    service_areas: dict[str, Iterable[str]],
    now: datetime,
) -> tuple[Snapshot, Contractor]:
    contractor = snapshot.contractor(contractor_id)
    categories = tuple(s.strip() for s in specialization if s and s.strip())
    areas = {
        state.strip(): tuple(c.strip() for c in cities if c and c.strip())
        for state, cities in service_areas.items()
        if state and state.strip()
    }
    updated = contractor.touch(now, specialization=categories, service_areas=areas)
    return snapshot.replace("contractors", updated), updated


def contractor_id_for_email(email: str) -> str:
    return "contractor-" + email.lower().replace("@", "-").replace(".", "-")


def register_user(
    snapshot: Snapshot, draft: UserCreate, now: datetime
) -> tuple[Snapshot, User]:
    """Create an account; contractors also get a roster entry linked by id."""
    email = str(draft.email).strip().lower()
    if snapshot.user_by_email(email) is not None:
        raise ValidationError(f"{email} is already registered")

    contractor_id = None
    nxt = snapshot
    if draft.role == UserRole.CONTRACTOR:
        contractor_id = contractor_id_for_email(email)
        existing = snapshot.find_contractor(contractor_id)
        if existing is not None and (existing.email or "").lower() != email:
            # Distinct addresses can derive the same id ("a.b@x.com", "a-b@x.com").
            logger.warning(
                f"Contractor id {contractor_id} belongs to {existing.email}; "
                f"issuing a new id for {email}"
            )
            contractor_id = f"contractor-{uuid7str()}"
            existing = None
        if existing is None:
            contractor = Contractor(
                id=contractor_id,
                name=draft.name,
                company=draft.company_name or draft.name,
                email=email,
                city=draft.city,
                state=draft.state,
                created_at=now,
                updated_at=now,
            )
            nxt = nxt.add("contractors", contractor)

    user = User(
        email=email,
        name=draft.name,
        role=draft.role,
        address=draft.address,
        city=draft.city,
        state=draft.state,
        company_name=draft.company_name,
        contractor_id=contractor_id,
        created_at=now,
        updated_at=now,
    )
    return nxt.add("users", user), user


# -- landlord-tenant connections ---------------------------------------------------


def request_connection(
    snapshot: Snapshot, landlord_email: str, tenant_email: str, now: datetime
) -> tuple[Snapshot, Connection]:
    landlord = _require(landlord_email, "landlord_email").lower()
    tenant = _require(tenant_email, "tenant_email").lower()
    existing = snapshot.find_connection(connection_id(landlord, tenant))

    if existing is None:
        connection = Connection(
            id=connection_id(landlord, tenant),
            landlord_email=landlord,
            tenant_email=tenant,
            requested_by=landlord,
            requested_at=now,
            created_at=now,
            updated_at=now,
        )
        return snapshot.add("connections", connection), connection

    if existing.status != ConnectionStatus.REJECTED:
        raise ValidationError(
            f"Connection with {tenant} is already {existing.status.value}"
        )
    renewed = existing.touch(
        now,
        status=ConnectionStatus.PENDING,
        requested_by=landlord,
        requested_at=now,
        confirmed_at=None,
    )
    return snapshot.replace("connections", renewed), renewed


def respond_to_connection(
    snapshot: Snapshot,
    target_id: str,
    tenant_email: str,
    accept: bool,
    now: datetime,
) -> tuple[Snapshot, Connection]:
    connection = snapshot.find_connection(target_id)
    if connection is None:
        raise NotFoundError("Connection", target_id)
    if connection.tenant_email != tenant_email.strip().lower():
        raise PermissionDeniedError("Only the invited tenant can answer this request")
    if connection.status != ConnectionStatus.PENDING:
        raise InvalidTransitionError(
            f"Connection {connection.id} is already {connection.status.value}"
        )

    if accept:
        updated = connection.touch(
            now, status=ConnectionStatus.CONNECTED, confirmed_at=now
        )
    else:
        updated = connection.touch(now, status=ConnectionStatus.REJECTED)
    return snapshot.replace("connections", updated), updated
