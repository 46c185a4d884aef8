"""API endpoints for contractor jobs."""

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow, require_role
from home.models.user import UserRole
from home.schemas.job import CompleteJobRequest, Job, RatingRequest, ScheduleResult
from home.schemas.snapshot import Snapshot
from home.schemas.ticket import ScheduleRequest
from home.schemas.user import User
from home.services import lifecycle
from home.services.projection import (
    landlords_for_ticket,
    project_jobs,
    resolve_contractor_id,
)
from home.services.scheduling import find_schedule_conflicts
from home.services.workflow import Workflow
from home.settings import settings
from home.utils.exceptions import PermissionDeniedError

router = APIRouter()


def require_job_contractor(snapshot: Snapshot, user: User, job: Job) -> None:
    require_role(user, UserRole.CONTRACTOR)
    contractor_id = resolve_contractor_id(
        user, snapshot.contractors, settings.CONTRACTOR_FUZZY_RESOLUTION
    )
    if contractor_id != job.contractor_id:
        raise PermissionDeniedError("This job is assigned to another contractor")


@router.get("", response_model=list[Job])
async def list_jobs(
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[Job]:
    snapshot = await workflow.snapshot()
    return project_jobs(
        current_user,
        snapshot.jobs,
        snapshot.contractors,
        settings.CONTRACTOR_FUZZY_RESOLUTION,
    )


@router.post("/{job_id}/schedule", response_model=ScheduleResult)
async def schedule(
    job_id: str,
    body: ScheduleRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> ScheduleResult:
    """Schedule or reschedule; same-day bookings come back as conflicts."""

    def command(snap: Snapshot, now):
        require_job_contractor(snap, current_user, snap.job(job_id))
        nxt, job = lifecycle.schedule_job(snap, job_id, body.date, body.time, now)
        return nxt, (nxt.ticket(job.ticket_id), job, nxt.jobs)

    ticket, job, jobs = await workflow.run(command, label="schedule_job")
    conflicts = find_schedule_conflicts(jobs, job.contractor_id, job.scheduled_date, job.id)
    return ScheduleResult(ticket=ticket, job=job, conflicts=conflicts)


@router.post("/{job_id}/complete", response_model=Job)
async def complete(
    job_id: str,
    body: CompleteJobRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Job:
    def command(snap: Snapshot, now):
        require_job_contractor(snap, current_user, snap.job(job_id))
        return lifecycle.complete_job(snap, job_id, now, body.photos, body.notes)

    return await workflow.run(command, label="complete_job")


@router.post("/{job_id}/rating", response_model=Job)
async def rate(
    job_id: str,
    body: RatingRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Job:
    """The tenant who submitted the ticket, or their landlord, rates the work."""

    def command(snap: Snapshot, now):
        ticket = snap.ticket(snap.job(job_id).ticket_id)
        landlords = landlords_for_ticket(ticket, snap.connections)
        if current_user.email != ticket.submitted_by and current_user.email not in landlords:
            raise PermissionDeniedError("Only the tenant or their landlord can rate this job")
        return lifecycle.add_rating(snap, job_id, body.rating, now)

    return await workflow.run(command, label="add_rating")
