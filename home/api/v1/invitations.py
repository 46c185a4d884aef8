"""API endpoints for answering job invitations."""

from typing import Optional

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow, require_role
from home.models.user import UserRole
from home.schemas.invitation import JobInvitation
from home.schemas.snapshot import Snapshot
from home.schemas.ticket import Ticket
from home.schemas.user import User
from home.services import lifecycle
from home.services.projection import project_invitations, resolve_contractor_id
from home.services.workflow import Workflow
from home.settings import settings

router = APIRouter()


def _acting_contractor(snapshot: Snapshot, user: User) -> Optional[str]:
    require_role(user, UserRole.CONTRACTOR)
    return resolve_contractor_id(
        user, snapshot.contractors, settings.CONTRACTOR_FUZZY_RESOLUTION
    )


@router.get("", response_model=list[JobInvitation])
async def list_invitations(
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[JobInvitation]:
    snapshot = await workflow.snapshot()
    return project_invitations(
        current_user,
        snapshot.invitations,
        snapshot.contractors,
        settings.CONTRACTOR_FUZZY_RESOLUTION,
    )


@router.post("/{invitation_id}/accept", response_model=Ticket)
async def accept(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Ticket:
    """Take the job: the ticket is assigned and its job created."""

    def command(snap: Snapshot, now):
        contractor_id = _acting_contractor(snap, current_user)
        return lifecycle.accept_invitation(snap, invitation_id, contractor_id, now)

    return await workflow.run(command, label="accept_invitation")


@router.post("/{invitation_id}/decline", response_model=JobInvitation)
async def decline(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> JobInvitation:
    def command(snap: Snapshot, now):
        contractor_id = _acting_contractor(snap, current_user)
        return lifecycle.decline_invitation(snap, invitation_id, contractor_id, now)

    return await workflow.run(command, label="decline_invitation")
