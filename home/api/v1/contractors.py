"""API endpoints for the contractor roster."""

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow, require_role
from home.models.user import UserRole
from home.schemas.contractor import Contractor, ContractorServiceUpdate
from home.schemas.snapshot import Snapshot
from home.schemas.user import User
from home.services.lifecycle import update_contractor_service
from home.services.projection import resolve_contractor_id
from home.services.workflow import Workflow
from home.settings import settings
from home.utils.exceptions import PermissionDeniedError

router = APIRouter()


@router.get("", response_model=list[Contractor])
async def list_contractors(
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[Contractor]:
    snapshot = await workflow.snapshot()
    return list(snapshot.contractors)


@router.get("/{contractor_id}", response_model=Contractor)
async def read_contractor(
    contractor_id: str,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Contractor:
    snapshot = await workflow.snapshot()
    return snapshot.contractor(contractor_id)


@router.put("/me/service", response_model=Contractor)
async def update_service(
    body: ContractorServiceUpdate,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Contractor:
    """Replace the caller's specializations and service areas."""
    require_role(current_user, UserRole.CONTRACTOR)

    def command(snap: Snapshot, now):
        contractor_id = resolve_contractor_id(
            current_user, snap.contractors, settings.CONTRACTOR_FUZZY_RESOLUTION
        )
        if contractor_id is None:
            raise PermissionDeniedError("No contractor profile for this account")
        return update_contractor_service(
            snap, contractor_id, body.specialization, body.service_areas, now
        )

    return await workflow.run(command, label="update_contractor_service")
