"""API endpoints for landlord-tenant connections."""

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow, require_role
from home.models.user import UserRole
from home.schemas.connection import Connection, ConnectionRequest, ConnectionResponse
from home.schemas.user import User
from home.services.lifecycle import request_connection, respond_to_connection
from home.services.workflow import Workflow

router = APIRouter()


@router.post("", status_code=201, response_model=Connection)
async def create_connection(
    body: ConnectionRequest,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Connection:
    require_role(current_user, UserRole.LANDLORD)
    return await workflow.run(
        lambda snap, now: request_connection(
            snap, current_user.email, str(body.tenant_email), now
        ),
        label="request_connection",
    )


@router.get("", response_model=list[Connection])
async def list_connections(
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> list[Connection]:
    snapshot = await workflow.snapshot()
    return [
        c
        for c in snapshot.connections
        if current_user.email in (c.landlord_email, c.tenant_email)
    ]


@router.post("/{connection_id}/respond", response_model=Connection)
async def respond(
    connection_id: str,
    body: ConnectionResponse,
    current_user: User = Depends(get_current_user),
    workflow: Workflow = Depends(get_workflow),
) -> Connection:
    require_role(current_user, UserRole.TENANT)
    return await workflow.run(
        lambda snap, now: respond_to_connection(
            snap, connection_id, current_user.email, body.accept, now
        ),
        label="respond_to_connection",
    )
