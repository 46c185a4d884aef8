"""API endpoints for accounts."""

from fastapi import APIRouter, Depends

from home.api.deps import get_current_user, get_workflow
from home.schemas.user import TokenResponse, User, UserCreate
from home.services.lifecycle import register_user
from home.services.workflow import Workflow
from home.utils.jwt_manager import create_access_token

router = APIRouter()


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    summary="Create an account",
    description="Creates the user record and, for contractors, their contractor profile.",
)
async def register(
    draft: UserCreate, workflow: Workflow = Depends(get_workflow)
) -> TokenResponse:
    user = await workflow.run(
        lambda snap, now: register_user(snap, draft, now), label="register_user"
    )
    return TokenResponse(
        user=user, access_token=create_access_token(user.email, user.name)
    )


@router.get("/me", response_model=User)
async def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
