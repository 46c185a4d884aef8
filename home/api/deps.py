"""Dependencies for API endpoints."""

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from home.models.user import UserRole
from home.schemas.user import User
from home.services.chat import ChatAssistant
from home.services.workflow import Workflow
from home.utils.exceptions import PermissionDeniedError
from home.utils.jwt_manager import Identity, decode_identity
from home.utils.logging_config import logger

reusable_oauth2 = HTTPBearer(scheme_name="Bearer")


def get_workflow(request: Request) -> Workflow:
    workflow = getattr(request.app.state, "workflow", None)
    if workflow is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not ready.",
        )
    return workflow


def get_chat_assistant(request: Request) -> ChatAssistant:
    return request.app.state.chat


async def get_identity(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2),
) -> Identity:
    try:
        return decode_identity(token.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired."
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}"
        ) from e


async def get_current_user(
    identity: Identity = Depends(get_identity),
    workflow: Workflow = Depends(get_workflow),
) -> User:
    """The registered account for the token's email."""
    snapshot = await workflow.snapshot()
    user = snapshot.user_by_email(identity.email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found."
        )
    return user


def require_role(user: User, *roles: UserRole) -> None:
    if user.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise PermissionDeniedError(f"Only {allowed} accounts can do this")
