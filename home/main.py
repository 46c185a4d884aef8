from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from home.api.v1 import chat as chat_router
from home.api.v1 import connections as connections_router
from home.api.v1 import contractors as contractors_router
from home.api.v1 import invitations as invitations_router
from home.api.v1 import jobs as jobs_router
from home.api.v1 import tickets as tickets_router
from home.api.v1 import users as users_router
from home.config.redis import create_redis_client
from home.services.chat import ChatAssistant
from home.services.events import ChangePublisher
from home.services.storage import select_backend
from home.services.workflow import Workflow
from home.utils.exceptions import (
    HomeError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StaleStateError,
    StorageUnavailableError,
    ValidationError,
)
from home.utils.logging_config import logger

ERROR_STATUS = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (PermissionDeniedError, 403),
    (StaleStateError, 409),
    (StorageUnavailableError, 503),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    backend = await select_backend()
    publisher = ChangePublisher(await create_redis_client())
    app.state.backend = backend
    app.state.workflow = Workflow(backend, publisher)
    app.state.chat = ChatAssistant()
    logger.info(
        f"HOME API ready on {backend.name} storage"
        + (" (degraded)" if backend.degraded else "")
    )

    yield

    await publisher.close()
    await backend.close()


app = FastAPI(
    lifespan=lifespan,
    title="HOME",
    description="Housing Operations & Maintenance Engine: tickets, contractors and scheduling",
)


@app.exception_handler(HomeError)
async def home_error_handler(request: Request, exc: HomeError) -> JSONResponse:
    status_code = next(
        (code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Include routers
app.include_router(users_router.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(tickets_router.router, prefix="/api/v1/tickets", tags=["Tickets"])
app.include_router(jobs_router.router, prefix="/api/v1/jobs", tags=["Jobs"])
app.include_router(
    contractors_router.router, prefix="/api/v1/contractors", tags=["Contractors"]
)
app.include_router(
    connections_router.router, prefix="/api/v1/connections", tags=["Connections"]
)
app.include_router(
    invitations_router.router, prefix="/api/v1/invitations", tags=["Invitations"]
)
app.include_router(chat_router.router, prefix="/api/v1/chat", tags=["Chat"])


def storage_status(request: Request) -> dict:
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        return {"storage": "unavailable", "degraded": True}
    return {"storage": backend.name, "degraded": backend.degraded}


@app.get("/")
def read_root(request: Request) -> dict:
    return {"message": "Hello from HOME API!", **storage_status(request)}


@app.get("/health")
def health(request: Request) -> dict:
    status = storage_status(request)
    return {"status": "degraded" if status["degraded"] else "ok", **status}
