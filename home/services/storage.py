"""
Storage backends: load a Snapshot, commit a ChangeSet.

A commit is all-or-nothing. Every update is a compare-and-swap on
`(id, version)`; a version mismatch or a duplicate insert raises
StaleStateError and nothing from the change set is written.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy import JSON, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from supabase import AsyncClient, PostgrestAPIError

from home import models
from home.config.db import check_db_connection, create_engine_for, session_factory
from home.config.supabase import check_supabase_connection, supabase_admin
from home.schemas.application import JobApplication
from home.schemas.base import Entity
from home.schemas.connection import Connection
from home.schemas.contractor import Contractor
from home.schemas.invitation import JobInvitation
from home.schemas.job import Job
from home.schemas.snapshot import TABLES, Change, ChangeSet, Snapshot
from home.schemas.ticket import Ticket
from home.schemas.user import User
from home.settings import settings
from home.utils.exceptions import StaleStateError, StorageUnavailableError
from home.utils.logging_config import logger

LOCAL_FALLBACK = "local-fallback"

# Snapshot field -> (ORM model, entity schema)
ENTITY_TYPES: dict[str, tuple[type[models.BaseModel], type[Entity]]] = {
    "users": (models.User, User),
    "tickets": (models.Ticket, Ticket),
    "jobs": (models.Job, Job),
    "contractors": (models.Contractor, Contractor),
    "connections": (models.LandlordTenantConnection, Connection),
    "applications": (models.JobApplication, JobApplication),
    "invitations": (models.JobInvitation, JobInvitation),
}
MODEL_BY_TABLE = {TABLES[field]: model for field, (model, _) in ENTITY_TYPES.items()}

# Raised by the home_apply_changes function on a lost compare-and-swap.
SERIALIZATION_FAILURE = "40001"


class StorageBackend(ABC):
    name: str = "abstract"
    degraded: bool = False

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def load_snapshot(self) -> Snapshot: ...

    @abstractmethod
    async def commit(self, changes: ChangeSet) -> None: ...


def row_values(model: type[models.BaseModel], entity: Entity) -> dict[str, Any]:
    """Column values for `entity`; JSON columns get JSON-safe values."""
    python_values = entity.model_dump()
    json_values = entity.model_dump(mode="json")
    values = {}
    for column in model.__table__.columns:
        if column.name not in python_values:
            continue
        if isinstance(column.type, JSON):
            values[column.name] = json_values[column.name]
        else:
            values[column.name] = python_values[column.name]
    return values


class LocalStore(StorageBackend):
    """SQLAlchemy store; SQLite through aiosqlite unless DATABASE_URL says otherwise."""

    def __init__(self, url: str, name: str = "local"):
        self.url = url
        self.name = name
        self.degraded = name == LOCAL_FALLBACK
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> None:
        self._engine = create_engine_for(self.url)
        await check_db_connection(self._engine)
        async with self._engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)
        self._sessions = session_factory(self._engine)
        logger.info(f"Local store ready ({self.name})")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None

    def _session(self) -> AsyncSession:
        if self._sessions is None:
            raise StorageUnavailableError("Local store is not connected")
        return self._sessions()

    async def load_snapshot(self) -> Snapshot:
        collections = {}
        async with self._session() as session:
            for field, (model, schema) in ENTITY_TYPES.items():
                result = await session.execute(
                    select(model).order_by(model.created_at, model.id)
                )
                collections[field] = tuple(
                    schema.model_validate(row) for row in result.scalars().all()
                )
        return Snapshot(**collections)

    async def commit(self, changes: ChangeSet) -> None:
        if not changes:
            return
        async with self._session() as session:
            try:
                async with session.begin():
                    for change in changes.changes:
                        await self._apply(session, change)
            except IntegrityError as e:
                logger.warning(f"Commit rejected by a constraint: {e.orig}")
                raise StaleStateError("A record was created concurrently") from e
            except SQLAlchemyError as e:
                logger.error(f"Local commit failed: {e}", exc_info=True)
                raise

    async def _apply(self, session: AsyncSession, change: Change) -> None:
        model = MODEL_BY_TABLE[change.table]
        values = row_values(model, change.entity)
        if change.op == "insert":
            await session.execute(insert(model).values(**values))
            return

        result = await session.execute(
            update(model)
            .where(model.id == change.entity.id, model.version == change.expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StaleStateError(
                f"{change.table} {change.entity.id} changed since version "
                f"{change.expected_version}"
            )


class SupabaseStore(StorageBackend):
    """
    Supabase Postgres store. Reads tables through PostgREST and commits through
    the `home_apply_changes` function so the whole batch runs in one
    transaction.
    """

    name = "supabase"

    def __init__(self, client: Optional[AsyncClient] = None):
        self._client = client

    async def connect(self) -> None:
        if self._client is None:
            self._client = await supabase_admin()
        await check_supabase_connection(self._client)

    async def close(self) -> None:
        self._client = None

    def _require_client(self) -> AsyncClient:
        if self._client is None:
            raise StorageUnavailableError("Supabase store is not connected")
        return self._client

    async def load_snapshot(self) -> Snapshot:
        client = self._require_client()
        collections = {}
        for field, (_, schema) in ENTITY_TYPES.items():
            try:
                response = await client.table(TABLES[field]).select("*").execute()
            except PostgrestAPIError as e:
                logger.error(f"Failed to read {TABLES[field]}: {e}", exc_info=True)
                raise StorageUnavailableError(str(e)) from e
            collections[field] = tuple(schema.model_validate(row) for row in response.data)
        return Snapshot(**collections)

    async def commit(self, changes: ChangeSet) -> None:
        if not changes:
            return
        payload = [
            {
                "table": change.table,
                "op": change.op,
                "id": change.entity.id,
                "expected_version": change.expected_version,
                "row": change.entity.model_dump(mode="json"),
            }
            for change in changes.changes
        ]
        try:
            await self._require_client().rpc(
                "home_apply_changes", {"changes": payload}
            ).execute()
        except PostgrestAPIError as e:
            if e.code in (SERIALIZATION_FAILURE, "23505"):
                logger.warning(f"Supabase commit lost a version check: {e.message}")
                raise StaleStateError(e.message or "Concurrent update") from e
            logger.error(f"Supabase commit failed: {e}", exc_info=True)
            raise


async def select_backend() -> StorageBackend:
    """
    Connect the configured backend.

    When Supabase is configured but unreachable and ALLOW_LOCAL_FALLBACK is
    set, run on a local store in the degraded `local-fallback` mode instead of
    failing startup.
    """
    if settings.STORAGE_BACKEND == "local":
        backend = LocalStore(settings.DATABASE_URL)
        await backend.connect()
        return backend

    backend = SupabaseStore()
    try:
        await backend.connect()
        return backend
    except Exception as e:
        if not settings.ALLOW_LOCAL_FALLBACK:
            logger.error(f"Supabase unavailable and fallback disabled: {e}")
            raise StorageUnavailableError(str(e)) from e
        logger.warning(
            f"Supabase unavailable ({e}); running in {LOCAL_FALLBACK} mode on "
            f"{settings.FALLBACK_DATABASE_URL}"
        )

    fallback = LocalStore(settings.FALLBACK_DATABASE_URL, name=LOCAL_FALLBACK)
    await fallback.connect()
    return fallback
