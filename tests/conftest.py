import os
import sys
from datetime import datetime, timezone
from pathlib import Path

# Bootstrap to ensure tests can import home modules without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; pin them before anything imports home.
os.environ["STORAGE_BACKEND"] = "local"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"
os.environ["ALLOW_LOCAL_FALLBACK"] = "true"
os.environ["AI_DIAGNOSIS_ENABLED"] = "true"
for var in ("REDIS_URL", "GOOGLE_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_KEY"):
    os.environ.pop(var, None)


def pytest_configure(config):
    config.pluginmanager.unregister(name="anyio")


import pytest

from home.models.connection import ConnectionStatus
from home.models.user import UserRole
from home.schemas.connection import Connection, connection_id
from home.schemas.contractor import Contractor
from home.schemas.snapshot import Snapshot
from home.schemas.ticket import TicketDraft
from home.schemas.user import User
from home.services import lifecycle

TENANT = "tenant@example.com"
LANDLORD = "landlord@example.com"
PLUMBER = "plumber@example.com"


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def contractors() -> tuple[Contractor, ...]:
    return (
        Contractor(
            id="contractor-plumber",
            name="Pat Plumber",
            company="Pat's Pipes",
            email=PLUMBER,
            city="Springfield",
            state="Illinois",
            specialization=("Plumbing",),
            service_areas={"Illinois": ("Springfield", "Chicago")},
            rating=4.5,
        ),
        Contractor(
            id="contractor-sparky",
            name="Sam Sparks",
            company="Sparks Electric",
            email="sparks@example.com",
            city="Chicago",
            state="Illinois",
            specialization=("Electrical", "Appliances"),
            service_areas={"Illinois": ("Chicago",)},
            rating=4.8,
        ),
    )


@pytest.fixture
def base_snapshot(now, contractors) -> Snapshot:
    """A tenant connected to a landlord, plus a contractor roster."""
    users = (
        User(
            email=TENANT,
            name="Terry Tenant",
            role=UserRole.TENANT,
            address="12 Elm St",
            city="Springfield",
            state="Illinois",
        ),
        User(email=LANDLORD, name="Lee Landlord", role=UserRole.LANDLORD),
        User(
            email=PLUMBER,
            name="Pat Plumber",
            role=UserRole.CONTRACTOR,
            contractor_id="contractor-plumber",
        ),
    )
    connection = Connection(
        id=connection_id(LANDLORD, TENANT),
        landlord_email=LANDLORD,
        tenant_email=TENANT,
        status=ConnectionStatus.CONNECTED,
        requested_by=LANDLORD,
        requested_at=now,
        confirmed_at=now,
    )
    return Snapshot(users=users, contractors=contractors, connections=(connection,))


@pytest.fixture
def leak_draft() -> TicketDraft:
    return TicketDraft(
        title="Kitchen sink leaking",
        description="Water is dripping under the sink",
        category="Plumbing",
        priority="high",
    )


@pytest.fixture
def submitted(base_snapshot, leak_draft, now):
    """(snapshot, ticket) with one freshly submitted tenant ticket."""
    return lifecycle.submit_ticket(base_snapshot, leak_draft, TENANT, UserRole.TENANT, now)
