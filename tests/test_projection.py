from home.models.connection import ConnectionStatus
from home.models.user import UserRole
from home.schemas.connection import Connection
from home.schemas.contractor import Contractor
from home.schemas.ticket import TicketDraft
from home.schemas.user import User
from home.services import lifecycle
from home.services.projection import (
    connected_tenant_emails,
    landlords_for_ticket,
    project_jobs,
    project_tickets,
    resolve_contractor_id,
)

TENANT = "tenant@example.com"
LANDLORD = "landlord@example.com"


def test_tenant_sees_only_own_tickets(submitted, now):
    snap, mine = submitted
    snap, _ = lifecycle.submit_ticket(
        snap,
        TicketDraft(title="Other", description="Other flat", category="HVAC"),
        "neighbour@example.com",
        UserRole.TENANT,
        now,
    )
    tenant = snap.user_by_email(TENANT)
    assert [t.id for t in project_tickets(tenant, snap.tickets, snap.connections)] == [mine.id]


def test_landlord_sees_connected_tenants_only(submitted, now):
    snap, mine = submitted
    snap, _ = lifecycle.submit_ticket(
        snap,
        TicketDraft(title="Stranger", description="Not connected", category="HVAC"),
        "stranger@example.com",
        UserRole.TENANT,
        now,
    )
    snap, _ = lifecycle.submit_ticket(
        snap,
        TicketDraft(title="Own", description="Landlord filed", category="HVAC"),
        LANDLORD,
        UserRole.LANDLORD,
        now,
    )
    landlord = snap.user_by_email(LANDLORD)
    visible = project_tickets(landlord, snap.tickets, snap.connections)
    assert [t.id for t in visible] == [mine.id]


def test_pending_connection_grants_nothing(submitted, now):
    snap, _ = submitted
    pending = tuple(
        c.model_copy(update={"status": ConnectionStatus.PENDING}) for c in snap.connections
    )
    landlord = snap.user_by_email(LANDLORD)
    assert project_tickets(landlord, snap.tickets, pending) == []


def test_contractor_sees_assigned_and_open_pool(submitted, now):
    snap, first = submitted
    snap, second = lifecycle.submit_ticket(
        snap,
        TicketDraft(title="Outlet", description="Dead outlet", category="Electrical"),
        TENANT,
        UserRole.TENANT,
        now,
    )
    snap, third = lifecycle.submit_ticket(
        snap,
        TicketDraft(title="Fan", description="Fan broken", category="HVAC"),
        TENANT,
        UserRole.TENANT,
        now,
    )
    snap, _ = lifecycle.assign_contractor(snap, first.id, "contractor-plumber", now)
    snap, _ = lifecycle.assign_contractor(snap, second.id, "contractor-sparky", now)

    plumber = snap.user_by_email("plumber@example.com")
    visible = project_tickets(plumber, snap.tickets, snap.connections, snap.contractors)
    assert {t.id for t in visible} == {first.id, third.id}

    jobs = project_jobs(plumber, snap.jobs, snap.contractors)
    assert [j.ticket_id for j in jobs] == [first.id]


def test_jobs_are_empty_for_other_roles(submitted, now):
    snap, ticket = submitted
    snap, _ = lifecycle.assign_contractor(snap, ticket.id, "contractor-plumber", now)
    assert project_jobs(snap.user_by_email(TENANT), snap.jobs, snap.contractors) == []


def test_no_user_sees_nothing(submitted):
    snap, _ = submitted
    assert project_tickets(None, snap.tickets, snap.connections) == []
    assert project_jobs(None, snap.jobs) == []


def _legacy_contractor(email: str, name: str) -> User:
    return User(email=email, name=name, role=UserRole.CONTRACTOR)


def test_explicit_contractor_id_wins(contractors):
    user = User(
        email="sparks@example.com",
        name="Sam",
        role=UserRole.CONTRACTOR,
        contractor_id="contractor-plumber",
    )
    assert resolve_contractor_id(user, contractors) == "contractor-plumber"


def test_fuzzy_resolution_order(contractors):
    by_email = _legacy_contractor("SPARKS@example.com", "Someone")
    by_name = _legacy_contractor("pp@example.com", "Pat")
    by_prefix = _legacy_contractor("sam@example.com", "Nobody Known")
    unknown = _legacy_contractor("zed@example.com", "Zed")

    assert resolve_contractor_id(by_email, contractors) == "contractor-sparky"
    assert resolve_contractor_id(by_name, contractors) == "contractor-plumber"
    assert resolve_contractor_id(by_prefix, contractors) == "contractor-sparky"
    assert resolve_contractor_id(unknown, contractors) == "contractor-plumber"


def test_fuzzy_resolution_can_be_disabled(contractors):
    user = _legacy_contractor("sparks@example.com", "Sam")
    assert resolve_contractor_id(user, contractors, allow_fuzzy=False) is None


def test_non_contractors_resolve_to_none(contractors):
    tenant = User(email=TENANT, name="T", role=UserRole.TENANT)
    assert resolve_contractor_id(tenant, contractors) is None
    assert resolve_contractor_id(_legacy_contractor("x@example.com", "X"), []) is None


def test_connection_helpers(submitted, now):
    snap, ticket = submitted
    extra = Connection(
        id="other",
        landlord_email=LANDLORD,
        tenant_email="pending@example.com",
        requested_by=LANDLORD,
        requested_at=now,
    )
    connections = snap.connections + (extra,)
    assert connected_tenant_emails(LANDLORD, connections) == {TENANT}
    assert landlords_for_ticket(ticket, connections) == [LANDLORD]
    assert landlords_for_ticket(ticket, ()) == []


def test_second_connected_landlord_sees_and_owns_ticket(submitted, now):
    snap, ticket = submitted
    second = "second-landlord@example.com"
    snap = snap.add(
        "users", User(email=second, name="Second Landlord", role=UserRole.LANDLORD)
    )
    snap = snap.add(
        "connections",
        Connection(
            landlord_email=second,
            tenant_email=TENANT,
            status=ConnectionStatus.CONNECTED,
            requested_by=second,
            requested_at=now,
            confirmed_at=now,
        ),
    )

    for landlord in (LANDLORD, second):
        user = snap.user_by_email(landlord)
        visible = project_tickets(user, snap.tickets, snap.connections)
        assert [t.id for t in visible] == [ticket.id]
        assert landlord in landlords_for_ticket(ticket, snap.connections)


def test_landlord_submitted_ticket_has_no_landlord(base_snapshot, leak_draft, now):
    _, ticket = lifecycle.submit_ticket(
        base_snapshot, leak_draft, LANDLORD, UserRole.LANDLORD, now
    )
    assert landlords_for_ticket(ticket, base_snapshot.connections) == []
