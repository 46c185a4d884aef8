import json

import pytest
import pytest_asyncio

from home.models.connection import ConnectionStatus
from home.models.invitation import InvitationStatus
from home.models.ticket import TicketStatus
from home.models.user import UserRole
from home.schemas.snapshot import Change, ChangeSet, Snapshot, diff
from home.schemas.ticket import Message
from home.services import lifecycle
from home.services.events import ChangePublisher
from home.services.storage import LocalStore
from home.services.workflow import Workflow
from home.utils.exceptions import StaleStateError, ValidationError


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.published: list[tuple[str, dict]] = []
        self.fail = fail

    async def publish(self, channel, message):
        if self.fail:
            raise ConnectionError("redis down")
        self.published.append((channel, json.loads(message)))
        return 1

    async def aclose(self):
        pass


@pytest_asyncio.fixture(scope="function")
async def store():
    """A fresh in-memory local store for each test."""
    backend = LocalStore("sqlite+aiosqlite:///:memory:")
    await backend.connect()
    yield backend
    await backend.close()


@pytest_asyncio.fixture(scope="function")
async def seeded(store, base_snapshot):
    await store.commit(diff(Snapshot(), base_snapshot))
    return store


@pytest.mark.asyncio
async def test_round_trip(seeded, base_snapshot):
    loaded = await seeded.load_snapshot()

    assert {u.email for u in loaded.users} == {u.email for u in base_snapshot.users}
    plumber = loaded.contractor("contractor-plumber")
    assert plumber.service_areas == {"Illinois": ("Springfield", "Chicago")}
    assert plumber.specialization == ("Plumbing",)
    assert loaded.user_by_email("plumber@example.com").role == UserRole.CONTRACTOR
    assert loaded.connections[0].status == ConnectionStatus.CONNECTED


@pytest.mark.asyncio
async def test_ticket_with_messages_round_trips(seeded, leak_draft, now):
    before = await seeded.load_snapshot()
    after, ticket = lifecycle.submit_ticket(
        before, leak_draft, "tenant@example.com", UserRole.TENANT, now
    )
    after, _ = lifecycle.add_message(
        after,
        ticket.id,
        Message(text="Please hurry", sender_email="tenant@example.com", sender_name="Terry"),
        now,
    )
    await seeded.commit(diff(before, after))

    loaded = (await seeded.load_snapshot()).ticket(ticket.id)
    assert loaded.status == TicketStatus.SUBMITTED
    assert [m.text for m in loaded.messages] == ["Please hurry"]
    assert loaded.version == 2


@pytest.mark.asyncio
async def test_stale_update_aborts_whole_batch(seeded, leak_draft, now):
    stale = await seeded.load_snapshot()
    first, _ = lifecycle.update_contractor_service(
        stale, "contractor-plumber", ["Plumbing", "HVAC"], {"Illinois": ["Peoria"]}, now
    )
    await seeded.commit(diff(stale, first))

    # Built from the same, now outdated, snapshot: one insert plus one stale update.
    second, _ = lifecycle.submit_ticket(
        stale, leak_draft, "tenant@example.com", UserRole.TENANT, now
    )
    second, _ = lifecycle.update_contractor_service(
        second, "contractor-plumber", ["Roofing"], {}, now
    )
    with pytest.raises(StaleStateError):
        await seeded.commit(diff(stale, second))

    current = await seeded.load_snapshot()
    assert current.contractor("contractor-plumber").specialization == ("Plumbing", "HVAC")
    assert current.tickets == ()


@pytest.mark.asyncio
async def test_duplicate_insert_is_stale(seeded, base_snapshot):
    duplicate = ChangeSet(
        changes=(Change(table="users", op="insert", entity=base_snapshot.users[0]),)
    )
    with pytest.raises(StaleStateError):
        await seeded.commit(duplicate)


@pytest.mark.asyncio
async def test_workflow_commits_and_notifies(seeded, leak_draft, now):
    redis = FakeRedis()
    workflow = Workflow(seeded, ChangePublisher(redis, channel="test:changes"), clock=lambda: now)

    ticket = await workflow.run(
        lambda snap, at: lifecycle.submit_ticket(
            snap, leak_draft, "tenant@example.com", UserRole.TENANT, at
        )
    )
    assigned = await workflow.run(
        lambda snap, at: lifecycle.assign_contractor(snap, ticket.id, "contractor-plumber", at)
    )

    assert assigned.status == TicketStatus.ASSIGNED
    snapshot = await workflow.snapshot()
    assert snapshot.job_for_ticket(ticket.id) is not None
    assert [(c, m["table"], m["op"]) for c, m in redis.published] == [
        ("test:changes", "tickets", "insert"),
        ("test:changes", "tickets", "update"),
        ("test:changes", "jobs", "insert"),
    ]
    assert redis.published[1][1]["version"] == 2


@pytest.mark.asyncio
async def test_workflow_writes_nothing_on_rejection(seeded, now):
    workflow = Workflow(seeded, clock=lambda: now)
    before = await seeded.load_snapshot()
    with pytest.raises(ValidationError):
        await workflow.run(
            lambda snap, at: lifecycle.request_connection(
                snap, "landlord@example.com", "tenant@example.com", at
            )
        )
    assert await seeded.load_snapshot() == before


@pytest.mark.asyncio
async def test_failed_publish_does_not_fail_the_command(seeded, now):
    workflow = Workflow(seeded, ChangePublisher(FakeRedis(fail=True)), clock=lambda: now)
    connection = await workflow.run(
        lambda snap, at: lifecycle.request_connection(
            snap, "landlord@example.com", "new@example.com", at
        )
    )
    snapshot = await workflow.snapshot()
    assert snapshot.find_connection(connection.id) is not None


@pytest.mark.asyncio
async def test_invitation_acceptance_commits_atomically(seeded, leak_draft, now):
    workflow = Workflow(seeded, clock=lambda: now)
    ticket = await workflow.run(
        lambda snap, at: lifecycle.submit_ticket(
            snap, leak_draft, "tenant@example.com", UserRole.TENANT, at
        )
    )
    invitation = await workflow.run(
        lambda snap, at: lifecycle.invite_contractor(
            snap, ticket.id, "contractor-plumber", "landlord@example.com", at
        )
    )
    stale = await seeded.load_snapshot()

    await workflow.run(
        lambda snap, at: lifecycle.accept_invitation(
            snap, invitation.id, "contractor-plumber", at
        )
    )
    loaded = await seeded.load_snapshot()
    assert loaded.invitation(invitation.id).status == InvitationStatus.ACCEPTED
    assert loaded.ticket(ticket.id).status == TicketStatus.ASSIGNED
    assert len(loaded.jobs) == 1

    # A second acceptance computed from the older snapshot loses the version check.
    racing, _ = lifecycle.accept_invitation(stale, invitation.id, "contractor-plumber", now)
    with pytest.raises(StaleStateError):
        await seeded.commit(diff(stale, racing))
    assert len((await seeded.load_snapshot()).jobs) == 1
