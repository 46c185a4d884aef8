import pytest
from fastapi.testclient import TestClient

from home.main import app
from home.utils.jwt_manager import create_access_token


@pytest.fixture
def client():
    """Runs the lifespan, so every test gets a fresh in-memory store."""
    with TestClient(app) as test_client:
        yield test_client


def _register(client, **fields) -> dict:
    response = client.post("/api/v1/users/register", json=fields)
    assert response.status_code == 201, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}


@pytest.fixture
def accounts(client):
    tenant = _register(
        client,
        name="Terry Tenant",
        email="tenant@example.com",
        role="tenant",
        address="12 Elm St",
        city="Springfield",
        state="Illinois",
    )
    landlord = _register(client, name="Lee Landlord", email="landlord@example.com", role="landlord")
    plumber = _register(
        client,
        name="Pat Plumber",
        email="pat@example.com",
        role="contractor",
        company_name="Pat's Pipes",
        city="Springfield",
        state="Illinois",
    )
    response = client.put(
        "/api/v1/contractors/me/service",
        headers=plumber,
        json={"specialization": ["Plumbing"], "service_areas": {"Illinois": ["Springfield"]}},
    )
    assert response.status_code == 200, response.text
    return {"tenant": tenant, "landlord": landlord, "plumber": plumber}


@pytest.fixture
def connected(client, accounts):
    response = client.post(
        "/api/v1/connections",
        headers=accounts["landlord"],
        json={"tenant_email": "tenant@example.com"},
    )
    assert response.status_code == 201, response.text
    connection_id = response.json()["id"]

    response = client.post(
        f"/api/v1/connections/{connection_id}/respond",
        headers=accounts["tenant"],
        json={"accept": True},
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "connected"
    return accounts


@pytest.fixture
def ticket_id(client, connected) -> str:
    response = client.post(
        "/api/v1/tickets",
        headers=connected["tenant"],
        json={
            "title": "Kitchen sink leaking",
            "description": "Water under the sink",
            "category": "Plumbing",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


def test_root_and_health_report_storage(client):
    root = client.get("/").json()
    assert root["storage"] == "local"
    assert root["degraded"] is False
    assert client.get("/health").json() == {"status": "ok", "storage": "local", "degraded": False}


def test_register_contractor_creates_profile(client, accounts):
    me = client.get("/api/v1/users/me", headers=accounts["plumber"]).json()
    assert me["contractor_id"] == "contractor-pat-example-com"

    profile = client.get(
        f"/api/v1/contractors/{me['contractor_id']}", headers=accounts["plumber"]
    ).json()
    assert profile["company"] == "Pat's Pipes"
    assert profile["specialization"] == ["Plumbing"]


def test_duplicate_registration_is_422(client, accounts):
    response = client.post(
        "/api/v1/users/register",
        json={"name": "Again", "email": "tenant@example.com", "role": "tenant"},
    )
    assert response.status_code == 422


def test_missing_and_bad_tokens(client, accounts):
    assert client.get("/api/v1/tickets").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/api/v1/tickets", headers=bad).status_code == 401


def test_unregistered_token_is_404(client):
    token = create_access_token("ghost@example.com", "Ghost")
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404


def test_ticket_lifecycle_over_http(client, connected, ticket_id):
    landlord, tenant, plumber = connected["landlord"], connected["tenant"], connected["plumber"]

    listed = client.get("/api/v1/tickets", headers=landlord).json()
    assert [t["id"] for t in listed] == [ticket_id]
    assert listed[0]["ai_diagnosis"]

    matches = client.get(f"/api/v1/tickets/{ticket_id}/matches", headers=landlord).json()
    assert [(m["contractor"]["id"], m["distance"]) for m in matches] == [
        ("contractor-pat-example-com", 0.0)
    ]

    applied = client.post(f"/api/v1/tickets/{ticket_id}/applications", headers=plumber)
    assert applied.status_code == 201, applied.text

    assigned = client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=landlord,
        json={"contractor_id": "contractor-pat-example-com"},
    )
    assert assigned.status_code == 200, assigned.text
    assert assigned.json()["status"] == "assigned"

    again = client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=landlord,
        json={"contractor_id": "contractor-pat-example-com"},
    )
    assert again.status_code == 409

    applications = client.get(
        f"/api/v1/tickets/{ticket_id}/applications", headers=landlord
    ).json()
    assert [a["status"] for a in applications] == ["accepted"]

    [job] = client.get("/api/v1/jobs", headers=plumber).json()
    scheduled = client.post(
        f"/api/v1/jobs/{job['id']}/schedule",
        headers=plumber,
        json={"date": "2026-03-20", "time": "2:30 PM"},
    )
    assert scheduled.status_code == 200, scheduled.text
    body = scheduled.json()
    assert body["ticket"]["scheduled_date"] == "2026-03-20 14:30"
    assert body["job"]["scheduled_time"] == "14:30"
    assert body["conflicts"] == []

    completed = client.post(
        f"/api/v1/jobs/{job['id']}/complete",
        headers=plumber,
        json={"photos": ["after.jpg"], "notes": "New trap fitted"},
    )
    assert completed.status_code == 200, completed.text
    assert completed.json()["status"] == "completed"

    rated = client.post(f"/api/v1/jobs/{job['id']}/rating", headers=tenant, json={"rating": 5})
    assert rated.status_code == 200, rated.text
    assert client.post(
        f"/api/v1/jobs/{job['id']}/rating", headers=tenant, json={"rating": 4}
    ).status_code == 409

    ticket = client.get(f"/api/v1/tickets/{ticket_id}", headers=tenant).json()
    assert ticket["status"] == "completed"
    assert ticket["rating"] == 5.0

    profile = client.get(
        "/api/v1/contractors/contractor-pat-example-com", headers=tenant
    ).json()
    assert profile["rating"] == 5.0
    assert profile["completed_jobs"] == 1


def test_completion_requires_schedule(client, connected, ticket_id):
    client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=connected["landlord"],
        json={"contractor_id": "contractor-pat-example-com"},
    )
    [job] = client.get("/api/v1/jobs", headers=connected["plumber"]).json()
    response = client.post(
        f"/api/v1/jobs/{job['id']}/complete", headers=connected["plumber"], json={}
    )
    assert response.status_code == 409


def test_tenant_cannot_assign(client, connected, ticket_id):
    response = client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=connected["tenant"],
        json={"contractor_id": "contractor-pat-example-com"},
    )
    assert response.status_code == 403


def test_unconnected_landlord_cannot_see_ticket(client, connected, ticket_id):
    other = _register(client, name="Olive", email="other-landlord@example.com", role="landlord")
    assert client.get("/api/v1/tickets", headers=other).json() == []
    assert client.get(f"/api/v1/tickets/{ticket_id}", headers=other).status_code == 404


def test_invalid_schedule_is_422(client, connected, ticket_id):
    client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=connected["landlord"],
        json={"contractor_id": "contractor-pat-example-com"},
    )
    response = client.post(
        f"/api/v1/tickets/{ticket_id}/schedule",
        headers=connected["landlord"],
        json={"date": "tomorrow", "time": "10:00"},
    )
    assert response.status_code == 422


def test_messages_are_appended(client, connected, ticket_id):
    response = client.post(
        f"/api/v1/tickets/{ticket_id}/messages",
        headers=connected["landlord"],
        json={"text": "I'll send someone"},
    )
    assert response.status_code == 201, response.text
    [message] = response.json()["messages"]
    assert message["sender_email"] == "landlord@example.com"
    assert message["sender_name"] == "Lee Landlord"


def test_landlord_marks_ticket_viewed(client, connected, ticket_id):
    response = client.post(f"/api/v1/tickets/{ticket_id}/viewed", headers=connected["landlord"])
    assert response.status_code == 200
    assert response.json()["viewed_by_landlord"] is True


def test_second_connected_landlord_can_manage_ticket(client, connected, ticket_id):
    second = _register(client, name="Sid", email="second-landlord@example.com", role="landlord")
    connection = client.post(
        "/api/v1/connections", headers=second, json={"tenant_email": "tenant@example.com"}
    ).json()
    client.post(
        f"/api/v1/connections/{connection['id']}/respond",
        headers=connected["tenant"],
        json={"accept": True},
    )

    assert [t["id"] for t in client.get("/api/v1/tickets", headers=second).json()] == [ticket_id]
    assert client.post(f"/api/v1/tickets/{ticket_id}/viewed", headers=second).status_code == 200
    assigned = client.post(
        f"/api/v1/tickets/{ticket_id}/assign",
        headers=second,
        json={"contractor_id": "contractor-pat-example-com"},
    )
    assert assigned.status_code == 200, assigned.text


def test_landlord_cannot_submit_ticket(client, connected):
    response = client.post(
        "/api/v1/tickets",
        headers=connected["landlord"],
        json={"title": "Roof", "description": "Loose shingles", "category": "Roofing"},
    )
    assert response.status_code == 403
    assert client.get("/api/v1/tickets", headers=connected["landlord"]).json() == []


def test_invitation_flow_over_http(client, connected, ticket_id):
    landlord, plumber = connected["landlord"], connected["plumber"]

    invited = client.post(
        f"/api/v1/tickets/{ticket_id}/invitations",
        headers=landlord,
        json={"contractor_id": "contractor-pat-example-com"},
    )
    assert invited.status_code == 201, invited.text
    invitation = invited.json()
    assert invitation["status"] == "pending"
    assert invitation["contractor_email"] == "pat@example.com"

    assert [i["id"] for i in client.get("/api/v1/invitations", headers=plumber).json()] == [
        invitation["id"]
    ]
    assert [i["id"] for i in client.get("/api/v1/invitations", headers=landlord).json()] == [
        invitation["id"]
    ]
    assert client.get("/api/v1/jobs", headers=plumber).json() == []

    assert client.post(
        f"/api/v1/invitations/{invitation['id']}/accept", headers=landlord
    ).status_code == 403

    accepted = client.post(f"/api/v1/invitations/{invitation['id']}/accept", headers=plumber)
    assert accepted.status_code == 200, accepted.text
    assert accepted.json()["status"] == "assigned"
    assert accepted.json()["assigned_to"] == "contractor-pat-example-com"

    [job] = client.get("/api/v1/jobs", headers=plumber).json()
    assert job["ticket_id"] == ticket_id

    listed = client.get(f"/api/v1/tickets/{ticket_id}/invitations", headers=landlord).json()
    assert [i["status"] for i in listed] == ["accepted"]
    again = client.post(f"/api/v1/invitations/{invitation['id']}/decline", headers=plumber)
    assert again.status_code == 409


def test_declined_invitation_leaves_ticket_open(client, connected, ticket_id):
    invitation = client.post(
        f"/api/v1/tickets/{ticket_id}/invitations",
        headers=connected["landlord"],
        json={"contractor_id": "contractor-pat-example-com"},
    ).json()
    declined = client.post(
        f"/api/v1/invitations/{invitation['id']}/decline", headers=connected["plumber"]
    )
    assert declined.status_code == 200, declined.text
    assert declined.json()["status"] == "declined"

    ticket = client.get(f"/api/v1/tickets/{ticket_id}", headers=connected["tenant"]).json()
    assert ticket["status"] == "submitted"
    assert ticket["assigned_to"] is None
