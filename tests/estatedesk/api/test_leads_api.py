"""
Tests for the Leads API
"""
import pytest

LEAD = {
    "first_name": "Chi",
    "last_name": "Eze",
    "email": "chi@example.com",
    "phone": "+2348000000000",
    "source": "website",
    "property_interest": [{"property_id": 1, "interest_level": "high"}],
    "requirements": {"budget_min": 10000000, "budget_max": 30000000, "preferred_locations": ["Lekki"]},
}


@pytest.fixture
def lead(client, agent):
    _, headers = agent
    response = client.post("/api/v1/leads/", json=LEAD, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestLeadCrud:
    """Tests for creating, listing and editing leads."""

    def test_create_lead(self, agent, lead):
        user, _ = agent

        assert lead["assigned_agent_id"] == user.id
        assert lead["status"] == "new"
        assert lead["property_interest"][0]["interest_level"] == "high"
        assert lead["requirements"]["preferred_locations"] == ["Lekki"]
        assert [entry["action"] for entry in lead["communication_history"]] == ["CREATED"]

    def test_invalid_source(self, client, agent):
        _, headers = agent

        response = client.post("/api/v1/leads/", json=dict(LEAD, source="billboard"), headers=headers)

        assert response.status_code == 400

    def test_status_change_is_logged(self, client, agent, lead):
        _, headers = agent

        response = client.put(f"/api/v1/leads/{lead['id']}", json={"status": "qualified"}, headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "qualified"
        entry = data["communication_history"][-1]
        assert entry["action"] == "UPDATED"
        assert entry["details"] == "Lead status updated from new to qualified"

    def test_plain_update_is_logged(self, client, agent, lead):
        _, headers = agent

        data = client.put(f"/api/v1/leads/{lead['id']}", json={"notes": "Prefers mornings"}, headers=headers).json()["data"]

        assert data["notes"] == "Prefers mornings"
        assert data["communication_history"][-1]["details"] == "Lead details updated"

    def test_other_agent_cannot_update(self, client, make_user, lead):
        _, headers = make_user("agent")

        response = client.put(f"/api/v1/leads/{lead['id']}", json={"notes": "x"}, headers=headers)

        assert response.status_code == 403

    def test_agents_only_see_their_leads(self, client, make_user, admin, lead):
        _, other_headers = make_user("agent")
        _, admin_headers = admin

        assert client.get("/api/v1/leads/", headers=other_headers).json()["data"] == []
        assert len(client.get("/api/v1/leads/?source=website", headers=admin_headers).json()["data"]) == 1

    def test_delete_admin_only(self, client, agent, admin, lead):
        _, headers = agent
        _, admin_headers = admin

        assert client.delete(f"/api/v1/leads/{lead['id']}", headers=headers).status_code == 403
        assert client.delete(f"/api/v1/leads/{lead['id']}", headers=admin_headers).status_code == 200


class TestLeadCommunication:
    """Tests for POST /api/v1/leads/{id}/communication."""

    def test_log_call(self, client, agent, lead):
        _, headers = agent

        response = client.post(
            f"/api/v1/leads/{lead['id']}/communication",
            json={"type": "call", "message": "Discussed viewing times", "outcome": "Viewing booked"},
            headers=headers,
        )

        assert response.status_code == 200
        entry = response.json()["data"]["communication_history"][-1]
        assert entry["action"] == "COMMUNICATION"
        assert entry["details"] == "Discussed viewing times"
        assert entry["changes"] == {"type": "call", "outcome": "Viewing booked"}

    def test_invalid_type(self, client, agent, lead):
        _, headers = agent

        response = client.post(
            f"/api/v1/leads/{lead['id']}/communication",
            json={"type": "fax", "message": "hello"},
            headers=headers,
        )

        assert response.status_code == 400

    def test_missing_lead(self, client, agent):
        _, headers = agent

        response = client.post(
            "/api/v1/leads/999/communication",
            json={"type": "email", "message": "hello"},
            headers=headers,
        )

        assert response.status_code == 404


class TestLeadAssignment:
    """Tests for PUT /api/v1/leads/{id}/assign."""

    def test_admin_assigns(self, client, admin, agent, make_user, lead):
        _, admin_headers = admin
        new_agent, new_agent_headers = make_user("agent")
        old_agent, _ = agent

        response = client.put(
            f"/api/v1/leads/{lead['id']}/assign",
            json={"agent_id": new_agent.id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["assigned_agent_id"] == new_agent.id
        entry = data["communication_history"][-1]
        assert entry["action"] == "ASSIGNMENT"
        assert entry["changes"] == {"from": old_agent.id, "to": new_agent.id}
        assert len(client.get("/api/v1/leads/", headers=new_agent_headers).json()["data"]) == 1

    def test_agent_cannot_assign(self, client, agent, make_user, lead):
        _, headers = agent
        other, _ = make_user("agent")

        response = client.put(f"/api/v1/leads/{lead['id']}/assign", json={"agent_id": other.id}, headers=headers)

        assert response.status_code == 403

    def test_unknown_target(self, client, admin, lead):
        _, admin_headers = admin

        response = client.put(f"/api/v1/leads/{lead['id']}/assign", json={"agent_id": 999}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Agent not found"
