"""
Tests for the Agents API
"""
import pytest


@pytest.fixture
def agent_profile(client, admin, agent):
    _, admin_headers = admin
    user, _ = agent
    response = client.post(
        "/api/v1/agents/",
        json={
            "user_id": user.id,
            "license_number": "LAG-001",
            "specializations": ["residential"],
            "areas_served": ["Lekki", "Ikoyi"],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestAgentProfiles:
    """Tests for agent profile management."""

    def test_create_profile(self, agent, agent_profile):
        user, _ = agent

        assert agent_profile["user_id"] == user.id
        assert agent_profile["status"] == "active"
        assert agent_profile["performance_metrics"] == {
            "deals_closed": 0,
            "revenue_generated": 0,
            "client_satisfaction": 0,
            "response_time": 0,
        }

    def test_non_admin_cannot_create(self, client, agent):
        user, headers = agent

        response = client.post(
            "/api/v1/agents/",
            json={"user_id": user.id, "license_number": "LAG-002"},
            headers=headers,
        )

        assert response.status_code == 403

    def test_duplicate_license(self, client, admin, make_user, agent_profile):
        _, admin_headers = admin
        other, _ = make_user("agent")

        response = client.post(
            "/api/v1/agents/",
            json={"user_id": other.id, "license_number": "LAG-001"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "License number is already registered"

    def test_second_profile_for_user(self, client, admin, agent, agent_profile):
        _, admin_headers = admin
        user, _ = agent

        response = client.post(
            "/api/v1/agents/",
            json={"user_id": user.id, "license_number": "LAG-009"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_unknown_user(self, client, admin):
        _, admin_headers = admin

        response = client.post(
            "/api/v1/agents/",
            json={"user_id": 999, "license_number": "LAG-003"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_agent_updates_own_profile(self, client, agent, agent_profile):
        _, headers = agent

        response = client.put(
            f"/api/v1/agents/{agent_profile['id']}",
            json={"bio": "Ten years in Lagos residential sales"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["bio"] == "Ten years in Lagos residential sales"

    def test_other_agent_cannot_update(self, client, make_user, agent_profile):
        _, headers = make_user("agent")

        response = client.put(f"/api/v1/agents/{agent_profile['id']}", json={"bio": "x"}, headers=headers)

        assert response.status_code == 403

    def test_list_and_get(self, client, client_user, agent_profile):
        _, headers = client_user

        assert len(client.get("/api/v1/agents/", headers=headers).json()["data"]) == 1
        assert client.get(f"/api/v1/agents/{agent_profile['id']}", headers=headers).status_code == 200
        assert client.get("/api/v1/agents/999", headers=headers).status_code == 404


class TestAgentAdministration:
    """Tests for admin-only agent actions."""

    def test_performance_metrics_merge(self, client, admin, agent_profile):
        _, admin_headers = admin

        response = client.put(
            f"/api/v1/agents/{agent_profile['id']}/performance",
            json={"deals_closed": 4, "revenue_generated": 5000000},
            headers=admin_headers,
        )

        assert response.status_code == 200
        metrics = response.json()["data"]["performance_metrics"]
        assert metrics["deals_closed"] == 4
        assert metrics["revenue_generated"] == 5000000
        assert metrics["client_satisfaction"] == 0

    def test_agent_cannot_set_own_metrics(self, client, agent, agent_profile):
        _, headers = agent

        response = client.put(
            f"/api/v1/agents/{agent_profile['id']}/performance",
            json={"deals_closed": 100},
            headers=headers,
        )

        assert response.status_code == 403

    def test_status_update(self, client, admin, agent, agent_profile):
        _, admin_headers = admin
        _, headers = agent

        assert client.put(
            f"/api/v1/agents/{agent_profile['id']}/status", json={"status": "inactive"}, headers=headers
        ).status_code == 403

        response = client.put(
            f"/api/v1/agents/{agent_profile['id']}/status", json={"status": "inactive"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "inactive"

    def test_delete(self, client, admin, agent, agent_profile):
        _, admin_headers = admin
        _, headers = agent

        assert client.delete(f"/api/v1/agents/{agent_profile['id']}", headers=headers).status_code == 403
        assert client.delete(f"/api/v1/agents/{agent_profile['id']}", headers=admin_headers).status_code == 200
