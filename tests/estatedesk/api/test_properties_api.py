"""
Tests for the Properties API

Covers listing CRUD, the document verification workflow, admin overrides and
title/survey verification by details.
"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

LISTING = {
    "owner_name": "Ada Okafor",
    "email": "ada@example.com",
    "address": "12 Marina Road, Lagos",
    "title_number": "T-100",
    "survey_plan_number": "S-100",
    "latitude": 6.5,
    "longitude": 3.3,
    "property_type": "land",
    "price": 25000000,
}


@pytest.fixture
def listed_property(client, owner):
    _, headers = owner
    response = client.post("/api/v1/properties/", json=LISTING, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


def upload(client, headers, property_id, name, document_type="deed"):
    return client.post(
        f"/api/v1/properties/{property_id}/documents",
        json={
            "document_type": document_type,
            "document_name": name,
            "document_url": f"https://files.example.com/{name}",
        },
        headers=headers,
    )


def verify_doc(client, headers, property_id, index, status="verified", notes=None):
    return client.put(
        f"/api/v1/properties/{property_id}/documents/verify",
        json={"document_index": index, "verification_status": status, "notes": notes},
        headers=headers,
    )


class TestPropertyCrud:
    """Tests for listing, reading and editing properties."""

    def test_create_property(self, client, owner, listed_property):
        user, _ = owner

        assert listed_property["owner_id"] == user.id
        assert listed_property["verification_status"] == "pending"
        assert listed_property["documents"] == []
        assert len(listed_property["history"]) == 1
        assert listed_property["history"][0]["action"] == "CREATED"
        assert listed_property["history"][0]["user_id"] == user.id

    def test_create_requires_auth(self, client):
        response = client.post("/api/v1/properties/", json=LISTING)

        assert response.status_code == 401

    def test_create_with_unpaired_coordinates(self, client, owner):
        _, headers = owner
        payload = dict(LISTING, longitude=None)

        response = client.post("/api/v1/properties/", json=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "bad_request"

    def test_duplicate_title_number(self, client, owner, listed_property):
        _, headers = owner

        response = client.post(
            "/api/v1/properties/",
            json=dict(LISTING, survey_plan_number="S-200"),
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Title number or survey plan number is already registered"

    def test_blank_identifiers_are_stored_as_absent(self, client, owner):
        """Blank title numbers never collide with each other."""
        _, headers = owner

        first = client.post(
            "/api/v1/properties/",
            json=dict(LISTING, title_number="", survey_plan_number="S-201"),
            headers=headers,
        )
        second = client.post(
            "/api/v1/properties/",
            json=dict(LISTING, title_number="   ", survey_plan_number="S-202"),
            headers=headers,
        )

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["data"]["title_number"] is None
        assert second.json()["data"]["title_number"] is None

    def test_identifiers_are_trimmed(self, client, owner, client_user):
        _, headers = owner
        _, client_headers = client_user

        created = client.post(
            "/api/v1/properties/",
            json=dict(LISTING, title_number=" T-9 ", survey_plan_number="S-9"),
            headers=headers,
        ).json()["data"]
        assert created["title_number"] == "T-9"

        response = client.post("/api/v1/properties/verify", json={"title_number": " T-9 "}, headers=client_headers)

        assert response.status_code == 200
        assert response.json()["data"]["property"]["id"] == created["id"]

    def test_trimmed_identifier_collides(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"survey_plan_number": " S-100 "},
            headers=headers,
        )
        other = client.post(
            "/api/v1/properties/",
            json=dict(LISTING, title_number=" T-100", survey_plan_number="S-300"),
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["survey_plan_number"] == "S-100"
        assert other.status_code == 400

    def test_list_and_filter(self, client, owner, admin, listed_property):
        _, headers = owner
        _, admin_headers = admin
        client.put(
            f"/api/v1/properties/{listed_property['id']}/verification",
            json={"status": "verified"},
            headers=admin_headers,
        )
        client.post(
            "/api/v1/properties/",
            json=dict(LISTING, title_number="T-200", survey_plan_number="S-200"),
            headers=headers,
        )

        everything = client.get("/api/v1/properties/", headers=headers).json()["data"]
        verified = client.get("/api/v1/properties/?status=verified", headers=headers).json()["data"]

        assert len(everything) == 2
        assert [p["id"] for p in verified] == [listed_property["id"]]

    def test_list_invalid_status_filter(self, client, owner):
        _, headers = owner

        response = client.get("/api/v1/properties/?status=approved", headers=headers)

        assert response.status_code == 400

    def test_get_property(self, client, client_user, listed_property):
        _, headers = client_user

        response = client.get(f"/api/v1/properties/{listed_property['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["title_number"] == "T-100"

    def test_get_missing_property(self, client, owner):
        _, headers = owner

        response = client.get("/api/v1/properties/999", headers=headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Property not found", "error": "not_found"}

    def test_owner_update(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"price": 30000000, "description": "Corner plot"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 30000000
        assert data["description"] == "Corner plot"
        assert data["history"][-1]["action"] == "UPDATED"
        assert data["history"][-1]["changes"] == {"price": 30000000, "description": "Corner plot"}

    def test_update_cannot_touch_status(self, client, owner, listed_property):
        """Status is not an editable listing field."""
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"verification_status": "verified", "address": "14 Marina Road"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["verification_status"] == "pending"
        assert response.json()["data"]["address"] == "14 Marina Road"

    def test_update_with_no_fields(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(f"/api/v1/properties/{listed_property['id']}", json={}, headers=headers)

        assert response.status_code == 400

    def test_update_cannot_clear_one_coordinate(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"latitude": None},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "latitude and longitude must be set or cleared together"
        detail = client.get(f"/api/v1/properties/{listed_property['id']}", headers=headers).json()["data"]
        assert detail["latitude"] == 6.5
        assert len(detail["history"]) == 1

    def test_update_clears_both_coordinates(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"latitude": None, "longitude": None},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["latitude"] is None
        assert response.json()["data"]["longitude"] is None

    def test_stranger_cannot_update(self, client, client_user, listed_property):
        _, headers = client_user

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}",
            json={"price": 1},
            headers=headers,
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_owner_cannot_delete(self, client, owner, listed_property):
        _, headers = owner

        response = client.delete(f"/api/v1/properties/{listed_property['id']}", headers=headers)

        assert response.status_code == 403

    def test_admin_delete(self, client, owner, admin, listed_property):
        _, headers = owner
        _, admin_headers = admin

        response = client.delete(f"/api/v1/properties/{listed_property['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Property deleted successfully"}
        assert client.get(f"/api/v1/properties/{listed_property['id']}", headers=headers).status_code == 404

    def test_delete_missing_is_404_not_403(self, client, owner):
        _, headers = owner

        response = client.delete("/api/v1/properties/999", headers=headers)

        assert response.status_code == 404


class TestDocumentWorkflow:
    """Tests for document upload and review."""

    def test_end_to_end_history_and_status(self, client, owner, admin, listed_property):
        """History grows 1 -> 3 -> 4 -> 5 while status goes pending -> pending -> verified."""
        _, headers = owner
        _, admin_headers = admin
        property_id = listed_property["id"]
        assert len(listed_property["history"]) == 1

        upload(client, headers, property_id, "deed.pdf")
        data = upload(client, headers, property_id, "survey.pdf", "survey").json()["data"]
        assert len(data["history"]) == 3
        assert data["verification_status"] == "pending"
        assert [d["name"] for d in data["documents"]] == ["deed.pdf", "survey.pdf"]

        data = verify_doc(client, admin_headers, property_id, 0).json()["data"]
        assert len(data["history"]) == 4
        assert data["verification_status"] == "pending"

        data = verify_doc(client, admin_headers, property_id, 1, notes="Matches survey").json()["data"]
        assert len(data["history"]) == 5
        assert data["verification_status"] == "verified"
        assert data["documents"][1]["verification_notes"] == "Matches survey"
        assert data["history"][-1]["details"] == "Document survey.pdf verified with status: verified"

    def test_upload_history_details(self, client, owner, listed_property):
        _, headers = owner

        data = upload(client, headers, listed_property["id"], "deed.pdf").json()["data"]

        entry = data["history"][-1]
        assert entry["action"] == "DOCUMENT_UPLOADED"
        assert entry["details"] == "New deed document uploaded: deed.pdf"
        assert data["documents"][0]["verification_status"] == "pending"

    def test_stranger_cannot_upload(self, client, client_user, listed_property):
        _, headers = client_user

        response = upload(client, headers, listed_property["id"], "deed.pdf")

        assert response.status_code == 403

    def test_rejected_document_rejects_property(self, client, owner, admin, listed_property):
        _, headers = owner
        _, admin_headers = admin
        upload(client, headers, listed_property["id"], "deed.pdf")
        upload(client, headers, listed_property["id"], "survey.pdf")

        data = verify_doc(client, admin_headers, listed_property["id"], 1, status="rejected").json()["data"]

        assert data["verification_status"] == "rejected"

    def test_bad_index_is_404(self, client, owner, admin, listed_property):
        _, headers = owner
        _, admin_headers = admin
        upload(client, headers, listed_property["id"], "deed.pdf")

        response = verify_doc(client, admin_headers, listed_property["id"], 3)

        assert response.status_code == 404
        assert response.json()["message"] == "Document not found"
        detail = client.get(f"/api/v1/properties/{listed_property['id']}", headers=headers).json()["data"]
        assert len(detail["history"]) == 2

    def test_invalid_decision(self, client, owner, admin, listed_property):
        _, headers = owner
        _, admin_headers = admin
        upload(client, headers, listed_property["id"], "deed.pdf")

        response = verify_doc(client, admin_headers, listed_property["id"], 0, status="pending")

        assert response.status_code == 400

    def test_owner_cannot_verify_documents(self, client, owner, listed_property):
        _, headers = owner
        upload(client, headers, listed_property["id"], "deed.pdf")

        response = verify_doc(client, headers, listed_property["id"], 0)

        assert response.status_code == 403


class TestVerificationOverride:
    """Tests for PUT /properties/{id}/verification."""

    def test_admin_override(self, client, admin, listed_property):
        _, admin_headers = admin

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}/verification",
            json={"status": "flagged", "notes": "Boundary dispute"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["verification_status"] == "flagged"
        assert data["history"][-1]["action"] == "VERIFICATION_STATUS_UPDATED"
        assert data["history"][-1]["details"] == "Verification status updated to flagged"

    def test_owner_override_forbidden(self, client, owner, listed_property):
        _, headers = owner

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}/verification",
            json={"status": "verified"},
            headers=headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to update verification status"

    def test_invalid_status(self, client, admin, listed_property):
        _, admin_headers = admin

        response = client.put(
            f"/api/v1/properties/{listed_property['id']}/verification",
            json={"status": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestVerifyByDetails:
    """Tests for POST /properties/verify."""

    def test_requires_identifier(self, client, client_user):
        _, headers = client_user

        response = client.post("/api/v1/properties/verify", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Title number or survey plan number is required",
            "error": "bad_request",
        }

    def test_not_found(self, client, client_user, listed_property):
        _, headers = client_user

        response = client.post("/api/v1/properties/verify", json={"title_number": "T-999"}, headers=headers)

        assert response.status_code == 404
        assert response.json()["message"] == "No property found with the provided details"

    def test_match_by_survey_plan(self, client, client_user, listed_property):
        _, headers = client_user

        response = client.post(
            "/api/v1/properties/verify",
            json={"survey_plan_number": "S-100", "coordinates": {"lat": 6.50045, "lng": 3.3}},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["property"]["id"] == listed_property["id"]
        assert data["verification"] == {
            "status": "verified",
            "message": "Property details match the records",
            "distance": None,
        }

    def test_coordinates_too_far_are_flagged(self, client, client_user, listed_property):
        _, headers = client_user

        response = client.post(
            "/api/v1/properties/verify",
            json={"title_number": "T-100", "coordinates": {"lat": 6.50135, "lng": 3.3}},
            headers=headers,
        )

        assert response.status_code == 200
        verification = response.json()["data"]["verification"]
        assert verification["status"] == "flagged"
        assert verification["distance"] == 150

    def test_does_not_write_history(self, client, client_user, owner, listed_property):
        _, headers = client_user
        _, owner_headers = owner

        client.post("/api/v1/properties/verify", json={"title_number": "T-100"}, headers=headers)

        detail = client.get(f"/api/v1/properties/{listed_property['id']}", headers=owner_headers).json()["data"]
        assert len(detail["history"]) == 1
        assert detail["verification_status"] == "pending"


class TestStoreFailure:
    """A failed commit surfaces as an internal error and applies nothing."""

    @staticmethod
    def failing_commit(session):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    def test_document_verification_rolled_back(self, client, owner, admin, listed_property, monkeypatch):
        _, headers = owner
        _, admin_headers = admin
        property_id = listed_property["id"]
        upload(client, headers, property_id, "deed.pdf")

        monkeypatch.setattr(Session, "commit", self.failing_commit)
        response = verify_doc(client, admin_headers, property_id, 0)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Database error", "error": "internal"}

        detail = client.get(f"/api/v1/properties/{property_id}", headers=headers).json()["data"]
        assert detail["documents"][0]["verification_status"] == "pending"
        assert detail["documents"][0]["verified_by"] is None
        assert [entry["action"] for entry in detail["history"]] == ["CREATED", "DOCUMENT_UPLOADED"]
        assert detail["verification_status"] == "pending"

    def test_create_rolled_back(self, client, owner, monkeypatch):
        _, headers = owner

        monkeypatch.setattr(Session, "commit", self.failing_commit)
        response = client.post("/api/v1/properties/", json=LISTING, headers=headers)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["error"] == "internal"
        assert client.get("/api/v1/properties/", headers=headers).json()["data"] == []
