"""
Tests for PropertyService

Exercises the load, authorize, mutate, log, commit sequence against an
in-memory database.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from src.estatedesk.core.permissions import Actor
from src.estatedesk.db.base import Base
from src.estatedesk.db.models import Property, User
from src.estatedesk.exceptions import BadRequestError, ForbiddenError, InternalError, NotFoundError
from src.estatedesk.services.property_service import PropertyService


@pytest.fixture
def session():
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    sess = Session()
    for user_id, role in [(1, "admin"), (2, "property_owner"), (3, "client")]:
        sess.add(User(
            id=user_id,
            first_name=role,
            last_name="User",
            email=f"{role}@example.com",
            hashed_password="x",
            role=role,
            status="active",
        ))
    sess.commit()
    yield sess
    sess.close()


ADMIN = Actor(id=1, role="admin")
OWNER = Actor(id=2, role="property_owner")
STRANGER = Actor(id=3, role="client")

LISTING = {
    "owner_name": "Ada Okafor",
    "address": "12 Marina Road, Lagos",
    "title_number": "T-100",
    "survey_plan_number": "S-100",
    "latitude": 6.5,
    "longitude": 3.3,
}


def test_create_sets_owner_status_and_history(session):
    property_obj = PropertyService(session).create(OWNER, dict(LISTING))

    assert property_obj.owner_id == OWNER.id
    assert property_obj.verification_status == "pending"
    assert property_obj.documents == []
    assert [entry["action"] for entry in property_obj.history] == ["CREATED"]
    assert property_obj.history[0]["details"] == "Property listing created"


def test_create_ignores_protected_fields(session):
    data = dict(LISTING, verification_status="verified", owner_id=3, history=[{"bogus": True}])

    property_obj = PropertyService(session).create(OWNER, data)

    assert property_obj.verification_status == "pending"
    assert property_obj.owner_id == OWNER.id
    assert len(property_obj.history) == 1


def test_create_rejects_duplicate_identifiers(session):
    service = PropertyService(session)
    service.create(OWNER, dict(LISTING))

    with pytest.raises(BadRequestError):
        service.create(OWNER, dict(LISTING, title_number="T-200"))


def test_get_missing_property(session):
    with pytest.raises(NotFoundError, match="Property not found"):
        PropertyService(session).get(404)


def test_update_by_owner_logs_changes(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    updated = service.update(OWNER, property_obj.id, {"price": 250000.0})

    assert updated.price == 250000.0
    assert updated.history[-1]["action"] == "UPDATED"
    assert updated.history[-1]["changes"] == {"price": 250000.0}


def test_update_by_stranger_forbidden(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    with pytest.raises(ForbiddenError):
        service.update(STRANGER, property_obj.id, {"price": 1.0})

    assert len(service.get(property_obj.id).history) == 1


def test_missing_property_is_404_before_403(session):
    with pytest.raises(NotFoundError):
        PropertyService(session).update(STRANGER, 999, {"price": 1.0})


def test_document_workflow(session):
    """History grows 1 -> 3 -> 4 -> 5 while status goes pending -> verified."""
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))
    assert len(property_obj.history) == 1

    service.upload_document(OWNER, property_obj.id, "deed", "deed.pdf", "https://files.example.com/deed.pdf")
    service.upload_document(OWNER, property_obj.id, "survey", "survey.pdf", "https://files.example.com/survey.pdf")
    assert len(property_obj.history) == 3
    assert property_obj.history[1]["details"] == "New deed document uploaded: deed.pdf"
    assert property_obj.documents[0]["verification_status"] == "pending"

    service.verify_document(ADMIN, property_obj.id, 0, "verified")
    assert len(property_obj.history) == 4
    assert property_obj.verification_status == "pending"

    service.verify_document(ADMIN, property_obj.id, 1, "verified", notes="Survey checked")
    assert len(property_obj.history) == 5
    assert property_obj.verification_status == "verified"


def test_owner_cannot_verify_documents(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))
    service.upload_document(OWNER, property_obj.id, "deed", "deed.pdf", "https://files.example.com/deed.pdf")

    with pytest.raises(ForbiddenError):
        service.verify_document(OWNER, property_obj.id, 0, "verified")


def test_override_verification(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    service.override_verification(ADMIN, property_obj.id, "flagged", notes="Boundary dispute")

    assert property_obj.verification_status == "flagged"
    entry = property_obj.history[-1]
    assert entry["action"] == "VERIFICATION_STATUS_UPDATED"
    assert entry["details"] == "Verification status updated to flagged"
    assert entry["changes"] == {"from": "pending", "to": "flagged", "notes": "Boundary dispute"}


def test_override_forbidden_for_owner(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    with pytest.raises(ForbiddenError):
        service.override_verification(OWNER, property_obj.id, "verified")


def test_delete_admin_only(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    with pytest.raises(ForbiddenError):
        service.delete(OWNER, property_obj.id)

    service.delete(ADMIN, property_obj.id)
    assert session.get(Property, property_obj.id) is None


def test_verify_details_read_only(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    result = service.verify_details(title_number="T-100", coordinates={"lat": 6.5, "lng": 3.3})

    assert result.status.value == "verified"
    assert len(property_obj.history) == 1


def test_create_normalizes_identifiers(session):
    service = PropertyService(session)
    first = service.create(OWNER, dict(LISTING, title_number="", survey_plan_number=" S-1 "))
    second = service.create(OWNER, dict(LISTING, title_number=" ", survey_plan_number="S-2"))

    assert first.title_number is None
    assert first.survey_plan_number == "S-1"
    assert second.title_number is None
    assert service.verify_details(survey_plan_number="S-1").property_obj.id == first.id


def test_update_rejects_half_cleared_coordinates(session):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    with pytest.raises(BadRequestError, match="latitude and longitude"):
        service.update(OWNER, property_obj.id, {"longitude": None})

    assert property_obj.longitude == 3.3
    assert len(property_obj.history) == 1


def test_commit_failure_raises_internal_error(session, monkeypatch):
    service = PropertyService(session)
    property_obj = service.create(OWNER, dict(LISTING))

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(InternalError):
        service.update(OWNER, property_obj.id, {"price": 1000})

    monkeypatch.undo()
    session.expire_all()
    reloaded = session.get(Property, property_obj.id)
    assert reloaded.price is None
    assert len(reloaded.history) == 1
