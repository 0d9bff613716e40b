"""
Service for property lifecycle operations.

Every mutating method follows the same sequence inside one session: load,
authorize, mutate, append exactly one history entry, commit. Nothing is
visible to other sessions until the single commit at the end.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.estatedesk.core.enums import HistoryAction, VerificationStatus
from src.estatedesk.core.history import append_history, utcnow
from src.estatedesk.core.permissions import Action, Actor, authorize
from src.estatedesk.core import verification
from src.estatedesk.core.verification import VerificationResult
from src.estatedesk.db.models import Property
from src.estatedesk.db.repository import PropertyRepository
from src.estatedesk.exceptions import BadRequestError, InternalError, NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

IMMUTABLE_FIELDS = {"id", "owner_id", "verification_status", "documents", "history"}


class PropertyService:
    def __init__(self, session: Session, repository: Optional[PropertyRepository] = None):
        self.session = session
        self.repository = repository or PropertyRepository()

    def get(self, property_id: int) -> Property:
        property_obj = self.repository.get_by_id(self.session, property_id)
        if property_obj is None:
            raise NotFoundError("Property not found")
        return property_obj

    def list_properties(self, status: Optional[str] = None, owner_id: Optional[int] = None) -> List[Property]:
        return self.repository.find(
            self.session,
            order_by=Property.created_at.desc(),
            verification_status=status,
            owner_id=owner_id,
        )

    def create(self, actor: Actor, data: Dict[str, Any]) -> Property:
        """
        List a new property owned by the actor.

        The property starts pending with a single CREATED history entry.
        """
        data = {k: v for k, v in data.items() if k not in IMMUTABLE_FIELDS}
        data = _normalize_identifiers(data)
        self._ensure_identifiers_free(data.get("title_number"), data.get("survey_plan_number"))

        property_obj = self.repository.create(
            self.session,
            **data,
            owner_id=actor.id,
            verification_status=VerificationStatus.PENDING.value,
            documents=[],
            history=[],
        )
        append_history(property_obj, HistoryAction.CREATED, actor.id, "Property listing created")
        self._commit()

        logger.info("property_created", property_id=property_obj.id, owner_id=actor.id)
        return property_obj

    def update(self, actor: Actor, property_id: int, changes: Dict[str, Any]) -> Property:
        property_obj = self.get(property_id)
        authorize(actor, property_obj, Action.UPDATE, "Not authorized to update this property")

        changes = {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
        changes = _normalize_identifiers(changes)
        self._ensure_identifiers_free(
            changes.get("title_number"),
            changes.get("survey_plan_number"),
            exclude_id=property_obj.id,
        )

        latitude = changes.get("latitude", property_obj.latitude)
        longitude = changes.get("longitude", property_obj.longitude)
        if (latitude is None) != (longitude is None):
            raise BadRequestError("latitude and longitude must be set or cleared together")

        for key, value in changes.items():
            setattr(property_obj, key, value)
        append_history(
            property_obj,
            HistoryAction.UPDATED,
            actor.id,
            "Property details updated",
            changes=changes,
        )
        self._commit()

        logger.info("property_updated", property_id=property_obj.id, fields=sorted(changes))
        return property_obj

    def delete(self, actor: Actor, property_id: int) -> None:
        property_obj = self.get(property_id)
        authorize(actor, property_obj, Action.DELETE, "Not authorized to delete this property")

        self.repository.delete(self.session, property_obj)
        self._commit()
        logger.info("property_deleted", property_id=property_id, actor_id=actor.id)

    def upload_document(
        self,
        actor: Actor,
        property_id: int,
        document_type: str,
        document_name: str,
        document_url: str,
    ) -> Property:
        property_obj = self.get(property_id)
        authorize(
            actor, property_obj, Action.UPLOAD_DOCUMENT,
            "Not authorized to upload documents for this property",
        )

        document = {
            "type": document_type,
            "name": document_name,
            "url": document_url,
            "uploaded_by": actor.id,
            "uploaded_at": utcnow().isoformat(),
            "verification_status": VerificationStatus.PENDING.value,
        }
        property_obj.documents = list(property_obj.documents or []) + [document]
        append_history(
            property_obj,
            HistoryAction.DOCUMENT_UPLOADED,
            actor.id,
            f"New {document_type} document uploaded: {document_name}",
        )
        self._commit()

        logger.info(
            "property_document_uploaded",
            property_id=property_obj.id,
            document_index=len(property_obj.documents) - 1,
        )
        return property_obj

    def verify_document(
        self,
        actor: Actor,
        property_id: int,
        document_index: int,
        decision: str,
        notes: Optional[str] = None,
    ) -> Property:
        property_obj = self.get(property_id)
        authorize(actor, property_obj, Action.VERIFY_DOCUMENT, "Not authorized to verify documents")

        verification.verify_document(property_obj, document_index, decision, actor.id, notes)
        self._commit()
        return property_obj

    def override_verification(
        self,
        actor: Actor,
        property_id: int,
        status: str,
        notes: Optional[str] = None,
    ) -> Property:
        """Set verification_status directly (admin only) and log the override."""
        property_obj = self.get(property_id)
        authorize(
            actor, property_obj, Action.OVERRIDE_VERIFICATION,
            "Not authorized to update verification status",
        )

        try:
            status = VerificationStatus(status).value
        except ValueError:
            raise BadRequestError(f"Invalid verification status: {status}")

        previous = property_obj.verification_status
        property_obj.verification_status = status
        append_history(
            property_obj,
            HistoryAction.VERIFICATION_STATUS_UPDATED,
            actor.id,
            f"Verification status updated to {status}",
            changes={"from": previous, "to": status, "notes": notes},
        )
        self._commit()

        logger.info(
            "property_verification_overridden",
            property_id=property_obj.id,
            previous_status=previous,
            verification_status=status,
        )
        return property_obj

    def verify_details(
        self,
        title_number: Optional[str] = None,
        survey_plan_number: Optional[str] = None,
        coordinates: Optional[Dict[str, float]] = None,
    ) -> VerificationResult:
        return verification.verify_by_details(
            self.session,
            title_number=title_number,
            survey_plan_number=survey_plan_number,
            coordinates=coordinates,
            repository=self.repository,
        )

    def _ensure_identifiers_free(
        self,
        title_number: Optional[str],
        survey_plan_number: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        if self.repository.identifier_taken(self.session, title_number, survey_plan_number, exclude_id):
            raise BadRequestError("Title number or survey plan number is already registered")

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("property_commit_failed", error=str(e), error_type=type(e).__name__)
            raise InternalError("Database error") from e


def _normalize_identifiers(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("title_number", "survey_plan_number"):
        if key in data:
            data[key] = verification.normalize_identifier(data[key])
    return data
