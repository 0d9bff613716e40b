"""
Property verification.

Two entry points:

* ``verify_by_details`` matches submitted title/survey identifiers and
  coordinates against the stored property records (read-only).
* ``verify_document`` records an admin decision on one embedded document and
  re-derives the property-level status from the whole document set.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from config.settings import settings
from src.estatedesk.core.enums import (
    DocumentDecision,
    HistoryAction,
    MatchStatus,
    VerificationStatus,
)
from src.estatedesk.core.history import append_history, utcnow
from src.estatedesk.db.models import Property
from src.estatedesk.db.repository import PropertyRepository
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.utils.geo_utils import distance_meters
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

MSG_IDENTIFIER_REQUIRED = "Title number or survey plan number is required"
MSG_NOT_FOUND = "No property found with the provided details"
MSG_MATCH = "Property details match the records"
MSG_COORDINATE_MISMATCH = "Property coordinates do not match the provided location"


def normalize_identifier(value: Optional[str]) -> Optional[str]:
    """Strip a title or survey plan number; blank values count as absent."""
    if value is None:
        return None
    return value.strip() or None


@dataclass
class VerificationResult:
    """Outcome of a single verification request. Never persisted."""
    status: MatchStatus
    message: str
    distance: Optional[int] = None
    property_obj: Optional[Property] = None

    @property
    def matched(self) -> bool:
        return self.status in (MatchStatus.VERIFIED, MatchStatus.FLAGGED)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"status": self.status.value, "message": self.message}
        if self.distance is not None:
            payload["distance"] = self.distance
        return payload


def verify_by_details(
    session: Session,
    title_number: Optional[str] = None,
    survey_plan_number: Optional[str] = None,
    coordinates: Optional[Dict[str, float]] = None,
    repository: Optional[PropertyRepository] = None,
    radius_meters: Optional[float] = None,
) -> VerificationResult:
    """
    Match submitted registry details against the stored property records.

    Args:
        session: Database session
        title_number: Land title number
        survey_plan_number: Survey plan number
        coordinates: Submitted location as ``{"lat": ..., "lng": ...}``
        repository: Property repository (defaults to PropertyRepository())
        radius_meters: Maximum distance still counted as a match

    Returns:
        VerificationResult with status verified, flagged, not_found or bad_request
    """
    title_number = normalize_identifier(title_number)
    survey_plan_number = normalize_identifier(survey_plan_number)

    if title_number is None and survey_plan_number is None:
        return VerificationResult(MatchStatus.BAD_REQUEST, MSG_IDENTIFIER_REQUIRED)

    repository = repository or PropertyRepository()
    property_obj = repository.find_by_identifier(session, title_number, survey_plan_number)
    if property_obj is None:
        logger.info(
            "property_verification_not_found",
            title_number=title_number,
            survey_plan_number=survey_plan_number,
        )
        return VerificationResult(MatchStatus.NOT_FOUND, MSG_NOT_FOUND)

    if coordinates is not None and property_obj.latitude is not None and property_obj.longitude is not None:
        radius = settings.verification_match_radius_meters if radius_meters is None else radius_meters
        distance = distance_meters(
            coordinates["lat"],
            coordinates["lng"],
            property_obj.latitude,
            property_obj.longitude,
        )
        if distance > radius:
            logger.info(
                "property_verification_flagged",
                property_id=property_obj.id,
                distance_meters=int(distance + 0.5),
            )
            return VerificationResult(
                MatchStatus.FLAGGED,
                MSG_COORDINATE_MISMATCH,
                distance=int(distance + 0.5),
                property_obj=property_obj,
            )

    logger.info("property_verification_matched", property_id=property_obj.id)
    return VerificationResult(MatchStatus.VERIFIED, MSG_MATCH, property_obj=property_obj)


def aggregate_verification_status(documents: Sequence[Dict[str, Any]], current_status: str) -> str:
    """
    Derive property-level status from its document statuses.

    All documents verified -> verified; otherwise any rejected -> rejected;
    otherwise the current status is kept (no fallback to pending). An empty
    document set keeps the current status.

    Args:
        documents: Embedded document dicts
        current_status: Property status before the recompute

    Returns:
        New property verification status
    """
    statuses = [doc.get("verification_status") for doc in documents]
    if not statuses:
        return current_status
    if all(status == VerificationStatus.VERIFIED.value for status in statuses):
        return VerificationStatus.VERIFIED.value
    if any(status == VerificationStatus.REJECTED.value for status in statuses):
        return VerificationStatus.REJECTED.value
    return current_status


def verify_document(
    property_obj: Property,
    document_index: int,
    decision: str,
    verifier_id: int,
    notes: Optional[str] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Property:
    """
    Record a verification decision on one document and recompute the property status.

    Args:
        property_obj: Property owning the document
        document_index: Position in property_obj.documents
        decision: verified, rejected or flagged
        verifier_id: Id of the admin making the decision
        notes: Optional verification notes
        clock: Timestamp source

    Returns:
        The updated property (not yet committed)

    Raises:
        NotFoundError: If document_index is out of range
        BadRequestError: If decision is not a valid document decision
    """
    try:
        decision = DocumentDecision(decision).value
    except ValueError:
        raise BadRequestError(f"Invalid verification status: {decision}")

    documents: List[Dict[str, Any]] = [dict(doc) for doc in (property_obj.documents or [])]
    if not 0 <= document_index < len(documents):
        raise NotFoundError("Document not found")

    documents[document_index].update(
        verification_status=decision,
        verified_by=verifier_id,
        verified_at=clock().isoformat(),
        verification_notes=notes,
    )
    property_obj.documents = documents

    name = documents[document_index].get("name")
    append_history(
        property_obj,
        HistoryAction.DOCUMENT_VERIFIED,
        verifier_id,
        f"Document {name} verified with status: {decision}",
        changes={"document_index": document_index, "verification_status": decision, "notes": notes},
        clock=clock,
    )

    previous = property_obj.verification_status
    property_obj.verification_status = aggregate_verification_status(documents, previous)
    logger.info(
        "property_document_verified",
        property_id=property_obj.id,
        document_index=document_index,
        decision=decision,
        previous_status=previous,
        verification_status=property_obj.verification_status,
    )
    return property_obj
