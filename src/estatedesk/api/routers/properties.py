"""
Properties Router

Endpoints for property listings, document uploads and verification.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    ApiResponse,
    DocumentUpload,
    DocumentVerificationRequest,
    MessageResponse,
    PropertyCreate,
    PropertyDetail,
    PropertyUpdate,
    VerificationOverride,
    VerifyDetailsRequest,
    VerifyDetailsResult,
)
from src.estatedesk.core.enums import MatchStatus
from src.estatedesk.core.permissions import Actor
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.services.property_service import PropertyService

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.post("/verify", response_model=ApiResponse[VerifyDetailsResult])
def verify_property_by_details(
    payload: VerifyDetailsRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Match title/survey identifiers and optional coordinates against the records.

    Returns:
        Matched property and verification outcome (verified or flagged)

    Raises:
        BadRequestError: 400 if neither identifier is supplied
        NotFoundError: 404 if no property matches
    """
    result = PropertyService(db).verify_details(
        title_number=payload.title_number,
        survey_plan_number=payload.survey_plan_number,
        coordinates=payload.coordinates.model_dump() if payload.coordinates else None,
    )
    if result.status == MatchStatus.BAD_REQUEST:
        raise BadRequestError(result.message)
    if not result.matched:
        raise NotFoundError(result.message)

    return {
        "success": True,
        "data": {"property": result.property_obj, "verification": result.to_dict()},
    }


@router.get("/", response_model=ApiResponse[List[PropertyDetail]])
def list_properties(
    status: Optional[str] = Query(None, pattern="^(pending|verified|rejected|flagged)$"),
    owner_id: Optional[int] = Query(None, description="Filter by owner user id"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List properties, newest first.
    """
    return {"success": True, "data": PropertyService(db).list_properties(status=status, owner_id=owner_id)}


@router.get("/{property_id}", response_model=ApiResponse[PropertyDetail])
def get_property_detail(
    property_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Get detailed information for a specific property.

    Raises:
        NotFoundError: 404 if property not found
    """
    return {"success": True, "data": PropertyService(db).get(property_id)}


@router.post("/", response_model=ApiResponse[PropertyDetail], status_code=201)
def create_property(
    payload: PropertyCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List a new property owned by the current user.
    """
    property_obj = PropertyService(db).create(actor, payload.model_dump())
    return {"success": True, "data": property_obj}


@router.put("/{property_id}", response_model=ApiResponse[PropertyDetail])
def update_property(
    property_id: int,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update listing details (owner or admin).
    """
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")
    property_obj = PropertyService(db).update(actor, property_id, changes)
    return {"success": True, "data": property_obj}


@router.delete("/{property_id}", response_model=MessageResponse)
def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Delete a property with its documents and history (admin only).
    """
    PropertyService(db).delete(actor, property_id)
    return {"success": True, "message": "Property deleted successfully"}


@router.put("/{property_id}/verification", response_model=ApiResponse[PropertyDetail])
def update_verification_status(
    property_id: int,
    payload: VerificationOverride,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Override the verification status directly (admin only).
    """
    property_obj = PropertyService(db).override_verification(
        actor, property_id, payload.status, payload.notes
    )
    return {"success": True, "data": property_obj}


@router.post("/{property_id}/documents", response_model=ApiResponse[PropertyDetail])
def upload_document(
    property_id: int,
    payload: DocumentUpload,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Append a document to the property (owner or admin).
    """
    property_obj = PropertyService(db).upload_document(
        actor,
        property_id,
        document_type=payload.document_type,
        document_name=payload.document_name,
        document_url=payload.document_url,
    )
    return {"success": True, "data": property_obj}


@router.put("/{property_id}/documents/verify", response_model=ApiResponse[PropertyDetail])
def verify_document(
    property_id: int,
    payload: DocumentVerificationRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Record a verification decision on one document (admin only).

    Raises:
        NotFoundError: 404 if the property or document index does not exist
    """
    property_obj = PropertyService(db).verify_document(
        actor,
        property_id,
        payload.document_index,
        payload.verification_status,
        payload.notes,
    )
    return {"success": True, "data": property_obj}
