"""
Deals Router

Endpoints for the deal pipeline: stages, documents and the activity log.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    ApiResponse,
    DealCreate,
    DealDetail,
    DealDocumentCreate,
    DealStageUpdate,
    DealUpdate,
    MessageResponse,
)
from src.estatedesk.core.enums import DealStage, DealType, HistoryAction, UserRole
from src.estatedesk.core.history import append_history, utcnow
from src.estatedesk.core.permissions import Action, Actor, authorize
from src.estatedesk.db.models import Deal
from src.estatedesk.db.repository import DealRepository, LeadRepository, PropertyRepository
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/deals", tags=["deals"])

deal_repository = DealRepository()
property_repository = PropertyRepository()
lead_repository = LeadRepository()


def _get_deal(db: Session, deal_id: int) -> Deal:
    deal = deal_repository.get_by_id(db, deal_id)
    if deal is None:
        raise NotFoundError("Deal not found")
    return deal


@router.get("/", response_model=ApiResponse[List[DealDetail]])
def list_deals(
    stage: Optional[DealStage] = Query(None, description="Filter by pipeline stage"),
    deal_type: Optional[DealType] = Query(None, description="Filter by deal type"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List deals, newest first. Agents only see deals they handle.
    """
    deals = deal_repository.find(
        db,
        order_by=Deal.created_at.desc(),
        stage=stage.value if stage else None,
        deal_type=deal_type.value if deal_type else None,
        agent_id=actor.id if actor.role == UserRole.AGENT.value else None,
    )
    return {"success": True, "data": deals}


@router.get("/{deal_id}", response_model=ApiResponse[DealDetail])
def get_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": _get_deal(db, deal_id)}


@router.post("/", response_model=ApiResponse[DealDetail], status_code=201)
def create_deal(
    payload: DealCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Open a deal between an existing lead and property. The actor becomes the
    handling agent.

    Raises:
        NotFoundError: 404 if the property or lead does not exist
    """
    if property_repository.get_by_id(db, payload.property_id) is None:
        raise NotFoundError("Property not found")
    if lead_repository.get_by_id(db, payload.lead_id) is None:
        raise NotFoundError("Lead not found")

    deal = deal_repository.create(
        db,
        **payload.model_dump(),
        agent_id=actor.id,
        documents=[],
        activity_log=[],
    )
    append_history(deal, HistoryAction.CREATED, actor.id, "Deal created")
    db.commit()

    logger.info("deal_created", deal_id=deal.id, property_id=deal.property_id, lead_id=deal.lead_id)
    return {"success": True, "data": deal}


@router.put("/{deal_id}", response_model=ApiResponse[DealDetail])
def update_deal(
    deal_id: int,
    payload: DealUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update deal terms (handling agent or admin). Stage changes go through
    ``PUT /{deal_id}/stage``.
    """
    deal = _get_deal(db, deal_id)
    authorize(actor, deal, Action.UPDATE, "Not authorized to update this deal")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")

    for key, value in changes.items():
        setattr(deal, key, value)
    append_history(
        deal,
        HistoryAction.UPDATED,
        actor.id,
        "Deal details updated",
        changes=payload.model_dump(mode="json", exclude_unset=True),
    )
    db.commit()

    logger.info("deal_updated", deal_id=deal.id, fields=sorted(changes))
    return {"success": True, "data": deal}


@router.delete("/{deal_id}", response_model=MessageResponse)
def delete_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Delete a deal (admin only).
    """
    deal = _get_deal(db, deal_id)
    authorize(actor, deal, Action.DELETE, "Not authorized to delete this deal")

    deal_repository.delete(db, deal)
    db.commit()
    return {"success": True, "message": "Deal deleted successfully"}


@router.put("/{deal_id}/stage", response_model=ApiResponse[DealDetail])
def update_deal_stage(
    deal_id: int,
    payload: DealStageUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Move a deal to another pipeline stage.
    """
    deal = _get_deal(db, deal_id)
    authorize(actor, deal, Action.UPDATE_STAGE, "Not authorized to update this deal")

    previous = deal.stage
    deal.stage = payload.stage
    append_history(
        deal,
        HistoryAction.STAGE_UPDATED,
        actor.id,
        f"Deal stage updated from {previous} to {payload.stage}",
        changes={"from": previous, "to": payload.stage},
    )
    db.commit()

    logger.info("deal_stage_updated", deal_id=deal.id, previous_stage=previous, stage=deal.stage)
    return {"success": True, "data": deal}


@router.post("/{deal_id}/documents", response_model=ApiResponse[DealDetail])
def add_deal_document(
    deal_id: int,
    payload: DealDocumentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Attach a document to a deal.
    """
    deal = _get_deal(db, deal_id)
    authorize(actor, deal, Action.UPLOAD_DOCUMENT, "Not authorized to add documents to this deal")

    document = {
        "type": payload.document_type,
        "url": payload.document_url,
        "notes": payload.notes,
        "uploaded_by": actor.id,
        "uploaded_at": utcnow().isoformat(),
    }
    deal.documents = list(deal.documents or []) + [document]
    append_history(
        deal,
        HistoryAction.DOCUMENT_ADDED,
        actor.id,
        f"New document added: {payload.document_type}",
    )
    db.commit()

    logger.info("deal_document_added", deal_id=deal.id, document_type=payload.document_type)
    return {"success": True, "data": deal}
