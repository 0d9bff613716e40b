"""
Leads Router

Endpoints for prospective clients, their communication log and assignment.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor, user_repository
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    ApiResponse,
    CommunicationCreate,
    LeadAssignment,
    LeadCreate,
    LeadDetail,
    LeadUpdate,
    MessageResponse,
)
from src.estatedesk.core.enums import HistoryAction, LeadSource, LeadStatus, UserRole
from src.estatedesk.core.history import append_history
from src.estatedesk.core.permissions import Action, Actor, authorize
from src.estatedesk.db.models import Lead
from src.estatedesk.db.repository import LeadRepository
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/leads", tags=["leads"])

lead_repository = LeadRepository()


def _get_lead(db: Session, lead_id: int) -> Lead:
    lead = lead_repository.get_by_id(db, lead_id)
    if lead is None:
        raise NotFoundError("Lead not found")
    return lead


@router.get("/", response_model=ApiResponse[List[LeadDetail]])
def list_leads(
    status: Optional[LeadStatus] = Query(None, description="Filter by lead status"),
    source: Optional[LeadSource] = Query(None, description="Filter by lead source"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List leads, newest first. Agents only see leads assigned to them.
    """
    leads = lead_repository.find(
        db,
        order_by=Lead.created_at.desc(),
        status=status.value if status else None,
        source=source.value if source else None,
        assigned_agent_id=actor.id if actor.role == UserRole.AGENT.value else None,
    )
    return {"success": True, "data": leads}


@router.get("/{lead_id}", response_model=ApiResponse[LeadDetail])
def get_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": _get_lead(db, lead_id)}


@router.post("/", response_model=ApiResponse[LeadDetail], status_code=201)
def create_lead(
    payload: LeadCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Record a new lead assigned to the current user.
    """
    lead = lead_repository.create(
        db,
        **payload.model_dump(),
        assigned_agent_id=actor.id,
        communication_history=[],
    )
    append_history(lead, HistoryAction.CREATED, actor.id, "Lead created")
    db.commit()

    logger.info("lead_created", lead_id=lead.id, source=lead.source)
    return {"success": True, "data": lead}


@router.put("/{lead_id}", response_model=ApiResponse[LeadDetail])
def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update lead details (assigned agent or admin).
    """
    lead = _get_lead(db, lead_id)
    authorize(actor, lead, Action.UPDATE, "Not authorized to update this lead")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")

    previous_status = lead.status
    for key, value in changes.items():
        setattr(lead, key, value)

    details = "Lead details updated"
    if "status" in changes and changes["status"] != previous_status:
        details = f"Lead status updated from {previous_status} to {changes['status']}"
    append_history(
        lead,
        HistoryAction.UPDATED,
        actor.id,
        details,
        changes=payload.model_dump(mode="json", exclude_unset=True),
    )
    db.commit()

    logger.info("lead_updated", lead_id=lead.id, fields=sorted(changes))
    return {"success": True, "data": lead}


@router.delete("/{lead_id}", response_model=MessageResponse)
def delete_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Delete a lead and its deals (admin only).
    """
    lead = _get_lead(db, lead_id)
    authorize(actor, lead, Action.DELETE, "Not authorized to delete this lead")

    lead_repository.delete(db, lead)
    db.commit()
    return {"success": True, "message": "Lead deleted successfully"}


@router.post("/{lead_id}/communication", response_model=ApiResponse[LeadDetail])
def add_communication(
    lead_id: int,
    payload: CommunicationCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Log a call, email, meeting or message with the lead.
    """
    lead = _get_lead(db, lead_id)
    authorize(actor, lead, Action.ADD_COMMUNICATION, "Not authorized to log communication for this lead")

    append_history(
        lead,
        HistoryAction.COMMUNICATION,
        actor.id,
        payload.message,
        changes={"type": payload.type, "outcome": payload.outcome},
    )
    db.commit()

    logger.info("lead_communication_logged", lead_id=lead.id, communication_type=payload.type)
    return {"success": True, "data": lead}


@router.put("/{lead_id}/assign", response_model=ApiResponse[LeadDetail])
def assign_lead(
    lead_id: int,
    payload: LeadAssignment,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Hand a lead to another agent (admin only).

    Raises:
        NotFoundError: 404 if the lead or target user does not exist
    """
    lead = _get_lead(db, lead_id)
    authorize(actor, lead, Action.ASSIGN, "Not authorized to assign leads")

    if user_repository.get_by_id(db, payload.agent_id) is None:
        raise NotFoundError("Agent not found")

    previous = lead.assigned_agent_id
    lead.assigned_agent_id = payload.agent_id
    append_history(
        lead,
        HistoryAction.ASSIGNMENT,
        actor.id,
        f"Lead assigned to agent {payload.agent_id}",
        changes={"from": previous, "to": payload.agent_id},
    )
    db.commit()

    logger.info("lead_assigned", lead_id=lead.id, previous_agent_id=previous, agent_id=payload.agent_id)
    return {"success": True, "data": lead}
