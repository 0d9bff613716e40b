"""
Agents Router

Endpoints for agent profiles and performance metrics.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor, user_repository
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    AgentCreate,
    AgentOut,
    AgentStatusUpdate,
    AgentUpdate,
    ApiResponse,
    MessageResponse,
    PerformanceMetrics,
)
from src.estatedesk.core.enums import AccountStatus
from src.estatedesk.core.permissions import Action, Actor, authorize, require_admin
from src.estatedesk.db.models import Agent
from src.estatedesk.db.repository import AgentRepository
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/agents", tags=["agents"])

agent_repository = AgentRepository()

DEFAULT_PERFORMANCE_METRICS = {
    "deals_closed": 0,
    "revenue_generated": 0,
    "client_satisfaction": 0,
    "response_time": 0,
}


def _get_agent(db: Session, agent_id: int) -> Agent:
    agent = agent_repository.get_by_id(db, agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    return agent


def _ensure_license_free(db: Session, license_number: str, exclude_id: Optional[int] = None) -> None:
    holders = agent_repository.find(db, license_number=license_number)
    if any(holder.id != exclude_id for holder in holders):
        raise BadRequestError("License number is already registered")


@router.get("/", response_model=ApiResponse[List[AgentOut]])
def list_agents(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": agent_repository.find(db, order_by=Agent.created_at.desc())}


@router.get("/{agent_id}", response_model=ApiResponse[AgentOut])
def get_agent(
    agent_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": _get_agent(db, agent_id)}


@router.post("/", response_model=ApiResponse[AgentOut], status_code=201)
def create_agent(
    payload: AgentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create an agent profile for an existing user (admin only).

    Raises:
        ForbiddenError: 403 for non-admins
        NotFoundError: 404 if the user does not exist
        BadRequestError: 400 if the user already has a profile or the license is taken
    """
    require_admin(actor, Action.MANAGE_AGENT, "Not authorized to create agents")

    if user_repository.get_by_id(db, payload.user_id) is None:
        raise NotFoundError("User not found")
    if agent_repository.get_by_user_id(db, payload.user_id) is not None:
        raise BadRequestError("User already has an agent profile")
    _ensure_license_free(db, payload.license_number)

    agent = agent_repository.create(
        db,
        **payload.model_dump(),
        performance_metrics=dict(DEFAULT_PERFORMANCE_METRICS),
        status=AccountStatus.ACTIVE.value,
    )
    db.commit()

    logger.info("agent_created", agent_id=agent.id, user_id=agent.user_id)
    return {"success": True, "data": agent}


@router.put("/{agent_id}", response_model=ApiResponse[AgentOut])
def update_agent(
    agent_id: int,
    payload: AgentUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update an agent profile (the agent themselves or an admin).
    """
    agent = _get_agent(db, agent_id)
    authorize(actor, agent, Action.UPDATE, "Not authorized to update this agent")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")
    if changes.get("license_number"):
        _ensure_license_free(db, changes["license_number"], exclude_id=agent.id)

    for key, value in changes.items():
        setattr(agent, key, value)
    db.commit()

    logger.info("agent_updated", agent_id=agent.id, fields=sorted(changes))
    return {"success": True, "data": agent}


@router.delete("/{agent_id}", response_model=MessageResponse)
def delete_agent(
    agent_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    agent = _get_agent(db, agent_id)
    authorize(actor, agent, Action.DELETE, "Not authorized to delete agents")

    agent_repository.delete(db, agent)
    db.commit()
    return {"success": True, "message": "Agent deleted successfully"}


@router.put("/{agent_id}/performance", response_model=ApiResponse[AgentOut])
def update_performance_metrics(
    agent_id: int,
    payload: PerformanceMetrics,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Merge new values into an agent's performance metrics (admin only).
    """
    agent = _get_agent(db, agent_id)
    authorize(actor, agent, Action.MANAGE_AGENT, "Not authorized to update performance metrics")

    agent.performance_metrics = {
        **(agent.performance_metrics or {}),
        **payload.model_dump(exclude_none=True),
    }
    db.commit()

    logger.info("agent_performance_updated", agent_id=agent.id)
    return {"success": True, "data": agent}


@router.put("/{agent_id}/status", response_model=ApiResponse[AgentOut])
def update_agent_status(
    agent_id: int,
    payload: AgentStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    agent = _get_agent(db, agent_id)
    authorize(actor, agent, Action.MANAGE_AGENT, "Not authorized to update agent status")

    previous = agent.status
    agent.status = payload.status
    db.commit()

    logger.info("agent_status_updated", agent_id=agent.id, previous_status=previous, status=agent.status)
    return {"success": True, "data": agent}
