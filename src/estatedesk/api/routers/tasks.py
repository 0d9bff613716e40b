"""
Tasks Router

Endpoints for work items handed between users.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import get_current_actor, user_repository
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import (
    ApiResponse,
    MessageResponse,
    TaskCreate,
    TaskDetail,
    TaskStatusUpdate,
    TaskUpdate,
)
from src.estatedesk.core.enums import HistoryAction, Priority, TaskStatus
from src.estatedesk.core.history import append_history
from src.estatedesk.core.permissions import Action, Actor, authorize
from src.estatedesk.db.models import Task
from src.estatedesk.db.repository import TaskRepository
from src.estatedesk.exceptions import BadRequestError, NotFoundError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])

task_repository = TaskRepository()


def _get_task(db: Session, task_id: int) -> Task:
    task = task_repository.get_by_id(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def _ensure_assignee_exists(db: Session, user_id: int) -> None:
    if user_repository.get_by_id(db, user_id) is None:
        raise NotFoundError("Assignee not found")


@router.get("/", response_model=ApiResponse[List[TaskDetail]])
def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by task status"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    List tasks by due date. Non-admins only see tasks assigned to them.
    """
    tasks = task_repository.find(
        db,
        order_by=(Task.due_date.asc(), Task.id.asc()),
        status=status.value if status else None,
        priority=priority.value if priority else None,
        assigned_to_id=None if actor.is_admin else actor.id,
    )
    return {"success": True, "data": tasks}


@router.get("/{task_id}", response_model=ApiResponse[TaskDetail])
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return {"success": True, "data": _get_task(db, task_id)}


@router.post("/", response_model=ApiResponse[TaskDetail], status_code=201)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Assign a new task. The actor is recorded as the assigner.

    Raises:
        NotFoundError: 404 if the assignee does not exist
    """
    _ensure_assignee_exists(db, payload.assigned_to_id)

    data = payload.model_dump(exclude={"related_to"})
    related = payload.related_to
    task = task_repository.create(
        db,
        **data,
        assigned_by_id=actor.id,
        related_model=related.model if related else None,
        related_id=related.id if related else None,
        reminders=[],
        history=[],
    )
    append_history(task, HistoryAction.CREATED, actor.id, "Task created")
    db.commit()

    logger.info("task_created", task_id=task.id, assigned_to_id=task.assigned_to_id)
    return {"success": True, "data": task}


@router.put("/{task_id}", response_model=ApiResponse[TaskDetail])
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update task details (assignee, assigner or admin).
    """
    task = _get_task(db, task_id)
    authorize(actor, task, Action.UPDATE, "Not authorized to update this task")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequestError("No fields to update")
    if changes.get("assigned_to_id") is not None:
        _ensure_assignee_exists(db, changes["assigned_to_id"])

    for key, value in changes.items():
        setattr(task, key, value)
    append_history(
        task,
        HistoryAction.UPDATED,
        actor.id,
        "Task details updated",
        changes=payload.model_dump(mode="json", exclude_unset=True),
    )
    db.commit()

    logger.info("task_updated", task_id=task.id, fields=sorted(changes))
    return {"success": True, "data": task}


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Delete a task (admin only).
    """
    task = _get_task(db, task_id)
    authorize(actor, task, Action.DELETE, "Not authorized to delete this task")

    task_repository.delete(db, task)
    db.commit()
    return {"success": True, "message": "Task deleted successfully"}


@router.put("/{task_id}/status", response_model=ApiResponse[TaskDetail])
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    task = _get_task(db, task_id)
    authorize(actor, task, Action.UPDATE_STATUS, "Not authorized to update this task")

    previous = task.status
    task.status = payload.status
    append_history(
        task,
        HistoryAction.UPDATED,
        actor.id,
        f"Task status updated from {previous} to {payload.status}",
        changes={"from": previous, "to": payload.status},
    )
    db.commit()

    logger.info("task_status_updated", task_id=task.id, previous_status=previous, status=task.status)
    return {"success": True, "data": task}
