from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from database import get_session
from schemas import TaskCreate, TaskUpdate, dump_task
from middleware.auth import get_current_user_id
from services import tasks as repository

router = APIRouter()


@router.get("")
def list_tasks(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """
    Get all tasks for authenticated user

    Args:
        user_id: Authenticated user
        session: Database session

    Returns:
        {"success": True, "tasks": [...]}
    """
    tasks = repository.list_tasks(session, user_id)
    return {"success": True, "tasks": [dump_task(task) for task in tasks]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """
    Create a new task

    Args:
        task_data: Task creation data
        user_id: Authenticated user
        session: Database session

    Returns:
        {"success": True, "task": {...}}
    """
    task = repository.create_task(session, user_id, task_data)
    return {"success": True, "task": dump_task(task)}


@router.get("/{task_id}")
def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """Get task details"""
    task = repository.get_task(session, user_id, task_id)
    return {"success": True, "task": dump_task(task)}


@router.put("/{task_id}")
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """
    Update a task

    Only the fields present in the body are changed.
    """
    task = repository.update_task(session, user_id, task_id, task_data)
    return {"success": True, "task": dump_task(task)}


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """Delete a task"""
    repository.delete_task(session, user_id, task_id)
    return {"success": True}


@router.patch("/{task_id}/complete")
def toggle_task_completion(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
) -> dict:
    """Toggle task completion status"""
    task = repository.toggle_complete(session, user_id, task_id)
    return {"success": True, "task": dump_task(task)}
