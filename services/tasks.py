import logging
from typing import Any, List, Mapping, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from errors import AuthorizationError, NotFoundError, UnexpectedError
from models import Task, utcnow
from schemas import TaskCreate, TaskUpdate, validate_fields
from utils.completion import is_completed

logger = logging.getLogger(__name__)


def _save(session: Session, task: Task) -> Task:
    session.add(task)
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to save task %s", task.id)
        raise UnexpectedError("Could not save task") from exc
    session.refresh(task)
    return task


def list_tasks(session: Session, user_id: str) -> List[Task]:
    """All tasks owned by the user, in storage order"""
    return list(session.exec(select(Task).where(Task.owner == user_id)).all())


def get_task(session: Session, user_id: str, task_id: str) -> Task:
    """
    Load one task owned by the user

    Raises:
        NotFoundError: No task with that id
        AuthorizationError: Task belongs to someone else
    """
    task = session.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    if task.owner != user_id:
        logger.warning("User %s tried to access task %s of another user", user_id, task_id)
        raise AuthorizationError("Task not found")
    return task


def create_task(
    session: Session, user_id: str, fields: Union[TaskCreate, Mapping[str, Any]]
) -> Task:
    """
    Create a task for the user

    Args:
        session: Database session
        user_id: Owner
        fields: title, priority and dueDate are required

    Returns:
        The stored task

    Raises:
        ValidationError: Required field absent or malformed
    """
    data = validate_fields(TaskCreate, fields)
    task = Task(
        owner=user_id,
        title=data.title,
        description=data.description or None,
        priority=data.priority,
        due_date=data.due_date,
        completed=data.completed,
    )
    task = _save(session, task)
    logger.info("Created task %s for user %s", task.id, user_id)
    return task


def update_task(
    session: Session,
    user_id: str,
    task_id: str,
    fields: Union[TaskUpdate, Mapping[str, Any]],
) -> Task:
    """Merge the provided fields into the user's task"""
    data = validate_fields(TaskUpdate, fields)
    task = get_task(session, user_id, task_id)

    changes = data.changes()
    if "description" in changes:
        changes["description"] = changes["description"] or None
    for key, value in changes.items():
        setattr(task, key, value)
    task.updated_at = utcnow()

    task = _save(session, task)
    logger.info("Updated task %s", task.id)
    return task


def delete_task(session: Session, user_id: str, task_id: str) -> None:
    """Permanently remove the user's task"""
    task = get_task(session, user_id, task_id)
    session.delete(task)
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to delete task %s", task_id)
        raise UnexpectedError("Could not delete task") from exc
    logger.info("Deleted task %s", task_id)


def toggle_complete(session: Session, user_id: str, task_id: str) -> Task:
    """Flip the completion flag, always writing a canonical boolean"""
    task = get_task(session, user_id, task_id)
    task.completed = not is_completed(task.completed)
    task.updated_at = utcnow()
    return _save(session, task)
