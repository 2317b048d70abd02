"""Owner-scoped task queries, CRUD and friend assignment.

Every query is filtered on ``Task.user_id == owner.id``: a task that belongs to
someone else is reported as missing, never as forbidden.

The dated views (today, missed, scheduled) cut days at local server midnight.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, or_
from sqlalchemy.orm import Query, Session

from tasknest.models.task import Task
from tasknest.models.user import User
from tasknest.schemas.task import TaskCreate, TaskFilters, TaskOut, TaskUpdate
from tasknest.services.friends import are_friends
from tasknest.utils.dates import local_day_bounds, utcnow
from tasknest.utils.errors import ApiError

logger = logging.getLogger(__name__)

# high sorts above medium above low
PRIORITY_RANK = case({"high": 3, "medium": 2, "low": 1}, value=Task.priority, else_=0)


def serialize_task(task: Task) -> dict:
    return TaskOut.model_validate(task).dump()


def _owned(db: Session, owner: User) -> Query:
    return db.query(Task).filter(Task.user_id == owner.id)


def _matching(query: Query, search: Optional[str]) -> Query:
    """Case-insensitive substring match on title or description."""
    if search and search.strip():
        term = search.strip()
        query = query.filter(
            or_(
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
            )
        )
    return query


def _get_owned(db: Session, owner: User, task_id: str, message: str = "Resource not found") -> Task:
    task = _owned(db, owner).filter(Task.id == task_id).first()
    if task is None:
        raise ApiError.not_found(message)
    return task


def _set_status(task: Task, status: str) -> None:
    if status == "completed" and task.status != "completed":
        task.completed_at = utcnow()
    elif status != "completed":
        task.completed_at = None
    task.status = status


def create_task(db: Session, owner: User, data: TaskCreate) -> dict:
    task = Task(
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        priority=data.priority,
        flagged=data.flagged,
        user_id=owner.id,
    )
    _set_status(task, data.status)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task %s created by %s", task.id, owner.id)
    return serialize_task(task)


def get_task(db: Session, owner: User, task_id: str) -> dict:
    return serialize_task(_get_owned(db, owner, task_id))


def update_task(db: Session, owner: User, task_id: str, data: TaskUpdate) -> dict:
    task = _get_owned(db, owner, task_id)
    changes = data.changes()
    status = changes.pop("status", None)
    for field, value in changes.items():
        setattr(task, field, value)
    if status is not None:
        _set_status(task, status)
    db.commit()
    db.refresh(task)
    return serialize_task(task)


def delete_task(db: Session, owner: User, task_id: str) -> None:
    task = _get_owned(db, owner, task_id)
    db.delete(task)
    db.commit()
    logger.info("task %s deleted by %s", task_id, owner.id)


def list_tasks(db: Session, owner: User, filters: TaskFilters) -> List[dict]:
    query = _owned(db, owner)
    if filters.all:
        # `all` replaces any status filter
        query = query.filter(Task.status != "completed")
    elif filters.status:
        query = query.filter(Task.status == filters.status)
    if filters.priority:
        query = query.filter(Task.priority == filters.priority)
    if filters.flagged is not None:
        query = query.filter(Task.flagged == filters.flagged)
    query = _matching(query, filters.search)
    return [serialize_task(t) for t in query.order_by(Task.created_at.desc())]


def list_assigned(db: Session, owner: User) -> List[dict]:
    tasks = (
        _owned(db, owner)
        .filter(Task.assigned_by.isnot(None))
        .order_by(Task.created_at.desc())
        .all()
    )
    out = []
    for task in tasks:
        data = serialize_task(task)
        if not data["assignedByEmail"] and task.assigner is not None:
            data["assignedByEmail"] = task.assigner.email
        out.append(data)
    return out


def list_completed(db: Session, owner: User, search: Optional[str] = None) -> List[dict]:
    query = _matching(_owned(db, owner).filter(Task.status == "completed"), search)
    query = query.order_by(Task.completed_at.desc().nulls_last(), Task.created_at.desc())
    return [serialize_task(t) for t in query]


def list_scheduled(db: Session, owner: User, search: Optional[str] = None, now: Optional[datetime] = None) -> List[dict]:
    today, _ = local_day_bounds(now)
    query = _owned(db, owner).filter(Task.due_date > today, Task.status != "completed")
    query = _matching(query, search).order_by(Task.due_date.asc(), Task.created_at.desc())
    return [serialize_task(t) for t in query]


def list_flagged(db: Session, owner: User, search: Optional[str] = None) -> List[dict]:
    query = _matching(_owned(db, owner).filter(Task.flagged.is_(True)), search)
    query = query.order_by(PRIORITY_RANK.desc(), Task.created_at.desc())
    return [serialize_task(t) for t in query]


def list_today(db: Session, owner: User, search: Optional[str] = None, now: Optional[datetime] = None) -> List[dict]:
    today, tomorrow = local_day_bounds(now)
    query = _owned(db, owner).filter(Task.due_date >= today, Task.due_date < tomorrow)
    query = _matching(query, search).order_by(PRIORITY_RANK.desc(), Task.created_at.desc())
    return [serialize_task(t) for t in query]


def list_missed(db: Session, owner: User, search: Optional[str] = None, now: Optional[datetime] = None) -> List[dict]:
    today, _ = local_day_bounds(now)
    query = _owned(db, owner).filter(Task.due_date < today, Task.status != "completed")
    query = _matching(query, search).order_by(
        Task.due_date.asc(), PRIORITY_RANK.desc(), Task.created_at.desc()
    )
    return [serialize_task(t) for t in query]


def search_all(db: Session, owner: User, search: Optional[str]) -> List[dict]:
    """Every matching task the owner holds, newest first.

    Each entry is tagged ``isAssigned`` when a friend assigned it in.
    """
    if not search or not search.strip():
        raise ApiError.bad_request("Search query is required")

    results = []
    for task in _matching(_owned(db, owner), search).order_by(Task.created_at.desc()):
        data = serialize_task(task)
        data["isAssigned"] = task.assigned_by is not None
        results.append(data)
    return results


def assign_task(db: Session, actor: User, task_id: str, friend_id: Optional[str]) -> dict:
    """Copy one of the actor's tasks into a friend's list.

    The copy starts over as ``todo`` and records who assigned it; the
    original is left as it was.
    """
    if not friend_id:
        raise ApiError.bad_request("Friend ID is required")
    if not are_friends(db, actor.id, friend_id):
        raise ApiError.bad_request("Friendship does not exist")

    source = _get_owned(db, actor, task_id, "Task not found")
    if db.get(User, friend_id) is None:
        raise ApiError.not_found("Friend not found")

    copy = Task(
        title=source.title,
        description=source.description,
        due_date=source.due_date,
        priority=source.priority,
        status="todo",
        user_id=friend_id,
        assigned_by=actor.id,
        assigned_by_email=actor.email,
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    logger.info("task %s assigned by %s to %s as %s", task_id, actor.id, friend_id, copy.id)
    return serialize_task(copy)
