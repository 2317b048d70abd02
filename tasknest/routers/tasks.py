from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from tasknest.database import get_db
from tasknest.dependencies import get_current_user
from tasknest.models.user import User
from tasknest.schemas.common import ID_PATTERN
from tasknest.schemas.task import TaskAssign, TaskCreate, TaskFilters, TaskUpdate
from tasknest.services import tasks
from tasknest.utils.response import send_success

router = APIRouter(prefix="/tasks", tags=["tasks"])

TaskId = Annotated[str, Path(pattern=ID_PATTERN, description="Task id")]
Search = Annotated[Optional[str], Query(description="Search title or description")]


@router.get("")
def list_tasks(
    filters: Annotated[TaskFilters, Query()],
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return send_success(tasks.list_tasks(db, current, filters), "Tasks retrieved successfully")


@router.get("/search")
def search_all(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.search_all(db, current, search), "Search results retrieved successfully")


@router.get("/assigned")
def list_assigned(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_assigned(db, current), "Assigned tasks retrieved successfully")


@router.get("/completed")
def list_completed(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_completed(db, current, search), "Completed tasks retrieved successfully")


@router.get("/scheduled")
def list_scheduled(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_scheduled(db, current, search), "Scheduled tasks retrieved successfully")


@router.get("/flagged")
def list_flagged(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_flagged(db, current, search), "Flagged tasks retrieved successfully")


@router.get("/today")
def list_today(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_today(db, current, search), "Today's tasks retrieved successfully")


@router.get("/missed")
def list_missed(search: Search = None, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.list_missed(db, current, search), "Missed tasks retrieved successfully")


@router.get("/{task_id}")
def get_task(task_id: TaskId, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.get_task(db, current, task_id), "Task retrieved successfully")


@router.post("")
def create_task(task: TaskCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(tasks.create_task(db, current, task), "Task created successfully", 201)


@router.post("/{task_id}/assign")
def assign_task(
    task_id: TaskId,
    body: TaskAssign,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    data = tasks.assign_task(db, current, task_id, body.friend_id)
    return send_success(data, "Task assigned to friend successfully", 201)


@router.put("/{task_id}")
def update_task(
    task_id: TaskId,
    updates: TaskUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return send_success(tasks.update_task(db, current, task_id, updates), "Task updated successfully")


@router.delete("/{task_id}")
def delete_task(task_id: TaskId, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    tasks.delete_task(db, current, task_id)
    return send_success(None, "Task deleted successfully", 204)
