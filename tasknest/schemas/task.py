from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from tasknest.models.task import PRIORITIES, STATUSES
from tasknest.schemas.common import ID_PATTERN, CamelModel, IsoDatetime
from tasknest.utils.dates import local_day_bounds, to_naive_utc

Priority = Literal["low", "medium", "high"]
Status = Literal["todo", "active", "completed"]


def _due_date_not_past(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return v
    v = to_naive_utc(v)
    today_start, _ = local_day_bounds()
    if v < today_start:
        raise ValueError("Due date cannot be in the past")
    return v


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority = "medium"
    status: Status = "todo"
    flagged: bool = False

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        if not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return v.strip() if v is not None else v

    @field_validator("due_date")
    @classmethod
    def due_date_not_past(cls, v):
        return _due_date_not_past(v)


class TaskUpdate(CamelModel):
    """Partial update; only keys present in the request body are applied.

    An explicit null clears description or dueDate; the other fields cannot
    be nulled.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    flagged: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        if v is None or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator("priority", "status", "flagged")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return v.strip() if v is not None else v

    @field_validator("due_date")
    @classmethod
    def due_date_not_past(cls, v):
        return _due_date_not_past(v)

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class TaskAssign(CamelModel):
    friend_id: str = Field(pattern=ID_PATTERN)


class TaskFilters(CamelModel):
    """Query filters for the main listing.

    Unknown status/priority values are ignored rather than rejected.
    """

    status: Optional[str] = None
    priority: Optional[str] = None
    flagged: Optional[bool] = None
    search: Optional[str] = None
    all: bool = False

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        return v if v in STATUSES else None

    @field_validator("priority")
    @classmethod
    def known_priority(cls, v):
        return v if v in PRIORITIES else None

    @field_validator("search")
    @classmethod
    def strip_search(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip()


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[IsoDatetime] = None
    priority: str
    status: str
    flagged: bool = False
    assigned_by: Optional[str] = None
    assigned_by_email: Optional[str] = None
    completed_at: Optional[IsoDatetime] = None
    created_at: IsoDatetime
    updated_at: IsoDatetime


class DashboardStats(CamelModel):
    all: int
    today: int
    scheduled: int
    flagged: int
    completed: int
    friends: int
    missed: int
