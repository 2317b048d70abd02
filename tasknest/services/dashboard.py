from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from tasknest.models.task import Task
from tasknest.models.user import User
from tasknest.schemas.task import DashboardStats
from tasknest.utils.dates import utc_day_bounds


def get_dashboard_stats(db: Session, owner: User, now: Optional[datetime] = None) -> dict:
    """Counts for the sidebar.

    Unlike the dated task views, "today" here is the UTC calendar day.
    """
    today, tomorrow = utc_day_bounds(now)
    owned = db.query(Task).filter(Task.user_id == owner.id)
    open_tasks = owned.filter(Task.status != "completed")

    stats = DashboardStats(
        all=open_tasks.count(),
        today=open_tasks.filter(Task.due_date >= today, Task.due_date < tomorrow).count(),
        missed=open_tasks.filter(Task.due_date < today).count(),
        scheduled=open_tasks.filter(Task.due_date >= tomorrow).count(),
        flagged=owned.filter(Task.flagged.is_(True)).count(),
        completed=owned.filter(Task.status == "completed").count(),
        friends=owned.filter(Task.assigned_by.isnot(None)).count(),
    )
    return stats.dump()
