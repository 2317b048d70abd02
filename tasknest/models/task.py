from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from tasknest.database import Base
from tasknest.models.user import new_id
from tasknest.utils.dates import utcnow

PRIORITIES = ("low", "medium", "high")
STATUSES = ("todo", "active", "completed")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    priority = Column(String(16), nullable=False, default="medium")
    status = Column(String(16), nullable=False, default="todo")
    flagged = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_by_email = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    assigner = relationship("User", foreign_keys=[assigned_by])

    __table_args__ = (
        Index("ix_tasks_user_status", "user_id", "status"),
        Index("ix_tasks_user_due", "user_id", "due_date"),
        Index("ix_tasks_user_flagged", "user_id", "flagged"),
    )
