import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import deferred

from tasknest.database import Base
from tasknest.utils.dates import utcnow


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # deferred: not loaded unless explicitly requested (login)
    password = deferred(Column(String, nullable=True))
    google_id = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
