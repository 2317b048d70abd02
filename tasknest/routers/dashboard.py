from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasknest.database import get_db
from tasknest.dependencies import get_current_user
from tasknest.models.user import User
from tasknest.services.dashboard import get_dashboard_stats
from tasknest.utils.response import send_success

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
def stats(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(get_dashboard_stats(db, current), "Dashboard stats retrieved successfully")
