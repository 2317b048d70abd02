import time

from fastapi import APIRouter, Request

from tasknest.utils.dates import isoformat, utcnow
from tasknest.utils.response import send_success

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    state = request.app.state
    return send_success(
        {
            "status": "ok",
            "timestamp": isoformat(utcnow()),
            "uptime": round(time.monotonic() - state.started_at, 3),
            "environment": state.settings.environment,
        },
        "Server is healthy",
    )
