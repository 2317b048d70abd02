from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from tasknest.database import get_db
from tasknest.dependencies import get_current_user
from tasknest.models.user import User
from tasknest.schemas.common import ID_PATTERN
from tasknest.schemas.friend import FriendRequestCreate
from tasknest.services import friends
from tasknest.utils.response import send_success

router = APIRouter(prefix="/friends", tags=["friends"])

RequestId = Annotated[str, Path(pattern=ID_PATTERN, description="Friend request or friendship id")]


@router.get("/search")
def search_users(
    email: Optional[str] = Query(None, description="Email substring"),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return send_success(friends.search_users(db, current, email), "Users found")


@router.get("/requests")
def list_requests(
    type: Optional[str] = Query(None, description="sent, received or both (default)"),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return send_success(friends.list_requests(db, current, type or "both"), "Friend requests retrieved successfully")


@router.post("/requests")
def send_request(
    body: FriendRequestCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    data = friends.send_request(db, current, body.recipient_id)
    return send_success(data, "Friend request sent successfully", 201)


@router.put("/requests/{request_id}/accept")
def accept_request(
    request_id: RequestId,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return send_success(friends.accept_request(db, current, request_id), "Friend request accepted")


@router.put("/requests/{request_id}/reject")
def reject_request(
    request_id: RequestId,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    friends.reject_request(db, current, request_id)
    return send_success(None, "Friend request rejected", 204)


@router.get("")
def list_friends(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return send_success(friends.list_friends(db, current), "Friends retrieved successfully")


@router.delete("/{friendship_id}")
def remove_friend(
    friendship_id: RequestId,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    friends.remove_friend(db, current, friendship_id)
    return send_success(None, "Friend removed successfully", 204)
