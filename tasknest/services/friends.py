"""Friend requests and friendships.

A request is created ``pending`` by the requester. Only the recipient may
accept it (-> ``accepted``) or reject it; rejection deletes the record instead
of keeping a ``rejected`` row, so the pair is free to start over. Either party
of an accepted friendship may remove it.
"""
import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasknest.models.friend import Friend
from tasknest.models.user import User
from tasknest.schemas.friend import FriendOut, FriendRequestOut
from tasknest.schemas.user import PublicProfile
from tasknest.utils.errors import ApiError

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def serialize_request(friend: Friend, viewer_id: Optional[str] = None, with_created: bool = True) -> dict:
    out = FriendRequestOut(
        id=friend.id,
        requester=PublicProfile.model_validate(friend.requester),
        recipient=PublicProfile.model_validate(friend.recipient),
        status=friend.status,
        is_sent=(friend.requester_id == viewer_id) if viewer_id else None,
        created_at=friend.created_at if with_created else None,
    )
    return out.dump(exclude_none=True)


def _pair_filter(a: str, b: str):
    low, high = sorted((a, b))
    return and_(Friend.user_low == low, Friend.user_high == high)


def find_between(db: Session, a: str, b: str) -> Optional[Friend]:
    return db.query(Friend).filter(_pair_filter(a, b)).first()


def are_friends(db: Session, a: str, b: str) -> bool:
    return (
        db.query(Friend.id)
        .filter(_pair_filter(a, b), Friend.status == "accepted")
        .first()
        is not None
    )


def send_request(db: Session, requester: User, recipient_id: Optional[str]) -> dict:
    if not recipient_id:
        raise ApiError.bad_request("Recipient ID is required")
    if recipient_id == requester.id:
        raise ApiError.bad_request("Cannot send friend request to yourself")

    if db.get(User, recipient_id) is None:
        raise ApiError.not_found("User not found")

    existing = find_between(db, requester.id, recipient_id)
    if existing is not None:
        if existing.status == "pending":
            raise ApiError.conflict("Friend request already sent")
        if existing.status == "accepted":
            raise ApiError.conflict("Already friends")

    friend = Friend.between(requester.id, recipient_id, status="pending")
    db.add(friend)
    try:
        db.commit()
    except IntegrityError:
        # lost the race against a concurrent request for the same pair
        db.rollback()
        raise ApiError.conflict("Friend request already exists")
    db.refresh(friend)
    logger.info("friend request %s sent %s -> %s", friend.id, requester.id, recipient_id)
    return serialize_request(friend)


def _recipient_owned(db: Session, actor: User, request_id: str, verb: str) -> Friend:
    friend = db.get(Friend, request_id)
    if friend is None:
        raise ApiError.not_found("Friend request not found")
    if friend.recipient_id != actor.id:
        raise ApiError.forbidden(f"Unauthorized to {verb} this request")
    return friend


def accept_request(db: Session, actor: User, request_id: str) -> dict:
    friend = _recipient_owned(db, actor, request_id, "accept")
    if friend.status != "pending":
        raise ApiError.bad_request("Friend request is not pending")

    friend.status = "accepted"
    db.commit()
    db.refresh(friend)
    logger.info("friend request %s accepted", friend.id)
    return serialize_request(friend, with_created=False)


def reject_request(db: Session, actor: User, request_id: str) -> None:
    friend = _recipient_owned(db, actor, request_id, "reject")
    db.delete(friend)
    db.commit()
    logger.info("friend request %s rejected", request_id)


def list_requests(db: Session, actor: User, direction: str = "both") -> List[dict]:
    sent = Friend.requester_id == actor.id
    received = Friend.recipient_id == actor.id
    if direction == "sent":
        role = sent
    elif direction == "received":
        role = received
    else:
        role = or_(sent, received)

    requests = (
        db.query(Friend)
        .filter(role, Friend.status == "pending")
        .order_by(Friend.created_at.desc())
        .all()
    )
    return [serialize_request(r, viewer_id=actor.id) for r in requests]


def list_friends(db: Session, actor: User) -> List[dict]:
    relations = (
        db.query(Friend)
        .filter(
            or_(Friend.requester_id == actor.id, Friend.recipient_id == actor.id),
            Friend.status == "accepted",
        )
        .order_by(Friend.updated_at.desc())
        .all()
    )
    friends = []
    for fr in relations:
        other = fr.other_party(actor.id)
        friends.append(
            FriendOut(
                id=other.id,
                name=other.name,
                email=other.email,
                friendship_id=fr.id,
                created_at=fr.created_at,
            ).dump()
        )
    return friends


def remove_friend(db: Session, actor: User, friendship_id: str) -> None:
    friend = (
        db.query(Friend)
        .filter(
            Friend.id == friendship_id,
            Friend.status == "accepted",
            or_(Friend.requester_id == actor.id, Friend.recipient_id == actor.id),
        )
        .first()
    )
    if friend is None:
        raise ApiError.not_found("Friend relationship not found")
    db.delete(friend)
    db.commit()
    logger.info("friendship %s removed by %s", friendship_id, actor.id)


def search_users(db: Session, actor: User, email: Optional[str]) -> List[dict]:
    """Users whose email contains the term, minus the actor and their friends."""
    if not email or not email.strip():
        raise ApiError.bad_request("Email query parameter is required")

    users = (
        db.query(User)
        .filter(User.email.icontains(email.strip().lower(), autoescape=True), User.id != actor.id)
        .order_by(User.email)
        .limit(SEARCH_LIMIT)
        .all()
    )
    relations = (
        db.query(Friend)
        .filter(
            or_(Friend.requester_id == actor.id, Friend.recipient_id == actor.id),
            Friend.status == "accepted",
        )
        .all()
    )
    friend_ids = {
        fr.recipient_id if fr.requester_id == actor.id else fr.requester_id
        for fr in relations
    }
    return [PublicProfile.model_validate(u).dump() for u in users if u.id not in friend_ids]
