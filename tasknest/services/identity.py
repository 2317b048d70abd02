import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from tasknest.config import Settings
from tasknest.models.user import User
from tasknest.utils.auth import create_token, hash_password, verify_password
from tasknest.utils.errors import ApiError

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
BAD_CREDENTIALS = "Invalid email or password"


def get_identity(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def create_identity(
    db: Session,
    name: str,
    email: str,
    raw_password: Optional[str] = None,
    google_id: Optional[str] = None,
) -> User:
    """Persist a new identity, hashing the password first when one is given.

    Emails are stored lower-cased; a duplicate (in any case) is a Conflict,
    whether caught by the lookup or by the unique index on a race.
    """
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ApiError.conflict(EMAIL_TAKEN)

    hashed = None
    if raw_password is not None:
        try:
            hashed = hash_password(raw_password)
        except ValueError as e:
            raise ApiError.bad_request(str(e))

    user = User(name=name, email=email, password=hashed, google_id=google_id)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ApiError.conflict(EMAIL_TAKEN)
    db.refresh(user)
    logger.info("identity created id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = (
        db.query(User)
        .options(undefer(User.password))
        .filter(User.email == email.strip().lower())
        .first()
    )
    if not user or not verify_password(password, user.password):
        raise ApiError.unauthorized(BAD_CREDENTIALS)
    return user


def issue_token(user: User, settings: Settings) -> str:
    return create_token({"sub": user.id, "email": user.email}, settings)


def link_oauth_identity(db: Session, google_id: str, email: str, name: Optional[str]) -> User:
    """Resolve an external login to an identity.

    Matches on the provider id first, then links an existing account with the
    same email, and otherwise creates a password-less identity.
    """
    user = db.query(User).filter(User.google_id == google_id).first()
    if user:
        return user

    email = (email or "").strip().lower()
    if not email:
        raise ApiError.bad_request("OAuth profile has no email address")

    user = db.query(User).filter(User.email == email).first()
    if user:
        user.google_id = google_id
        db.commit()
        db.refresh(user)
        logger.info("linked google account to identity id=%s", user.id)
        return user

    return create_identity(db, name=name or "User", email=email, google_id=google_id)
