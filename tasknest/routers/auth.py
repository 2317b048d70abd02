import json
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from tasknest.config import Settings
from tasknest.database import get_db
from tasknest.dependencies import get_current_user, get_settings
from tasknest.models.user import User
from tasknest.schemas.user import UserCreate, UserLogin, UserOut
from tasknest.services.identity import authenticate, create_identity, issue_token, link_oauth_identity
from tasknest.utils.errors import ApiError
from tasknest.utils.response import send_success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


def _user_payload(user: User) -> dict:
    return UserOut.model_validate(user).dump()


@router.post("/register")
def register(user: UserCreate, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    new_user = create_identity(db, name=user.name, email=user.email, raw_password=user.password)
    token = issue_token(new_user, settings)
    return send_success(
        {"user": _user_payload(new_user), "token": token},
        "User registered successfully",
        201,
    )


@router.post("/login")
def login(user: UserLogin, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    db_user = authenticate(db, user.email, user.password)
    token = issue_token(db_user, settings)
    logger.info("login user=%s", db_user.id)
    return send_success({"user": _user_payload(db_user), "token": token}, "Login successful")


@router.get("/me")
def me(current: User = Depends(get_current_user)):
    return send_success({"user": _user_payload(current)}, "User retrieved successfully")


@router.post("/logout")
def logout(current: User = Depends(get_current_user)):
    # JWTs are stateless; the client discards the token
    return send_success({"message": "Logged out successfully"}, "Logout successful")


def _require_google(settings: Settings) -> None:
    if not settings.google_enabled:
        raise ApiError.not_implemented(
            "Google OAuth not configured. Please set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET"
        )


@router.get("/google")
def google_login(settings: Settings = Depends(get_settings)):
    _require_google(settings)
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_callback_url,
        "response_type": "code",
        "scope": "openid email profile",
    }
    return RedirectResponse(f"{GOOGLE_AUTH_URL}?{urlencode(params)}")


def _fetch_google_profile(code: str, settings: Settings) -> dict:
    with httpx.Client(timeout=10.0) as client:
        r = client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "redirect_uri": settings.google_callback_url,
                "grant_type": "authorization_code",
            },
        )
        r.raise_for_status()
        access_token = r.json()["access_token"]
        r = client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        r.raise_for_status()
        return r.json()


@router.get("/google/callback")
def google_callback(
    code: Optional[str] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    _require_google(settings)
    failed = RedirectResponse(f"{settings.frontend_url}/login?error=auth_failed")
    if not code:
        return failed
    try:
        profile = _fetch_google_profile(code, settings)
    except (httpx.HTTPError, KeyError, ValueError):
        logger.exception("google token exchange failed")
        return failed

    user = link_oauth_identity(db, profile["sub"], profile.get("email", ""), profile.get("name"))
    params = {
        "token": issue_token(user, settings),
        "user": json.dumps(_user_payload(user)),
    }
    return RedirectResponse(f"{settings.frontend_url}/auth/callback?{urlencode(params)}")
