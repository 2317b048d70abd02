import re

from pydantic import EmailStr, field_validator

from tasknest.schemas.common import CamelModel, IsoDatetime
from tasknest.utils.auth import BCRYPT_MAX_BYTES


class UserCreate(CamelModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        """Ensure the password is strong enough and fits bcrypt's 72-byte limit."""
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain at least one number")
        return v


class UserLogin(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class PublicProfile(CamelModel):
    id: str
    name: str
    email: str


class UserOut(PublicProfile):
    created_at: IsoDatetime
