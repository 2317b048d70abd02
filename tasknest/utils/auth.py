from datetime import datetime, timedelta, UTC

from jose import jwt
from passlib.context import CryptContext

from tasknest.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BCRYPT_MAX_BYTES = 72


def hash_password(password: str):
    """Hash a password after validating bcrypt's 72-byte limit.

    Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes.
    """
    if isinstance(password, str):
        b = password.encode("utf-8")
        if len(b) > BCRYPT_MAX_BYTES:
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    A missing hash (OAuth-only account) never verifies. If verification raises
    a ValueError (for example plain >72 bytes), return False so the caller
    responds with an authentication failure instead of an error.
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_token(data: dict, settings: Settings):
    data = data.copy()
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    data.update({"exp": int(expire.timestamp())})  # NumericDate: seconds since epoch
    return jwt.encode(data, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and verify a token; jwt.decode validates exp automatically.

    Raises jose's ExpiredSignatureError or JWTError on failure.
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
