import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(override=False)

DEFAULT_SECRET_KEY = "development-secret-key-change-in-production-min-32-chars"


def _env_list(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass
class Settings:
    environment: str = "development"
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: float = 7 * 24 * 60

    # Default to local SQLite for dev/tests; override via env in Docker/Prod
    database_url: str = "sqlite:///./tasknest.db"

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    frontend_url: str = "http://localhost:3000"

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_callback_url: str = "http://localhost:8000/auth/google/callback"

    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


def load_settings() -> Settings:
    """Build settings from the process environment.

    Read at call-time so tests (and runtime overrides) that modify os.environ
    take effect for the next app built.
    """
    return Settings(
        environment=os.environ.get("ENVIRONMENT", "development"),
        secret_key=os.environ.get("SECRET_KEY", DEFAULT_SECRET_KEY),
        algorithm=os.environ.get("ALGORITHM", "HS256"),
        access_token_expire_minutes=float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 7 * 24 * 60)),
        database_url=os.environ.get("DATABASE_URL", "sqlite:///./tasknest.db"),
        cors_origins=_env_list("CORS_ORIGINS", "http://localhost:3000"),
        frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:3000"),
        google_client_id=os.environ.get("GOOGLE_CLIENT_ID") or None,
        google_client_secret=os.environ.get("GOOGLE_CLIENT_SECRET") or None,
        google_callback_url=os.environ.get(
            "GOOGLE_CALLBACK_URL", "http://localhost:8000/auth/google/callback"
        ),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
