import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    org_name: str
    event_manager_term_days: int
    login_rate_limit: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///savishkar.db"),
        org_name=_getenv("ORG_NAME", "SAVISHKAR"),
        event_manager_term_days=_getenv_int("EVENT_MANAGER_TERM_DAYS", 30),
        login_rate_limit=_getenv_int("LOGIN_RATE_LIMIT", 5),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "ORG_NAME": s.org_name,
        "EVENT_MANAGER_TERM_DAYS": s.event_manager_term_days,
        "LOGIN_RATE_LIMIT": s.login_rate_limit,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
        # form posts only; no uploads (2MB)
        "MAX_CONTENT_LENGTH": 2 * 1024 * 1024,
    }
