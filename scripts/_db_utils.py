from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///savishkar.db"


def resolve_database_url(explicit: str | None = None) -> str:
    """Explicit URL, else DATABASE_URL from the environment (or .env), else the local SQLite file."""
    if explicit and explicit.strip():
        return explicit.strip()
    load_dotenv()
    return (os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL).strip()


@contextmanager
def script_session(db_url: str | None = None) -> Iterator[Session]:
    """Commit-on-success session for maintenance scripts, outside any Flask app."""
    engine = create_engine(resolve_database_url(db_url), future=True, pool_pre_ping=True)
    s = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
