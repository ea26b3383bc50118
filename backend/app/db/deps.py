"""FastAPI database dependencies."""
from __future__ import annotations

from typing import Iterator

from sqlalchemy.orm import Session

from app.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """Yield one session per request; each service call owns its transaction."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
