"""Transaction scope used by the mutating services."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import PersistenceFailure

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, action: str) -> Iterator[Session]:
    """Commit on success; roll back everything on any error.

    Storage errors are re-raised as PersistenceFailure carrying the driver message.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist %s", action)
        detail = getattr(exc, "orig", None) or exc
        raise PersistenceFailure(f"Failed to persist {action}: {detail}") from exc
    except Exception:
        db.rollback()
        raise
