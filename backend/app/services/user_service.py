"""Users are keyed by the id in the ``X-User-Id`` header and created lazily."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import PersistenceFailure
from app.db.models.user import User

logger = logging.getLogger(__name__)


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Return the user row for ``user_id``, inserting it on first sight.

    Commits on its own, so call it before entering a unit of work.
    """
    existing = db.get(User, user_id)
    if existing is not None:
        return existing

    db.add(User(id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent first request inserted the same id.
        db.rollback()
        logger.debug("User %s was registered concurrently", user_id)
    else:
        logger.info("Registered user %s", user_id)

    user = db.get(User, user_id)
    if user is None:
        raise PersistenceFailure(f"Failed to register user {user_id}")
    return user
