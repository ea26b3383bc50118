"""User ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(Text, nullable=True)
    # The only social-graph signal the core consumes: whether activity is public.
    show_in_activity_feed = Column(Boolean, nullable=False, default=True, server_default=sa_text("true"))
    reminder_enabled = Column(Boolean, nullable=False, default=True, server_default=sa_text("true"))
    onboarding_complete = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
