"""Shared-goal invite ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.db.types import JSONBCompat


class GoalInvite(Base):
    __tablename__ = "goal_invites"
    __table_args__ = (
        Index("ix_goal_invites_to_user_id", "to_user_id"),
        Index("ix_goal_invites_from_to", "from_user_id", "to_user_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    from_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    source_goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    # type, title, description, total_days, daily_minutes and the normalized plan.
    goal_data = Column(JSONBCompat, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
