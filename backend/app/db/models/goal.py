"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text as sa_text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.db.types import JSONBCompat

GOAL_TYPES = ("learning", "project", "health", "exam", "habit")


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        Index("ix_goals_user_id", "user_id"),
        Index("ix_goals_user_active", "user_id", "is_active", "is_completed"),
        CheckConstraint("total_days >= 1", name="ck_goals_total_days_positive"),
        CheckConstraint("daily_minutes > 0", name="ck_goals_daily_minutes_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(length=20), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    total_days = Column(Integer, nullable=False)
    daily_minutes = Column(Integer, nullable=False, default=60)
    start_date = Column(Date, nullable=False)
    current_day = Column(Integer, nullable=False, default=1, server_default=sa_text("1"))
    completed_days = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    skipped_days = Column(Integer, nullable=False, default=0, server_default=sa_text("0"))
    is_active = Column(Boolean, nullable=False, default=True, server_default=sa_text("true"))
    is_completed = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    # Normalized plan kept verbatim so a shared goal can replay it for a partner.
    plan_snapshot = Column(JSONBCompat, nullable=True)
    is_shared_goal = Column(Boolean, nullable=False, default=False, server_default=sa_text("false"))
    partner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    partner_goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="SET NULL"), nullable=True)
    shared_by_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    tasks = relationship(
        "Task",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Task.day_number",
    )
