"""Task ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.db.types import JSONList

TASK_PENDING = "pending"
TASK_COMPLETED = "completed"
TASK_SKIPPED = "skipped"


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_goal_day", "goal_id", "day_number"),
        Index("ix_tasks_goal_status", "goal_id", "status"),
        Index("ix_tasks_user_scheduled_date", "user_id", "scheduled_date"),
        CheckConstraint("day_number >= 1", name="ck_tasks_day_number_positive"),
        CheckConstraint("status IN ('pending', 'completed', 'skipped')", name="ck_tasks_status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_number = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    purpose = Column(Text, nullable=False, default="")
    phase = Column(Text, nullable=True)
    deliverables = Column(JSONList, nullable=False, default=list)
    action_items = Column(JSONList, nullable=False, default=list)
    resources = Column(JSONList, nullable=False, default=list)
    skill_progression = Column(Text, nullable=True)
    estimated_minutes = Column(Integer, nullable=False)
    status = Column(String(length=20), nullable=False, default=TASK_PENDING, server_default=sa_text("'pending'"))
    scheduled_date = Column(Date, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    skipped_at = Column(DateTime(timezone=True), nullable=True)
    rescheduled_from_id = Column(UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    goal = relationship("Goal", back_populates="tasks")
