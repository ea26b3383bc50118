from app.db.base import Base
from app.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())
    expected = {
        "users",
        "goals",
        "tasks",
        "goal_invites",
        "activities",
    }

    assert expected == table_names


def test_task_status_is_constrained() -> None:
    constraints = {constraint.name for constraint in Base.metadata.tables["tasks"].constraints}

    assert "ck_tasks_status" in constraints
    assert "ck_tasks_day_number_positive" in constraints


def test_deleting_goal_cascades_to_tasks() -> None:
    goal_fk = next(fk for fk in Base.metadata.tables["tasks"].foreign_keys if fk.column.table.name == "goals")

    assert goal_fk.ondelete == "CASCADE"
