"""Timeline sanity check for new goals."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MINIMUM_DAYS = 3

MINIMUM_DAYS = {
    "learning": 3,
    "project": 3,
    "health": 3,
    "exam": 3,
    "habit": 3,
}


@dataclass(frozen=True)
class TimelineSuggestion:
    is_rushed: bool
    suggested_days: int
    message: str


def check_timeline_and_suggest(goal_type: str, total_days: int) -> TimelineSuggestion:
    minimum = MINIMUM_DAYS.get(goal_type, DEFAULT_MINIMUM_DAYS)
    if total_days < minimum:
        return TimelineSuggestion(
            is_rushed=True,
            suggested_days=minimum,
            message=f"{total_days} days is too short for a {goal_type} goal. We suggest at least {minimum} days.",
        )
    return TimelineSuggestion(is_rushed=False, suggested_days=total_days, message="Timeline accepted.")
