from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(slots=True)
class Exercise:
    """A single description/duration/date entry owned by one user."""

    exercise_id: str
    user_id: str
    description: str
    duration: float
    date: date
    created_at: datetime


@dataclass(slots=True)
class LogEntry:
    """Projection of an exercise as it appears in a user's log."""

    description: str
    duration: float
    date: date
