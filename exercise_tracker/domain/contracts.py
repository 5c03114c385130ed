"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(slots=True)
class CreateUserInput:
    """Validated inputs required to create a user."""

    username: str


@dataclass(slots=True)
class CreateExerciseInput:
    """Validated inputs required to attach an exercise to a resolved user."""

    user_id: str
    description: str
    duration: float
    date: date


@dataclass(slots=True)
class LogQuery:
    """Filter, ordering and size bound for a user's exercise log.

    ``date_from`` and ``date_to`` are inclusive and only set when the caller
    supplied a parseable date; ``limit`` is only set when positive.
    """

    user_id: str
    date_from: date | None = None
    date_to: date | None = None
    limit: int | None = None
