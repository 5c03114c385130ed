"""Tracker service orchestrating user, exercise and log workflows over the repository."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
from typing import Any, Callable

from .contracts import CreateExerciseInput, CreateUserInput, LogQuery
from .errors import InvalidInputError, UserNotFoundError
from .exercise import Exercise, LogEntry
from .parsing import (
    coerce_duration,
    format_calendar_date,
    is_missing,
    parse_calendar_date,
    parse_limit,
)
from .user import User
from ..repository import TrackerRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExerciseLog:
    """A user's log together with the bounds echoed back to the caller."""

    user: User
    entries: list[LogEntry]
    date_from: str | None = None
    date_to: str | None = None

    @property
    def count(self) -> int:
        return len(self.entries)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class TrackerService:
    """User, exercise and log workflows backed by Postgres storage."""

    def __init__(
        self,
        repository: TrackerRepository,
        *,
        echo_unparsed_bounds: bool = True,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        """Store the repository plus the log echo policy and the clock used for default dates."""
        self._repository = repository
        self._echo_unparsed_bounds = echo_unparsed_bounds
        self._today = today

    def create_user(self, username: Any) -> User:
        """Persist a new user; usernames need not be unique."""
        if not isinstance(username, str) or not username:
            raise InvalidInputError("username is required")
        user = self._repository.create_user(CreateUserInput(username=username))
        logger.info("user created user_id=%s", user.user_id)
        return user

    def list_users(self) -> list[User]:
        return self._repository.list_users()

    def add_exercise(
        self,
        user_id: str,
        *,
        description: Any,
        duration: Any,
        date_value: Any = None,
    ) -> tuple[User, Exercise]:
        """Attach an exercise to an existing user.

        The user is resolved before any field is validated, so an unknown id
        is reported as not found even when the body is also invalid. A missing
        or unparseable date falls back to today without raising.

        Returns
        -------
        tuple[User, Exercise]
            The owning user and the stored exercise.
        """
        user = self._require_user(user_id)

        if is_missing(description) or is_missing(duration):
            raise InvalidInputError("description and duration are required")
        if not isinstance(description, str):
            raise InvalidInputError("description must be a string")
        try:
            minutes = coerce_duration(duration)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        exercise_date = parse_calendar_date(date_value)
        if exercise_date is None:
            if not is_missing(date_value):
                logger.debug("unparseable exercise date %r replaced with today", date_value)
            exercise_date = self._today()

        exercise = self._repository.create_exercise(
            CreateExerciseInput(
                user_id=user.user_id,
                description=description,
                duration=minutes,
                date=exercise_date,
            )
        )
        logger.info(
            "exercise created exercise_id=%s user_id=%s", exercise.exercise_id, user.user_id
        )
        return user, exercise

    def get_log(
        self,
        user_id: str,
        *,
        date_from: str | None = None,
        date_to: str | None = None,
        limit: str | None = None,
    ) -> ExerciseLog:
        """Return a user's exercises, ascending by date, optionally bounded and capped.

        Parameters
        ----------
        user_id:
            Identifier of the user whose log is requested.
        date_from, date_to:
            Inclusive date bounds. Values that do not parse are ignored for
            filtering; see :meth:`_echo_bound` for how they are reported back.
        limit:
            Maximum number of entries; ignored unless it parses to a positive integer.
        """
        user = self._require_user(user_id)

        lower = parse_calendar_date(date_from)
        upper = parse_calendar_date(date_to)
        query = LogQuery(
            user_id=user.user_id,
            date_from=lower,
            date_to=upper,
            limit=parse_limit(limit),
        )
        entries = self._repository.list_log_entries(query)

        return ExerciseLog(
            user=user,
            entries=entries,
            date_from=self._echo_bound(date_from, lower),
            date_to=self._echo_bound(date_to, upper),
        )

    def _echo_bound(self, raw: str | None, parsed: date | None) -> str | None:
        """Return the value to echo for a ``from``/``to`` parameter.

        Parsed bounds are echoed in display format. A supplied value that did
        not parse, and so was not applied, is echoed verbatim only when the
        service is configured to echo unparsed bounds.
        """
        if not raw:
            return None
        if parsed is not None:
            return format_calendar_date(parsed)
        return raw if self._echo_unparsed_bounds else None

    def _require_user(self, user_id: str) -> User:
        user = self._repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
