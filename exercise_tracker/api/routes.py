"""HTTP route definitions for the exercise tracker."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ..domain.errors import UserNotFoundError
from ..domain.exercise import Exercise, LogEntry
from ..domain.parsing import format_calendar_date, present_duration
from ..domain.service import ExerciseLog, TrackerService
from ..domain.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class UserResponse(BaseModel):
    """Serialised representation of a `User`."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    user_id: str = Field(..., alias="_id")

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(username=user.username, user_id=user.user_id)


class ExerciseResponse(BaseModel):
    """Response returned after adding an exercise; `_id` is the owning user's id."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    description: str
    duration: int | float
    date: str
    user_id: str = Field(..., alias="_id")

    @classmethod
    def from_domain(cls, user: User, exercise: Exercise) -> "ExerciseResponse":
        return cls(
            username=user.username,
            description=exercise.description,
            duration=present_duration(exercise.duration),
            date=format_calendar_date(exercise.date),
            user_id=user.user_id,
        )


class LogEntryResponse(BaseModel):
    """One exercise within a log."""

    description: str
    duration: int | float
    date: str

    @classmethod
    def from_domain(cls, entry: LogEntry) -> "LogEntryResponse":
        return cls(
            description=entry.description,
            duration=present_duration(entry.duration),
            date=format_calendar_date(entry.date),
        )


class ExerciseLogResponse(BaseModel):
    """Envelope for a user's exercise log; `from`/`to` are omitted when not requested."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="_id")
    username: str
    date_from: str | None = Field(default=None, alias="from")
    date_to: str | None = Field(default=None, alias="to")
    count: int
    log: list[LogEntryResponse]

    @classmethod
    def from_domain(cls, exercise_log: ExerciseLog) -> "ExerciseLogResponse":
        return cls(
            user_id=exercise_log.user.user_id,
            username=exercise_log.user.username,
            date_from=exercise_log.date_from,
            date_to=exercise_log.date_to,
            count=exercise_log.count,
            log=[LogEntryResponse.from_domain(entry) for entry in exercise_log.entries],
        )


def get_service(request: Request) -> TrackerService:
    """Resolve the `TrackerService` stored on the FastAPI application state."""
    service: TrackerService = request.app.state.tracker_service
    return service


async def read_payload(request: Request) -> dict[str, Any]:
    """Return the request body as a mapping, accepting JSON and HTML form posts."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}
    try:
        data = await request.json()
    except ValueError as exc:
        logger.debug("rejected malformed JSON body on %s: %s", request.url.path, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="malformed JSON body"
        ) from exc
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="request body must be an object"
        )
    return data


@router.post("/users", response_model=UserResponse)
def create_user(
    payload: dict[str, Any] = Depends(read_payload),
    service: TrackerService = Depends(get_service),
) -> UserResponse:
    """Create a user from the submitted username."""
    try:
        user = service.create_user(payload.get("username"))
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return UserResponse.from_domain(user)


@router.get("/users", response_model=list[UserResponse])
def list_users(service: TrackerService = Depends(get_service)) -> list[UserResponse]:
    """Return every user in insertion order."""
    return [UserResponse.from_domain(user) for user in service.list_users()]


@router.post("/users/{user_id}/exercises", response_model=ExerciseResponse)
def add_exercise(
    user_id: str,
    payload: dict[str, Any] = Depends(read_payload),
    service: TrackerService = Depends(get_service),
) -> ExerciseResponse:
    """Attach an exercise to the user and echo it back with the user's id."""
    try:
        user, exercise = service.add_exercise(
            user_id,
            description=payload.get("description"),
            duration=payload.get("duration"),
            date_value=payload.get("date"),
        )
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return ExerciseResponse.from_domain(user, exercise)


@router.get(
    "/users/{user_id}/logs",
    response_model=ExerciseLogResponse,
    response_model_exclude_none=True,
)
def get_log(
    user_id: str,
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    limit: str | None = Query(default=None),
    service: TrackerService = Depends(get_service),
) -> ExerciseLogResponse:
    """Return the user's exercise log with optional inclusive date bounds and a count cap."""
    try:
        exercise_log = service.get_log(
            user_id, date_from=date_from, date_to=date_to, limit=limit
        )
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return ExerciseLogResponse.from_domain(exercise_log)


def _http_error_from_value_error(exc: ValueError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, UserNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=str(exc))
