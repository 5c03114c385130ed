from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from exercise_tracker.api import routes
from exercise_tracker.api.errors import register_error_handlers
from exercise_tracker.domain.contracts import CreateExerciseInput, CreateUserInput, LogQuery
from exercise_tracker.domain.exercise import Exercise, LogEntry
from exercise_tracker.domain.service import TrackerService
from exercise_tracker.domain.user import User

FIXED_TODAY = date(2024, 3, 15)


class FakeRepository:
    """In-memory repository mimicking Postgres-backed behaviors."""

    def __init__(self) -> None:
        self.users: list[User] = []
        self.exercises: list[Exercise] = []
        self.queries: list[LogQuery] = []

    def create_user(self, payload: CreateUserInput) -> User:
        user = User(
            user_id=str(uuid.uuid4()),
            username=payload.username,
            created_at=datetime.now(timezone.utc),
        )
        self.users.append(user)
        return user

    def list_users(self) -> list[User]:
        return list(self.users)

    def get_user(self, user_id: str) -> User | None:
        for user in self.users:
            if user.user_id == user_id:
                return user
        return None

    def create_exercise(self, payload: CreateExerciseInput) -> Exercise:
        exercise = Exercise(
            exercise_id=str(uuid.uuid4()),
            user_id=payload.user_id,
            description=payload.description,
            duration=payload.duration,
            date=payload.date,
            created_at=datetime.now(timezone.utc),
        )
        self.exercises.append(exercise)
        return exercise

    def list_log_entries(self, query: LogQuery) -> list[LogEntry]:
        self.queries.append(query)
        results = [exercise for exercise in self.exercises if exercise.user_id == query.user_id]
        if query.date_from is not None:
            results = [exercise for exercise in results if exercise.date >= query.date_from]
        if query.date_to is not None:
            results = [exercise for exercise in results if exercise.date <= query.date_to]
        # stable sort keeps insertion order for equal dates
        results.sort(key=lambda exercise: exercise.date)
        if query.limit:
            results = results[: query.limit]
        return [
            LogEntry(description=exercise.description, duration=exercise.duration, date=exercise.date)
            for exercise in results
        ]


class FailingRepository(FakeRepository):
    """Repository whose reads blow up, standing in for a lost database connection."""

    def list_users(self) -> list[User]:
        raise RuntimeError("connection refused")


def build_app(service: TrackerService) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(routes.router)
    app.state.tracker_service = service
    return app


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository: FakeRepository) -> TrackerService:
    return TrackerService(repository, today=lambda: FIXED_TODAY)


@pytest.fixture
def api_client(service: TrackerService):
    """Provide a FastAPI test client with isolated state."""
    with TestClient(build_app(service)) as client:
        yield client, service


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def failing_client():
    """Client whose repository raises on reads; server exceptions become 500 responses."""
    service = TrackerService(FailingRepository(), today=lambda: FIXED_TODAY)
    with TestClient(build_app(service), raise_server_exceptions=False) as client:
        yield client
