"""Database repository for tracker users and exercises."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.contracts import CreateExerciseInput, CreateUserInput, LogQuery
from .domain.exercise import Exercise, LogEntry
from .domain.user import User

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS tracker_users (
        user_id TEXT PRIMARY KEY,
        username TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tracker_exercises (
        exercise_id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES tracker_users (user_id),
        description TEXT NOT NULL,
        duration DOUBLE PRECISION NOT NULL,
        exercise_date DATE NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS tracker_exercises_user_date_idx
    ON tracker_exercises (user_id, exercise_date)
    """,
)


def build_log_statement(query: LogQuery) -> tuple[str, list[Any]]:
    """Translate a :class:`LogQuery` into SQL text and positional parameters.

    The filter always scopes to the user; date bounds are inclusive and only
    added when set. Rows are ordered by date with insertion order breaking
    ties, and ``LIMIT`` is emitted only for a positive limit.
    """
    clauses = ["user_id = %s"]
    params: list[Any] = [query.user_id]

    if query.date_from is not None:
        clauses.append("exercise_date >= %s")
        params.append(query.date_from)
    if query.date_to is not None:
        clauses.append("exercise_date <= %s")
        params.append(query.date_to)

    where_sql = " AND ".join(clauses)
    sql = f"""
        SELECT description, duration, exercise_date
        FROM tracker_exercises
        WHERE {where_sql}
        ORDER BY exercise_date ASC, created_at ASC, exercise_id ASC
    """
    if query.limit is not None and query.limit > 0:
        sql += "LIMIT %s\n"
        params.append(query.limit)
    return sql, params


class TrackerRepository:
    """Postgres-backed persistence for users and their exercises."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the tracker tables and index when they do not exist yet."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    cur.execute(statement)
            conn.commit()
        logger.info("tracker schema ready")

    def create_user(self, payload: CreateUserInput) -> User:
        """Insert a user row and return the stored record."""
        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    INSERT INTO tracker_users (user_id, username, created_at)
                    VALUES (%s, %s, %s)
                    RETURNING user_id, username, created_at
                    """,
                    (user_id, payload.username, now),
                )
                row = cur.fetchone()
            conn.commit()
        return self._map_user(row)

    def list_users(self) -> list[User]:
        """Return every user in insertion order."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT user_id, username, created_at
                    FROM tracker_users
                    ORDER BY created_at ASC, user_id ASC
                    """
                )
                rows = cur.fetchall()
        return [self._map_user(row) for row in rows]

    def get_user(self, user_id: str) -> User | None:
        """Fetch a user by id or return ``None``."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT user_id, username, created_at
                    FROM tracker_users
                    WHERE user_id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_user(row)

    def create_exercise(self, payload: CreateExerciseInput) -> Exercise:
        """Insert an exercise for an already resolved user."""
        exercise_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    INSERT INTO tracker_exercises
                        (exercise_id, user_id, description, duration, exercise_date, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING exercise_id, user_id, description, duration, exercise_date, created_at
                    """,
                    (
                        exercise_id,
                        payload.user_id,
                        payload.description,
                        payload.duration,
                        payload.date,
                        now,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return Exercise(
            exercise_id=row[0],
            user_id=row[1],
            description=row[2],
            duration=row[3],
            date=row[4],
            created_at=row[5],
        )

    def list_log_entries(self, query: LogQuery) -> list[LogEntry]:
        """Return the projected log entries matching ``query``."""
        sql, params = build_log_statement(query)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        return [LogEntry(description=row[0], duration=row[1], date=row[2]) for row in rows]

    def _map_user(self, row: tuple) -> User:
        """Convert a raw database tuple into the domain ``User`` dataclass."""
        return User(user_id=row[0], username=row[1], created_at=row[2])
