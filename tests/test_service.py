from __future__ import annotations

from datetime import date

import pytest

from exercise_tracker.domain.errors import InvalidInputError, UserNotFoundError
from exercise_tracker.domain.service import TrackerService


def test_add_exercise_resolves_user_before_validating(service):
    with pytest.raises(UserNotFoundError):
        service.add_exercise("unknown", description="", duration="not-a-number")


def test_add_exercise_rejects_non_string_description(service):
    user = service.create_user("alice")
    with pytest.raises(InvalidInputError):
        service.add_exercise(user.user_id, description=["run"], duration=10)


def test_add_exercise_stores_numeric_duration(service, repository):
    user = service.create_user("alice")
    _, exercise = service.add_exercise(user.user_id, description="run", duration="25")
    assert exercise.duration == 25.0
    assert repository.exercises[0].duration == 25.0


def test_add_exercise_substitutes_today_for_bad_dates(service, today):
    user = service.create_user("alice")
    _, exercise = service.add_exercise(
        user.user_id, description="run", duration=5, date_value="32/13/2024"
    )
    assert exercise.date == today


def test_get_log_builds_query_from_valid_parameters(service, repository):
    user = service.create_user("alice")
    service.get_log(user.user_id, date_from="2024-01-01", date_to="junk", limit="4")

    query = repository.queries[-1]
    assert query.user_id == user.user_id
    assert query.date_from == date(2024, 1, 1)
    assert query.date_to is None
    assert query.limit == 4


def test_get_log_without_parameters_is_unbounded(service, repository):
    user = service.create_user("alice")
    exercise_log = service.get_log(user.user_id)

    query = repository.queries[-1]
    assert (query.date_from, query.date_to, query.limit) == (None, None, None)
    assert exercise_log.date_from is None
    assert exercise_log.date_to is None
    assert exercise_log.count == 0


def test_get_log_does_not_query_for_unknown_user(service, repository):
    with pytest.raises(UserNotFoundError):
        service.get_log("unknown", limit="2")
    assert repository.queries == []


def test_get_log_echoes_unparsed_bounds_verbatim_by_default(service):
    user = service.create_user("alice")
    exercise_log = service.get_log(user.user_id, date_from="soon", date_to="2024-01-05")
    assert exercise_log.date_from == "soon"
    assert exercise_log.date_to == "Fri Jan 05 2024"


def test_get_log_can_echo_only_applied_bounds(repository, today):
    strict = TrackerService(repository, echo_unparsed_bounds=False, today=lambda: today)
    user = strict.create_user("alice")
    exercise_log = strict.get_log(user.user_id, date_from="soon", date_to="2024-01-05")
    assert exercise_log.date_from is None
    assert exercise_log.date_to == "Fri Jan 05 2024"


def test_create_user_allows_duplicate_usernames(service):
    first = service.create_user("alice")
    second = service.create_user("alice")
    assert first.user_id != second.user_id
    assert [user.username for user in service.list_users()] == ["alice", "alice"]
