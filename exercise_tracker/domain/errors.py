"""Errors raised by tracker workflows and mapped to HTTP statuses by the API layer."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """A required field is missing or has the wrong type."""


class UserNotFoundError(ValueError):
    """The referenced user id does not resolve to a stored user."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found")
        self.user_id = user_id
