from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class User:
    """Account that exercise entries are attached to."""

    user_id: str
    username: str
    created_at: datetime
