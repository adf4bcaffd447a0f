"""Shared fixtures."""

from datetime import datetime
from itertools import count

import pytest

from checkmate.core.tasks import Location, MentalLoad, Priority, Task, TimeEstimate


@pytest.fixture
def now():
    # A Wednesday
    return datetime(2025, 1, 15, 14, 30)


@pytest.fixture
def make_task(now):
    """Factory for tasks with sensible defaults; ids are t1, t2, ..."""
    ids = count(1)

    def _make(
        title: str = "Task",
        id: str | None = None,
        *,
        time: str = "quick",
        load: str = "low",
        location: str = "anywhere",
        priority: str = "medium",
        created_at: datetime | None = None,
        completed_at: datetime | None = None,
        completed: bool | None = None,
        **kwargs,
    ) -> Task:
        return Task(
            id=id or f"t{next(ids)}",
            title=title,
            time_estimate=TimeEstimate.parse(time),
            mental_load=MentalLoad.parse(load),
            location=Location.parse(location),
            priority=Priority.parse(priority),
            created_at=created_at or datetime(2025, 1, 1, 9, 0),
            completed=completed if completed is not None else completed_at is not None,
            completed_at=completed_at,
            **kwargs,
        )

    return _make
