"""Context-aware task recommendations - no I/O dependencies."""

from datetime import datetime

from .context import UserContext, energy_fits, location_matches, time_fits
from .tasks import Task

# Never more than this many recommendations, whatever the caller asks for.
DEFAULT_LIMIT = 5
HEADLINE_COUNT = 3


def is_eligible(task: Task, context: UserContext) -> bool:
    """Incomplete, and compatible with the context on place, time and energy."""
    return (
        not task.completed
        and location_matches(task, context)
        and time_fits(task, context)
        and energy_fits(task, context)
    )


def rank_key(task: Task) -> tuple[int, datetime]:
    # Priority descending, then oldest first.
    return (-task.priority, task.created_at)


def recommend(
    tasks: list[Task],
    context: UserContext,
    limit: int = DEFAULT_LIMIT,
) -> list[Task]:
    """
    Recommend the best tasks for the current context.

    Filters to eligible tasks, ranks them by priority (high first) and then by
    age (oldest first), and keeps the top `limit`, never more than
    DEFAULT_LIMIT. Equal keys keep collection order because sorted() is stable.

    Pure function - no I/O. Returns references to the input tasks.
    """
    eligible = [t for t in tasks if is_eligible(t, context)]
    ranked = sorted(eligible, key=rank_key)
    return ranked[: max(0, min(limit, DEFAULT_LIMIT))]


def headline(recommendations: list[Task], count: int = HEADLINE_COUNT) -> list[Task]:
    """Top picks from an already-ranked recommendation list."""
    return recommendations[: max(count, 0)]
