"""Progress analytics over a task history - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .tasks import Location, MentalLoad, Task, TimeEstimate

# Week starts on Sunday (day 0) unless configured otherwise.
DEFAULT_WEEK_START = calendar.SUNDAY


@dataclass(frozen=True)
class ProgressReport:
    """Statistical snapshot of the task collection at a reference instant."""

    as_of: datetime
    total: int
    completed_count: int
    active_count: int
    completion_rate: float
    completed_today: int
    completed_this_week: int
    mental_load_distribution: dict[MentalLoad, int]
    time_estimate_distribution: dict[TimeEstimate, int]
    location_distribution: dict[Location, int]
    most_productive_location: Location

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def share(self, distribution: dict, value: Enum) -> float:
        """Percentage of completed tasks carrying `value` (unrounded)."""
        if self.completed_count == 0:
            return 0.0
        return distribution.get(value, 0) / self.completed_count * 100


def start_of_day(as_of: datetime) -> datetime:
    """Local midnight of the day containing as_of."""
    return as_of.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(as_of: datetime, week_start: int = DEFAULT_WEEK_START) -> datetime:
    """
    Midnight of the first day of the week containing as_of.

    week_start uses datetime.weekday() numbering (Monday=0 ... Sunday=6).
    """
    offset = (as_of.weekday() - week_start) % 7
    return start_of_day(as_of) - timedelta(days=offset)


def _completed_between(tasks: list[Task], start: datetime, end: datetime) -> int:
    return sum(1 for t in tasks if t.completed_at is not None and start <= t.completed_at <= end)


def _distribution(tasks: list[Task], attr: str, values) -> dict:
    counts = {v: 0 for v in values}
    for t in tasks:
        counts[getattr(t, attr)] += 1
    return counts


def most_productive(location_counts: dict[Location, int]) -> Location:
    """Location with the most completions; ties go to the earlier canonical location."""
    best = Location.HOME
    for loc in Location:
        if location_counts.get(loc, 0) > location_counts.get(best, 0):
            best = loc
    return best


def aggregate(
    tasks: list[Task],
    as_of: datetime | None = None,
    week_start: int = DEFAULT_WEEK_START,
) -> ProgressReport:
    """
    Compute the progress report for a task collection.

    Pure function - no I/O. `as_of` pins "today" and "this week" so results
    do not depend on the wall clock. Ratios are left unrounded.
    """
    as_of = as_of or datetime.now()
    completed = [t for t in tasks if t.completed]
    total = len(tasks)

    location_counts = _distribution(completed, "location", Location)

    return ProgressReport(
        as_of=as_of,
        total=total,
        completed_count=len(completed),
        active_count=total - len(completed),
        completion_rate=len(completed) / total * 100 if total > 0 else 0.0,
        completed_today=_completed_between(completed, start_of_day(as_of), as_of),
        completed_this_week=_completed_between(completed, start_of_week(as_of, week_start), as_of),
        mental_load_distribution=_distribution(completed, "mental_load", MentalLoad),
        time_estimate_distribution=_distribution(completed, "time_estimate", TimeEstimate),
        location_distribution=location_counts,
        most_productive_location=most_productive(location_counts),
    )


def format_report(report: ProgressReport) -> str:
    """
    Format a progress report as plain text for display.

    Pure function - no I/O. Percentages are rounded here and only here.
    """
    if report.is_empty:
        return "No progress data yet. Complete some tasks to see your progress."

    lines = [
        f"Completion rate: {round(report.completion_rate)}% "
        f"({report.completed_count} of {report.total} done, {report.active_count} active)",
        f"Completed today: {report.completed_today}",
        f"Completed this week: {report.completed_this_week}",
        "",
        "Mental load:",
    ]
    for load, count in report.mental_load_distribution.items():
        share = round(report.share(report.mental_load_distribution, load))
        lines.append(f"  {load.label:8} {count:3} ({share}%)")

    lines.append("")
    lines.append("Time estimate:")
    for estimate, count in report.time_estimate_distribution.items():
        share = round(report.share(report.time_estimate_distribution, estimate))
        lines.append(f"  {estimate.short_label:8} {count:3} ({share}%)")

    lines.append("")
    lines.append("Location:")
    for loc, count in report.location_distribution.items():
        lines.append(f"  {loc.label:8} {count:3}")

    if report.completed_count:
        lines.append("")
        lines.append(f"Most productive at: {report.most_productive_location.label}")

    return "\n".join(lines)
