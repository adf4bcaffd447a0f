"""Pure export formatting - no I/O dependencies.

Turns a task collection (and optionally its progress report) into JSON, CSV
or plain text, and reads JSON exports back in.
"""

import csv
import io
import json
from datetime import date, datetime
from enum import Enum

from .progress import ProgressReport
from .tasks import Task, TaskStatus, TaskValidationError, filter_by_status, tasks_from_records

APP_VERSION = "1.0.0"

CSV_HEADERS = [
    "Title",
    "Description",
    "Time Estimate",
    "Mental Load",
    "Location",
    "Priority",
    "Completed",
    "Created Date",
    "Completed Date",
    "Due Date",
]


class ExportScope(Enum):
    ALL = "all"
    TASKS = "tasks"
    PROGRESS = "progress"
    COMPLETED = "completed"
    ACTIVE = "active"

    @property
    def includes_progress(self) -> bool:
        return self in (ExportScope.ALL, ExportScope.PROGRESS)


class ExportFormat(Enum):
    JSON = "json"
    CSV = "csv"
    TXT = "txt"


def scoped_tasks(tasks: list[Task], scope: ExportScope) -> list[Task]:
    """Tasks included in an export of the given scope."""
    if scope == ExportScope.COMPLETED:
        return filter_by_status(tasks, TaskStatus.COMPLETED)
    if scope == ExportScope.ACTIVE:
        return filter_by_status(tasks, TaskStatus.ACTIVE)
    return list(tasks)


def export_filename(fmt: ExportFormat, scope: ExportScope, on: date) -> str:
    return f"checkmate-{scope.value}-{on.isoformat()}.{fmt.value}"


def progress_summary(report: ProgressReport, exported_at: datetime) -> dict:
    """Progress report as an export-ready dict (completion rate rounded)."""
    return {
        "summary": {
            "totalTasks": report.total,
            "completedTasks": report.completed_count,
            "activeTasks": report.active_count,
            "completionRate": round(report.completion_rate),
            "completedToday": report.completed_today,
            "completedThisWeek": report.completed_this_week,
        },
        "distributions": {
            "mentalLoad": {k.label: v for k, v in report.mental_load_distribution.items()},
            "timeEstimate": {k.label: v for k, v in report.time_estimate_distribution.items()},
            "location": {k.label: v for k, v in report.location_distribution.items()},
        },
        "exportDate": exported_at.isoformat(),
    }


def to_json(
    tasks: list[Task],
    scope: ExportScope,
    exported_at: datetime,
    report: ProgressReport | None = None,
    include_metadata: bool = True,
) -> str:
    """Structured export; `from_json` reads it back."""
    selected = scoped_tasks(tasks, scope)
    data = {
        "exportInfo": {
            "exportDate": exported_at.isoformat(),
            "exportType": scope.value,
            "totalTasks": len(selected),
            "appVersion": APP_VERSION,
        },
        "tasks": [t.to_dict() for t in selected],
    }
    if include_metadata and scope.includes_progress and report is not None:
        data["progressData"] = progress_summary(report, exported_at)
    return json.dumps(data, indent=2)


def from_json(text: str) -> list[Task]:
    """
    Parse a JSON export (or a bare list of task records) into tasks.

    Raises TaskValidationError on malformed input or duplicate ids.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TaskValidationError(f"Invalid JSON: {e}") from e

    records = data.get("tasks") if isinstance(data, dict) else data
    return tasks_from_records(records)


def to_csv(tasks: list[Task], scope: ExportScope) -> str:
    """Tabular export, one row per task, every field quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for t in scoped_tasks(tasks, scope):
        writer.writerow(
            [
                t.title,
                t.description or "",
                t.time_estimate.label,
                t.mental_load.label,
                t.location.label,
                t.priority.label,
                "Yes" if t.completed else "No",
                t.created_at.isoformat(),
                t.completed_at.isoformat() if t.completed_at else "",
                t.due_date.isoformat() if t.due_date else "",
            ]
        )
    return buf.getvalue()


def _fmt_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def to_text(
    tasks: list[Task],
    scope: ExportScope,
    exported_at: datetime,
    report: ProgressReport | None = None,
    include_metadata: bool = True,
) -> str:
    """Human-readable narrative export."""
    selected = scoped_tasks(tasks, scope)
    lines = [
        "CheckMate Task Export",
        f"Export Date: {exported_at.strftime('%Y-%m-%d %H:%M')}",
        f"Export Type: {scope.value}",
        f"Total Tasks: {len(selected)}",
        "",
    ]

    if include_metadata and scope.includes_progress and report is not None:
        lines += [
            "PROGRESS SUMMARY",
            "================",
            f"Completion Rate: {round(report.completion_rate)}%",
            f"Completed Today: {report.completed_today}",
            f"Completed This Week: {report.completed_this_week}",
            "",
        ]

    lines += ["TASKS", "=====", ""]
    for i, t in enumerate(selected, 1):
        lines.append(f"{i}. {t.title}")
        if t.description:
            lines.append(f"   Description: {t.description}")
        lines.append(
            f"   Time: {t.time_estimate.label} | Mental Load: {t.mental_load.label}"
            f" | Location: {t.location.label}"
        )
        lines.append(f"   Priority: {t.priority.label} | Status: {'Completed' if t.completed else 'Active'}")
        lines.append(f"   Created: {_fmt_date(t.created_at)}")
        if t.completed_at:
            lines.append(f"   Completed: {_fmt_date(t.completed_at)}")
        if t.due_date:
            lines.append(f"   Due: {_fmt_date(t.due_date)}")
        lines.append("")

    return "\n".join(lines)


def render(
    fmt: ExportFormat,
    tasks: list[Task],
    scope: ExportScope,
    exported_at: datetime,
    report: ProgressReport | None = None,
    include_metadata: bool = True,
) -> str:
    """Dispatch to the formatter for `fmt`."""
    match fmt:
        case ExportFormat.JSON:
            return to_json(tasks, scope, exported_at, report, include_metadata)
        case ExportFormat.CSV:
            return to_csv(tasks, scope)
        case ExportFormat.TXT:
            return to_text(tasks, scope, exported_at, report, include_metadata)
    raise ValueError(f"Unsupported export format: {fmt}")
