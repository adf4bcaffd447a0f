"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Location,
    MentalLoad,
    Priority,
    SortOrder,
    Task,
    TaskNotFoundError,
    TaskStatus,
    TaskValidationError,
    TimeEstimate,
    add_task,
    delete_task,
    filter_by_status,
    find_task,
    format_task_line,
    new_task,
    sort_tasks,
    toggle_task,
)
from .context import UserContext
from .recommend import headline, is_eligible, recommend
from .progress import ProgressReport, aggregate, format_report
from .focus import FocusSession, estimated_minutes
from .export import ExportFormat, ExportScope, from_json, render

__all__ = [
    # Tasks
    "Location",
    "MentalLoad",
    "Priority",
    "SortOrder",
    "Task",
    "TaskNotFoundError",
    "TaskStatus",
    "TaskValidationError",
    "TimeEstimate",
    "add_task",
    "delete_task",
    "filter_by_status",
    "find_task",
    "format_task_line",
    "new_task",
    "sort_tasks",
    "toggle_task",
    # Context + recommendations
    "UserContext",
    "headline",
    "is_eligible",
    "recommend",
    # Progress
    "ProgressReport",
    "aggregate",
    "format_report",
    # Focus
    "FocusSession",
    "estimated_minutes",
    # Export
    "ExportFormat",
    "ExportScope",
    "from_json",
    "render",
]
