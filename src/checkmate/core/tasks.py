"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, IntEnum


class TaskValidationError(ValueError):
    """Raised when a task record violates the task model."""

    pass


class TaskNotFoundError(KeyError):
    """Raised when a task id does not match the collection."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Task not found"


class _Ranked(IntEnum):
    """Ordinal enum with lowercase text labels."""

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: "str | _Ranked") -> "_Ranked":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            choices = ", ".join(m.label for m in cls)
            raise TaskValidationError(
                f"Invalid {cls.__name__} '{value}' (expected one of: {choices})"
            ) from None


class TimeEstimate(_Ranked):
    """Rough duration bucket: quick < medium < long."""

    QUICK = 1
    MEDIUM = 2
    LONG = 3

    @property
    def short_label(self) -> str:
        return {1: "<15m", 2: "30m", 3: "1hr+"}[self.value]

    @property
    def long_label(self) -> str:
        return {1: "<15 minutes", 2: "~30 minutes", 3: "1+ hours"}[self.value]


class MentalLoad(_Ranked):
    """Required focus/energy: low < medium < high."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Priority(_Ranked):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Location(Enum):
    """Where a task can be done. ANYWHERE matches every place."""

    HOME = "home"
    WORK = "work"
    ERRANDS = "errands"
    ONLINE = "online"
    ANYWHERE = "anywhere"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | Location") -> "Location":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise TaskValidationError(
                f"Invalid Location '{value}' (expected one of: {choices})"
            ) from None


class TaskStatus(Enum):
    """Completion-state filter used by list views and exports."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortOrder(Enum):
    """Orderings offered by the task list view."""

    PRIORITY = "priority"
    TIME = "time"
    CREATED = "created"


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Accepts a trailing "Z" and explicit offsets; aware values are converted to
    local time so stored timestamps keep their ordering.
    """
    if value is None or value == "":
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise TaskValidationError(f"Invalid timestamp '{value}'") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Task:
    """A task with context attributes used for recommendations."""

    id: str
    title: str
    time_estimate: TimeEstimate
    mental_load: MentalLoad
    location: Location
    priority: Priority
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None
    description: str | None = None
    due_date: datetime | None = None

    def __post_init__(self):
        if not self.id:
            raise TaskValidationError("Task id must not be empty")
        if not isinstance(self.title, str):
            raise TaskValidationError(f"Task {self.id}: title must be a string")
        if not self.title.strip():
            raise TaskValidationError("Task title must not be empty")
        if self.description is not None and not isinstance(self.description, str):
            raise TaskValidationError(f"Task {self.id}: description must be a string")
        if self.completed and self.completed_at is None:
            raise TaskValidationError(f"Task {self.id} is completed but has no completedAt")
        if not self.completed and self.completed_at is not None:
            raise TaskValidationError(f"Task {self.id} is active but has a completedAt")
        if self.completed_at is not None and self.completed_at < self.created_at:
            raise TaskValidationError(f"Task {self.id} was completed before it was created")

    def with_completion(self, completed: bool, now: datetime) -> "Task":
        """Return a copy with the completion flag set (completed_at follows it)."""
        return replace(self, completed=completed, completed_at=now if completed else None)

    def to_dict(self) -> dict:
        """Serialize to the stored record format."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "timeEstimate": self.time_estimate.label,
            "mentalLoad": self.mental_load.label,
            "location": self.location.label,
            "priority": self.priority.label,
            "completed": self.completed,
            "createdAt": format_timestamp(self.created_at),
            "completedAt": format_timestamp(self.completed_at),
            "dueDate": format_timestamp(self.due_date),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record. Rejects malformed records."""
        if not isinstance(data, dict):
            raise TaskValidationError(f"Task record must be an object, got {type(data).__name__}")
        missing = [
            key
            for key in ("id", "title", "timeEstimate", "mentalLoad", "location", "priority", "createdAt")
            if data.get(key) in (None, "")
        ]
        if missing:
            raise TaskValidationError(f"Task record missing: {', '.join(missing)}")

        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise TaskValidationError(f"Task {data['id']}: completed must be a boolean")

        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description") or None,
            time_estimate=TimeEstimate.parse(data["timeEstimate"]),
            mental_load=MentalLoad.parse(data["mentalLoad"]),
            location=Location.parse(data["location"]),
            priority=Priority.parse(data["priority"]),
            completed=completed,
            created_at=parse_timestamp(data["createdAt"]),
            completed_at=parse_timestamp(data.get("completedAt")),
            due_date=parse_timestamp(data.get("dueDate")),
        )


def new_task(
    title: str,
    *,
    time_estimate: TimeEstimate = TimeEstimate.MEDIUM,
    mental_load: MentalLoad = MentalLoad.MEDIUM,
    location: Location = Location.ANYWHERE,
    priority: Priority = Priority.MEDIUM,
    description: str | None = None,
    due_date: datetime | None = None,
    now: datetime | None = None,
) -> Task:
    """Build a fresh, incomplete task with a new id."""
    title = (title or "").strip()
    if not title:
        raise TaskValidationError("Task title must not be empty")
    return Task(
        id=uuid.uuid4().hex,
        title=title,
        description=(description or "").strip() or None,
        time_estimate=time_estimate,
        mental_load=mental_load,
        location=location,
        priority=priority,
        created_at=now or datetime.now(),
        due_date=due_date,
    )


def add_task(tasks: list[Task], task: Task) -> list[Task]:
    """
    Append a task to the collection.

    Pure function - returns a new list.
    """
    if any(t.id == task.id for t in tasks):
        raise TaskValidationError(f"Duplicate task id: {task.id}")
    return [*tasks, task]


def find_task(tasks: list[Task], ref: str) -> Task:
    """Find a task by full id or unique id prefix."""
    ref = (ref or "").strip()
    if not ref:
        raise TaskNotFoundError("No task id given")

    for t in tasks:
        if t.id == ref:
            return t

    matches = [t for t in tasks if t.id.startswith(ref)]
    if not matches:
        raise TaskNotFoundError(f"No task matching '{ref}'")
    if len(matches) > 1:
        raise TaskNotFoundError(f"Task id '{ref}' is ambiguous ({len(matches)} matches)")
    return matches[0]


def toggle_task(tasks: list[Task], task_id: str, now: datetime | None = None) -> list[Task]:
    """
    Flip a task's completion state.

    Pure function - returns a new list; other tasks are shared, not copied.
    """
    target = find_task(tasks, task_id)
    now = now or datetime.now()
    return [
        t.with_completion(not t.completed, now) if t.id == target.id else t
        for t in tasks
    ]


def delete_task(tasks: list[Task], task_id: str) -> list[Task]:
    """Remove a task from the collection. Pure function."""
    target = find_task(tasks, task_id)
    return [t for t in tasks if t.id != target.id]


def filter_by_status(tasks: list[Task], status: TaskStatus) -> list[Task]:
    """Filter tasks by completion state."""
    if status == TaskStatus.ACTIVE:
        return [t for t in tasks if not t.completed]
    if status == TaskStatus.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def sort_tasks(tasks: list[Task], by: SortOrder = SortOrder.PRIORITY) -> list[Task]:
    """
    Sort tasks for the list view.

    PRIORITY: priority descending, then newest first.
    TIME: quickest first, then newest first.
    CREATED: newest first.
    """
    # Newest first as the shared tiebreak; sorted() is stable so the
    # primary pass below keeps it.
    newest_first = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if by == SortOrder.PRIORITY:
        return sorted(newest_first, key=lambda t: -t.priority)
    if by == SortOrder.TIME:
        return sorted(newest_first, key=lambda t: t.time_estimate)
    return newest_first


def ensure_unique_ids(tasks: list[Task]) -> list[Task]:
    """Reject collections that contain the same id twice."""
    seen: set[str] = set()
    for t in tasks:
        if t.id in seen:
            raise TaskValidationError(f"Duplicate task id: {t.id}")
        seen.add(t.id)
    return tasks


def tasks_from_records(records: list) -> list[Task]:
    """Decode stored records into tasks, rejecting malformed or duplicate ones."""
    if not isinstance(records, list):
        raise TaskValidationError("Expected a list of task records")
    return ensure_unique_ids([Task.from_dict(r) for r in records])


def format_task_line(task: Task) -> str:
    """
    Format a single task for list display.

    Pure function - no I/O.
    """
    check = "x" if task.completed else " "
    due = f", due {task.due_date.date().isoformat()}" if task.due_date else ""
    return (
        f"[{check}] {task.id[:8]}  {task.title} "
        f"({task.time_estimate.short_label}, {task.mental_load.label} load, "
        f"{task.location.label}, {task.priority.label} priority{due})"
    )
