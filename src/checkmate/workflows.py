"""Shared workflow layer between CLI and Telegram.

Each mutating workflow loads a snapshot from the store, applies a pure
collection operation, saves the new snapshot and returns what changed. A
failed save leaves the stored collection untouched.
"""

import logging
from datetime import datetime

from .adapters.file_store import FileTaskStore
from .adapters.http_store import HttpTaskStore
from .config import Config
from .core.context import UserContext
from .core.export import ExportFormat, ExportScope, export_filename, from_json, render
from .core.progress import ProgressReport, aggregate
from .core.recommend import recommend
from .core.tasks import (
    Task,
    add_task,
    delete_task,
    find_task,
    new_task,
    toggle_task,
)
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> TaskStore:
    """Resolve the task store backend from config."""
    if config.store_backend == "http":
        return HttpTaskStore(config.store_url, key=config.store_key, token=config.store_token)
    return FileTaskStore(config.data_path, key=config.store_key)


def load_tasks(config: Config) -> list[Task]:
    return get_store(config).load()


def create_task(config: Config, title: str, now: datetime | None = None, **fields) -> Task:
    """Create a task from user input and persist it."""
    store = get_store(config)
    task = new_task(title, now=now, **fields)
    store.save(add_task(store.load(), task))
    logger.info(f"Created task {task.id}: {task.title}")
    return task


def toggle_completion(config: Config, ref: str, now: datetime | None = None) -> Task:
    """Flip a task between active and completed. Returns the updated task."""
    store = get_store(config)
    tasks = toggle_task(store.load(), ref, now)
    updated = find_task(tasks, ref)
    store.save(tasks)
    logger.info(f"Task {updated.id} {'completed' if updated.completed else 'reopened'}")
    return updated


def remove_task(config: Config, ref: str) -> Task:
    """Delete a task. Returns the removed task."""
    store = get_store(config)
    tasks = store.load()
    target = find_task(tasks, ref)
    store.save(delete_task(tasks, target.id))
    logger.info(f"Deleted task {target.id}")
    return target


def suggest(config: Config, context: UserContext | None = None) -> list[Task]:
    """Recommendations for the given (or configured default) context."""
    context = context or config.default_context()
    return recommend(load_tasks(config), context, limit=config.recommendation_limit)


def progress(config: Config, as_of: datetime | None = None) -> ProgressReport:
    return aggregate(load_tasks(config), as_of or datetime.now(), week_start=config.week_start)


def export_tasks(
    config: Config,
    fmt: ExportFormat,
    scope: ExportScope,
    include_metadata: bool = True,
    now: datetime | None = None,
) -> tuple[str, str]:
    """
    Render an export of the stored collection.

    Returns (suggested filename, content). Writing the file is up to the caller.
    """
    now = now or datetime.now()
    tasks = load_tasks(config)
    report = aggregate(tasks, now, week_start=config.week_start) if scope.includes_progress else None
    content = render(fmt, tasks, scope, now, report, include_metadata)
    return export_filename(fmt, scope, now.date()), content


def import_tasks(config: Config, text: str, replace: bool = False) -> int:
    """
    Import tasks from a JSON export.

    Merges by id (existing tasks win) unless `replace` is set. Returns the
    number of tasks added.
    """
    incoming = from_json(text)
    store = get_store(config)

    if replace:
        store.save(incoming)
        logger.info(f"Replaced collection with {len(incoming)} imported tasks")
        return len(incoming)

    tasks = store.load()
    existing = {t.id for t in tasks}
    added = 0
    for task in incoming:
        if task.id in existing:
            continue
        tasks = add_task(tasks, task)
        added += 1
    store.save(tasks)
    logger.info(f"Imported {added} new tasks ({len(incoming) - added} already present)")
    return added
