"""File-based task store adapter."""

import json
import logging
import os
import tempfile
from pathlib import Path

from checkmate.core.tasks import Task, TaskValidationError, tasks_from_records
from checkmate.ports.task_store import StoreError

logger = logging.getLogger(__name__)


class FileTaskStore:
    """
    File-based task storage.

    Implements TaskStore protocol. The whole collection lives in one JSON file
    named after the store key.
    """

    def __init__(self, data_dir: Path | str, key: str = "checkmate-tasks"):
        self.data_dir = Path(data_dir).expanduser()
        self.key = key

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    def load(self) -> list[Task]:
        """Load the collection. Returns [] if the file does not exist."""
        if not self.path.exists():
            return []
        try:
            records = json.loads(self.path.read_text())
            return tasks_from_records(records)
        except OSError as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt task file {self.path}: {e}") from e
        except TaskValidationError as e:
            raise StoreError(f"Invalid task data in {self.path}: {e}") from e

    def save(self, tasks: list[Task]) -> None:
        """Write the collection, replacing the file atomically."""
        payload = json.dumps([t.to_dict() for t in tasks], indent=2)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{self.key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")
