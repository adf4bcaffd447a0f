"""Task store interface."""

from typing import Protocol

from checkmate.core.tasks import Task


class StoreError(Exception):
    """Raised when the task store cannot be read or written."""

    pass


class TaskStore(Protocol):
    """Interface for loading and saving the whole task collection under one key."""

    key: str

    def load(self) -> list[Task]:
        """Load the collection. Returns an empty list if nothing is stored yet."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored collection with `tasks`."""
        ...
