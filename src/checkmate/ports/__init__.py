"""Ports - interfaces/protocols for external dependencies."""

from .task_store import StoreError, TaskStore

__all__ = [
    "StoreError",
    "TaskStore",
]
