"""Adapters - I/O implementations of ports."""

from .file_store import FileTaskStore
from .http_store import HttpTaskStore

__all__ = [
    "FileTaskStore",
    "HttpTaskStore",
]
