"""HTTP key-value store adapter - remote storage for the task collection."""

import logging

import requests

from checkmate.core.tasks import Task, tasks_from_records
from checkmate.ports.task_store import StoreError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class HttpTaskStore:
    """
    Remote key-value store over HTTP.

    Implements TaskStore protocol. The collection is the JSON value stored at
    `{base_url}/{key}`: GET reads it, PUT replaces it. No business logic -
    just I/O.
    """

    def __init__(
        self,
        base_url: str,
        key: str = "checkmate-tasks",
        token: str = "",
        timeout: int = DEFAULT_TIMEOUT,
    ):
        if not base_url:
            raise StoreError("STORE_URL is required for the http store backend")
        self.base_url = base_url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self._session = requests.Session()
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.key}"

    def load(self) -> list[Task]:
        """Fetch the collection. A missing key is an empty collection."""
        try:
            resp = self._session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreError(f"Task store unreachable: {e}") from e

        if resp.status_code == 404:
            logger.info(f"No stored collection at {self.url}, starting empty")
            return []
        if not resp.ok:
            raise StoreError(f"Task store read failed: {resp.status_code} {resp.text}")

        try:
            return tasks_from_records(resp.json())
        except ValueError as e:
            # Covers both JSON decode errors and TaskValidationError
            raise StoreError(f"Invalid task data from {self.url}: {e}") from e

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored collection."""
        try:
            resp = self._session.put(
                self.url,
                json=[t.to_dict() for t in tasks],
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StoreError(f"Task store unreachable: {e}") from e

        if not resp.ok:
            raise StoreError(f"Task store write failed: {resp.status_code} {resp.text}")
        logger.debug(f"Saved {len(tasks)} tasks to {self.url}")
