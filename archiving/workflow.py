"""
Workflow queue and engine notification.

The workflow queue owns PendingRecords from admission until the engine
confirms that archiving has started. Engine notification is fire-and-forget:
the engine may live in another process and only acknowledges the trigger.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from .errors import SubmissionError
from .interfaces import ConfigStore
from .logging_config import TRACE
from .models import PendingRecord

logger = logging.getLogger(__name__)


class WorkflowQueue:
    """Pending archive requests keyed by queue name (protocol prefix removed)

    The queue lock only guards the dicts. Persisting a new request happens
    outside it, with the name reserved so a second insert for the same name
    still loses.
    """

    def __init__(self, config_store: ConfigStore | None = None) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, PendingRecord] = {}
        self._reserved: set[str] = set()
        self._config_store = config_store

    def get(self, pv_name: str) -> PendingRecord | None:
        """Return the live pending entry; mutations are visible to the queue but not persisted."""
        with self._lock:
            return self._pending.get(pv_name)

    def contains(self, pv_name: str) -> bool:
        with self._lock:
            return pv_name in self._pending or pv_name in self._reserved

    def insert_if_absent(self, pv_name: str, record: PendingRecord) -> bool:
        """Atomically add a pending request.

        Returns:
            True if the record was inserted, False if the name was already pending

        Raises:
            CollaboratorIOError: if the request cannot be persisted; the name is released
        """
        with self._lock:
            if pv_name in self._pending or pv_name in self._reserved:
                return False
            self._reserved.add(pv_name)

        try:
            if self._config_store is not None:
                self._config_store.persist_archive_request(pv_name, record)
        except Exception:
            with self._lock:
                self._reserved.discard(pv_name)
            raise

        with self._lock:
            self._reserved.discard(pv_name)
            self._pending[pv_name] = record
        return True

    def load(self) -> int:
        """Restore persisted requests after a restart; returns how many were added."""
        if self._config_store is None:
            return 0
        persisted = self._config_store.load_archive_requests()
        added = 0
        with self._lock:
            for pv_name, record in persisted.items():
                if pv_name not in self._pending and pv_name not in self._reserved:
                    self._pending[pv_name] = record
                    added += 1
        return added

    def remove(self, pv_name: str) -> PendingRecord | None:
        """Drop a request once the engine has taken it over, here and in the store."""
        with self._lock:
            if pv_name not in self._pending:
                return None
        if self._config_store is not None:
            self._config_store.remove_archive_request(pv_name)
        with self._lock:
            return self._pending.pop(pv_name, None)

    def pending_names(self) -> list[str]:
        with self._lock:
            return sorted(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class LoggingWorkflowEngine:
    """Engine stand-in used when no engine URL is configured"""

    def start_pv_workflow(self, pv_name: str) -> None:
        logger.info(f"No engine configured; workflow for {pv_name} stays pending")


class HttpWorkflowEngine:
    """Posts start-workflow triggers to the engine on a background pool"""

    def __init__(
        self,
        engine_url: str,
        timeout_seconds: float = 5.0,
        max_workers: int = 4,
        client: httpx.Client | None = None,
    ) -> None:
        self.start_url = f"{engine_url.rstrip('/')}/startPVWorkflow"
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="EngineNotify")

    def start_pv_workflow(self, pv_name: str) -> None:
        """Queue the trigger and return immediately.

        Raises:
            SubmissionError: if the trigger cannot be queued
        """
        try:
            future = self._executor.submit(self._post, pv_name)
        except RuntimeError as e:
            raise SubmissionError(f"Engine notifier is shut down; cannot start workflow for {pv_name}") from e
        future.add_done_callback(lambda f: self._log_outcome(pv_name, f))

    def _post(self, pv_name: str) -> None:
        logger.log(TRACE, f"POST {self.start_url} pv={pv_name}")
        response = self._client.post(self.start_url, params={"pv": pv_name})
        response.raise_for_status()

    @staticmethod
    def _log_outcome(pv_name: str, future: Future[None]) -> None:
        error = future.exception()
        if error is not None:
            logger.error(f"Engine did not accept workflow for {pv_name}: {error}")
        else:
            logger.debug(f"Engine accepted workflow for {pv_name}")

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self._client.close()
