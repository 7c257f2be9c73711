"""In-memory config store.

Used when STORE_BACKEND=memory (local development) and as the fake config
store in tests."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable

from ..models import ActiveRecord, PendingRecord

logger = logging.getLogger(__name__)


class InMemoryConfigStore:
    """Thread-safe dict-backed config store"""

    def __init__(self, standard_fields: Iterable[str] = ()) -> None:
        self._lock = threading.RLock()
        self._type_infos: dict[str, ActiveRecord] = {}
        self._aliases: dict[str, str] = {}
        self._archive_requests: dict[str, PendingRecord] = {}
        self._standard_fields = list(standard_fields)

    def get_active_record(self, pv_name: str) -> ActiveRecord | None:
        with self._lock:
            record = self._type_infos.get(pv_name)
            # Callers mutate the record before saving it back
            return copy.deepcopy(record) if record is not None else None

    def update_active_record(self, pv_name: str, record: ActiveRecord) -> None:
        with self._lock:
            self._type_infos[pv_name] = copy.deepcopy(record)
        logger.debug(f"Updated type info for {pv_name}")

    def add_alias(self, alias: str, pv_name: str) -> None:
        with self._lock:
            self._aliases[alias] = pv_name
        logger.debug(f"Registered alias {alias} for {pv_name}")

    def get_fields_archived_as_part_of_stream(self) -> list[str]:
        with self._lock:
            return list(self._standard_fields)

    def persist_archive_request(self, pv_name: str, record: PendingRecord) -> None:
        with self._lock:
            self._archive_requests[pv_name] = copy.deepcopy(record)

    def load_archive_requests(self) -> dict[str, PendingRecord]:
        with self._lock:
            return copy.deepcopy(self._archive_requests)

    def remove_archive_request(self, pv_name: str) -> None:
        with self._lock:
            self._archive_requests.pop(pv_name, None)

    # ------------------------------------------------------------------
    # Read helpers (not part of the ConfigStore protocol)
    # ------------------------------------------------------------------

    def get_alias_target(self, alias: str) -> str | None:
        with self._lock:
            return self._aliases.get(alias)

    def get_persisted_request(self, pv_name: str) -> PendingRecord | None:
        with self._lock:
            record = self._archive_requests.get(pv_name)
            return copy.deepcopy(record) if record is not None else None
