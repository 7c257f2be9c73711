"""PocketBase-backed config store.

Collections:
- pv_type_info: pv_name, archive_fields (json), modification_time
- pv_aliases: alias, pv_name
- archive_requests: pv_name, params (json)
- config: config_key, config_value (standard_fields is a comma separated list)
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import CollaboratorIOError, UnknownSamplingMethodError
from ..logging_config import TRACE
from ..models import ActiveRecord, PendingRecord

logger = logging.getLogger(__name__)

TYPE_INFO_COLLECTION = "pv_type_info"
ALIAS_COLLECTION = "pv_aliases"
ARCHIVE_REQUEST_COLLECTION = "archive_requests"
CONFIG_COLLECTION = "config"
STANDARD_FIELDS_KEY = "standard_fields"


def _quote(value: str) -> str:
    """Quote a string literal for a PocketBase filter expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


class PocketBaseConfigStore:
    """Config store reading and writing PocketBase collections"""

    def __init__(self, pb_client: PocketBase, default_standard_fields: list[str] | None = None) -> None:
        """Initialize store with PocketBase client.

        Args:
            pb_client: Authenticated PocketBase client
            default_standard_fields: Used when the config collection has no standard_fields entry
        """
        self.pb = pb_client
        self.default_standard_fields = list(default_standard_fields or [])

    def _find_first(self, collection: str, filter_str: str) -> Any | None:
        logger.log(TRACE, f"Querying {collection} with filter {filter_str}")
        try:
            return self.pb.collection(collection).get_first_list_item(filter_str)
        except ClientResponseError as e:
            if getattr(e, "status", None) == 404:
                return None
            raise CollaboratorIOError(f"Failed to query {collection}: {e}") from e

    def get_active_record(self, pv_name: str) -> ActiveRecord | None:
        item = self._find_first(TYPE_INFO_COLLECTION, f"pv_name = {_quote(pv_name)}")
        if item is None:
            return None
        try:
            return ActiveRecord(
                pv_name=item.pv_name,
                archive_fields=set(getattr(item, "archive_fields", None) or []),
                modification_time=_parse_time(getattr(item, "modification_time", None)),
                id=item.id,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise CollaboratorIOError(f"Malformed type info for {pv_name}: {e}") from e

    def update_active_record(self, pv_name: str, record: ActiveRecord) -> None:
        data = {
            "pv_name": pv_name,
            "archive_fields": sorted(record.archive_fields),
            "modification_time": record.modification_time.isoformat(),
        }
        try:
            if record.id:
                self.pb.collection(TYPE_INFO_COLLECTION).update(record.id, data)
            else:
                created = self.pb.collection(TYPE_INFO_COLLECTION).create(data)
                record.id = created.id
        except ClientResponseError as e:
            raise CollaboratorIOError(f"Failed to update type info for {pv_name}: {e}") from e

    def add_alias(self, alias: str, pv_name: str) -> None:
        existing = self._find_first(ALIAS_COLLECTION, f"alias = {_quote(alias)}")
        try:
            if existing is None:
                self.pb.collection(ALIAS_COLLECTION).create({"alias": alias, "pv_name": pv_name})
            elif existing.pv_name != pv_name:
                logger.warning(f"Re-pointing alias {alias} from {existing.pv_name} to {pv_name}")
                self.pb.collection(ALIAS_COLLECTION).update(existing.id, {"pv_name": pv_name})
        except ClientResponseError as e:
            raise CollaboratorIOError(f"Failed to register alias {alias} for {pv_name}: {e}") from e

    def get_fields_archived_as_part_of_stream(self) -> list[str]:
        item = self._find_first(CONFIG_COLLECTION, f"config_key = {_quote(STANDARD_FIELDS_KEY)}")
        if item is None:
            return list(self.default_standard_fields)
        value = getattr(item, "config_value", "") or ""
        return [f.strip() for f in str(value).split(",") if f.strip()]

    def persist_archive_request(self, pv_name: str, record: PendingRecord) -> None:
        data = {"pv_name": pv_name, "params": record.to_dict()}
        try:
            existing = self._find_first(ARCHIVE_REQUEST_COLLECTION, f"pv_name = {_quote(pv_name)}")
            if existing is None:
                self.pb.collection(ARCHIVE_REQUEST_COLLECTION).create(data)
            else:
                self.pb.collection(ARCHIVE_REQUEST_COLLECTION).update(existing.id, data)
        except ClientResponseError as e:
            raise CollaboratorIOError(f"Failed to persist archive request for {pv_name}: {e}") from e

    def load_archive_requests(self) -> dict[str, PendingRecord]:
        try:
            items = self.pb.collection(ARCHIVE_REQUEST_COLLECTION).get_full_list()
        except ClientResponseError as e:
            raise CollaboratorIOError(f"Failed to load archive requests: {e}") from e

        requests: dict[str, PendingRecord] = {}
        for item in items:
            params = getattr(item, "params", None)
            try:
                if not isinstance(params, dict):
                    raise TypeError(f"params is {type(params).__name__}, expected an object")
                requests[item.pv_name] = PendingRecord.from_dict(params)
            except (AttributeError, TypeError, ValueError, UnknownSamplingMethodError) as e:
                logger.warning(f"Skipping malformed archive request {getattr(item, 'id', '?')}: {e}")
        return requests

    def remove_archive_request(self, pv_name: str) -> None:
        existing = self._find_first(ARCHIVE_REQUEST_COLLECTION, f"pv_name = {_quote(pv_name)}")
        if existing is None:
            return
        try:
            self.pb.collection(ARCHIVE_REQUEST_COLLECTION).delete(existing.id)
        except ClientResponseError as e:
            raise CollaboratorIOError(f"Failed to remove archive request for {pv_name}: {e}") from e
