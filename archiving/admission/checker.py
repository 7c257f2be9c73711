"""Admission checker - looks a PV up in the config store and the workflow queue.

Existing entries absorb new standard fields and aliases instead of gaining a
second record. Merges into an active type info are persisted; merges into a
pending request only touch the in-memory queue entry and are lost if the
process restarts before the request goes active.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..interfaces import ConfigStore
from ..models import (
    AdmissionResult,
    AlreadyActive,
    AlreadyPending,
    NormalizedName,
    NotRegistered,
)
from ..workflow import WorkflowQueue

logger = logging.getLogger(__name__)


class AdmissionChecker:
    """Classifies a normalized PV as active, pending or unregistered"""

    def __init__(self, config_store: ConfigStore, workflow_queue: WorkflowQueue) -> None:
        self.config_store = config_store
        self.workflow_queue = workflow_queue

    def check(self, name: NormalizedName, alias: str | None = None) -> AdmissionResult:
        pv_name = name.pv_name

        type_info = self.config_store.get_active_record(pv_name)
        if type_info is not None:
            logger.debug(f"We are already archiving pv {pv_name} and have a type info")
            if name.field_name and name.is_standard_field:
                if type_info.has_archive_field(name.field_name):
                    logger.debug(f"Field {name.field_name} is already being archived for {pv_name}")
                else:
                    logger.info(f"Adding field {name.field_name} to pv {pv_name} that is already being archived")
                    type_info.add_archive_field(name.field_name)
                    type_info.modification_time = datetime.now(UTC)
                    self.config_store.update_active_record(pv_name, type_info)

            if alias is not None:
                self.config_store.add_alias(alias, pv_name)

            return AlreadyActive(type_info)

        pending = self.workflow_queue.get(pv_name)
        if pending is not None:
            if name.field_name and name.is_standard_field and not pending.has_archive_field(name.field_name):
                logger.debug(
                    f"Adding field {name.field_name} to the pending request for {pv_name}; not updating persistence"
                )
                pending.add_archive_field(name.field_name)

            if alias is not None:
                logger.debug(f"Adding alias {alias} to the pending request for {pv_name}")
                pending.add_alias(alias)

            logger.warning(f"We have a pending request for pv {pv_name}")
            return AlreadyPending(pending)

        return NotRegistered()
