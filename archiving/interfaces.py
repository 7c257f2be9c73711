"""Collaborator protocols for the admission pipeline.

The pipeline never reaches for global services; the config store, the
workflow queue and the engine are passed in, which keeps it testable with
fakes."""

from __future__ import annotations

from typing import Protocol

from .models import ActiveRecord, PendingRecord


class ConfigStore(Protocol):
    """Owns persisted state for PVs that are already archiving"""

    def get_active_record(self, pv_name: str) -> ActiveRecord | None:
        """Return the type info for a PV, or None if it is not archiving"""
        ...

    def update_active_record(self, pv_name: str, record: ActiveRecord) -> None:
        """Persist a modified type info"""
        ...

    def add_alias(self, alias: str, pv_name: str) -> None:
        """Register an alternate lookup name for a PV"""
        ...

    def get_fields_archived_as_part_of_stream(self) -> list[str]:
        """Fields bundled automatically with the base PV.

        Raises:
            CollaboratorIOError: if the list cannot be read
        """
        ...

    def persist_archive_request(self, pv_name: str, record: PendingRecord) -> None:
        """Durably record a newly admitted request"""
        ...

    def load_archive_requests(self) -> dict[str, PendingRecord]:
        """All persisted requests keyed by queue name, for restoring the queue on startup"""
        ...

    def remove_archive_request(self, pv_name: str) -> None:
        """Forget a persisted request once the PV is archiving"""
        ...


class WorkflowEngine(Protocol):
    """Starts the archiving workflow for an admitted PV"""

    def start_pv_workflow(self, pv_name: str) -> None:
        """Trigger the workflow; returns once the trigger is accepted, not completed"""
        ...
