"""Archiving error classes.

Errors raised before per-PV isolation is established abort a whole batch;
errors raised inside the per-PV pipeline are reported inline.
"""

from __future__ import annotations


class ArchivingError(Exception):
    """Base exception for archive admission errors."""

    pass


class InvalidNameError(ArchivingError):
    """Raised when a PV name fails the syntax check. Aborts the batch."""

    def __init__(self, pv_name: str) -> None:
        self.pv_name = pv_name
        super().__init__(f"PV name fails syntax check {pv_name}")


class UnknownSamplingMethodError(ArchivingError):
    """Raised when a sampling method string is not one of SCAN or MONITOR."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown sampling method {value!r}")


class InvalidSamplingPeriodError(ArchivingError):
    """Raised when a sampling period is not a finite number."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid sampling period {value!r}")


class SubmissionError(ArchivingError):
    """Raised when a pending request cannot be enqueued or the engine cannot be notified."""

    pass


class CollaboratorIOError(ArchivingError):
    """Raised when the config store or another collaborator cannot be read or written."""

    pass
