"""
Archiving - admission control for PV archive requests.

This package contains:
- models: Domain models (ArchiveRequest, ActiveRecord, PendingRecord, ...)
- pv_names: PV name parsing and syntax checks
- admission: The normalize/check/resolve/submit pipeline
- stores: Config store implementations (PocketBase, in-memory)
- workflow: Workflow queue and engine notification
"""

from archiving.admission import ArchivePVService
from archiving.errors import (
    ArchivingError,
    CollaboratorIOError,
    InvalidNameError,
    InvalidSamplingPeriodError,
    SubmissionError,
    UnknownSamplingMethodError,
)
from archiving.models import ArchiveRequest, ArchiveResult, ArchiveStatus, SamplingMethod

__all__ = [
    "ArchivePVService",
    "ArchiveRequest",
    "ArchiveResult",
    "ArchiveStatus",
    "ArchivingError",
    "CollaboratorIOError",
    "InvalidNameError",
    "InvalidSamplingPeriodError",
    "SamplingMethod",
    "SubmissionError",
    "UnknownSamplingMethodError",
]
