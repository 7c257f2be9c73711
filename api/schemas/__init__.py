"""
Pydantic schemas for the management API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .archive import ArchivePVResult, ConfirmArchivingResponse, PendingRequestsResponse

__all__ = [
    "ArchivePVResult",
    "ConfirmArchivingResponse",
    "PendingRequestsResponse",
]
