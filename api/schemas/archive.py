"""
Pydantic schemas for archive request endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ArchivePVResult(BaseModel):
    """One entry of the archivePV response."""

    model_config = ConfigDict(populate_by_name=True)

    pv_name: str = Field(alias="pvName")
    status: str


class PendingRequestsResponse(BaseModel):
    """PV names currently waiting in the workflow queue."""

    pending: list[str]
    count: int


class ConfirmArchivingResponse(BaseModel):
    """Type info created when the engine reports a PV as archiving."""

    model_config = ConfigDict(populate_by_name=True)

    pv_name: str = Field(alias="pvName")
    archive_fields: list[str] = Field(alias="archiveFields")
