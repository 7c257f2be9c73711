"""
Archive Router - PV archive request endpoints.

Accepts a comma separated PV list with shared query parameters, or a JSON
array where each item carries its own parameters, and reports one status per
PV in input order. The engine calls back on confirmArchiving once a PV is
archiving, which retires its pending request.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from archiving.admission import ArchivePVService, parse_plain_request
from archiving.errors import (
    CollaboratorIOError,
    InvalidNameError,
    InvalidSamplingPeriodError,
    UnknownSamplingMethodError,
)

from ..dependencies import get_archive_service
from ..schemas.archive import ArchivePVResult, ConfirmArchivingResponse, PendingRequestsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mgmt/bpl", tags=["archive"])

JSON_CONTENT_TYPE = "application/json"


def _is_json_request(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() == JSON_CONTENT_TYPE


@router.api_route("/archivePV", methods=["GET", "POST"], response_model=list[ArchivePVResult])
async def archive_pv(
    request: Request,
    pv: str | None = Query(None, description="PV name, or a comma separated list of PV names"),
    samplingperiod: str | None = Query(None, description="Sampling period in seconds; presence overrides policy"),
    samplingmethod: str | None = Query(None, description="SCAN or MONITOR"),
    controlling_pv: str | None = Query(None, alias="controllingPV", description="PV gating conditional archiving"),
    policy: str | None = Query(None, description="Policy to use instead of the normal policy execution"),
    service: ArchivePVService = Depends(get_archive_service),
) -> list[dict[str, Any]]:
    """Archive one or more PVs.

    Plain requests parse the shared parameters before any PV is processed, so
    an unknown sampling method fails the whole request. JSON requests isolate
    per-item parameter errors. A PV name failing the syntax check fails the
    whole request in both modes.
    """
    if _is_json_request(request):
        try:
            body = await request.json()
        except ValueError as e:
            logger.error(f"Exception processing archive JSON: {e}")
            raise HTTPException(status_code=400, detail="Request body is not valid JSON")
        if not isinstance(body, list):
            raise HTTPException(status_code=400, detail="Expected a JSON array of PV archive parameters")
        logger.debug(f"PV count {len(body)}")
        run = partial(service.archive_structured, body)
    else:
        if not pv:
            raise HTTPException(status_code=400, detail="Missing required parameter pv")
        logger.info(f"Archiving pv(s) {pv}")
        try:
            archive_requests = parse_plain_request(
                pv,
                samplingperiod=samplingperiod,
                samplingmethod=samplingmethod,
                controlling_pv=controlling_pv,
                policy=policy,
                default_sampling_period=service.default_sampling_period,
            )
        except (UnknownSamplingMethodError, InvalidSamplingPeriodError) as e:
            logger.error(f"Rejecting archive request for {pv}: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        run = partial(service.archive_pvs, archive_requests)

    try:
        results = await asyncio.to_thread(run)
    except InvalidNameError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [result.to_dict() for result in results]


@router.get("/getPendingArchiveRequests", response_model=PendingRequestsResponse)
async def get_pending_archive_requests(
    service: ArchivePVService = Depends(get_archive_service),
) -> PendingRequestsResponse:
    """List PVs admitted but not yet archiving."""
    pending = service.pending_requests()
    return PendingRequestsResponse(pending=pending, count=len(pending))


@router.post("/confirmArchiving", response_model=ConfirmArchivingResponse)
async def confirm_archiving(
    pv: str = Query(..., description="PV the engine has started archiving"),
    service: ArchivePVService = Depends(get_archive_service),
) -> dict[str, Any]:
    """Engine callback: move a pending PV over to its type info."""
    try:
        type_info = await asyncio.to_thread(service.confirm_archiving, pv)
    except CollaboratorIOError as e:
        logger.error(f"Could not record {pv} as archiving: {e}")
        raise HTTPException(status_code=503, detail=f"Config store unavailable: {e}")

    if type_info is None:
        raise HTTPException(status_code=404, detail=f"No pending archive request for {pv}")

    return {"pvName": type_info.pv_name, "archiveFields": sorted(type_info.archive_fields)}
