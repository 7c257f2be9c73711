"""Archive PV service - the admission pipeline for one or many PVs.

Pipeline per PV: normalize -> check (merge into existing entries) ->
resolve policy -> submit. The per-PV lock is held from the check to the
submit so concurrent requests for one PV cannot both enqueue it.

Error handling:
- InvalidNameError always aborts the batch
- plain batches parse the shared sampling method/period up front, so a bad
  value aborts the batch before any PV is processed
- structured batches parse each item inside the per-item isolation, so a bad
  value only fails that item
"""

from __future__ import annotations

import logging
import math
from collections.abc import Collection, Iterable
from typing import Any

from ..errors import (
    CollaboratorIOError,
    InvalidNameError,
    InvalidSamplingPeriodError,
    UnknownSamplingMethodError,
)
from ..interfaces import ConfigStore, WorkflowEngine
from ..locks import KeyedLock
from ..models import (
    DEFAULT_MONITOR_SAMPLING_PERIOD,
    ActiveRecord,
    ArchiveRequest,
    ArchiveResult,
    ArchiveStatus,
    NotRegistered,
    SamplingMethod,
)
from ..pv_names import strip_v4_prefix
from ..workflow import WorkflowQueue
from .checker import AdmissionChecker
from .normalizer import NameNormalizer
from .policy import PolicyResolver
from .registrar import RequestRegistrar
from .standard_fields import get_fields_archived_as_part_of_stream

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value)
    return value or None


def parse_sampling_period(value: Any) -> float:
    """Parse a sampling period given as a number or a numeric string."""
    if isinstance(value, bool):
        raise InvalidSamplingPeriodError(value)
    try:
        period = float(value)
    except (TypeError, ValueError):
        raise InvalidSamplingPeriodError(value) from None
    if not math.isfinite(period):
        raise InvalidSamplingPeriodError(value)
    return period


def parse_plain_request(
    pv: str,
    samplingperiod: str | None = None,
    samplingmethod: str | None = None,
    controlling_pv: str | None = None,
    policy: str | None = None,
    default_sampling_period: float = DEFAULT_MONITOR_SAMPLING_PERIOD,
) -> list[ArchiveRequest]:
    """Build one request per name of a comma separated PV list.

    The shared parameters are parsed once, before any PV is processed.
    The sampling method is matched exactly (no case folding).

    Raises:
        UnknownSamplingMethodError: for a sampling method other than SCAN/MONITOR
        InvalidSamplingPeriodError: for a non-numeric sampling period
    """
    override = bool(samplingperiod)
    sampling_period = parse_sampling_period(samplingperiod) if override else default_sampling_period
    sampling_method = SamplingMethod.parse(samplingmethod) if samplingmethod is not None else SamplingMethod.MONITOR

    controlling_pv = _optional_str(controlling_pv)
    if controlling_pv:
        logger.debug(f"We are conditionally archiving using controlling PV {controlling_pv}")
    policy_name = _optional_str(policy)
    if policy_name:
        logger.info(f"We have a user override for policy {policy_name}")

    names = [name.strip() for name in pv.split(",")]
    return [
        ArchiveRequest(
            pv_name=name,
            override_policy_params=override,
            sampling_method=sampling_method,
            sampling_period=sampling_period,
            controlling_pv=controlling_pv,
            policy_name=policy_name,
        )
        for name in names
        if name
    ]


def parse_structured_item(
    item: dict[str, Any],
    default_sampling_period: float = DEFAULT_MONITOR_SAMPLING_PERIOD,
) -> ArchiveRequest:
    """Build a request from one item of a JSON batch.

    The presence of ``samplingperiod`` alone requests a policy override.
    The sampling method is upper-cased before matching.
    """
    override = "samplingperiod" in item
    sampling_period = parse_sampling_period(item["samplingperiod"]) if override else default_sampling_period

    sampling_method = SamplingMethod.MONITOR
    if "samplingmethod" in item:
        raw_method = item["samplingmethod"]
        sampling_method = SamplingMethod.parse(raw_method.upper() if isinstance(raw_method, str) else raw_method)

    return ArchiveRequest(
        pv_name=item["pv"],
        override_policy_params=override,
        sampling_method=sampling_method,
        sampling_period=sampling_period,
        controlling_pv=_optional_str(item.get("controllingPV")),
        policy_name=_optional_str(item.get("policy")),
        alias=_optional_str(item.get("alias")),
    )


class ArchivePVService:
    """Admission pipeline wired to injected collaborators"""

    def __init__(
        self,
        config_store: ConfigStore,
        workflow_queue: WorkflowQueue,
        engine: WorkflowEngine,
        policy_resolver: PolicyResolver | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self.config_store = config_store
        self.workflow_queue = workflow_queue
        self.normalizer = NameNormalizer()
        self.checker = AdmissionChecker(config_store, workflow_queue)
        self.policy_resolver = policy_resolver or PolicyResolver()
        self.registrar = RequestRegistrar(workflow_queue, engine)
        self.locks = locks or KeyedLock()

    @property
    def default_sampling_period(self) -> float:
        return self.policy_resolver.default_monitor_sampling_period

    def standard_fields(self) -> frozenset[str]:
        return get_fields_archived_as_part_of_stream(self.config_store)

    def archive_pv(self, request: ArchiveRequest, standard_fields: Collection[str]) -> ArchiveResult:
        """Run the admission pipeline for one PV.

        Raises:
            InvalidNameError: if the PV name fails the syntax check
        """
        name = self.normalizer.normalize(request.pv_name, standard_fields)
        pv_name = name.pv_name

        with self.locks.hold(strip_v4_prefix(pv_name)):
            try:
                admission = self.checker.check(name, request.alias)
            except CollaboratorIOError as e:
                logger.error(f"Could not check existing state for {pv_name}: {e}")
                return ArchiveResult(pv_name, ArchiveStatus.EXCEPTION)
            except Exception as e:
                logger.error(f"Exception checking existing state for {pv_name}: {e}", exc_info=True)
                return ArchiveResult(pv_name, ArchiveStatus.EXCEPTION)

            if not isinstance(admission, NotRegistered):
                return ArchiveResult(pv_name, ArchiveStatus.ALREADY_SUBMITTED)

            policy = self.policy_resolver.resolve(request)
            status = self.registrar.submit(name, policy, request.alias)

        return ArchiveResult(pv_name, status)

    def archive_pvs(self, requests: Iterable[ArchiveRequest]) -> list[ArchiveResult]:
        """Admit a plain batch, preserving input order."""
        standard_fields = self.standard_fields()
        results = []
        for request in requests:
            logger.debug(f"Calling archive_pv for pv {request.pv_name}")
            results.append(self.archive_pv(request, standard_fields))
        return results

    def archive_structured(self, items: list[Any]) -> list[ArchiveResult]:
        """Admit a structured (JSON) batch, preserving input order."""
        logger.debug(f"Archiving {len(items)} PVs from a structured request")
        standard_fields = self.standard_fields()
        results = []
        for item in items:
            pv_name = item.get("pv") if isinstance(item, dict) else None
            if not isinstance(pv_name, str):
                logger.error(f"Structured archive request item has no usable pv: {item!r}")
                raise InvalidNameError(str(pv_name or ""))

            try:
                request = parse_structured_item(item, self.default_sampling_period)
            except (UnknownSamplingMethodError, InvalidSamplingPeriodError) as e:
                logger.error(f"Exception parsing archive parameters for pv {pv_name}: {e}")
                results.append(ArchiveResult(pv_name, ArchiveStatus.EXCEPTION))
                continue

            logger.debug(f"Calling archive_pv for pv {pv_name}")
            results.append(self.archive_pv(request, standard_fields))
        return results

    def pending_requests(self) -> list[str]:
        return self.workflow_queue.pending_names()

    def restore_pending_requests(self) -> int:
        """Reload requests persisted before a restart into the workflow queue."""
        restored = self.workflow_queue.load()
        if restored:
            logger.info(f"Restored {restored} pending archive request(s)")
        return restored

    def confirm_archiving(self, pv_name: str) -> ActiveRecord | None:
        """Hand a pending PV over to the config store once the engine has started it.

        The type info is written before the request leaves the queue, so the
        PV is visible as active or pending throughout.

        Returns:
            The new type info, or None if the PV had no pending request

        Raises:
            CollaboratorIOError: if the store cannot be updated; the request stays pending
        """
        queue_name = strip_v4_prefix(pv_name)
        with self.locks.hold(queue_name):
            pending = self.workflow_queue.get(queue_name)
            if pending is None:
                logger.warning(f"Engine confirmed {pv_name} but no request is pending")
                return None

            type_info = ActiveRecord(pv_name=queue_name, archive_fields=set(pending.archive_fields))
            self.config_store.update_active_record(queue_name, type_info)
            for alias in pending.aliases:
                self.config_store.add_alias(alias, queue_name)
            self.workflow_queue.remove(queue_name)

        logger.info(f"PV {queue_name} is now archiving")
        return type_info
