"""Request registrar - enqueues a new pending request and triggers the engine."""

from __future__ import annotations

import logging

from ..interfaces import WorkflowEngine
from ..models import ArchiveStatus, EffectivePolicy, NormalizedName, PendingRecord
from ..pv_names import strip_v4_prefix
from ..workflow import WorkflowQueue

logger = logging.getLogger(__name__)


class RequestRegistrar:
    """Creates PendingRecords and hands them to the workflow"""

    def __init__(self, workflow_queue: WorkflowQueue, engine: WorkflowEngine) -> None:
        self.workflow_queue = workflow_queue
        self.engine = engine

    def submit(self, name: NormalizedName, policy: EffectivePolicy, alias: str | None = None) -> ArchiveStatus:
        """Submit a new archive request.

        The queue key drops the protocol prefix; the engine is triggered with
        the lookup name. Failures are reported, never raised, so the rest of a
        batch continues.
        """
        pv_name = name.pv_name
        try:
            queue_name = strip_v4_prefix(pv_name)

            record = PendingRecord(
                sampling_method=policy.sampling_method,
                sampling_period=policy.sampling_period,
                controlling_pv=policy.controlling_pv,
                policy_name=policy.policy_name,
            )
            if name.field_name and name.is_standard_field:
                record.add_archive_field(name.field_name)
            if alias is not None:
                logger.debug(f"Adding alias {alias} to the new request for {queue_name}")
                record.add_alias(alias)

            if not self.workflow_queue.insert_if_absent(queue_name, record):
                logger.warning(f"Lost the race to submit {queue_name}; a request is already pending")
                return ArchiveStatus.ALREADY_SUBMITTED

            self.engine.start_pv_workflow(pv_name)
            if policy.period_clamped:
                logger.info(
                    f"Archive request submitted for {pv_name} at the minimum sampling period {policy.sampling_period}"
                )
            else:
                logger.info(f"Archive request submitted for {pv_name}")
            return ArchiveStatus.SUBMITTED
        except Exception as e:
            logger.error(f"Exception archiving PV {pv_name}: {e}", exc_info=True)
            return ArchiveStatus.EXCEPTION
