"""Policy resolver - sampling method and period for a new request."""

from __future__ import annotations

import logging

from ..models import DEFAULT_MONITOR_SAMPLING_PERIOD, ArchiveRequest, EffectivePolicy, SamplingMethod

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_SAMPLING_PERIOD = 0.1


class PolicyResolver:
    """Applies defaults, caller overrides and the minimum sampling period"""

    def __init__(
        self,
        default_monitor_sampling_period: float = DEFAULT_MONITOR_SAMPLING_PERIOD,
        minimum_sampling_period: float = DEFAULT_MINIMUM_SAMPLING_PERIOD,
    ) -> None:
        self.default_monitor_sampling_period = default_monitor_sampling_period
        self.minimum_sampling_period = minimum_sampling_period

    def resolve(self, request: ArchiveRequest) -> EffectivePolicy:
        if not request.override_policy_params:
            return EffectivePolicy(
                sampling_method=SamplingMethod.MONITOR,
                sampling_period=self.default_monitor_sampling_period,
                controlling_pv=request.controlling_pv,
                policy_name=request.policy_name,
            )

        sampling_period = request.sampling_period
        clamped = False
        if sampling_period < self.minimum_sampling_period:
            logger.warning(
                f"Enforcing the minimum sampling period of {self.minimum_sampling_period} for pv {request.pv_name}"
            )
            sampling_period = self.minimum_sampling_period
            clamped = True

        logger.debug(
            f"Overriding policy params with sampling method {request.sampling_method.value} "
            f"and sampling period {sampling_period}"
        )
        return EffectivePolicy(
            sampling_method=request.sampling_method,
            sampling_period=sampling_period,
            controlling_pv=request.controlling_pv,
            policy_name=request.policy_name,
            period_clamped=clamped,
        )
