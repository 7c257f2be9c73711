"""Core domain models for archive request admission.

These models represent the admission concepts and are independent of the
HTTP layer and of any particular config store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .errors import UnknownSamplingMethodError

# Sampling period used when the caller does not override policy parameters
DEFAULT_MONITOR_SAMPLING_PERIOD = 1.0


class SamplingMethod(Enum):
    """How the engine samples a PV"""

    SCAN = "SCAN"
    MONITOR = "MONITOR"

    @classmethod
    def parse(cls, value: Any) -> SamplingMethod:
        """Parse an exact enum name; anything else raises UnknownSamplingMethodError."""
        if isinstance(value, SamplingMethod):
            return value
        try:
            return cls[value]
        except (KeyError, TypeError):
            raise UnknownSamplingMethodError(value) from None


class ArchiveStatus(Enum):
    """Per-PV outcome reported back to the caller.

    Note: Values are part of the public response format.
    """

    ALREADY_SUBMITTED = "Already submitted"
    SUBMITTED = "Archive request submitted"
    EXCEPTION = "Exception occurred"


@dataclass
class ArchiveRequest:
    """Caller intent for one PV"""

    pv_name: str
    override_policy_params: bool = False
    sampling_method: SamplingMethod = SamplingMethod.MONITOR
    sampling_period: float = DEFAULT_MONITOR_SAMPLING_PERIOD
    controlling_pv: str | None = None
    policy_name: str | None = None
    alias: str | None = None


@dataclass
class NormalizedName:
    """Result of PV name normalization"""

    pv_name: str
    field_name: str | None = None
    is_standard_field: bool = False


@dataclass
class ActiveRecord:
    """Persisted state for a PV that is already being archived (its type info)"""

    pv_name: str
    archive_fields: set[str] = field(default_factory=set)
    modification_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str | None = None

    def has_archive_field(self, field_name: str) -> bool:
        return field_name in self.archive_fields

    def add_archive_field(self, field_name: str) -> None:
        self.archive_fields.add(field_name)


@dataclass
class PendingRecord:
    """User specified sampling parameters for a PV admitted but not yet archiving"""

    sampling_method: SamplingMethod = SamplingMethod.MONITOR
    sampling_period: float = DEFAULT_MONITOR_SAMPLING_PERIOD
    controlling_pv: str | None = None
    policy_name: str | None = None
    archive_fields: set[str] = field(default_factory=set)
    aliases: list[str] = field(default_factory=list)

    def has_archive_field(self, field_name: str) -> bool:
        return field_name in self.archive_fields

    def add_archive_field(self, field_name: str) -> None:
        self.archive_fields.add(field_name)

    def add_alias(self, alias: str) -> None:
        if alias not in self.aliases:
            self.aliases.append(alias)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for persistence in the archive_requests collection."""
        return {
            "sampling_method": self.sampling_method.value,
            "sampling_period": self.sampling_period,
            "controlling_pv": self.controlling_pv,
            "policy_name": self.policy_name,
            "archive_fields": sorted(self.archive_fields),
            "aliases": list(self.aliases),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PendingRecord:
        """Rebuild a record persisted with to_dict."""
        return cls(
            sampling_method=SamplingMethod.parse(data.get("sampling_method", SamplingMethod.MONITOR.value)),
            sampling_period=float(data.get("sampling_period", DEFAULT_MONITOR_SAMPLING_PERIOD)),
            controlling_pv=data.get("controlling_pv"),
            policy_name=data.get("policy_name"),
            archive_fields=set(data.get("archive_fields") or ()),
            aliases=list(data.get("aliases") or ()),
        )


@dataclass
class EffectivePolicy:
    """Sampling policy resolved for a new pending request"""

    sampling_method: SamplingMethod
    sampling_period: float
    controlling_pv: str | None = None
    policy_name: str | None = None
    period_clamped: bool = False


@dataclass
class AlreadyActive:
    """Admission result: the PV already has a type info"""

    record: ActiveRecord


@dataclass
class AlreadyPending:
    """Admission result: the PV already has a request in the workflow"""

    record: PendingRecord


@dataclass
class NotRegistered:
    """Admission result: the PV is unknown to both the store and the workflow"""

    pass


AdmissionResult = AlreadyActive | AlreadyPending | NotRegistered


@dataclass
class ArchiveResult:
    """One entry of the batch response"""

    pv_name: str
    status: ArchiveStatus

    def to_dict(self) -> dict[str, str]:
        return {"pvName": self.pv_name, "status": self.status.value}
