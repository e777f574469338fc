"""
Domain models for the compliance feature.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class ComplianceStatus(StrEnum):
    OK = "ok"
    WARNING = "warning"
    BLOCKED = "blocked"


class WarningLevel(StrEnum):
    NONE = "none"
    APPROACHING = "approaching"
    LIMIT = "limit"


@dataclass(slots=True, frozen=True)
class ComplianceResult:
    """Classification of one worker-business pair for one month."""

    status: ComplianceStatus
    days_worked: int
    warning_level: WarningLevel
    message: str

    @property
    def can_accept(self) -> bool:
        return self.status != ComplianceStatus.BLOCKED


@dataclass(slots=True, frozen=True)
class ComplianceCheck:
    """Result of the acceptance gate for a worker-business pair."""

    worker_id: str
    business_id: str
    month: date
    result: ComplianceResult

    @property
    def can_accept(self) -> bool:
        return self.result.can_accept


@dataclass(slots=True)
class ComplianceRecord:
    """Represents a compliance_tracking row."""

    worker_id: str
    business_id: str
    month: date
    days_worked: int
    updated_at: datetime | None = None
    worker_name: str | None = None
    business_name: str | None = None


@dataclass(slots=True)
class AlternativeWorker:
    """A worker who can still be booked by the business this month."""

    worker_id: str
    full_name: str | None
    avatar_url: str | None
    phone: str | None
    reliability_score: float | None
    compliance: ComplianceResult

    @property
    def days_worked(self) -> int:
        return self.compliance.days_worked
