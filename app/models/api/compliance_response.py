# app/models/api/compliance_response.py
"""
Compliance API response models.
Used by the compliance router for output formatting.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.features.compliance.domain.models import (
    AlternativeWorker,
    ComplianceCheck,
    ComplianceRecord,
    ComplianceResult,
)


class ComplianceStatusResponse(BaseModel):
    """Response for GET /compliance/status and the acceptance gate"""

    worker_id: str
    business_id: str
    month: date = Field(..., description="First day of the checked month")
    status: Literal["ok", "warning", "blocked"]
    days_worked: int = Field(..., ge=0)
    warning_level: Literal["none", "approaching", "limit"]
    message: str
    can_accept: bool

    @classmethod
    def from_domain(cls, check: ComplianceCheck) -> "ComplianceStatusResponse":
        result = check.result
        return cls(
            worker_id=check.worker_id,
            business_id=check.business_id,
            month=check.month,
            status=result.status.value,
            days_worked=result.days_worked,
            warning_level=result.warning_level.value,
            message=result.message,
            can_accept=result.can_accept,
        )


class ComplianceSummary(BaseModel):
    status: Literal["ok", "warning", "blocked"]
    days_worked: int
    warning_level: Literal["none", "approaching", "limit"]
    message: str

    @classmethod
    def from_domain(cls, result: ComplianceResult) -> "ComplianceSummary":
        return cls(
            status=result.status.value,
            days_worked=result.days_worked,
            warning_level=result.warning_level.value,
            message=result.message,
        )


class AlternativeWorkerItem(BaseModel):
    worker_id: str
    full_name: str | None
    avatar_url: str | None
    phone: str | None
    reliability_score: float | None
    days_worked: int
    compliance: ComplianceSummary

    @classmethod
    def from_domain(cls, worker: AlternativeWorker) -> "AlternativeWorkerItem":
        return cls(
            worker_id=worker.worker_id,
            full_name=worker.full_name,
            avatar_url=worker.avatar_url,
            phone=worker.phone,
            reliability_score=worker.reliability_score,
            days_worked=worker.days_worked,
            compliance=ComplianceSummary.from_domain(worker.compliance),
        )


class AlternativeWorkersResponse(BaseModel):
    """Response for GET /compliance/businesses/{business_id}/alternatives"""

    business_id: str
    month: date
    workers: list[AlternativeWorkerItem]


class ComplianceRecordItem(BaseModel):
    worker_id: str
    business_id: str
    month: date
    days_worked: int
    updated_at: datetime | None = None
    worker_name: str | None = None
    business_name: str | None = None

    @classmethod
    def from_domain(cls, record: ComplianceRecord) -> "ComplianceRecordItem":
        return cls(
            worker_id=record.worker_id,
            business_id=record.business_id,
            month=record.month,
            days_worked=record.days_worked,
            updated_at=record.updated_at,
            worker_name=record.worker_name,
            business_name=record.business_name,
        )


class ComplianceRecordsResponse(BaseModel):
    records: list[ComplianceRecordItem]
    count: int
