"""
PP 35/2021 compliance routes.

Usage:
    1. GET  /compliance/status - Days worked and status for a worker-business pair
    2. GET  /compliance/check - Acceptance gate (verifies worker and business exist)
    3. POST /compliance/bookings/{booking_id}/accept - Atomic gate + accept
    4. GET  /compliance/businesses/{business_id}/alternatives - Workers still bookable
    5. GET  /compliance/businesses/{business_id}/records - Audit trail for a business
    6. GET  /compliance/workers/{worker_id}/records - A worker's history across businesses
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from app.features.compliance.tracking.calculator import normalize_month
from app.features.compliance.tracking.service import compliance_service
from app.features.errors import (
    ComplianceLimitError,
    DataUnavailableError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)
from app.infrastructure.observability.logging import get_logger
from app.models.api.compliance_response import (
    AlternativeWorkerItem,
    AlternativeWorkersResponse,
    ComplianceRecordItem,
    ComplianceRecordsResponse,
    ComplianceStatusResponse,
)

router = APIRouter(prefix="/compliance", tags=["compliance"])
logger = get_logger(__name__)


def _to_http_error(error: ServiceError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ComplianceLimitError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": error.code,
                "message": str(error),
                "days_worked": error.days_worked,
            },
        )
    if isinstance(error, InvalidStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, DataUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def _parse_month(month: str | None) -> date | None:
    if month is None:
        return None
    try:
        return normalize_month(month)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid month '{month}', expected YYYY-MM or YYYY-MM-DD",
        ) from e


@router.get("/status", response_model=ComplianceStatusResponse)
async def get_compliance_status(
    worker_id: str, business_id: str, month: str | None = None
) -> ComplianceStatusResponse:
    try:
        check = await compliance_service.get_compliance_status(
            worker_id, business_id, _parse_month(month)
        )
    except ServiceError as e:
        raise _to_http_error(e) from e
    return ComplianceStatusResponse.from_domain(check)


@router.get("/check", response_model=ComplianceStatusResponse)
async def check_compliance_before_accept(
    worker_id: str, business_id: str, month: str | None = None
) -> ComplianceStatusResponse:
    """
    Check whether a worker can be accepted for a business this month.

    Raises:
        404: Worker or business not found
        503: Day count could not be loaded
    """
    try:
        check = await compliance_service.check_before_accept(
            worker_id, business_id, _parse_month(month)
        )
    except ServiceError as e:
        raise _to_http_error(e) from e
    return ComplianceStatusResponse.from_domain(check)


@router.post("/bookings/{booking_id}/accept", response_model=ComplianceStatusResponse)
async def accept_booking(booking_id: str) -> ComplianceStatusResponse:
    """
    Accept a pending booking if the worker is under the 21-day limit.

    Raises:
        404: Booking not found
        409: Limit reached, or booking not pending
        503: Database failure
    """
    try:
        check = await compliance_service.accept_booking(booking_id)
    except ServiceError as e:
        raise _to_http_error(e) from e
    return ComplianceStatusResponse.from_domain(check)


@router.get("/businesses/{business_id}/alternatives", response_model=AlternativeWorkersResponse)
async def list_alternative_workers(
    business_id: str,
    month: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    exclude_worker_id: str | None = None,
) -> AlternativeWorkersResponse:
    target_month = normalize_month(_parse_month(month))
    try:
        workers = await compliance_service.get_alternative_workers(
            business_id, target_month, limit, exclude_worker_id
        )
    except ServiceError as e:
        raise _to_http_error(e) from e

    return AlternativeWorkersResponse(
        business_id=business_id,
        month=target_month,
        workers=[AlternativeWorkerItem.from_domain(worker) for worker in workers],
    )


@router.get("/businesses/{business_id}/records", response_model=ComplianceRecordsResponse)
async def list_business_compliance_records(
    business_id: str, limit: int = Query(100, ge=1, le=500)
) -> ComplianceRecordsResponse:
    try:
        records = await compliance_service.get_business_records_for_audit(business_id, limit)
    except ServiceError as e:
        raise _to_http_error(e) from e

    logger.info("Compliance audit records served", business_id=business_id, count=len(records))
    return ComplianceRecordsResponse(
        records=[ComplianceRecordItem.from_domain(record) for record in records],
        count=len(records),
    )


@router.get("/workers/{worker_id}/records", response_model=ComplianceRecordsResponse)
async def list_worker_compliance_records(
    worker_id: str, limit: int = Query(100, ge=1, le=500)
) -> ComplianceRecordsResponse:
    try:
        records = await compliance_service.get_worker_records(worker_id, limit)
    except ServiceError as e:
        raise _to_http_error(e) from e

    return ComplianceRecordsResponse(
        records=[ComplianceRecordItem.from_domain(record) for record in records],
        count=len(records),
    )
