"""
Compliance tracking service - PP 35/2021 acceptance gate and worker suggestions.
"""

from __future__ import annotations

from datetime import date

import psycopg

from app.config import settings
from app.db.helpers import DatabaseError
from app.db.pool import db_pool
from app.features.compliance.domain.models import (
    AlternativeWorker,
    ComplianceCheck,
    ComplianceRecord,
)
from app.features.errors import (
    ComplianceLimitError,
    DataUnavailableError,
    InvalidStateError,
    NotFoundError,
)
from app.features.reliability.domain.models import BookingStatus
from app.infrastructure.observability.logging import get_logger

from .calculator import classify_days_worked, normalize_month, rank_alternative_workers
from .repository import ComplianceRepository

logger = get_logger(__name__)


class ComplianceService:
    async def get_compliance_status(
        self, worker_id: str, business_id: str, month: date | str | None = None
    ) -> ComplianceCheck:
        """
        Classify a worker-business pair for a month.

        A pair with no bookings this month is simply ok with zero days.
        """
        target_month = normalize_month(month)
        try:
            days_worked = await ComplianceRepository.count_days_worked(
                worker_id,
                business_id,
                target_month,
                include_in_progress=settings.COMPLIANCE_COUNT_IN_PROGRESS,
            )
        except DatabaseError as e:
            logger.error(
                "Failed to count days worked",
                worker_id=worker_id,
                business_id=business_id,
                month=target_month.isoformat(),
                error=str(e),
            )
            raise DataUnavailableError("Could not check compliance status") from e

        return ComplianceCheck(
            worker_id=worker_id,
            business_id=business_id,
            month=target_month,
            result=classify_days_worked(days_worked),
        )

    async def check_before_accept(
        self, worker_id: str, business_id: str, month: date | str | None = None
    ) -> ComplianceCheck:
        """
        Acceptance gate: can this worker take another booking from this business?

        Raises:
            NotFoundError: business or worker does not exist
            DataUnavailableError: counts could not be loaded
        """
        await self._require_business(business_id)
        await self._require_worker(worker_id)

        check = await self.get_compliance_status(worker_id, business_id, month)

        logger.info(
            "Compliance checked before accept",
            worker_id=worker_id,
            business_id=business_id,
            month=check.month.isoformat(),
            days_worked=check.result.days_worked,
            status=check.result.status.value,
            can_accept=check.can_accept,
        )
        return check

    async def accept_booking(self, booking_id: str) -> ComplianceCheck:
        """
        Accept a pending booking only if the pair is still under the monthly limit.

        The recount and the status change run in one transaction holding a
        per worker-business-month advisory lock, so two concurrent accepts
        cannot both pass the gate at day 20.

        Returns:
            ComplianceCheck reflecting the day count after acceptance

        Raises:
            NotFoundError: booking does not exist
            InvalidStateError: booking is not pending, or has no start date
            ComplianceLimitError: pair already at 21 days this month
            DataUnavailableError: database failure
        """
        include_in_progress = settings.COMPLIANCE_COUNT_IN_PROGRESS

        try:
            async with db_pool.transaction() as conn:
                booking = await ComplianceRepository.fetch_booking(
                    booking_id, connection=conn, for_update=True
                )
                if not booking:
                    raise NotFoundError("booking", booking_id)
                if booking["status"] != BookingStatus.PENDING.value:
                    raise InvalidStateError(
                        f"Booking {booking_id} is {booking['status']}, only pending bookings "
                        "can be accepted"
                    )
                if booking["start_date"] is None:
                    raise InvalidStateError(
                        f"Booking {booking_id} has no start date and cannot be counted "
                        "toward the monthly limit"
                    )

                worker_id = str(booking["worker_id"])
                business_id = str(booking["business_id"])
                month = normalize_month(booking["start_date"])

                await ComplianceRepository.lock_pair_for_month(conn, worker_id, business_id, month)
                days_worked = await ComplianceRepository.count_days_worked(
                    worker_id,
                    business_id,
                    month,
                    include_in_progress=include_in_progress,
                    connection=conn,
                )

                before = classify_days_worked(days_worked)
                if not before.can_accept:
                    logger.warning(
                        "Booking acceptance blocked by day limit",
                        booking_id=booking_id,
                        worker_id=worker_id,
                        business_id=business_id,
                        days_worked=days_worked,
                    )
                    raise ComplianceLimitError(before.message, days_worked=days_worked)

                await ComplianceRepository.mark_booking_accepted(conn, booking_id)
                days_after = await ComplianceRepository.count_days_worked(
                    worker_id,
                    business_id,
                    month,
                    include_in_progress=include_in_progress,
                    connection=conn,
                )
                await ComplianceRepository.upsert_compliance_record(
                    worker_id, business_id, month, days_after, connection=conn
                )

        except (DatabaseError, psycopg.Error) as e:
            logger.error("Booking acceptance failed", booking_id=booking_id, error=str(e))
            raise DataUnavailableError(f"Could not accept booking {booking_id}") from e

        after = classify_days_worked(days_after)
        logger.info(
            "Booking accepted",
            booking_id=booking_id,
            worker_id=worker_id,
            business_id=business_id,
            month=month.isoformat(),
            days_worked=days_after,
            status=after.status.value,
        )
        return ComplianceCheck(
            worker_id=worker_id, business_id=business_id, month=month, result=after
        )

    async def get_alternative_workers(
        self,
        business_id: str,
        month: date | str | None = None,
        limit: int | None = None,
        exclude_worker_id: str | None = None,
    ) -> list[AlternativeWorker]:
        """Workers the business can still book this month, most remaining capacity first."""
        await self._require_business(business_id)
        target_month = normalize_month(month)

        try:
            rows = await ComplianceRepository.fetch_candidate_workers(
                business_id,
                target_month,
                limit or settings.COMPLIANCE_ALTERNATIVES_LIMIT,
                include_in_progress=settings.COMPLIANCE_COUNT_IN_PROGRESS,
                exclude_worker_id=exclude_worker_id,
            )
        except DatabaseError as e:
            logger.error("Failed to load candidate workers", business_id=business_id, error=str(e))
            raise DataUnavailableError("Could not load alternative workers") from e

        candidates = [
            AlternativeWorker(
                worker_id=str(row["worker_id"]),
                full_name=row.get("full_name"),
                avatar_url=row.get("avatar_url"),
                phone=row.get("phone"),
                reliability_score=(
                    float(row["reliability_score"])
                    if row.get("reliability_score") is not None
                    else None
                ),
                compliance=classify_days_worked(int(row["days_worked"])),
            )
            for row in rows
        ]
        ranked = rank_alternative_workers(candidates)

        logger.info(
            "Alternative workers ranked",
            business_id=business_id,
            month=target_month.isoformat(),
            candidates=len(candidates),
            available=len(ranked),
        )
        return ranked

    async def get_business_records_for_audit(
        self, business_id: str, limit: int | None = None
    ) -> list[ComplianceRecord]:
        await self._require_business(business_id)
        try:
            return await ComplianceRepository.fetch_business_records(
                business_id, limit or settings.COMPLIANCE_AUDIT_LIMIT
            )
        except DatabaseError as e:
            raise DataUnavailableError("Could not load compliance records") from e

    async def get_worker_records(
        self, worker_id: str, limit: int | None = None
    ) -> list[ComplianceRecord]:
        await self._require_worker(worker_id)
        try:
            return await ComplianceRepository.fetch_worker_records(
                worker_id, limit or settings.COMPLIANCE_AUDIT_LIMIT
            )
        except DatabaseError as e:
            raise DataUnavailableError("Could not load compliance records") from e

    async def _require_business(self, business_id: str) -> None:
        try:
            exists = await ComplianceRepository.business_exists(business_id)
        except DatabaseError as e:
            raise DataUnavailableError("Could not verify business") from e
        if not exists:
            raise NotFoundError("business", business_id)

    async def _require_worker(self, worker_id: str) -> None:
        try:
            exists = await ComplianceRepository.worker_exists(worker_id)
        except DatabaseError as e:
            raise DataUnavailableError("Could not verify worker") from e
        if not exists:
            raise NotFoundError("worker", worker_id)


compliance_service = ComplianceService()
