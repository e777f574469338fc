"""
PP 35/2021 day-limit rules.

Daily workers may work at most 21 days per calendar month for the same
business. These functions classify a day count and rank alternative
workers; they never touch the database.

    days_worked <= 14   -> ok       / none
    15 <= days <= 20    -> warning  / approaching
    days_worked >= 21   -> blocked  / limit
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime

from app.features.compliance.domain.models import (
    AlternativeWorker,
    ComplianceResult,
    ComplianceStatus,
    WarningLevel,
)
from app.features.reliability.domain.models import BookingRecord, BookingStatus

MONTHLY_DAY_LIMIT = 21
WARNING_THRESHOLD = 15

COUNTED_STATUSES = frozenset({BookingStatus.ACCEPTED, BookingStatus.COMPLETED})


def normalize_month(value: date | datetime | str | None = None, today: date | None = None) -> date:
    """
    Return the first day of the month identified by value.

    Accepts a date, a datetime, an ISO string ("2026-02-01" or "2026-02"),
    or None for the current UTC month.
    """
    if value is None:
        value = today or datetime.now(UTC).date()
    elif isinstance(value, str):
        text = value.strip()
        value = date.fromisoformat(text if len(text) > 7 else f"{text}-01")
    elif isinstance(value, datetime):
        value = value.date()
    return value.replace(day=1)


def count_days_worked(
    bookings: Iterable[BookingRecord],
    worker_id: str,
    business_id: str,
    month: date,
    *,
    include_in_progress: bool = False,
) -> int:
    """
    Count the pair's accepted/completed bookings scheduled to start in month.

    In-memory counterpart of ComplianceRepository.count_days_worked, for
    booking lists already loaded by a caller. The month key is the UTC
    calendar date of the scheduled start.
    """
    statuses = COUNTED_STATUSES
    if include_in_progress:
        statuses = statuses | {BookingStatus.IN_PROGRESS}
    month = normalize_month(month)
    return sum(
        1
        for booking in bookings
        if booking.worker_id == worker_id
        and booking.business_id == business_id
        and booking.status in statuses
        and (day := _scheduled_day(booking)) is not None
        and normalize_month(day) == month
    )


def _scheduled_day(booking: BookingRecord) -> date | None:
    if booking.scheduled_date is not None:
        return booking.scheduled_date
    start = booking.scheduled_start
    if start is None:
        return None
    return start.astimezone(UTC).date() if start.tzinfo else start.date()


def classify_days_worked(days_worked: int) -> ComplianceResult:
    """Classify a monthly day count against the 21-day limit."""
    if days_worked < 0:
        raise ValueError(f"days_worked must be >= 0, got {days_worked}")

    if days_worked >= MONTHLY_DAY_LIMIT:
        return ComplianceResult(
            status=ComplianceStatus.BLOCKED,
            days_worked=days_worked,
            warning_level=WarningLevel.LIMIT,
            message=(
                f"Worker has reached {days_worked} days this month. "
                f"PP 35/2021 limit ({MONTHLY_DAY_LIMIT} days) reached. "
                "Cannot accept more bookings."
            ),
        )

    if days_worked >= WARNING_THRESHOLD:
        return ComplianceResult(
            status=ComplianceStatus.WARNING,
            days_worked=days_worked,
            warning_level=WarningLevel.APPROACHING,
            message=(
                f"Warning: Worker has worked {days_worked} days this month. "
                f"Approaching PP 35/2021 limit of {MONTHLY_DAY_LIMIT} days."
            ),
        )

    return ComplianceResult(
        status=ComplianceStatus.OK,
        days_worked=days_worked,
        warning_level=WarningLevel.NONE,
        message="Worker can be booked",
    )


def rank_alternative_workers(workers: Iterable[AlternativeWorker]) -> list[AlternativeWorker]:
    """Drop blocked workers and order the rest by days worked, fewest first."""
    available = [worker for worker in workers if worker.compliance.can_accept]
    # sorted() is stable, so ties keep source order
    return sorted(available, key=lambda worker: worker.days_worked)
