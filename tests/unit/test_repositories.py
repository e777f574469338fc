"""
Tests for row mapping and query shape in the feature repositories.
"""

from datetime import UTC, date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from app.features.compliance.tracking import repository as compliance_repository
from app.features.compliance.tracking.calculator import MONTHLY_DAY_LIMIT
from app.features.compliance.tracking.repository import ComplianceRepository
from app.features.reliability.scoring import repository as reliability_repository
from app.features.reliability.scoring.calculator import (
    calculate_legacy_completion_score,
    calculate_reliability_score,
)
from app.features.reliability.scoring.repository import ReliabilityRepository


def _booking_row(day: int, **overrides):
    row = {
        "id": f"booking-{day}",
        "worker_id": "worker-1",
        "business_id": "biz-1",
        "status": "completed",
        "scheduled_start": date(2026, 2, day),
        "scheduled_end": date(2026, 2, day),
        "actual_start": datetime(2026, 2, day, 8, 0, tzinfo=UTC),
        "actual_end": datetime(2026, 2, day, 16, 0, tzinfo=UTC),
        "rating": 5,
        "created_at": datetime(2026, 2, 1, tzinfo=UTC),
    }
    row.update(overrides)
    return row


@pytest.mark.asyncio
async def test_date_only_schedule_is_not_scored_as_midnight(monkeypatch):
    rows = [_booking_row(10 + i) for i in range(4)]
    monkeypatch.setattr(reliability_repository, "fetch_all", AsyncMock(return_value=rows))

    bookings = await ReliabilityRepository.fetch_bookings("worker-1")
    result = calculate_reliability_score(bookings)

    assert all(booking.scheduled_start is None for booking in bookings)
    assert all(booking.scheduled_end is None for booking in bookings)
    assert [booking.scheduled_date for booking in bookings] == [
        date(2026, 2, 10 + i) for i in range(4)
    ]
    assert result.breakdown.punctuality_rate == 100.0
    assert result.score == 5.0


@pytest.mark.asyncio
async def test_date_only_schedule_passes_legacy_grace_check(monkeypatch):
    rows = [_booking_row(10), _booking_row(11)]
    monkeypatch.setattr(reliability_repository, "fetch_all", AsyncMock(return_value=rows))

    bookings = await ReliabilityRepository.fetch_bookings("worker-1")
    result = calculate_legacy_completion_score(
        bookings, [], now=datetime(2026, 3, 1, tzinfo=UTC)
    )

    assert result.breakdown.attendance_rate == 100.0


@pytest.mark.asyncio
async def test_timestamp_schedule_keeps_time_and_utc_day(monkeypatch):
    jakarta = timezone(timedelta(hours=7))
    start = datetime(2026, 3, 1, 5, 0, tzinfo=jakarta)
    row = _booking_row(10, scheduled_start=start, scheduled_end=start + timedelta(hours=8))
    monkeypatch.setattr(reliability_repository, "fetch_all", AsyncMock(return_value=[row]))

    [booking] = await ReliabilityRepository.fetch_bookings("worker-1")

    assert booking.scheduled_start == start
    assert booking.scheduled_date == date(2026, 2, 28)


@pytest.mark.asyncio
async def test_candidate_query_filters_and_orders_before_limit(monkeypatch):
    fetch_all = AsyncMock(return_value=[])
    monkeypatch.setattr(compliance_repository, "fetch_all", fetch_all)

    await ComplianceRepository.fetch_candidate_workers("biz-1", date(2026, 2, 1), 20)

    query, params = fetch_all.await_args.args
    query = " ".join(query.split())
    assert "WHERE COALESCE(month_counts.days_worked, 0) < %s" in query
    assert query.endswith("ORDER BY COALESCE(month_counts.days_worked, 0), w.id LIMIT %s")
    assert params[5] == MONTHLY_DAY_LIMIT
    assert params[-1] == 20
    assert params[3:5] == (date(2026, 2, 1), date(2026, 3, 1))
