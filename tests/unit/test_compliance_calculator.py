from dataclasses import replace
from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from app.features.compliance.domain.models import ComplianceStatus, WarningLevel
from app.features.compliance.tracking.calculator import (
    MONTHLY_DAY_LIMIT,
    classify_days_worked,
    count_days_worked,
    normalize_month,
    rank_alternative_workers,
)
from app.features.reliability.domain.models import BookingStatus
from tests.factories import make_alternative, make_booking


@pytest.mark.parametrize(
    ("days", "status", "level"),
    [
        (0, ComplianceStatus.OK, WarningLevel.NONE),
        (14, ComplianceStatus.OK, WarningLevel.NONE),
        (15, ComplianceStatus.WARNING, WarningLevel.APPROACHING),
        (20, ComplianceStatus.WARNING, WarningLevel.APPROACHING),
        (21, ComplianceStatus.BLOCKED, WarningLevel.LIMIT),
        (30, ComplianceStatus.BLOCKED, WarningLevel.LIMIT),
    ],
)
def test_classification_boundaries(days, status, level):
    result = classify_days_worked(days)

    assert result.status == status
    assert result.warning_level == level
    assert result.days_worked == days
    assert result.can_accept is (status != ComplianceStatus.BLOCKED)


def test_messages_name_the_regulation():
    assert classify_days_worked(3).message == "Worker can be booked"
    assert "Approaching PP 35/2021 limit of 21 days" in classify_days_worked(18).message
    blocked = classify_days_worked(MONTHLY_DAY_LIMIT).message
    assert "PP 35/2021 limit (21 days) reached" in blocked
    assert "Cannot accept more bookings" in blocked


def test_negative_day_count_is_rejected():
    with pytest.raises(ValueError):
        classify_days_worked(-1)


def test_alternatives_drop_blocked_and_sort_by_days():
    workers = [
        make_alternative("a", 5),
        make_alternative("b", 0),
        make_alternative("c", 20),
        make_alternative("d", 21),
        make_alternative("e", 14),
    ]

    ranked = rank_alternative_workers(workers)

    assert [worker.days_worked for worker in ranked] == [0, 5, 14, 20]
    assert "d" not in {worker.worker_id for worker in ranked}


def test_alternatives_ties_keep_input_order():
    workers = [make_alternative("x", 3), make_alternative("y", 1), make_alternative("z", 3)]

    assert [worker.worker_id for worker in rank_alternative_workers(workers)] == ["y", "x", "z"]


def test_alternatives_empty_input():
    assert rank_alternative_workers([]) == []


def test_count_days_worked_only_counts_pair_status_and_month():
    march = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
    bookings = [
        make_booking("accepted", status=BookingStatus.ACCEPTED),
        make_booking("completed", status=BookingStatus.COMPLETED),
        make_booking("pending", status=BookingStatus.PENDING),
        make_booking("cancelled", status=BookingStatus.CANCELLED),
        make_booking("running", status=BookingStatus.IN_PROGRESS),
        make_booking("other-biz", business_id="biz-2"),
        make_booking("other-worker", worker_id="worker-2"),
        make_booking("next-month", scheduled_start=march),
        make_booking("unscheduled", scheduled_start=None),
    ]

    february = date(2026, 2, 1)
    assert count_days_worked(bookings, "worker-1", "biz-1", february) == 2
    assert (
        count_days_worked(bookings, "worker-1", "biz-1", february, include_in_progress=True) == 3
    )
    assert count_days_worked(bookings, "worker-1", "biz-1", date(2026, 3, 15)) == 1


def test_count_days_worked_buckets_by_utc_day():
    # 05:00 on 1 March in UTC+7 is still 28 February in UTC
    start = datetime(2026, 3, 1, 5, 0, tzinfo=timezone(timedelta(hours=7)))
    bookings = [make_booking("b1", scheduled_start=start)]

    assert count_days_worked(bookings, "worker-1", "biz-1", date(2026, 2, 1)) == 1
    assert count_days_worked(bookings, "worker-1", "biz-1", date(2026, 3, 1)) == 0


def test_count_days_worked_uses_date_only_schedule():
    booking = replace(make_booking("b1", scheduled_start=None), scheduled_date=date(2026, 2, 27))

    assert count_days_worked([booking], "worker-1", "biz-1", date(2026, 2, 1)) == 1


def test_count_days_worked_without_bookings_is_zero():
    assert count_days_worked([], "worker-1", "biz-1", date(2026, 2, 1)) == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2026-02", date(2026, 2, 1)),
        ("2026-02-17", date(2026, 2, 1)),
        (date(2026, 12, 31), date(2026, 12, 1)),
        (datetime(2026, 7, 4, 23, 59, tzinfo=UTC), date(2026, 7, 1)),
    ],
)
def test_normalize_month(value, expected):
    assert normalize_month(value) == expected


def test_normalize_month_defaults_to_today():
    assert normalize_month(None, today=date(2026, 5, 20)) == date(2026, 5, 1)


def test_normalize_month_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_month("February")
