from dataclasses import replace
from datetime import UTC, datetime, timedelta

from app.features.reliability.domain.models import BookingStatus, ReviewRecord
from app.features.reliability.scoring.calculator import calculate_legacy_completion_score
from tests.factories import make_booking

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=UTC)


def test_legacy_formula_without_history_uses_defaults():
    result = calculate_legacy_completion_score([], [], now=NOW)

    # (100% completion * 0.5 + 60% rating * 0.5) / 20
    assert result.score == 4.0
    assert result.formula == "legacy_completion"
    assert result.breakdown.average_rating is None


def test_legacy_formula_counts_late_start_as_missed():
    bookings = [make_booking(f"c{i}") for i in range(3)]
    bookings.append(make_booking("late", late_minutes=120))

    result = calculate_legacy_completion_score(bookings, [], now=NOW)

    assert result.breakdown.attendance_rate == 75.0
    assert result.breakdown.punctuality_rate == 75.0
    assert result.score == 3.38


def test_legacy_formula_counts_early_leave_as_missed():
    left_early = make_booking("early-leave")
    left_early = replace(left_early, actual_end=left_early.scheduled_end - timedelta(hours=2))
    bookings = [make_booking("c1"), left_early]

    result = calculate_legacy_completion_score(bookings, [], now=NOW)

    assert result.breakdown.attendance_rate == 50.0
    assert result.breakdown.completed_jobs_count == 2


def test_legacy_formula_ignores_bookings_outside_window():
    old = make_booking(
        "old",
        status=BookingStatus.CANCELLED,
        created_at=NOW - timedelta(days=100),
    )
    bookings = [make_booking("c1"), old]
    reviews = [ReviewRecord(id="r1", worker_id="worker-1", rating=5)]

    result = calculate_legacy_completion_score(bookings, reviews, now=NOW)

    assert result.breakdown.total_bookings_count == 1
    assert result.score == 5.0
