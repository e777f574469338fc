"""
Reliability score calculators.

Pure functions over bookings and reviews that were already fetched by the
repository. Nothing here touches the database, the clock or any shared
state, so the same input always yields the same score.

Score = 0.40 * attendance + 0.30 * punctuality + 0.30 * rating, each
component on a 0-5 scale, clamped to [1.0, 5.0] and rounded half-up to
two decimals.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from app.features.reliability.domain.models import (
    BookingRecord,
    ReliabilityScore,
    ReviewRecord,
    ScoreBreakdown,
)

MIN_SCORE = 1.0
MAX_SCORE = 5.0

# Onboarding defaults. Changing any of these moves every new worker's badge.
NEW_WORKER_SCORE = 3.0
NO_COMPLETED_JOBS_SCORE = 2.5
DEFAULT_RATING = 4.0

ATTENDANCE_WEIGHT = Decimal("0.40")
PUNCTUALITY_WEIGHT = Decimal("0.30")
RATING_WEIGHT = Decimal("0.30")

PUNCTUALITY_WINDOW_MINUTES = 15

LEGACY_WINDOW_DAYS = 90
LEGACY_GRACE = timedelta(hours=1)
LEGACY_DEFAULT_RATING = 3.0

_TWO_PLACES = Decimal("0.01")


def calculate_reliability_score(
    bookings: Iterable[BookingRecord], reviews: Iterable[ReviewRecord] = ()
) -> ReliabilityScore:
    """
    Score a worker from their booking history and reviews.

    Args:
        bookings: Every booking of the worker, any status
        reviews: Reviews targeting the worker

    Returns:
        ReliabilityScore with the rounded score and its breakdown
    """
    bookings = list(bookings)
    reviews = list(reviews)
    completed = [booking for booking in bookings if booking.is_completed]

    average_rating = average_rating_for(completed, reviews)
    punctuality = punctuality_fraction(completed)

    if not bookings:
        return ReliabilityScore(
            score=NEW_WORKER_SCORE,
            breakdown=ScoreBreakdown(
                attendance_rate=0.0,
                punctuality_rate=_as_percent(punctuality),
                average_rating=average_rating,
                completed_jobs_count=0,
                total_bookings_count=0,
            ),
        )

    if not completed:
        return ReliabilityScore(
            score=NO_COMPLETED_JOBS_SCORE,
            breakdown=ScoreBreakdown(
                attendance_rate=0.0,
                punctuality_rate=_as_percent(punctuality),
                average_rating=average_rating,
                completed_jobs_count=0,
                total_bookings_count=len(bookings),
            ),
        )

    attendance = len(completed) / len(bookings)
    rating_component = average_rating if average_rating is not None else DEFAULT_RATING

    score = weighted_score(
        attendance_score=attendance * MAX_SCORE,
        punctuality_score=punctuality * MAX_SCORE,
        rating_score=rating_component,
    )

    return ReliabilityScore(
        score=score,
        breakdown=ScoreBreakdown(
            attendance_rate=_as_percent(attendance),
            punctuality_rate=_as_percent(punctuality),
            average_rating=average_rating,
            completed_jobs_count=len(completed),
            total_bookings_count=len(bookings),
        ),
    )


def weighted_score(attendance_score: float, punctuality_score: float, rating_score: float) -> float:
    """Combine 0-5 component scores into the clamped, rounded reliability score."""
    total = (
        ATTENDANCE_WEIGHT * _to_decimal(attendance_score)
        + PUNCTUALITY_WEIGHT * _to_decimal(punctuality_score)
        + RATING_WEIGHT * _to_decimal(rating_score)
    )
    return _clamp_and_round(total)


def punctuality_fraction(completed: Iterable[BookingRecord]) -> float:
    """
    Share of completed bookings that started within +/-15 minutes of schedule.

    Bookings without both timestamps are left out. With no time data at all
    the worker gets full marks.
    """
    timed = [
        booking
        for booking in completed
        if booking.actual_start is not None and booking.scheduled_start is not None
    ]
    if not timed:
        return 1.0

    on_time = sum(
        1
        for booking in timed
        if abs(_minutes_between(booking.scheduled_start, booking.actual_start))
        <= PUNCTUALITY_WINDOW_MINUTES
    )
    return on_time / len(timed)


def average_rating_for(
    completed: Iterable[BookingRecord], reviews: Iterable[ReviewRecord]
) -> float | None:
    """
    Mean of valid 1-5 ratings from completed bookings and reviews.

    A review tied to a booking that already carries its own rating is not
    counted a second time. Returns None when nothing was rated.
    """
    ratings: list[int] = []
    rated_booking_ids: set[str] = set()

    for booking in completed:
        if _is_valid_rating(booking.rating):
            ratings.append(booking.rating)
            rated_booking_ids.add(booking.id)

    for review in reviews:
        if not _is_valid_rating(review.rating):
            continue
        if review.booking_id is not None and review.booking_id in rated_booking_ids:
            continue
        ratings.append(review.rating)

    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def calculate_legacy_completion_score(
    bookings: Iterable[BookingRecord],
    reviews: Iterable[ReviewRecord] = (),
    *,
    now: datetime,
) -> ReliabilityScore:
    """
    Deprecated 50/50 completion/rating formula from the old edge function.

    Kept so operators can compare both formulas on the same data; the
    weighted formula above is the one persisted by default.

    Works in percentage space over a rolling 90-day window. A completed
    booking only counts as attended when its recorded start is no more than
    an hour late and its recorded end no more than an hour early.
    """
    window_start = now - timedelta(days=LEGACY_WINDOW_DAYS)
    recent = [booking for booking in bookings if _in_window(booking, window_start)]
    completed = [booking for booking in recent if booking.is_completed]
    attended = [booking for booking in completed if _within_grace(booking)]

    completion_rate = len(attended) / len(recent) * 100 if recent else 100.0
    grace_rate = len(attended) / len(completed) * 100 if completed else 100.0

    ratings = [review.rating for review in reviews if _is_valid_rating(review.rating)]
    average_rating = sum(ratings) / len(ratings) if ratings else None
    rating_percent = (average_rating or LEGACY_DEFAULT_RATING) / MAX_SCORE * 100

    total = (
        _to_decimal(completion_rate) * Decimal("0.5") + _to_decimal(rating_percent) * Decimal("0.5")
    ) / Decimal(20)

    return ReliabilityScore(
        score=_clamp_and_round(total),
        breakdown=ScoreBreakdown(
            attendance_rate=round(completion_rate, 2),
            punctuality_rate=round(grace_rate, 2),
            average_rating=average_rating,
            completed_jobs_count=len(completed),
            total_bookings_count=len(recent),
        ),
        formula="legacy_completion",
    )


def _in_window(booking: BookingRecord, window_start: datetime) -> bool:
    stamp = booking.created_at or booking.scheduled_start
    if stamp is not None:
        return stamp >= window_start
    if booking.scheduled_date is not None:
        return booking.scheduled_date >= window_start.date()
    return True


def _within_grace(booking: BookingRecord) -> bool:
    if (
        booking.actual_start is not None
        and booking.scheduled_start is not None
        and booking.actual_start > booking.scheduled_start + LEGACY_GRACE
    ):
        return False
    if (
        booking.actual_end is not None
        and booking.scheduled_end is not None
        and booking.actual_end < booking.scheduled_end - LEGACY_GRACE
    ):
        return False
    return True


def _minutes_between(scheduled: datetime, actual: datetime) -> float:
    return (actual - scheduled).total_seconds() / 60


def _is_valid_rating(rating: int | None) -> bool:
    return rating is not None and 1 <= rating <= 5


def _to_decimal(value: float) -> Decimal:
    # str() keeps 4.2 as 4.2 instead of its binary expansion
    return Decimal(str(value))


def _clamp_and_round(value: Decimal) -> float:
    clamped = max(Decimal(str(MIN_SCORE)), min(Decimal(str(MAX_SCORE)), value))
    return float(clamped.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _as_percent(fraction: float) -> float:
    return float((_to_decimal(fraction) * 100).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
