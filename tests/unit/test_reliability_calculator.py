from app.features.reliability.domain.models import BookingStatus, ReviewRecord
from app.features.reliability.scoring.calculator import (
    DEFAULT_RATING,
    NEW_WORKER_SCORE,
    NO_COMPLETED_JOBS_SCORE,
    average_rating_for,
    calculate_reliability_score,
    punctuality_fraction,
    weighted_score,
)
from tests.factories import make_booking


def _review(review_id: str, rating: int, booking_id: str | None = None) -> ReviewRecord:
    return ReviewRecord(id=review_id, worker_id="worker-1", rating=rating, booking_id=booking_id)


def test_new_worker_gets_default_score():
    result = calculate_reliability_score([], [])

    assert result.score == NEW_WORKER_SCORE == 3.0
    assert result.breakdown.total_bookings_count == 0
    assert result.breakdown.completed_jobs_count == 0
    assert result.breakdown.average_rating is None


def test_worker_without_completed_jobs_gets_lower_default():
    bookings = [
        make_booking("b1", status=BookingStatus.PENDING),
        make_booking("b2", status=BookingStatus.CANCELLED),
    ]

    result = calculate_reliability_score(bookings)

    assert result.score == NO_COMPLETED_JOBS_SCORE == 2.5
    assert result.breakdown.total_bookings_count == 2
    assert result.breakdown.attendance_rate == 0.0


def test_documented_example_scores_4_08():
    """10 bookings, 8 completed, 6 of 8 on time, ratings averaging 4.5."""
    bookings = [
        make_booking(f"c{i}", late_minutes=0 if i < 6 else 45, rating=5 if i % 2 == 0 else 4)
        for i in range(8)
    ]
    bookings += [make_booking(f"x{i}", status=BookingStatus.CANCELLED) for i in range(2)]

    result = calculate_reliability_score(bookings)

    assert result.breakdown.attendance_rate == 80.0
    assert result.breakdown.punctuality_rate == 75.0
    assert result.breakdown.average_rating == 4.5
    assert result.score == 4.08


def test_rounding_is_half_up():
    # 0.4*4.0 + 0.3*3.75 + 0.3*4.2 = 3.985 exactly
    assert weighted_score(4.0, 3.75, 4.2) == 3.99


def test_half_up_rounding_through_reviews():
    bookings = [make_booking(f"c{i}", late_minutes=0 if i < 3 else 30) for i in range(4)]
    bookings += [make_booking("x1", status=BookingStatus.REJECTED)]
    reviews = [_review(f"r{i}", rating) for i, rating in enumerate([4, 4, 4, 4, 5])]

    result = calculate_reliability_score(bookings, reviews)

    assert result.breakdown.attendance_rate == 80.0
    assert result.breakdown.average_rating == 4.2
    assert result.score == 3.99


def test_unrated_worker_uses_default_rating():
    bookings = [make_booking("c1"), make_booking("c2")]

    result = calculate_reliability_score(bookings)

    assert result.breakdown.average_rating is None
    # 0.4*5 + 0.3*5 + 0.3*4.0
    assert result.score == round(2.0 + 1.5 + 0.3 * DEFAULT_RATING, 2) == 4.7


def test_perfect_worker_scores_five():
    bookings = [make_booking(f"c{i}", rating=5) for i in range(5)]

    assert calculate_reliability_score(bookings).score == 5.0


def test_always_late_one_star_worker():
    bookings = [make_booking(f"c{i}", late_minutes=60, rating=1) for i in range(3)]

    result = calculate_reliability_score(bookings)

    assert result.breakdown.punctuality_rate == 0.0
    assert result.score == 2.3


def test_score_is_clamped_to_minimum():
    assert weighted_score(0.0, 0.0, 1.0) == 1.0
    assert weighted_score(0.0, 0.0, 0.0) == 1.0


def test_score_never_exceeds_maximum():
    assert weighted_score(5.0, 5.0, 5.0) == 5.0
    assert weighted_score(6.0, 6.0, 6.0) == 5.0


def test_punctuality_window_is_inclusive_both_ways():
    on_time = [
        make_booking("early", late_minutes=-15),
        make_booking("late", late_minutes=15),
        make_booking("exact", late_minutes=0),
    ]
    assert punctuality_fraction(on_time) == 1.0

    off = [make_booking("early", late_minutes=-16), make_booking("late", late_minutes=16)]
    assert punctuality_fraction(off) == 0.0


def test_bookings_without_check_in_are_ignored_for_punctuality():
    bookings = [
        make_booking("timed", late_minutes=30),
        make_booking("untimed", late_minutes=None),
    ]

    assert punctuality_fraction(bookings) == 0.0
    assert punctuality_fraction([make_booking("untimed", late_minutes=None)]) == 1.0


def test_review_for_already_rated_booking_is_not_double_counted():
    completed = [make_booking("c1", rating=5)]
    reviews = [_review("r1", 1, booking_id="c1"), _review("r2", 3)]

    assert average_rating_for(completed, reviews) == 4.0


def test_out_of_range_ratings_are_ignored():
    completed = [make_booking("c1", rating=0), make_booking("c2", rating=4)]
    reviews = [_review("r1", 6), _review("r2", 2)]

    assert average_rating_for(completed, reviews) == 3.0
    assert average_rating_for([make_booking("c1", rating=9)], []) is None


def test_ratings_on_unfinished_bookings_do_not_count():
    bookings = [
        make_booking("c1", rating=4),
        make_booking("p1", status=BookingStatus.ACCEPTED, rating=1),
    ]

    result = calculate_reliability_score(bookings)

    assert result.breakdown.average_rating == 4.0
    assert result.breakdown.attendance_rate == 50.0


def test_same_input_gives_same_score():
    bookings = [make_booking(f"c{i}", late_minutes=i * 5, rating=3 + i % 3) for i in range(6)]

    first = calculate_reliability_score(bookings)
    second = calculate_reliability_score(list(reversed(bookings)))

    assert first == second
