"""
Domain models for the reliability feature.

These lightweight dataclasses describe snapshots of rows owned by the
booking workflow. They carry no business logic so the calculators,
repositories and API layer can all share them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class BookingStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class BookingRecord:
    """Read-only snapshot of a bookings row.

    scheduled_start and scheduled_end carry a time of day only when the row
    has one; a date-only schedule leaves them None and sets scheduled_date,
    so punctuality is never judged against midnight.
    """

    id: str
    worker_id: str
    business_id: str
    status: BookingStatus
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    actual_start: datetime | None = None
    actual_end: datetime | None = None
    rating: int | None = None
    created_at: datetime | None = None
    scheduled_date: date | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == BookingStatus.COMPLETED


@dataclass(slots=True)
class ReviewRecord:
    """Worker-targeted review, optionally tied to a booking."""

    id: str
    worker_id: str
    rating: int
    booking_id: str | None = None


@dataclass(slots=True)
class ScoreBreakdown:
    attendance_rate: float  # 0-100
    punctuality_rate: float  # 0-100
    average_rating: float | None  # 1-5, None when nothing was rated
    completed_jobs_count: int
    total_bookings_count: int


@dataclass(slots=True)
class ReliabilityScore:
    score: float
    breakdown: ScoreBreakdown
    formula: str = "weighted"


@dataclass(slots=True)
class ScoreHistoryEntry:
    """Represents a reliability_score_history row."""

    id: str
    worker_id: str
    score: float
    attendance_rate: float
    punctuality_rate: float
    average_rating: float | None
    completed_jobs_count: int
    calculated_at: datetime
