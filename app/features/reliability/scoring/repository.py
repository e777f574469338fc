"""
Repository helpers for reliability scoring and score persistence.
"""

from datetime import UTC, date, datetime
from typing import Any

from app.db.helpers import execute_transaction, fetch_all, fetch_one
from app.features.reliability.domain.models import (
    BookingRecord,
    BookingStatus,
    ReliabilityScore,
    ReviewRecord,
    ScoreHistoryEntry,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ReliabilityRepository:
    """Thin wrappers for reading booking history and writing cached scores."""

    @staticmethod
    async def fetch_worker(worker_id: str) -> dict[str, Any] | None:
        return await fetch_one(
            """
            SELECT id, full_name, avatar_url, reliability_score, updated_at
            FROM workers
            WHERE id = %s
            """,
            (worker_id,),
        )

    @staticmethod
    async def fetch_bookings(worker_id: str) -> list[BookingRecord]:
        rows = await fetch_all(
            """
            SELECT id,
                   worker_id,
                   business_id,
                   status,
                   start_date AS scheduled_start,
                   end_date AS scheduled_end,
                   actual_start_time AS actual_start,
                   actual_end_time AS actual_end,
                   rating,
                   created_at
            FROM bookings
            WHERE worker_id = %s
            ORDER BY created_at
            """,
            (worker_id,),
        )
        return [_row_to_booking(row) for row in rows]

    @staticmethod
    async def fetch_reviews(worker_id: str) -> list[ReviewRecord]:
        rows = await fetch_all(
            """
            SELECT id, worker_id, booking_id, rating
            FROM reviews
            WHERE worker_id = %s
            """,
            (worker_id,),
        )
        return [
            ReviewRecord(
                id=str(row["id"]),
                worker_id=str(row["worker_id"]),
                rating=row["rating"],
                booking_id=str(row["booking_id"]) if row.get("booking_id") else None,
            )
            for row in rows
        ]

    @staticmethod
    async def save_score(worker_id: str, result: ReliabilityScore, record_history: bool) -> None:
        """Update the cached score and append a history row in one transaction."""
        queries: list[tuple] = [
            (
                """
                UPDATE workers
                SET reliability_score = %s,
                    updated_at = NOW()
                WHERE id = %s
                """,
                (result.score, worker_id),
            )
        ]

        if record_history:
            breakdown = result.breakdown
            queries.append(
                (
                    """
                    INSERT INTO reliability_score_history (
                        worker_id, score, attendance_rate, punctuality_rate,
                        avg_rating, completed_jobs_count, calculated_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, NOW())
                    """,
                    (
                        worker_id,
                        result.score,
                        breakdown.attendance_rate,
                        breakdown.punctuality_rate,
                        breakdown.average_rating,
                        breakdown.completed_jobs_count,
                    ),
                )
            )

        await execute_transaction(queries)

        logger.debug(
            "Reliability score persisted",
            worker_id=worker_id,
            score=result.score,
            history=record_history,
        )

    @staticmethod
    async def fetch_score_history(worker_id: str, limit: int) -> list[ScoreHistoryEntry]:
        rows = await fetch_all(
            """
            SELECT id, worker_id, score, attendance_rate, punctuality_rate,
                   avg_rating, completed_jobs_count, calculated_at
            FROM reliability_score_history
            WHERE worker_id = %s
            ORDER BY calculated_at DESC
            LIMIT %s
            """,
            (worker_id, limit),
        )
        return [
            ScoreHistoryEntry(
                id=str(row["id"]),
                worker_id=str(row["worker_id"]),
                score=float(row["score"]),
                attendance_rate=float(row["attendance_rate"]),
                punctuality_rate=float(row["punctuality_rate"]),
                average_rating=(
                    float(row["avg_rating"]) if row.get("avg_rating") is not None else None
                ),
                completed_jobs_count=row["completed_jobs_count"],
                calculated_at=row["calculated_at"],
            )
            for row in rows
        ]

    @staticmethod
    async def fetch_worker_ids(after_id: str | None, limit: int) -> list[str]:
        """Keyset-paginated worker ids for batch recalculation."""
        if after_id is None:
            rows = await fetch_all(
                "SELECT id FROM workers ORDER BY id LIMIT %s",
                (limit,),
            )
        else:
            rows = await fetch_all(
                "SELECT id FROM workers WHERE id > %s ORDER BY id LIMIT %s",
                (after_id, limit),
            )
        return [str(row["id"]) for row in rows]


def _row_to_booking(row: dict[str, Any]) -> BookingRecord:
    return BookingRecord(
        id=str(row["id"]),
        worker_id=str(row["worker_id"]),
        business_id=str(row["business_id"]),
        status=BookingStatus(row["status"]),
        scheduled_start=_with_time(row.get("scheduled_start")),
        scheduled_end=_with_time(row.get("scheduled_end")),
        actual_start=row.get("actual_start"),
        actual_end=row.get("actual_end"),
        rating=row.get("rating"),
        created_at=row.get("created_at"),
        scheduled_date=_as_date(row.get("scheduled_start")),
    )


def _with_time(value: date | datetime | None) -> datetime | None:
    # start_date/end_date are DATE columns; a bare date has no time to be late against
    return value if isinstance(value, datetime) else None


def _as_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.astimezone(UTC).date() if value.tzinfo else value.date()
    return value
