"""
Repository helpers for PP 35/2021 compliance tracking.
"""

from datetime import date
from typing import Any

import psycopg

from app.db.helpers import execute_query, fetch_all, fetch_one, fetch_val
from app.features.compliance.domain.models import ComplianceRecord
from app.features.compliance.tracking.calculator import MONTHLY_DAY_LIMIT
from app.features.reliability.domain.models import BookingStatus
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def next_month(month: date) -> date:
    if month.month == 12:
        return date(month.year + 1, 1, 1)
    return date(month.year, month.month + 1, 1)


def counted_statuses(include_in_progress: bool) -> list[str]:
    statuses = [BookingStatus.ACCEPTED.value, BookingStatus.COMPLETED.value]
    if include_in_progress:
        statuses.append(BookingStatus.IN_PROGRESS.value)
    return statuses


class ComplianceRepository:
    """Thin wrappers around bookings counts and the compliance_tracking table."""

    @staticmethod
    async def worker_exists(worker_id: str) -> bool:
        return bool(
            await fetch_val("SELECT EXISTS(SELECT 1 FROM workers WHERE id = %s)", (worker_id,))
        )

    @staticmethod
    async def business_exists(business_id: str) -> bool:
        return bool(
            await fetch_val(
                "SELECT EXISTS(SELECT 1 FROM businesses WHERE id = %s)", (business_id,)
            )
        )

    @staticmethod
    async def fetch_booking(
        booking_id: str,
        *,
        connection: psycopg.AsyncConnection | None = None,
        for_update: bool = False,
    ) -> dict[str, Any] | None:
        query = """
            SELECT id, worker_id, business_id, status, start_date, created_at
            FROM bookings
            WHERE id = %s
        """
        if for_update:
            query += " FOR UPDATE"
        return await fetch_one(query, (booking_id,), connection=connection)

    @staticmethod
    async def count_days_worked(
        worker_id: str,
        business_id: str,
        month: date,
        *,
        include_in_progress: bool = False,
        connection: psycopg.AsyncConnection | None = None,
    ) -> int:
        """Count the pair's accepted/completed bookings starting within month."""
        days = await fetch_val(
            """
            SELECT COUNT(*)
            FROM bookings
            WHERE business_id = %s
              AND worker_id = %s
              AND status = ANY(%s)
              AND start_date >= %s
              AND start_date < %s
            """,
            (
                business_id,
                worker_id,
                counted_statuses(include_in_progress),
                month,
                next_month(month),
            ),
            connection=connection,
        )
        return int(days or 0)

    @staticmethod
    async def lock_pair_for_month(
        connection: psycopg.AsyncConnection, worker_id: str, business_id: str, month: date
    ) -> None:
        """
        Serialize accepts for one worker-business-month.

        Transaction-scoped advisory lock; released on commit or rollback.
        Must be called inside db_pool.transaction().
        """
        key = f"compliance:{worker_id}:{business_id}:{month.isoformat()}"
        await connection.execute("SELECT pg_advisory_xact_lock(hashtextextended(%s, 0))", (key,))

    @staticmethod
    async def mark_booking_accepted(connection: psycopg.AsyncConnection, booking_id: str) -> int:
        return await execute_query(
            """
            UPDATE bookings
            SET status = 'accepted',
                updated_at = NOW()
            WHERE id = %s
              AND status = 'pending'
            """,
            (booking_id,),
            connection=connection,
        )

    @staticmethod
    async def upsert_compliance_record(
        worker_id: str,
        business_id: str,
        month: date,
        days_worked: int,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> None:
        await execute_query(
            """
            INSERT INTO compliance_tracking (business_id, worker_id, month, days_worked)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (business_id, worker_id, month)
            DO UPDATE SET
                days_worked = EXCLUDED.days_worked,
                updated_at = NOW()
            """,
            (business_id, worker_id, month, days_worked),
            connection=connection,
        )

    @staticmethod
    async def fetch_candidate_workers(
        business_id: str,
        month: date,
        limit: int,
        *,
        include_in_progress: bool = False,
        exclude_worker_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Bookable workers who have booked with the business before.

        Workers at or past the monthly limit are excluded and the rest come
        back fewest days first, so LIMIT keeps the best candidates.
        """
        return await fetch_all(
            """
            SELECT w.id AS worker_id,
                   w.full_name,
                   w.avatar_url,
                   w.phone,
                   w.reliability_score,
                   COALESCE(month_counts.days_worked, 0) AS days_worked
            FROM workers w
            JOIN (
                SELECT DISTINCT worker_id
                FROM bookings
                WHERE business_id = %s
            ) past ON past.worker_id = w.id
            LEFT JOIN (
                SELECT worker_id, COUNT(*) AS days_worked
                FROM bookings
                WHERE business_id = %s
                  AND status = ANY(%s)
                  AND start_date >= %s
                  AND start_date < %s
                GROUP BY worker_id
            ) month_counts ON month_counts.worker_id = w.id
            WHERE COALESCE(month_counts.days_worked, 0) < %s
              AND (%s::uuid IS NULL OR w.id <> %s::uuid)
            ORDER BY COALESCE(month_counts.days_worked, 0), w.id
            LIMIT %s
            """,
            (
                business_id,
                business_id,
                counted_statuses(include_in_progress),
                month,
                next_month(month),
                MONTHLY_DAY_LIMIT,
                exclude_worker_id,
                exclude_worker_id,
                limit,
            ),
        )

    @staticmethod
    async def fetch_business_records(business_id: str, limit: int) -> list[ComplianceRecord]:
        rows = await fetch_all(
            """
            SELECT ct.worker_id, ct.business_id, ct.month, ct.days_worked, ct.updated_at,
                   w.full_name AS worker_name
            FROM compliance_tracking ct
            JOIN workers w ON w.id = ct.worker_id
            WHERE ct.business_id = %s
            ORDER BY ct.month DESC
            LIMIT %s
            """,
            (business_id, limit),
        )
        return [_row_to_record(row) for row in rows]

    @staticmethod
    async def fetch_worker_records(worker_id: str, limit: int) -> list[ComplianceRecord]:
        rows = await fetch_all(
            """
            SELECT ct.worker_id, ct.business_id, ct.month, ct.days_worked, ct.updated_at,
                   b.name AS business_name
            FROM compliance_tracking ct
            JOIN businesses b ON b.id = ct.business_id
            WHERE ct.worker_id = %s
            ORDER BY ct.month DESC
            LIMIT %s
            """,
            (worker_id, limit),
        )
        return [_row_to_record(row) for row in rows]


def _row_to_record(row: dict[str, Any]) -> ComplianceRecord:
    return ComplianceRecord(
        worker_id=str(row["worker_id"]),
        business_id=str(row["business_id"]),
        month=row["month"],
        days_worked=row["days_worked"],
        updated_at=row.get("updated_at"),
        worker_name=row.get("worker_name"),
        business_name=row.get("business_name"),
    )
