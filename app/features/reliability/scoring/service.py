"""
Reliability scoring service - fetches history, scores workers and caches results.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from app.config import settings
from app.db.helpers import DatabaseError
from app.features.errors import DataUnavailableError, NotFoundError
from app.features.reliability.domain.models import (
    BookingRecord,
    ReliabilityScore,
    ReviewRecord,
    ScoreHistoryEntry,
)
from app.infrastructure.observability.logging import get_logger

from .calculator import calculate_legacy_completion_score, calculate_reliability_score
from .repository import ReliabilityRepository

logger = get_logger(__name__)


@dataclass(slots=True)
class WorkerScoreSnapshot:
    worker_id: str
    full_name: str | None
    reliability_score: float | None
    history: list[ScoreHistoryEntry]


class ReliabilityScoringService:
    def score(
        self,
        bookings: list[BookingRecord],
        reviews: list[ReviewRecord],
        now: datetime | None = None,
    ) -> ReliabilityScore:
        """Score already-fetched history with the configured formula."""
        if settings.RELIABILITY_SCORING_FORMULA == "legacy_completion":
            return calculate_legacy_completion_score(
                bookings, reviews, now=now or datetime.now(UTC)
            )
        return calculate_reliability_score(bookings, reviews)

    async def calculate_worker_score(
        self, worker_id: str, *, persist: bool = True
    ) -> ReliabilityScore:
        """
        Recalculate a worker's reliability score.

        Args:
            worker_id: Worker ID
            persist: Write the cached score and a history row (best effort)

        Returns:
            ReliabilityScore with breakdown

        Raises:
            NotFoundError: worker does not exist
            DataUnavailableError: bookings or reviews could not be fetched
        """
        try:
            worker = await ReliabilityRepository.fetch_worker(worker_id)
            if not worker:
                raise NotFoundError("worker", worker_id)

            bookings = await ReliabilityRepository.fetch_bookings(worker_id)
            reviews = await ReliabilityRepository.fetch_reviews(worker_id)
        except DatabaseError as e:
            logger.error("Failed to load worker history", worker_id=worker_id, error=str(e))
            raise DataUnavailableError(f"Could not load history for worker {worker_id}") from e

        result = self.score(bookings, reviews)

        logger.info(
            "Reliability score calculated",
            worker_id=worker_id,
            score=result.score,
            formula=result.formula,
            total_bookings=result.breakdown.total_bookings_count,
            completed_jobs=result.breakdown.completed_jobs_count,
        )

        if persist:
            await self._persist(worker_id, result)

        return result

    async def get_worker_score_with_history(
        self, worker_id: str, limit: int | None = None
    ) -> WorkerScoreSnapshot:
        """Return the cached score plus the most recent history entries."""
        try:
            worker = await ReliabilityRepository.fetch_worker(worker_id)
            if not worker:
                raise NotFoundError("worker", worker_id)
            history = await ReliabilityRepository.fetch_score_history(
                worker_id, limit or settings.RELIABILITY_HISTORY_LIMIT
            )
        except DatabaseError as e:
            logger.error("Failed to load score history", worker_id=worker_id, error=str(e))
            raise DataUnavailableError(f"Could not load score for worker {worker_id}") from e

        cached = worker.get("reliability_score")
        return WorkerScoreSnapshot(
            worker_id=worker_id,
            full_name=worker.get("full_name"),
            reliability_score=float(cached) if cached is not None else None,
            history=history,
        )

    async def recalculate_all(self, batch_size: int | None = None) -> dict[str, Any]:
        """
        Recalculate every worker's score in keyset-paginated batches.

        One worker failing never aborts the run; failures are counted and logged.
        """
        size = batch_size or settings.RELIABILITY_RECALC_BATCH_SIZE
        result = {"processed": 0, "failed": 0, "errors": []}
        after_id: str | None = None

        while True:
            worker_ids = await ReliabilityRepository.fetch_worker_ids(after_id, size)
            if not worker_ids:
                break

            for worker_id in worker_ids:
                try:
                    await self.calculate_worker_score(worker_id)
                    result["processed"] += 1
                except (NotFoundError, DataUnavailableError) as e:
                    result["failed"] += 1
                    result["errors"].append(f"{worker_id}: {e}")
                    logger.warning("Worker recalculation failed", worker_id=worker_id, error=str(e))

            after_id = worker_ids[-1]
            if len(worker_ids) < size:
                break

        logger.info(
            "Reliability recalculation finished",
            processed=result["processed"],
            failed=result["failed"],
        )
        return result

    async def _persist(self, worker_id: str, result: ReliabilityScore) -> None:
        # Cached score and history are last-write-wins; a failed write must
        # not fail the calculation itself.
        try:
            await ReliabilityRepository.save_score(
                worker_id, result, record_history=settings.RELIABILITY_HISTORY_ENABLED
            )
        except DatabaseError as e:
            logger.warning(
                "Failed to persist reliability score",
                worker_id=worker_id,
                score=result.score,
                error=str(e),
            )


reliability_service = ReliabilityScoringService()
