"""
Worker reliability routes.

Read the cached reliability score with its trend history, or force a
recalculation after a booking completes.
"""

from fastapi import APIRouter, HTTPException, Query, status

from app.features.errors import DataUnavailableError, NotFoundError
from app.features.reliability.scoring.service import reliability_service
from app.infrastructure.observability.logging import get_logger
from app.models.api.reliability_response import (
    ReliabilityScoreResponse,
    ScoreHistoryItem,
    WorkerReliabilityResponse,
)

router = APIRouter(prefix="/workers", tags=["reliability"])
logger = get_logger(__name__)


@router.get("/{worker_id}/reliability", response_model=WorkerReliabilityResponse)
async def get_worker_reliability(
    worker_id: str, limit: int | None = Query(None, ge=1, le=100)
) -> WorkerReliabilityResponse:
    """
    Get a worker's cached reliability score and recent score history.

    Raises:
        404: Worker not found
        503: Score data could not be loaded
    """
    try:
        snapshot = await reliability_service.get_worker_score_with_history(worker_id, limit)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DataUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return WorkerReliabilityResponse(
        worker_id=snapshot.worker_id,
        full_name=snapshot.full_name,
        reliability_score=snapshot.reliability_score,
        history=[ScoreHistoryItem.from_domain(entry) for entry in snapshot.history],
    )


@router.post("/{worker_id}/reliability/recalculate", response_model=ReliabilityScoreResponse)
async def recalculate_worker_reliability(worker_id: str) -> ReliabilityScoreResponse:
    """
    Recalculate and cache a worker's reliability score.

    Typically called by the booking workflow once a job is completed.

    Raises:
        404: Worker not found
        503: Booking or review history could not be loaded
    """
    try:
        result = await reliability_service.calculate_worker_score(worker_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DataUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    logger.info("Reliability recalculation requested", worker_id=worker_id, score=result.score)
    return ReliabilityScoreResponse.from_domain(worker_id, result)
