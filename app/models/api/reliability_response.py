# app/models/api/reliability_response.py
"""
Reliability API response models.
Used by the reliability router for output formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.features.reliability.domain.models import ReliabilityScore, ScoreHistoryEntry


class ScoreBreakdownResponse(BaseModel):
    attendance_rate: float = Field(..., ge=0, le=100, description="Completed / total, percent")
    punctuality_rate: float = Field(..., ge=0, le=100, description="On-time check-ins, percent")
    average_rating: float | None = Field(None, description="Mean rating 1-5, null if unrated")
    completed_jobs_count: int
    total_bookings_count: int


class ReliabilityScoreResponse(BaseModel):
    """Response for POST /workers/{worker_id}/reliability/recalculate"""

    worker_id: str
    score: float = Field(..., ge=1.0, le=5.0)
    formula: str
    breakdown: ScoreBreakdownResponse

    @classmethod
    def from_domain(cls, worker_id: str, result: ReliabilityScore) -> "ReliabilityScoreResponse":
        breakdown = result.breakdown
        return cls(
            worker_id=worker_id,
            score=result.score,
            formula=result.formula,
            breakdown=ScoreBreakdownResponse(
                attendance_rate=breakdown.attendance_rate,
                punctuality_rate=breakdown.punctuality_rate,
                average_rating=breakdown.average_rating,
                completed_jobs_count=breakdown.completed_jobs_count,
                total_bookings_count=breakdown.total_bookings_count,
            ),
        )


class ScoreHistoryItem(BaseModel):
    score: float
    attendance_rate: float
    punctuality_rate: float
    average_rating: float | None
    completed_jobs_count: int
    calculated_at: datetime

    @classmethod
    def from_domain(cls, entry: ScoreHistoryEntry) -> "ScoreHistoryItem":
        return cls(
            score=entry.score,
            attendance_rate=entry.attendance_rate,
            punctuality_rate=entry.punctuality_rate,
            average_rating=entry.average_rating,
            completed_jobs_count=entry.completed_jobs_count,
            calculated_at=entry.calculated_at,
        )


class WorkerReliabilityResponse(BaseModel):
    """Response for GET /workers/{worker_id}/reliability"""

    worker_id: str
    full_name: str | None
    reliability_score: float | None = Field(None, description="Cached score, null if never scored")
    history: list[ScoreHistoryItem]
