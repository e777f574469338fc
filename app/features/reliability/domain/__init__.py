"""
Domain subpackage for the reliability feature.
"""

from .models import (
    BookingRecord,
    BookingStatus,
    ReliabilityScore,
    ReviewRecord,
    ScoreBreakdown,
    ScoreHistoryEntry,
)

__all__ = [
    "BookingRecord",
    "BookingStatus",
    "ReliabilityScore",
    "ReviewRecord",
    "ScoreBreakdown",
    "ScoreHistoryEntry",
]
