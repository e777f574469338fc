"""
Reliability scoring package.

Provides the pure score calculators and the service that loads a worker's
history, scores it and caches the result.
"""

from .calculator import calculate_legacy_completion_score, calculate_reliability_score
from .service import ReliabilityScoringService, reliability_service

__all__ = [
    "ReliabilityScoringService",
    "calculate_legacy_completion_score",
    "calculate_reliability_score",
    "reliability_service",
]
