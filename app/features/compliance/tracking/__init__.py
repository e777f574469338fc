"""
Compliance tracking package.

Day-limit classification rules and the service that applies them at
booking-acceptance time.
"""

from .calculator import (
    MONTHLY_DAY_LIMIT,
    WARNING_THRESHOLD,
    classify_days_worked,
    count_days_worked,
    normalize_month,
    rank_alternative_workers,
)
from .service import ComplianceService, compliance_service

__all__ = [
    "MONTHLY_DAY_LIMIT",
    "WARNING_THRESHOLD",
    "ComplianceService",
    "classify_days_worked",
    "compliance_service",
    "count_days_worked",
    "normalize_month",
    "rank_alternative_workers",
]
