"""
Domain subpackage for the compliance feature.
"""

from .models import (
    AlternativeWorker,
    ComplianceCheck,
    ComplianceRecord,
    ComplianceResult,
    ComplianceStatus,
    WarningLevel,
)

__all__ = [
    "AlternativeWorker",
    "ComplianceCheck",
    "ComplianceRecord",
    "ComplianceResult",
    "ComplianceStatus",
    "WarningLevel",
]
