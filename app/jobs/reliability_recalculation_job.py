"""
Reliability recalculation job.

Recomputes every worker's cached reliability score. Intended to run nightly
so scores reflect bookings whose completion never triggered a recalculation.
"""

from app.db.pool import db_pool
from app.features.reliability.scoring.service import reliability_service
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


async def run_reliability_recalculation() -> None:
    await db_pool.initialize()
    try:
        summary = await reliability_service.recalculate_all()
    finally:
        await db_pool.close()

    if summary["failed"]:
        logger.warning(
            "Reliability recalculation completed with failures",
            processed=summary["processed"],
            failed=summary["failed"],
            sample_errors=summary["errors"][:10],
        )
    else:
        logger.info("Reliability recalculation completed", processed=summary["processed"])
