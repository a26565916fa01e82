"""Executable worker revoking access of enrollments past their end date."""

from __future__ import annotations

import asyncio
import logging
import os

from student_portal.core.database import SessionLocal
from student_portal.modules.enrollment.service import build_enrollment_service

logger = logging.getLogger(__name__)


async def run_cycle() -> int:
    """Expire stale enrollments in one DB transaction and return how many changed."""
    async with SessionLocal() as session:
        service = build_enrollment_service(session)
        expired = await service.expire_all_stale()
        await session.commit()
        return len(expired)


async def main() -> None:
    """Run once or keep polling according to worker mode."""
    logging.basicConfig(level=os.getenv("ENROLLMENT_EXPIRY_WORKER_LOG_LEVEL", "INFO"))
    mode = os.getenv("ENROLLMENT_EXPIRY_WORKER_MODE", "once").strip().lower()
    poll_seconds = int(os.getenv("ENROLLMENT_EXPIRY_WORKER_POLL_SECONDS", "3600"))

    if mode == "once":
        expired = await run_cycle()
        logger.info("Enrollment expiry worker expired %s enrollment(s)", expired)
        return

    while True:
        try:
            expired = await run_cycle()
            logger.info("Enrollment expiry worker expired %s enrollment(s)", expired)
        except Exception:
            logger.exception("Enrollment expiry worker cycle failed")
        await asyncio.sleep(poll_seconds)


if __name__ == "__main__":
    asyncio.run(main())
