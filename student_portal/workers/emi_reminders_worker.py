"""Executable worker sending EMI due-date reminders; schedule it daily."""

from __future__ import annotations

import asyncio
import logging
import os

from student_portal.core.config import get_settings
from student_portal.core.database import SessionLocal
from student_portal.modules.notifications.emi_reminders import EmiReminderJob
from student_portal.modules.notifications.repository import NotificationsRepository
from student_portal.modules.payments.repository import PaymentsRepository

logger = logging.getLogger(__name__)


async def run_cycle() -> dict[str, int]:
    """Run a single reminder pass in one DB transaction."""
    async with SessionLocal() as session:
        job = EmiReminderJob(
            payments_repository=PaymentsRepository(session),
            notifications_repository=NotificationsRepository(session),
            reminder_days=get_settings().emi_reminder_days,
        )
        stats = await job.run_once()
        await session.commit()
        return stats


async def main() -> None:
    """Run once or keep polling according to worker mode."""
    logging.basicConfig(level=os.getenv("EMI_REMINDER_WORKER_LOG_LEVEL", "INFO"))
    mode = os.getenv("EMI_REMINDER_WORKER_MODE", "once").strip().lower()
    poll_seconds = int(os.getenv("EMI_REMINDER_WORKER_POLL_SECONDS", "86400"))

    if mode == "once":
        stats = await run_cycle()
        logger.info("EMI reminder worker stats: %s", stats)
        return

    while True:
        try:
            stats = await run_cycle()
            logger.info("EMI reminder worker stats: %s", stats)
        except Exception:
            logger.exception("EMI reminder worker cycle failed")
        await asyncio.sleep(poll_seconds)


if __name__ == "__main__":
    asyncio.run(main())
