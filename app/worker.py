"""
ARQ worker: background task definitions.
Run with: python -m app.worker
"""
import logging

from arq import cron
from arq.connections import RedisSettings

from app.core.config import settings
from app.tasks.planting_reminders import send_planting_reminders

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    )
    logger.info("worker: started (%s)", settings.ENVIRONMENT)


# ── Worker settings ───────────────────────────────────────────────────────────


class WorkerSettings:
    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    functions = [send_planting_reminders]
    cron_jobs = [
        cron(
            send_planting_reminders,
            hour=settings.PLANTING_REMINDER_HOUR,
            minute=settings.PLANTING_REMINDER_MINUTE,
            unique=True,
        ),
    ]
    on_startup = startup
    on_shutdown = None


if __name__ == "__main__":
    from arq import run_worker

    run_worker(WorkerSettings)
