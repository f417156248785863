"""
ARQ Background Worker
Runs the notification scan on a recurring cron schedule, as an alternative
to calling the HTTP trigger from an external scheduler
"""

import logging

from arq.connections import RedisSettings
from arq.cron import cron

from . import config
from .domain.notifications.repository import get_record_store
from .domain.notifications.service import NotificationService
from .domain.notifications.settings import NotificationSettings

logger = logging.getLogger(__name__)


def get_redis_settings(redis_url: str = config.REDIS_URL) -> RedisSettings:
    """Redis connection for the worker; rediss:// URLs enable TLS"""
    return RedisSettings.from_dsn(redis_url)


def scan_minutes(interval: int) -> set[int]:
    """Minutes of the hour on which the cron job fires"""
    if interval <= 0 or interval > 60:
        raise ValueError("SCAN_INTERVAL_MINUTES must be between 1 and 60")
    return set(range(0, 60, interval))


async def notification_scan_task(ctx):
    """
    Cron job: daily summary (when due) and 2-hour reminders.
    Errors are logged and swallowed so the next tick runs normally.
    """
    logger.info(f"🚀 ARQ Worker: notification scan (job {ctx.get('job_id', 'unknown')})")

    service = NotificationService(
        get_record_store(),
        NotificationSettings.from_config(),
        fallback_token=config.TELEGRAM_BOT_TOKEN,
    )
    try:
        report = await service.run_scan()
    except Exception as e:
        logger.exception(f"❌ ARQ Worker: notification scan failed: {type(e).__name__}: {str(e)}")
        return {"success": False, "error": type(e).__name__}

    return report.model_dump()


class WorkerSettings:
    """ARQ Worker Settings"""

    functions = [notification_scan_task]
    redis_settings = get_redis_settings()

    job_timeout = config.ARQ_JOB_TIMEOUT
    keep_result = config.ARQ_KEEP_RESULT
    health_check_interval = 60

    # A failed scan is not retried; the next tick recomputes the window
    max_tries = 1

    cron_jobs = [
        cron(
            notification_scan_task,
            minute=scan_minutes(config.SCAN_INTERVAL_MINUTES),
            run_at_startup=False,
            unique=True,
        ),
    ]

    logger.info(f"🔧 ARQ Worker configured: scan every {config.SCAN_INTERVAL_MINUTES} min")
