# src/newsfeed/jobs/key_usage_reset.py
"""
Key usage reset job

Periodically zeroes the KeyRotator counters whose daily or monthly window has
elapsed. The rotator also rolls a stale window lazily on the next
record_usage, so the sweep only keeps diagnostics (usage_snapshot) honest
for keys that have gone quiet.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.newsfeed.services.key_rotator import KeyRotator
from src.scheduler.scheduler_config import JobConfig
from src.utils.logger.custom_logging import LoggerMixin

logger = LoggerMixin().logger

JOB_ID = "key_usage_reset"
DEFAULT_SWEEP_MINUTES = 60


async def reset_expired_key_usage(rotator: KeyRotator) -> int:
    """Run one sweep; returns the number of counters reset."""
    reset = rotator.reset_expired()
    if reset:
        logger.info(f"[KeyUsageReset] Reset {reset} expired usage counter(s)")
    else:
        logger.debug("[KeyUsageReset] No expired usage windows")
    return reset


def schedule_key_usage_reset(
    scheduler: AsyncIOScheduler,
    rotator: KeyRotator,
    interval_minutes: int = DEFAULT_SWEEP_MINUTES,
):
    """
    Register the sweep on ``scheduler`` (started by the caller).

    Returns:
        The apscheduler Job
    """
    job_settings = JobConfig.get_job_config(JOB_ID)
    job = scheduler.add_job(
        reset_expired_key_usage,
        IntervalTrigger(minutes=interval_minutes),
        args=[rotator],
        id=JOB_ID,
        name="Reset expired API key usage windows",
        replace_existing=True,
        **job_settings,
    )
    logger.info(f"[KeyUsageReset] Scheduled every {interval_minutes} minute(s)")
    return job
