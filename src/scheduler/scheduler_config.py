from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
import logging

logger = logging.getLogger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """
    Create the in-process scheduler for maintenance jobs

    - coalesce: a sweep missed while the loop was busy runs once, not N times
    - max_instances=1: sweeps never overlap
    - misfire_grace_time: still run a sweep that is up to 5 minutes late
    """

    jobstores = {
        'default': MemoryJobStore()
    }

    executors = {
        'default': AsyncIOExecutor()
    }

    job_defaults = {
        'coalesce': True,
        'max_instances': 1,
        'misfire_grace_time': 300,
        'replace_existing': True
    }

    scheduler = AsyncIOScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone='UTC'
    )

    return scheduler


class JobConfig:
    """Configuration for different job types"""

    JOB_SETTINGS = {
        'key_usage_reset': {
            'max_instances': 1,
            'misfire_grace_time': 300,
            'coalesce': True,
        },
    }

    @classmethod
    def get_job_config(cls, job_name: str) -> dict:
        """Helper to get config for a specific job"""
        return cls.JOB_SETTINGS.get(job_name, {
            'max_instances': 1,
            'misfire_grace_time': 30,
            'coalesce': True,
        })
