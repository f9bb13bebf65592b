"""
Scheduled tasks for the social sync service.
This module sets up the retry sweeper to run within the FastAPI application.
Deployments that prefer an external cron can call POST /api/sync/youtube/retry
or run scripts/run_youtube_retry.py instead.
"""

import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from app.core.config import SyncRetryConfig, get_settings
from app.database import async_session
from app.services.sync.sweeper import RetrySweeper
from app.services.youtube.auth import YouTubeAuthManager
from app.services.youtube.client import YouTubeClient

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def build_retry_sweeper(settings=None) -> RetrySweeper:
    settings = settings or get_settings()
    return RetrySweeper(
        session_factory=async_session,
        config=SyncRetryConfig.from_settings(settings),
        youtube_client=YouTubeClient(
            base_url=settings.YOUTUBE_API_BASE_URL,
            timeout=settings.YOUTUBE_HTTP_TIMEOUT,
        ),
        auth_manager=YouTubeAuthManager(settings=settings),
    )


async def youtube_retry_sweep_task():
    """Task to retry failed/pending YouTube syncs"""
    try:
        logger.info("=== SCHEDULED YOUTUBE RETRY SWEEP STARTING ===")
        report = await build_retry_sweeper().sweep_with_report()
        logger.info(f"Scheduled retry sweep processed {report.processed} intents")
    except Exception as e:
        logger.exception(f"Error in scheduled retry sweep: {str(e)}")


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


def create_scheduler(settings=None) -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    settings = settings or get_settings()
    scheduler = AsyncIOScheduler()

    # Add job event listeners
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    if settings.SYNC_RETRY_SCHEDULE_ENABLED:
        scheduler.add_job(
            youtube_retry_sweep_task,
            CronTrigger.from_crontab(settings.SYNC_RETRY_SCHEDULE),
            id="youtube_retry_sweep",
            name="YouTube Sync Retry Sweep",
            replace_existing=True,
            max_instances=1,  # Only one sweep at a time
            coalesce=True,
            misfire_grace_time=300
        )
        logger.info(f"Retry sweep job added with schedule: {settings.SYNC_RETRY_SCHEDULE}")
    else:
        logger.info("Scheduled retry sweep is disabled. Set SYNC_RETRY_SCHEDULE_ENABLED=true to enable")

    return scheduler


async def start_scheduler():
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started successfully")

        jobs = scheduler.get_jobs()
        if jobs:
            logger.info(f"Active scheduled jobs: {len(jobs)}")
            for job in jobs:
                logger.info(f"  - {job.name}: {job.trigger}")
        else:
            logger.info("No scheduled jobs configured")


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped successfully")
    scheduler = None


async def get_scheduler_status():
    """Get current scheduler status and job information"""
    global scheduler

    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    jobs_info = []
    for job in scheduler.get_jobs():
        next_run = getattr(job, "next_run_time", None)
        jobs_info.append({
            "id": job.id,
            "name": job.name,
            "next_run": next_run.isoformat() if next_run else None,
            "trigger": str(job.trigger)
        })

    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": jobs_info
    }
