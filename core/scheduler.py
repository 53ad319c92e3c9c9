# core/scheduler.py
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.logging_config import logger

CACHE_SWEEP_JOB_ID = "cache_sweep_job"


def run_cache_sweep(cleanup: Callable[[], int]):
    """Runs one sweep. Errors are logged so the job keeps its schedule."""
    try:
        removed = cleanup()
        if removed:
            logger.debug(f"[SCHEDULER] Cache sweep removed {removed} expired entries")
    except Exception:
        logger.exception("[SCHEDULER] Cache sweep failed")


def start_cache_sweeper(cleanup: Callable[[], int], interval_seconds: int = 300) -> BackgroundScheduler:
    """
    Start an APScheduler background process that calls `cleanup`
    every `interval_seconds`. The caller owns the returned scheduler
    and must shut it down.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_cache_sweep,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[cleanup],
        id=CACHE_SWEEP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    scheduler.start()
    logger.info(f"⏰ Cache sweeper started, running every {interval_seconds}s.")
    return scheduler
