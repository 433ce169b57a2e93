"""
Recurring Trigger

APScheduler background jobs that call FinanceBot.run_query():
- finance_query: every 6 hours on the hour (America/New_York)
- initial_query: once, a few seconds after start-up

Results are only logged; failures never stop the schedule.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

import config

QUERY_JOB_ID = "finance_query"
INITIAL_JOB_ID = "initial_query"


def scheduled_run(bot):
    """Job body: one run, logged."""
    result = bot.run_query()
    if result.success:
        print(f"[Scheduler] ✓ Scheduled run stored {result.stock_count} stocks")
    else:
        print(f"[Scheduler] ✗ Scheduled run failed: {result.error}")
    return result


def create_scheduler(bot, initial_delay: Optional[float] = config.INITIAL_RUN_DELAY) -> BackgroundScheduler:
    """
    Build (but do not start) the scheduler for `bot`.

    Args:
        bot: FinanceBot whose run_query() the jobs call
        initial_delay: seconds until the one-off start-up run; None skips it
    """
    scheduler = BackgroundScheduler(
        timezone=config.SCHEDULE['timezone'],
        job_defaults={
            'coalesce': True,          # collapse missed runs into one
            'max_instances': 1,
            'misfire_grace_time': 600,
        },
    )

    scheduler.add_job(
        scheduled_run,
        trigger=CronTrigger(
            hour=config.SCHEDULE['hour'],
            minute=config.SCHEDULE['minute'],
            timezone=config.SCHEDULE['timezone'],
        ),
        args=[bot],
        id=QUERY_JOB_ID,
        name="Perplexity small-cap query (every 6 hours)",
        replace_existing=True,
    )

    if initial_delay is not None:
        scheduler.add_job(
            scheduled_run,
            trigger='date',
            run_date=datetime.now(timezone.utc) + timedelta(seconds=initial_delay),
            args=[bot],
            id=INITIAL_JOB_ID,
            name="Initial query",
            replace_existing=True,
        )

    return scheduler


def next_run_time(scheduler) -> Optional[datetime]:
    """Next fire time of the recurring job, or None if it is not scheduled."""
    job = scheduler.get_job(QUERY_JOB_ID)
    if job is None:
        return None
    return getattr(job, 'next_run_time', None)
