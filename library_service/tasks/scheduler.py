# library_service/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger


def start_scheduler(app):
    """
    Starts the daily notification jobs.
    - Skipped when SCHEDULER_ENABLED is off (tests, one-off CLI runs).
    - Debug reloader runs two processes; only the real one schedules.
    - Stopped on interpreter exit.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] Disabled by config.")
        return None

    # Werkzeug reloader: the child process has WERKZEUG_RUN_MAIN=true
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    from library_service.tasks.notification_jobs import run_due_soon_job, run_overdue_job

    scheduler = BackgroundScheduler(timezone="UTC")

    reminder_hour = app.config["REMINDER_CRON_HOUR"]
    overdue_hour = app.config["OVERDUE_CRON_HOUR"]

    common = dict(
        replace_existing=True,
        max_instances=1,         # never overlap a run with itself
        coalesce=True,           # collapse missed runs into one
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        func=run_due_soon_job,
        args=[app],
        trigger=CronTrigger(hour=reminder_hour, minute=0),
        id="due_soon_job",
        **common,
    )
    scheduler.add_job(
        func=run_overdue_job,
        args=[app],
        trigger=CronTrigger(hour=overdue_hour, minute=0),
        id="overdue_job",
        **common,
    )

    scheduler.start()
    app.logger.info(
        f"[scheduler] Notification jobs started (due_soon {reminder_hour:02d}:00, overdue {overdue_hour:02d}:00 UTC)."
    )

    app.extensions["apscheduler"] = scheduler
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
