# library_service/tasks/notification_jobs.py
from flask import current_app

from library_service.extensions import db, get_services


def _run(app, tag, job):
    """
    Runs one notification pass inside an app context. Errors are logged and
    swallowed: there is no caller to report them to.
    """
    with app.app_context():
        try:
            return job(get_services().notifications)
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[{tag}] Error: {e}")
            return None


def run_due_soon_job(app):
    return _run(app, "due_soon_job", lambda svc: svc.send_due_soon_reminders())


def run_overdue_job(app):
    return _run(app, "overdue_job", lambda svc: svc.send_overdue_notices())
