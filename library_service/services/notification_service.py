import math
from datetime import datetime

from flask import current_app

SECONDS_PER_DAY = 24 * 60 * 60


def days_until_due(return_date: datetime, now: datetime) -> int:
    return math.ceil((return_date - now).total_seconds() / SECONDS_PER_DAY)


class NotificationService:
    """
    Daily reminder / overdue mail runs over the loan ledger.

    Overdue notices are not de-duplicated: a loan that stays overdue gets one
    notice per run.
    """

    def __init__(self, borrow_repo, mail_service, due_soon_days: int = 2, clock=datetime.utcnow):
        self.borrows = borrow_repo
        self.mail = mail_service
        self.due_soon_days = due_soon_days
        self.clock = clock

    def _dispatch(self, tag: str, loans, send):
        sent = 0
        failed = 0
        for loan in loans:
            try:
                ok, err = send(loan)
            except Exception as e:
                current_app.logger.exception(f"[notifications] {tag} loan_id={loan.id} error: {e}")
                failed += 1
                continue

            if ok:
                sent += 1
            else:
                current_app.logger.warning(f"[notifications] {tag} loan_id={loan.id} not sent: {err}")
                failed += 1
        return sent, failed

    def send_due_soon_reminders(self, now: datetime = None) -> dict:
        now = now or self.clock()
        pending = self.borrows.list_pending_due_soon(now)

        # due today (0 days left) is left to the overdue run
        due_soon = [
            b for b in pending
            if 0 < days_until_due(b.return_date, now) <= self.due_soon_days
        ]
        sent, failed = self._dispatch("due_soon", due_soon, self.mail.send_due_soon_mail)

        current_app.logger.info(
            f"[notifications] due_soon pending={len(pending)} checked={len(due_soon)} sent={sent} failed={failed}"
        )
        return {"checked": len(due_soon), "sent": sent, "failed": failed}

    def send_overdue_notices(self, now: datetime = None) -> dict:
        now = now or self.clock()
        overdue = self.borrows.list_overdue(now)
        sent, failed = self._dispatch("overdue", overdue, self.mail.send_overdue_mail)

        current_app.logger.info(
            f"[notifications] overdue checked={len(overdue)} sent={sent} failed={failed}"
        )
        return {"checked": len(overdue), "sent": sent, "failed": failed}

    def run_all(self, now: datetime = None) -> dict:
        now = now or self.clock()
        return {
            "due_soon": self.send_due_soon_reminders(now),
            "overdue": self.send_overdue_notices(now),
        }
