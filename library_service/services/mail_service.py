# library_service/services/mail_service.py
from __future__ import annotations

from flask import current_app
from flask_mail import Message


class MailService:
    """
    Thin wrapper over the Flask-Mail extension. Built once in create_app and
    handed to the services that need it, so tests can swap in a fake.
    """

    def __init__(self, mail, sender: str | None = None):
        self.mail = mail
        self.sender = sender

    def send_email(self, to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body, sender=self.sender)
            self.mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[mail] Could not send to {to_email}: {e}")
            return False, str(e)

    @staticmethod
    def _loan_labels(loan):
        book = getattr(loan, "book", None)
        book_title = getattr(book, "title", None) or f"Book #{getattr(loan, 'book_id', '-')}"
        due = loan.return_date.isoformat() if loan.return_date else "-"
        return loan.user_email, book_title, due

    def send_borrow_confirmation(self, loan) -> tuple[bool, str | None]:
        to_email, book_title, due = self._loan_labels(loan)
        days = (loan.return_date - loan.borrow_date).days
        body = (
            f'You have borrowed "{book_title}". Please return it by {due}. '
            f"The book is due in {days} days."
        )
        return self.send_email(to_email, "Library Book Borrowed", body)

    def send_due_soon_mail(self, loan) -> tuple[bool, str | None]:
        to_email, book_title, due = self._loan_labels(loan)
        body = (
            f'Reminder: Your borrowed book "{book_title}" is due on {due}. '
            "Please return it on time."
        )
        return self.send_email(to_email, "Library Book Return Reminder", body)

    def send_overdue_mail(self, loan) -> tuple[bool, str | None]:
        to_email, book_title, due = self._loan_labels(loan)
        body = (
            f'OVERDUE NOTICE: Your borrowed book "{book_title}" was due on {due}. '
            "Please return it immediately."
        )
        return self.send_email(to_email, "Library Book Overdue Notice", body)
