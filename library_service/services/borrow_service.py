from datetime import datetime, timedelta

from flask import current_app

from library_service.errors import AlreadyReturned, BookNotFound, BookUnavailable, LoanNotFound
from library_service.models.borrow import Borrow


class BorrowService:
    """
    Keeps a book's availability flag in step with its loans: borrowing flips
    the book to unavailable and returning flips it back, each inside a
    single transaction together with the loan row write.
    """

    def __init__(self, book_repo, borrow_repo, mail_service=None, loan_period_days: int = 14,
                 clock=datetime.utcnow):
        self.books = book_repo
        self.borrows = borrow_repo
        self.mail = mail_service
        self.loan_period_days = loan_period_days
        self.clock = clock

    def borrow(self, book_id: int, user_email: str):
        """
        Returns (loan, return_date).
        Raises BookNotFound / BookUnavailable; nothing is written in either case.
        """
        book = self.books.get(book_id)
        if not book:
            raise BookNotFound()
        if not book.available:
            raise BookUnavailable()

        borrow_date = self.clock()
        return_date = borrow_date + timedelta(days=self.loan_period_days)

        try:
            # the flag flip doubles as the lock: a concurrent borrow sees 0 rows
            if not self.books.mark_unavailable(book_id):
                raise BookUnavailable()

            loan = Borrow(
                book_id=book_id,
                user_email=user_email,
                borrow_date=borrow_date,
                return_date=return_date,
                returned=False,
            )
            self.borrows.create(loan, commit=False)
            self.borrows.commit()
        except Exception:
            self.borrows.rollback()
            raise

        current_app.logger.info(
            f"[borrow] book_id={book_id} loan_id={loan.id} email={user_email} due={return_date.isoformat()}"
        )

        if self.mail is not None:
            ok, err = self.mail.send_borrow_confirmation(loan)
            if not ok:
                current_app.logger.warning(f"[borrow] Confirmation mail failed for loan_id={loan.id}: {err}")

        return loan, return_date

    def return_loan(self, loan_id: int) -> bool:
        loan = self.borrows.get(loan_id)
        if not loan:
            raise LoanNotFound()
        if loan.returned:
            raise AlreadyReturned()

        book_id = loan.book_id
        try:
            changed = self.borrows.mark_returned(loan_id, commit=False)
            if not changed:
                # returned by a concurrent request since the read above
                raise AlreadyReturned()
            self.books.mark_available(book_id)
            self.borrows.commit()
        except Exception:
            self.borrows.rollback()
            raise

        current_app.logger.info(f"[return] loan_id={loan_id} book_id={book_id}")
        return changed

    def list_loans(self, active_only: bool = False):
        return self.borrows.list_all(active_only=active_only)
