from datetime import datetime

from sqlalchemy.orm import contains_eager

from library_service.errors import LoanNotFound
from library_service.models.book import Book
from library_service.models.borrow import Borrow
from library_service.utils.validators import is_storable_id


class BorrowRepo:
    def __init__(self, session):
        self.session = session

    def get(self, borrow_id: int):
        if not is_storable_id(borrow_id):
            return None
        return self.session.get(Borrow, borrow_id)

    def list_all(self, active_only: bool = False):
        q = self.session.query(Borrow)
        if active_only:
            q = q.filter(Borrow.returned.is_(False))
        return q.order_by(Borrow.id.desc()).all()

    def list_for_book(self, book_id: int, active_only: bool = True):
        q = self.session.query(Borrow).filter(Borrow.book_id == book_id)
        if active_only:
            q = q.filter(Borrow.returned.is_(False))
        return q.order_by(Borrow.id.desc()).all()

    def has_active_loan(self, book_id: int) -> bool:
        if not is_storable_id(book_id):
            return False
        q = self.session.query(Borrow.id).filter(
            Borrow.book_id == book_id,
            Borrow.returned.is_(False),
        )
        return self.session.query(q.exists()).scalar()

    def create(self, borrow: Borrow, commit: bool = True):
        self.session.add(borrow)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return borrow

    def _active_with_book(self):
        # inner join: the title/author are needed for the mail templates
        return (
            self.session.query(Borrow)
            .join(Book, Borrow.book_id == Book.id)
            .options(contains_eager(Borrow.book))
            .filter(Borrow.returned.is_(False))
        )

    def list_pending_due_soon(self, now: datetime):
        """Active loans that are not overdue yet (reminder candidates)."""
        return (
            self._active_with_book()
            .filter(Borrow.return_date >= now)
            .order_by(Borrow.return_date.asc())
            .all()
        )

    def list_overdue(self, now: datetime):
        return (
            self._active_with_book()
            .filter(Borrow.return_date < now)
            .order_by(Borrow.return_date.asc())
            .all()
        )

    def mark_returned(self, borrow_id: int, commit: bool = True) -> bool:
        if self.get(borrow_id) is None:
            raise LoanNotFound()

        changed = (
            self.session.query(Borrow)
            .filter(Borrow.id == borrow_id, Borrow.returned.is_(False))
            .update({Borrow.returned: True}, synchronize_session=False)
        )
        if commit:
            self.session.commit()
        return changed == 1

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()
