from library_service.models.book import Book
from library_service.models.borrow import Borrow
from library_service.utils.validators import is_storable_id


class BookRepo:
    def __init__(self, session):
        self.session = session

    def list_all(self):
        return self.session.query(Book).order_by(Book.id.asc()).all()

    def get(self, book_id: int):
        # ids the column cannot hold cannot exist
        if not is_storable_id(book_id):
            return None
        return self.session.get(Book, book_id)

    def create(self, book: Book):
        self.session.add(book)
        self.session.commit()
        return book

    def update(self):
        self.session.commit()

    def delete(self, book_id: int) -> bool:
        """
        Deletes the book unless an active loan references it, in one
        statement. Returns False when nothing was deleted (absent or on loan).
        """
        if not is_storable_id(book_id):
            return False

        on_loan = (
            self.session.query(Borrow.id)
            .filter(Borrow.book_id == book_id, Borrow.returned.is_(False))
            .exists()
        )
        removed = (
            self.session.query(Book)
            .filter(Book.id == book_id, ~on_loan)
            .delete(synchronize_session="fetch")
        )
        self.session.commit()
        return removed > 0

    def mark_unavailable(self, book_id: int) -> bool:
        """
        Compare-and-set on the availability flag. Returns False when the book
        was already unavailable, i.e. another borrow got there first.
        No commit: the caller owns the transaction.
        """
        changed = (
            self.session.query(Book)
            .filter(Book.id == book_id, Book.available.is_(True))
            .update({Book.available: False}, synchronize_session=False)
        )
        return changed == 1

    def mark_available(self, book_id: int) -> bool:
        changed = (
            self.session.query(Book)
            .filter(Book.id == book_id)
            .update({Book.available: True}, synchronize_session=False)
        )
        return changed == 1

    def rollback(self):
        self.session.rollback()
