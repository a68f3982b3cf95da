from sqlalchemy.exc import IntegrityError

from library_service.errors import BookNotFound, BookOnLoan, Conflict, DuplicateIsbn
from library_service.models.book import Book


class BookService:
    def __init__(self, book_repo, borrow_repo):
        self.books = book_repo
        self.borrows = borrow_repo

    def list_books(self):
        return self.books.list_all()

    def find_book(self, book_id: int):
        return self.books.get(book_id)

    def get_book(self, book_id: int):
        book = self.books.get(book_id)
        if not book:
            raise BookNotFound()
        return book

    def create_book(self, title: str, author: str, isbn: str):
        book = Book(title=title, author=author, isbn=isbn, available=True)
        try:
            return self.books.create(book)
        except IntegrityError:
            self.books.rollback()
            raise DuplicateIsbn()

    def update_book(self, book_id: int, data: dict):
        book = self.get_book(book_id)
        for k in ["title", "author", "isbn"]:
            if k in data:
                setattr(book, k, data[k])

        try:
            self.books.update()
        except IntegrityError:
            self.books.rollback()
            raise DuplicateIsbn()
        return book

    def delete_book(self, book_id: int) -> bool:
        try:
            removed = self.books.delete(book_id)
        except IntegrityError:
            # engines enforcing the borrows FK refuse to orphan loan history
            self.books.rollback()
            raise Conflict("Book has borrow history and cannot be deleted")

        if not removed and self.borrows.has_active_loan(book_id):
            raise BookOnLoan()
        return removed
