from datetime import timedelta

import pytest

from library_service import create_app
from library_service.config import TestConfig
from library_service.extensions import db, get_services, mail
from library_service.models.book import Book
from library_service.models.borrow import Borrow


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return get_services()


@pytest.fixture
def outbox(app):
    with mail.record_messages() as messages:
        yield messages


@pytest.fixture
def make_book(services):
    counter = {"n": 0}

    def _make(title="Clean Code", author="Robert Martin", isbn=None):
        counter["n"] += 1
        isbn = isbn or f"978-0-13-{235088 + counter['n']}-4"
        return services.books.create_book(title, author, isbn)

    return _make


@pytest.fixture
def make_loan(services):
    """Writes a loan row directly, bypassing the availability rules."""

    def _make(book, return_date, email="reader@example.com", returned=False):
        loan = Borrow(
            book_id=book.id,
            user_email=email,
            borrow_date=return_date - timedelta(days=14),
            return_date=return_date,
            returned=returned,
        )
        return services.borrows.borrows.create(loan)

    return _make


@pytest.fixture
def book_available(app):
    def _available(book_id):
        db.session.expire_all()
        return db.session.get(Book, book_id).available

    return _available
