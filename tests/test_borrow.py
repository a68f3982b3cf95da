from datetime import datetime, timedelta

import pytest

from library_service.errors import AlreadyReturned, BookNotFound, BookUnavailable, LoanNotFound
from library_service.extensions import db
from library_service.models.borrow import Borrow

BOOK = {"title": "A", "author": "B", "isbn": "978-0-13-468599-1"}


def _borrow(client, book_id, email="x@y.com"):
    return client.post("/borrow", json={"bookId": book_id, "userEmail": email})


def test_borrow_return_borrow_again(client, outbox):
    before = datetime.utcnow()
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]

    r = _borrow(client, book_id)
    assert r.status_code == 200
    data = r.get_json()["data"]
    loan = data["borrow"]
    borrow_date = datetime.fromisoformat(loan["borrowDate"])
    return_date = datetime.fromisoformat(data["returnDate"])
    assert borrow_date >= before
    assert return_date - borrow_date == timedelta(days=14)
    assert loan["returnDate"] == data["returnDate"]
    assert loan["returned"] is False
    assert client.get(f"/books/{book_id}").get_json()["data"]["available"] is False

    r = _borrow(client, book_id, "other@y.com")
    assert r.status_code == 400
    assert r.get_json()["message"] == "Book is not available"

    r = client.post(f"/return/{loan['id']}")
    assert r.status_code == 200
    assert client.get(f"/books/{book_id}").get_json()["data"]["available"] is True

    r = _borrow(client, book_id, "other@y.com")
    assert r.status_code == 200

    # two confirmations, none for the rejected attempt
    assert [m.recipients for m in outbox] == [["x@y.com"], ["other@y.com"]]
    assert outbox[0].subject == "Library Book Borrowed"
    assert '"A"' in outbox[0].body


def test_borrow_accepts_numeric_string_id(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]
    assert _borrow(client, str(book_id)).status_code == 200


def test_borrow_missing_fields(client):
    assert client.post("/borrow", json={"bookId": 1}).status_code == 400
    assert client.post("/borrow", json={"userEmail": "x@y.com"}).status_code == 400
    assert client.post("/borrow", json={}).status_code == 400


def test_borrow_bad_values(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]

    r = _borrow(client, book_id, "not-an-email")
    assert r.status_code == 400
    assert r.get_json()["message"] == "Invalid email format"

    assert _borrow(client, "abc").status_code == 400


def test_borrow_unknown_book(client):
    r = _borrow(client, 999)
    assert r.status_code == 404
    assert r.get_json()["message"] == "Book not found"


def test_return_unknown_loan(client):
    r = client.post("/return/999")
    assert r.status_code == 404


def test_return_twice_is_rejected(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]
    loan_id = _borrow(client, book_id).get_json()["data"]["borrow"]["id"]

    assert client.post(f"/return/{loan_id}").status_code == 200
    r = client.post(f"/return/{loan_id}")
    assert r.status_code == 400
    assert r.get_json()["message"] == "Book has already been returned"


def test_second_return_does_not_free_a_reborrowed_book(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]
    first = _borrow(client, book_id).get_json()["data"]["borrow"]["id"]
    client.post(f"/return/{first}")
    _borrow(client, book_id, "second@y.com")

    client.post(f"/return/{first}")
    assert client.get(f"/books/{book_id}").get_json()["data"]["available"] is False


def test_list_borrows(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]
    first = _borrow(client, book_id).get_json()["data"]["borrow"]["id"]
    client.post(f"/return/{first}")
    second = _borrow(client, book_id).get_json()["data"]["borrow"]["id"]

    all_ids = [x["id"] for x in client.get("/borrows").get_json()["data"]]
    assert all_ids == [second, first]

    active = client.get("/borrows?active=1").get_json()["data"]
    assert [x["id"] for x in active] == [second]


def test_delete_book_on_loan_is_refused(client):
    book_id = client.post("/books", json=BOOK).get_json()["data"]["id"]
    loan_id = _borrow(client, book_id).get_json()["data"]["borrow"]["id"]

    assert client.delete(f"/books/{book_id}").status_code == 409
    assert client.get(f"/books/{book_id}").status_code == 200

    client.post(f"/return/{loan_id}")
    assert client.delete(f"/books/{book_id}").status_code == 200


# --- coordinator ---------------------------------------------------------

def test_borrow_creates_exactly_one_loan(services, make_book, book_available):
    book = make_book()
    loan, return_date = services.borrows.borrow(book.id, "reader@example.com")

    assert return_date == loan.return_date
    assert loan.return_date - loan.borrow_date == timedelta(days=14)
    assert db.session.query(Borrow).filter_by(book_id=book.id).count() == 1
    assert book_available(book.id) is False


def test_borrow_unavailable_creates_no_loan(services, make_book):
    book = make_book()
    services.borrows.borrow(book.id, "first@example.com")

    with pytest.raises(BookUnavailable):
        services.borrows.borrow(book.id, "second@example.com")
    assert db.session.query(Borrow).count() == 1


def test_borrow_unknown_book(services):
    with pytest.raises(BookNotFound):
        services.borrows.borrow(42, "reader@example.com")


def test_borrow_loses_race_on_availability_flag(services, make_book, monkeypatch):
    book = make_book()
    # another request flipped the flag between our read and our write
    monkeypatch.setattr(services.borrows.books, "mark_unavailable", lambda book_id: False)

    with pytest.raises(BookUnavailable):
        services.borrows.borrow(book.id, "reader@example.com")
    assert db.session.query(Borrow).count() == 0


def test_failed_loan_insert_rolls_back_availability(services, make_book, monkeypatch, book_available):
    book = make_book()

    def fail(borrow, commit=True):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(services.borrows.borrows, "create", fail)

    with pytest.raises(RuntimeError):
        services.borrows.borrow(book.id, "reader@example.com")
    assert book_available(book.id) is True
    assert db.session.query(Borrow).count() == 0


def test_borrow_survives_mail_failure(services, make_book, monkeypatch, book_available):
    book = make_book()
    monkeypatch.setattr(services.mail, "send_borrow_confirmation", lambda loan: (False, "smtp down"))

    loan, _ = services.borrows.borrow(book.id, "reader@example.com")
    assert loan.id is not None
    assert book_available(book.id) is False


def test_borrow_uses_configured_clock(services, make_book, monkeypatch):
    fixed = datetime(2026, 3, 1, 12, 0)
    monkeypatch.setattr(services.borrows, "clock", lambda: fixed)

    loan, return_date = services.borrows.borrow(make_book().id, "reader@example.com")
    assert loan.borrow_date == fixed
    assert return_date == datetime(2026, 3, 15, 12, 0)


def test_return_loan(services, make_book, book_available):
    book = make_book()
    loan, _ = services.borrows.borrow(book.id, "reader@example.com")

    assert services.borrows.return_loan(loan.id) is True
    db.session.expire_all()
    assert db.session.get(Borrow, loan.id).returned is True
    assert book_available(book.id) is True


def test_return_errors(services, make_book):
    with pytest.raises(LoanNotFound):
        services.borrows.return_loan(999)

    loan, _ = services.borrows.borrow(make_book().id, "reader@example.com")
    services.borrows.return_loan(loan.id)
    with pytest.raises(AlreadyReturned):
        services.borrows.return_loan(loan.id)


@pytest.mark.parametrize("book_id", ["²", "٣", 0, -4, 10 ** 20, "100000000000000000000", 2.5, True])
def test_borrow_rejects_unusable_book_ids(client, book_id):
    r = _borrow(client, book_id)
    assert r.status_code == 400
    assert r.get_json()["message"] == "Book ID must be a positive integer"


def test_return_out_of_range_loan_is_404(client):
    r = client.post("/return/100000000000000000000")
    assert r.status_code == 404
    assert r.get_json()["message"] == "Borrow record not found"
