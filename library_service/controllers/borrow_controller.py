from flask import Blueprint, request, jsonify

from library_service.errors import ValidationError
from library_service.extensions import get_services
from library_service.utils.validators import clean_text, is_valid_email, parse_id

borrow_bp = Blueprint("borrow", __name__)


def loan_json(x):
    return {
        "id": x.id,
        "bookId": x.book_id,
        "userEmail": x.user_email,
        "borrowDate": x.borrow_date.isoformat(),
        "returnDate": x.return_date.isoformat(),
        "returned": bool(x.returned),
    }


@borrow_bp.post("/borrow")
def borrow_book():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    raw_book_id = data.get("bookId")
    user_email = clean_text(data.get("userEmail"))
    if raw_book_id in (None, "") or not user_email:
        raise ValidationError("Book ID and user email are required")

    book_id = parse_id(raw_book_id)
    if book_id is None:
        raise ValidationError("Book ID must be a positive integer")
    if not is_valid_email(user_email):
        raise ValidationError("Invalid email format")

    loan, return_date = get_services().borrows.borrow(book_id, user_email)
    return jsonify({
        "success": True,
        "message": "Book borrowed successfully",
        "data": {"borrow": loan_json(loan), "returnDate": return_date.isoformat()},
    })


@borrow_bp.post("/return/<int:borrow_id>")
def return_book(borrow_id: int):
    get_services().borrows.return_loan(borrow_id)
    return jsonify({"success": True, "message": "Book returned successfully"})


@borrow_bp.get("/borrows")
def list_borrows():
    active_only = request.args.get("active", "0").lower() in ("1", "true", "yes")
    loans = get_services().borrows.list_loans(active_only=active_only)
    return jsonify({"success": True, "data": [loan_json(x) for x in loans]})
