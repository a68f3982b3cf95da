# library_service/controllers/book_controller.py

from flask import Blueprint, request, jsonify

from library_service.errors import BookNotFound, ValidationError
from library_service.extensions import get_services
from library_service.utils.validators import clean_text, is_valid_isbn

book_bp = Blueprint("books", __name__)

UPDATABLE_FIELDS = ("title", "author", "isbn")


def book_json(b):
    return {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "available": bool(b.available),
    }


@book_bp.get("/books")
def list_books():
    books = get_services().books.list_books()
    return jsonify({"success": True, "data": [book_json(b) for b in books]})


@book_bp.get("/books/<int:book_id>")
def get_book(book_id: int):
    b = get_services().books.get_book(book_id)
    return jsonify({"success": True, "data": book_json(b)})


@book_bp.post("/books")
def create_book():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    title = clean_text(data.get("title"))
    author = clean_text(data.get("author"))
    isbn = clean_text(data.get("isbn"))

    if not title or not author or not isbn:
        raise ValidationError("Title, author, and ISBN are required")
    if not is_valid_isbn(isbn):
        raise ValidationError("Invalid ISBN format")

    b = get_services().books.create_book(title, author, isbn)
    return jsonify({"success": True, "message": "Book added successfully", "data": book_json(b)}), 201


@book_bp.put("/books/<int:book_id>")
def update_book(book_id: int):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    changes = {}
    for k in UPDATABLE_FIELDS:
        if k not in data or data[k] is None:
            continue
        value = clean_text(data[k])
        if not value:
            raise ValidationError(f"{k} must be a non-empty string")
        changes[k] = value

    if not changes:
        raise ValidationError("At least one field to update is required")
    if "isbn" in changes and not is_valid_isbn(changes["isbn"]):
        raise ValidationError("Invalid ISBN format")

    b = get_services().books.update_book(book_id, changes)
    return jsonify({"success": True, "message": "Book updated successfully", "data": book_json(b)})


@book_bp.delete("/books/<int:book_id>")
def delete_book(book_id: int):
    if not get_services().books.delete_book(book_id):
        raise BookNotFound()
    return jsonify({"success": True, "message": "Book deleted successfully"})
