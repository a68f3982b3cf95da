from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class LibraryError(Exception):
    status_code = 500
    message = "Unexpected error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(LibraryError):
    status_code = 400
    message = "Invalid request"


class NotFound(LibraryError):
    status_code = 404
    message = "Not found"


class BookNotFound(NotFound):
    message = "Book not found"


class LoanNotFound(NotFound):
    message = "Borrow record not found"


class Conflict(LibraryError):
    status_code = 409
    message = "Conflict"


class DuplicateIsbn(Conflict):
    message = "Book with this ISBN already exists"


class BookOnLoan(Conflict):
    message = "Book is currently borrowed and cannot be deleted"


class BusinessRuleViolation(LibraryError):
    status_code = 400
    message = "Operation not allowed"


class BookUnavailable(BusinessRuleViolation):
    message = "Book is not available"


class AlreadyReturned(BusinessRuleViolation):
    message = "Book has already been returned"


def _json_error(message, code):
    return jsonify({"success": False, "message": message}), code


def register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def _library_error(e: LibraryError):
        return _json_error(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return _json_error(e.description, e.code)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        current_app.logger.exception(f"[api] Unhandled error: {e}")
        return _json_error(str(e), 500)
