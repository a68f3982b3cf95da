import re

ISBN_PATTERN = re.compile(r"^\d{3}-\d{1,5}-\d{1,7}-\d{1,7}-\d{1,7}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_DB_ID = 2 ** 63 - 1


def is_valid_isbn(isbn) -> bool:
    return isinstance(isbn, str) and ISBN_PATTERN.match(isbn) is not None


def is_valid_email(email) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.match(email) is not None


def clean_text(value):
    """Strip a JSON string field; anything that is not a string comes back as None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_storable_id(value) -> bool:
    """Positive and within a signed 64-bit INTEGER column."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_DB_ID


def parse_id(value):
    """Accept ints and ASCII digit strings (JSON clients send both)."""
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdecimal()):
            return None
        value = int(value)
    return value if is_storable_id(value) else None
