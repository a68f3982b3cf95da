from datetime import datetime
from library_service.extensions import db


class Borrow(db.Model):
    __tablename__ = "borrows"

    id = db.Column(db.Integer, primary_key=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=False, index=True)

    borrow_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    return_date = db.Column(db.DateTime, nullable=False, index=True)
    returned = db.Column(db.Boolean, nullable=False, default=False)

    # many-to-one only; deleting a book never touches its loan rows
    book = db.relationship("Book")
