from dataclasses import dataclass

from flask import Flask, jsonify

from library_service.config import Config
from library_service.extensions import db, migrate, mail
from library_service.repositories.book_repo import BookRepo
from library_service.repositories.borrow_repo import BorrowRepo
from library_service.services.book_service import BookService
from library_service.services.borrow_service import BorrowService
from library_service.services.mail_service import MailService
from library_service.services.notification_service import NotificationService


@dataclass
class LibraryServices:
    books: BookService
    borrows: BorrowService
    notifications: NotificationService
    mail: MailService


def build_services(app, mail_service=None) -> LibraryServices:
    mail_service = mail_service or MailService(mail, app.config.get("MAIL_DEFAULT_SENDER"))

    # db.session is the scoped session: each app context gets its own
    book_repo = BookRepo(db.session)
    borrow_repo = BorrowRepo(db.session)

    return LibraryServices(
        books=BookService(book_repo, borrow_repo),
        borrows=BorrowService(
            book_repo,
            borrow_repo,
            mail_service=mail_service,
            loan_period_days=app.config["LOAN_PERIOD_DAYS"],
        ),
        notifications=NotificationService(
            borrow_repo,
            mail_service,
            due_soon_days=app.config["DUE_SOON_DAYS"],
        ),
        mail=mail_service,
    )


def create_app(config_class=Config, mail_service=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # 1) Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    # models must be imported before create_all / migrations
    from library_service.models import book, borrow  # noqa: F401

    # 2) Services (storage handle + mail transport passed in explicitly)
    app.extensions["library"] = build_services(app, mail_service)

    # 3) Errors -> JSON
    from library_service.errors import register_error_handlers
    register_error_handlers(app)

    # 4) Blueprints
    from library_service.controllers.book_controller import book_bp
    from library_service.controllers.borrow_controller import borrow_bp
    from library_service.controllers.notification_controller import notif_bp
    prefix = app.config.get("API_PREFIX") or None
    app.register_blueprint(book_bp, url_prefix=prefix)
    app.register_blueprint(borrow_bp, url_prefix=prefix)
    app.register_blueprint(notif_bp, url_prefix=prefix)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from library_service.cli import register_cli
    register_cli(app)

    # 5) Daily notification jobs
    from library_service.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
