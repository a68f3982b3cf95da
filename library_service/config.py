import os

from dotenv import load_dotenv

load_dotenv()


def _database_uri():
    uri = os.getenv("SQLALCHEMY_DATABASE_URI")
    if uri:
        return uri
    # DB_PATH points at a plain sqlite file
    db_path = os.getenv("DB_PATH", "library.db")
    return f"sqlite:///{os.path.abspath(db_path)}"


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "library-secret-key")

    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    PORT = int(os.getenv("PORT", "3000"))
    # e.g. "/api"; empty mounts the endpoints at the root
    API_PREFIX = os.getenv("API_PREFIX", "")

    # SMTP
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "1") == "1"
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@library.local")

    # Lending rules
    LOAN_PERIOD_DAYS = int(os.getenv("LOAN_PERIOD_DAYS", "14"))
    DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", "2"))

    # Daily notification runs (UTC hours)
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "1") == "1"
    REMINDER_CRON_HOUR = int(os.getenv("REMINDER_CRON_HOUR", "9"))
    OVERDUE_CRON_HOUR = int(os.getenv("OVERDUE_CRON_HOUR", "10"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "library@test.local"
    SCHEDULER_ENABLED = False
