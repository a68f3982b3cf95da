import click
from flask import current_app

from library_service.extensions import db, get_services


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create the books and borrows tables."""
        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("send-notifications")
    @click.option(
        "--only",
        type=click.Choice(["due-soon", "overdue"]),
        default=None,
        help="Run a single notification pass instead of both.",
    )
    def send_notifications(only):
        """Run the reminder / overdue mail passes now."""
        svc = get_services().notifications
        if only == "due-soon":
            summary = {"due_soon": svc.send_due_soon_reminders()}
        elif only == "overdue":
            summary = {"overdue": svc.send_overdue_notices()}
        else:
            summary = svc.run_all()

        for name, counts in summary.items():
            click.echo(f"{name}: checked={counts['checked']} sent={counts['sent']} failed={counts['failed']}")
        current_app.logger.info(f"[cli] send-notifications {summary}")
