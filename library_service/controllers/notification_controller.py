from flask import Blueprint, jsonify

from library_service.extensions import get_services

notif_bp = Blueprint("notifications", __name__)


@notif_bp.post("/notifications/run")
def run_notifications():
    summary = get_services().notifications.run_all()
    return jsonify({"success": True, "message": "Notification runs finished", "data": summary})
