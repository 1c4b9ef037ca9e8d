# routes/public.py
from datetime import datetime, timezone

from flask import Blueprint, jsonify, current_app

from services.public_view import public_status

public_bp = Blueprint("public", __name__, url_prefix="/public")


@public_bp.route("/bus/<string:bus_number>", methods=["GET"])
def bus_status(bus_number: str):
    return jsonify(success=True, data=public_status(bus_number)), 200


@public_bp.route("/health", methods=["GET"])
def health():
    return jsonify(
        success=True,
        message="API is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=current_app.config.get("APP_VERSION"),
    ), 200
