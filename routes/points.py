# routes/points.py
from __future__ import annotations

from flask import Blueprint, jsonify, current_app

from db import db
from auth_guard import require_role
from models.point import Point
from models.route_point import RoutePoint
from services.errors import NotFound
from services.public_view import point_payload, route_point_payload
from services.route_points import add_point_to_route, remove_point_from_route
from utils.validation import (
    as_int,
    fits_db_id,
    json_body,
    validate_point_creation,
    validate_point_update,
    validate_route_point,
)

points_bp = Blueprint("points", __name__, url_prefix="/points")

_EDITABLE = {
    "name": "name",
    "description": "description",
    "address": "address",
    "latitude": "latitude",
    "longitude": "longitude",
    "isActive": "is_active",
}


@points_bp.route("", methods=["POST"])
@require_role("admin")
def create_point():
    data = json_body()
    validate_point_creation(data)

    point = Point(
        name=data["name"].strip(),
        description=data.get("description"),
        address=data.get("address"),
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
        is_active=True,
    )
    db.session.add(point)
    db.session.commit()

    current_app.logger.info("[points] created point=%s name=%s", point.id, point.name)
    return jsonify(success=True, message="Point created", data={"point": point_payload(point)}), 201


@points_bp.route("", methods=["GET"])
@require_role()
def list_points():
    rows = Point.query.filter(Point.is_active.is_(True)).order_by(Point.name.asc()).all()
    return jsonify(success=True, data={"points": [point_payload(p) for p in rows]}), 200


@points_bp.route("/<int:point_id>", methods=["GET"])
@require_role()
def get_point(point_id: int):
    point = db.session.get(Point, point_id) if fits_db_id(point_id) else None
    if not point:
        raise NotFound("Point not found")

    out = point_payload(point)
    out["routes"] = [
        {
            "id": rp.route.id,
            "name": rp.route.name,
            "busNumber": rp.route.bus_number,
            "order": rp.order,
            "estimatedTime": rp.estimated_time,
            "isPassed": bool(rp.is_passed),
        }
        for rp in sorted(point.route_points, key=lambda rp: rp.route_id)
    ]
    return jsonify(success=True, data={"point": out}), 200


@points_bp.route("/<int:point_id>", methods=["PUT"])
@require_role("admin")
def update_point(point_id: int):
    point = db.session.get(Point, point_id) if fits_db_id(point_id) else None
    if not point:
        raise NotFound("Point not found")

    data = json_body()
    validate_point_update(data)

    for key, attr in _EDITABLE.items():
        if key in data:
            value = data[key]
            setattr(point, attr, value.strip() if key == "name" else value)

    db.session.commit()
    return jsonify(success=True, message="Point updated", data={"point": point_payload(point)}), 200


# ─────────────────────────────────────────────
# Route ↔ point associations (admin)
# ─────────────────────────────────────────────
@points_bp.route("/route", methods=["POST"])
@require_role("admin")
def add_to_route():
    data = json_body()
    validate_route_point(data)

    rp = add_point_to_route(
        as_int(data["routeId"]),
        as_int(data["pointId"]),
        order=as_int(data.get("order")),
        estimated_time=as_int(data.get("estimatedTime")),
    )
    rp = db.session.get(RoutePoint, rp.id)
    payload = route_point_payload(rp)
    payload["routeId"] = rp.route_id
    payload["pointId"] = rp.point_id
    return jsonify(success=True, message="Point added to route", data={"routePoint": payload}), 201


@points_bp.route("/route/<int:route_id>/<int:point_id>", methods=["DELETE"])
@require_role("admin")
def remove_from_route(route_id: int, point_id: int):
    remove_point_from_route(route_id, point_id)
    return jsonify(success=True, message="Point removed from route"), 200
