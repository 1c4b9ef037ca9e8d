# routes/bus_routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from db import db
from auth_guard import require_role, current_caller
from models.route import Route
from models.route_point import RoutePoint
from models.user import User
from services.authorization import authorize
from services.errors import Conflict, NotFound, ValidationError
from services.public_view import route_payload
from services.route_status import StatusPatch, load_route, update_status
from utils.validation import (
    as_int,
    fits_db_id,
    json_body,
    validate_driver_assignment,
    validate_route_creation,
    validate_status_update,
)

routes_bp = Blueprint("routes", __name__, url_prefix="/routes")


def _checked_driver(driver_id) -> User | None:
    """Resolve driverId; None clears the assignment."""
    if driver_id is None:
        return None
    driver = db.session.get(User, as_int(driver_id))
    if not driver:
        raise NotFound("Driver not found")
    if (driver.role or "").lower() != "driver":
        raise ValidationError("The given user is not a driver")
    return driver


@routes_bp.route("", methods=["POST"])
@require_role("admin")
def create_route():
    data = json_body()
    validate_route_creation(data)

    bus_number = data["busNumber"].strip()
    if Route.query.filter_by(bus_number=bus_number).first():
        raise Conflict("Bus number is already in use")

    driver = _checked_driver(data.get("driverId"))
    route = Route(
        name=data["name"].strip(),
        bus_number=bus_number,
        description=(data.get("description") or None),
        max_capacity=as_int(data.get("maxCapacity")) or current_app.config["DEFAULT_MAX_CAPACITY"],
        current_passengers=0,
        current_point_index=0,
        is_active=False,
        driver_id=driver.id if driver else None,
    )

    try:
        db.session.add(route)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Bus number is already in use")

    current_app.logger.info("[routes] created route=%s bus=%s driver=%s", route.id, bus_number, route.driver_id)
    return jsonify(success=True, message="Route created", data={"route": route_payload(load_route(route.id))}), 201


@routes_bp.route("", methods=["GET"])
@require_role()
def list_routes():
    rows = (
        Route.query.options(
            selectinload(Route.route_points).joinedload(RoutePoint.point),
            selectinload(Route.driver),
        )
        .order_by(Route.created_at.desc(), Route.id.desc())
        .all()
    )
    return jsonify(success=True, data={"routes": [route_payload(r) for r in rows]}), 200


@routes_bp.route("/<int:route_id>", methods=["GET"])
@require_role()
def get_route(route_id: int):
    route = load_route(route_id)
    if not route:
        raise NotFound("Route not found")
    return jsonify(success=True, data={"route": route_payload(route)}), 200


@routes_bp.route("/<int:route_id>/status", methods=["PUT"])
@require_role()
def update_route_status(route_id: int):
    authorize(current_caller(), route_id).raise_for_denial()

    data = json_body()
    validate_status_update(data)

    route = update_status(route_id, StatusPatch.from_payload(data))
    return jsonify(success=True, message="Route status updated", data={"route": route_payload(route)}), 200


@routes_bp.route("/<int:route_id>/driver", methods=["PUT"])
@require_role("admin")
def assign_driver(route_id: int):
    data = json_body()
    validate_driver_assignment(data)

    route = db.session.get(Route, route_id) if fits_db_id(route_id) else None
    if not route:
        raise NotFound("Route not found")

    driver = _checked_driver(data.get("driverId"))
    route.driver_id = driver.id if driver else None
    db.session.commit()

    current_app.logger.info("[routes] route=%s driver=%s", route_id, route.driver_id)
    return jsonify(success=True, message="Driver assigned", data={"route": route_payload(load_route(route_id))}), 200
