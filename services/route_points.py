# services/route_points.py
"""
Admin-side management of the stops on a route.

  - add_point_to_route(route_id, point_id, order=None, estimated_time=None) -> RoutePoint
  - remove_point_from_route(route_id, point_id) -> None

Orders are never renumbered; gaps are allowed.
"""
from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from db import db
from models.point import Point
from models.route import Route
from models.route_point import RoutePoint
from services.errors import Conflict, NotFound, ValidationError
from utils.validation import fits_db_id, is_int


def _next_order(route_id: int) -> int:
    top = db.session.query(func.max(RoutePoint.order)).filter(RoutePoint.route_id == route_id).scalar()
    return 0 if top is None else int(top) + 1


def add_point_to_route(
    route_id: int,
    point_id: int,
    order: Optional[int] = None,
    estimated_time: Optional[int] = None,
) -> RoutePoint:
    if not fits_db_id(route_id) or db.session.get(Route, route_id) is None:
        raise NotFound("Route not found")
    if not fits_db_id(point_id) or db.session.get(Point, point_id) is None:
        raise NotFound("Point not found")
    for name, value in (("order", order), ("estimatedTime", estimated_time)):
        if value is not None and not (is_int(value) and value >= 0):
            raise ValidationError(f"{name} must be a non-negative integer")

    existing = RoutePoint.query.filter_by(route_id=route_id, point_id=point_id).first()
    if existing:
        raise Conflict("Point is already associated with this route")

    if order is not None:
        taken = RoutePoint.query.filter_by(route_id=route_id, order=order).first()
        if taken:
            raise Conflict(f"Order {order} is already used on this route")
    else:
        order = _next_order(route_id)

    rp = RoutePoint(
        route_id=route_id,
        point_id=point_id,
        order=order,
        estimated_time=estimated_time,
    )
    try:
        db.session.add(rp)
        db.session.commit()
    except IntegrityError:
        # lost a race against a concurrent insert on the same pair/order
        db.session.rollback()
        current_app.logger.warning(
            "[points] unique violation adding point=%s to route=%s order=%s",
            point_id, route_id, order,
        )
        raise Conflict("Point or order already used on this route")

    current_app.logger.info("[points] route=%s +point=%s order=%s", route_id, point_id, order)
    return rp


def remove_point_from_route(route_id: int, point_id: int) -> None:
    rp = None
    if fits_db_id(route_id) and fits_db_id(point_id):
        rp = RoutePoint.query.filter_by(route_id=route_id, point_id=point_id).first()
    if rp is None:
        raise NotFound("Route/point association not found")

    try:
        db.session.delete(rp)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("[points] remove point=%s from route=%s failed", point_id, route_id)
        raise

    current_app.logger.info("[points] route=%s -point=%s", route_id, point_id)
