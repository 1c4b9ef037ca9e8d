# services/route_status.py
"""
Route status engine.

Public API:
  - occupancy_percentage(current_passengers, max_capacity) -> int
  - reclassify_points(route_id, current_point_index) -> int     (no commit)
  - update_status(route_id, patch: StatusPatch) -> Route

update_status validates the whole patch before touching the route, then
assigns the fields and recomputes RoutePoint.is_passed in a single commit.
Applying the same patch twice leaves the same state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.orm import selectinload

from db import db
from models.route import Route
from models.route_point import RoutePoint
from services.errors import CapacityExceeded, NotFound, ValidationError
from utils.validation import DB_INT_MAX, fits_db_id


@dataclass(frozen=True)
class StatusPatch:
    """Partial status update; None means "leave unchanged"."""
    current_passengers: Optional[int] = None
    is_active: Optional[bool] = None
    current_point_index: Optional[int] = None

    @classmethod
    def from_payload(cls, data: dict) -> "StatusPatch":
        return cls(
            current_passengers=data.get("currentPassengers"),
            is_active=data.get("isActive"),
            current_point_index=data.get("currentPointIndex"),
        )

    def is_empty(self) -> bool:
        return (
            self.current_passengers is None
            and self.is_active is None
            and self.current_point_index is None
        )


def occupancy_percentage(current_passengers: int, max_capacity: int) -> int:
    """Whole-number occupancy, rounded half up (1/3 -> 33, 1/2 -> 50)."""
    if max_capacity < 1:
        raise ValueError("max_capacity must be at least 1")
    p = max(int(current_passengers or 0), 0)
    return (200 * p + max_capacity) // (2 * max_capacity)


def reclassify_points(route_id: int, current_point_index: int) -> int:
    """
    Mark every stop with order <= index as passed and every later stop as
    not passed. Full recomputation, so moving the index backwards converges
    too. Does NOT commit. Returns the number of rows touched.
    """
    passed = (
        RoutePoint.query
        .filter(RoutePoint.route_id == route_id, RoutePoint.order <= current_point_index)
        .update({RoutePoint.is_passed: True}, synchronize_session="fetch")
    )
    ahead = (
        RoutePoint.query
        .filter(RoutePoint.route_id == route_id, RoutePoint.order > current_point_index)
        .update({RoutePoint.is_passed: False}, synchronize_session="fetch")
    )
    return int(passed or 0) + int(ahead or 0)


def _validate_patch(route: Route, patch: StatusPatch) -> None:
    if patch.current_passengers is not None:
        if patch.current_passengers > route.max_capacity:
            raise CapacityExceeded(
                f"Passenger count cannot exceed the maximum capacity of {route.max_capacity}"
            )
        if patch.current_passengers < 0:
            raise ValidationError("currentPassengers must be >= 0")
    if patch.current_point_index is not None and not 0 <= patch.current_point_index <= DB_INT_MAX:
        raise ValidationError(f"currentPointIndex must be between 0 and {DB_INT_MAX}")


def load_route(route_id: int) -> Route | None:
    """Route with its stops (and their points) eagerly loaded."""
    if not fits_db_id(route_id):
        return None
    return (
        Route.query.options(
            selectinload(Route.route_points).joinedload(RoutePoint.point),
            selectinload(Route.driver),
        )
        .filter(Route.id == route_id)
        .first()
    )


def update_status(route_id: int, patch: StatusPatch) -> Route:
    if not fits_db_id(route_id):
        raise NotFound("Route not found")

    route = (
        db.session.query(Route)
        .filter(Route.id == route_id)
        .with_for_update()
        .first()
    )
    if route is None:
        db.session.rollback()
        raise NotFound("Route not found")

    try:
        _validate_patch(route, patch)

        if patch.current_passengers is not None:
            route.current_passengers = int(patch.current_passengers)
        if patch.is_active is not None:
            route.is_active = bool(patch.is_active)
        if patch.current_point_index is not None:
            route.current_point_index = int(patch.current_point_index)
            reclassify_points(route.id, route.current_point_index)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "[status] route=%s bus=%s pax=%s/%s active=%s index=%s",
        route.id, route.bus_number, route.current_passengers,
        route.max_capacity, route.is_active, route.current_point_index,
    )
    return load_route(route_id)
