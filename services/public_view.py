# services/public_view.py
"""
JSON projections of routes, stops and users, plus the read-only public
status view served at /public/bus/<busNumber>.
"""
from __future__ import annotations

from sqlalchemy.orm import selectinload

from models.route import Route
from models.route_point import RoutePoint
from services.errors import NotFound
from services.route_status import occupancy_percentage


def _iso(dt):
    return dt.isoformat() if dt else None


def user_payload(u) -> dict | None:
    if u is None:
        return None
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "isActive": bool(u.is_active),
        "createdAt": _iso(u.created_at),
    }


def driver_payload(u) -> dict | None:
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "email": u.email}


def point_payload(p) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "address": p.address,
        "latitude": p.latitude,
        "longitude": p.longitude,
        "isActive": bool(p.is_active),
    }


def route_point_payload(rp: RoutePoint, *, brief: bool = False) -> dict:
    """Point fields merged with the stop's position on the route."""
    if brief:
        out = {"id": rp.point.id, "name": rp.point.name, "address": rp.point.address}
    else:
        out = point_payload(rp.point)
    out.update(
        order=rp.order,
        isPassed=bool(rp.is_passed),
        estimatedTime=rp.estimated_time,
    )
    return out


def route_payload(route: Route, *, include_points: bool = True) -> dict:
    out = {
        "id": route.id,
        "name": route.name,
        "busNumber": route.bus_number,
        "description": route.description,
        "isActive": bool(route.is_active),
        "currentPassengers": route.current_passengers,
        "maxCapacity": route.max_capacity,
        "currentPointIndex": route.current_point_index,
        "occupancyPercentage": occupancy_percentage(route.current_passengers, route.max_capacity),
        "driverId": route.driver_id,
        "driver": driver_payload(route.driver),
        "createdAt": _iso(route.created_at),
        "updatedAt": _iso(route.updated_at),
    }
    if include_points:
        out["points"] = [route_point_payload(rp) for rp in _sorted_stops(route)]
    return out


def _sorted_stops(route: Route) -> list[RoutePoint]:
    return sorted(route.route_points, key=lambda rp: rp.order)


def _stop_at(stops: list[RoutePoint], order: int) -> RoutePoint | None:
    for rp in stops:
        if rp.order == order:
            return rp
    return None


def public_status(bus_number: str) -> dict:
    """
    Public view of a bus. currentPoint / nextPoint are None when the index
    has no matching stop (no stops yet, or past the last mapped one).
    Never mutates pass-state.
    """
    route = (
        Route.query.options(selectinload(Route.route_points).joinedload(RoutePoint.point))
        .filter(Route.bus_number == bus_number)
        .first()
    )
    if route is None:
        raise NotFound("Bus not found")

    stops = _sorted_stops(route)
    current = _stop_at(stops, route.current_point_index)
    upcoming = _stop_at(stops, route.current_point_index + 1)

    return {
        "busNumber": route.bus_number,
        "routeName": route.name,
        "isActive": bool(route.is_active),
        "currentPassengers": route.current_passengers,
        "maxCapacity": route.max_capacity,
        "occupancyPercentage": occupancy_percentage(route.current_passengers, route.max_capacity),
        "currentPoint": route_point_payload(current, brief=True) if current else None,
        "nextPoint": route_point_payload(upcoming, brief=True) if upcoming else None,
        "allPoints": [route_point_payload(rp, brief=True) for rp in stops],
    }
