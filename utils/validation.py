# utils/validation.py
"""
Request payload checks. Each validator collects every problem it finds and
raises a single ValidationError carrying the list.
"""
from __future__ import annotations

import re

from flask import request

from services.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# signed 32-bit INTEGER columns (MySQL INT); larger values overflow the driver
DB_INT_MAX = 2**31 - 1


def is_valid_email(email) -> bool:
    return isinstance(email, str) and bool(_EMAIL_RE.match(email.strip()))


def is_int(v) -> bool:
    """Integral JSON number (3 or 3.0, not True) that fits an INTEGER column."""
    if isinstance(v, bool):
        return False
    if isinstance(v, float):
        if not v.is_integer():
            return False
    elif not isinstance(v, int):
        return False
    return -DB_INT_MAX - 1 <= v <= DB_INT_MAX


def fits_db_id(v) -> bool:
    """True when v can be a primary key; anything else cannot match a row."""
    return is_int(v) and v >= 1


def json_body() -> dict:
    """Request JSON as a dict; an empty/missing body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _text_ok(v, min_len: int = 2, max_len: int = 100) -> bool:
    return isinstance(v, str) and min_len <= len(v.strip()) <= max_len


def _raise_if(errors: list[str]) -> None:
    if errors:
        raise ValidationError("Invalid data", errors=errors)


def as_int(v):
    """Coerce an already-validated integral value (e.g. 3.0) to int."""
    return None if v is None else int(v)


def validate_registration(data: dict) -> None:
    errors = []
    if not _text_ok(data.get("name")):
        errors.append("name must be 2-100 characters")
    if not is_valid_email(data.get("email")):
        errors.append("a valid email is required")
    pw = data.get("password")
    if not isinstance(pw, str) or len(pw) < 6:
        errors.append("password must be at least 6 characters")
    _raise_if(errors)


def validate_login(data: dict) -> None:
    errors = []
    if not is_valid_email(data.get("email")):
        errors.append("a valid email is required")
    if not data.get("password"):
        errors.append("password is required")
    _raise_if(errors)


def validate_route_creation(data: dict) -> None:
    errors = []
    if not _text_ok(data.get("name")):
        errors.append("route name must be 2-100 characters")
    bus = data.get("busNumber")
    if not isinstance(bus, str) or not bus.strip():
        errors.append("busNumber is required")
    cap = data.get("maxCapacity")
    if cap is not None and (not is_int(cap) or cap < 1):
        errors.append("maxCapacity must be an integer greater than 0")
    drv = data.get("driverId")
    if drv is not None and not is_int(drv):
        errors.append("driverId must be an integer")
    _raise_if(errors)


def _coordinate_errors(data: dict) -> list[str]:
    errors = []
    lat = data.get("latitude")
    if lat is not None and (not _is_number(lat) or not -90 <= lat <= 90):
        errors.append("latitude must be a number between -90 and 90")
    lng = data.get("longitude")
    if lng is not None and (not _is_number(lng) or not -180 <= lng <= 180):
        errors.append("longitude must be a number between -180 and 180")
    return errors


def validate_point_creation(data: dict) -> None:
    errors = []
    if not _text_ok(data.get("name")):
        errors.append("point name must be 2-100 characters")
    errors += _coordinate_errors(data)
    _raise_if(errors)


def validate_point_update(data: dict) -> None:
    errors = []
    if "name" in data and not _text_ok(data.get("name")):
        errors.append("point name must be 2-100 characters")
    if "isActive" in data and not isinstance(data["isActive"], bool):
        errors.append("isActive must be true or false")
    errors += _coordinate_errors(data)
    _raise_if(errors)


def validate_status_update(data: dict) -> None:
    errors = []
    pax = data.get("currentPassengers")
    if pax is not None and (not is_int(pax) or pax < 0):
        errors.append("currentPassengers must be an integer >= 0")
    active = data.get("isActive")
    if active is not None and not isinstance(active, bool):
        errors.append("isActive must be true or false")
    idx = data.get("currentPointIndex")
    if idx is not None and (not is_int(idx) or idx < 0):
        errors.append("currentPointIndex must be an integer >= 0")
    _raise_if(errors)


def validate_route_point(data: dict) -> None:
    errors = []
    for key in ("routeId", "pointId"):
        if not is_int(data.get(key)):
            errors.append(f"{key} must be an integer")
    order = data.get("order")
    if order is not None and (not is_int(order) or order < 0):
        errors.append("order must be an integer >= 0")
    eta = data.get("estimatedTime")
    if eta is not None and (not is_int(eta) or eta < 0):
        errors.append("estimatedTime must be an integer >= 0 (minutes)")
    _raise_if(errors)


def validate_driver_assignment(data: dict) -> None:
    drv = data.get("driverId")
    if drv is not None and not is_int(drv):
        raise ValidationError("driverId must be an integer or null")
