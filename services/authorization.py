# services/authorization.py
"""
Route-level access decision.

    authorize(caller, route_id) -> Decision

Admins may act on any route; drivers only on routes assigned to them.
The decision is read-only and must be taken before any mutation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from db import db
from models.route import Route
from services.errors import Forbidden, NotFound
from utils.validation import fits_db_id

__all__ = ["Caller", "Decision", "authorize"]


@dataclass(frozen=True)
class Caller:
    id: int
    role: str
    is_active: bool = True

    @classmethod
    def from_user(cls, user) -> "Caller":
        return cls(id=int(user.id), role=(user.role or "").lower(), is_active=bool(user.is_active))

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    kind: Optional[str] = None      # "not_found" | "forbidden" when denied
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, kind: str, reason: str) -> "Decision":
        return cls(allowed=False, kind=kind, reason=reason)

    def raise_for_denial(self) -> None:
        if self.allowed:
            return
        if self.kind == "not_found":
            raise NotFound(self.reason or "Route not found")
        raise Forbidden(self.reason or "Access denied")


def authorize(caller: Caller, route_id: int) -> Decision:
    if caller.is_admin:
        return Decision.allow()

    route = db.session.get(Route, route_id) if fits_db_id(route_id) else None
    if route is None:
        return Decision.deny("not_found", "Route not found")

    if route.driver_id is not None and int(route.driver_id) == int(caller.id):
        return Decision.allow()

    return Decision.deny("forbidden", "Access denied. You can only modify your own routes.")
