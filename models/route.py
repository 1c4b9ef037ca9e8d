# models/route.py
from __future__ import annotations
from db import db
from sqlalchemy.orm import validates
from sqlalchemy.sql import func


class Route(db.Model):
    """
    A bus line and its live status. `current_point_index` points at the
    RoutePoint.order the bus is currently at; it may run past the last
    mapped stop.
    """
    __tablename__ = "routes"

    id                  = db.Column(db.Integer, primary_key=True)
    name                = db.Column(db.String(100), nullable=False)
    bus_number          = db.Column(db.String(32), nullable=False, unique=True, index=True)
    description         = db.Column(db.Text, nullable=True)
    is_active           = db.Column(db.Boolean, nullable=False, default=False)
    current_passengers  = db.Column(db.Integer, nullable=False, default=0)
    max_capacity        = db.Column(db.Integer, nullable=False, default=50)
    current_point_index = db.Column(db.Integer, nullable=False, default=0)
    driver_id           = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    created_at          = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at          = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        db.CheckConstraint("current_passengers >= 0", name="ck_routes_passengers_nonneg"),
        db.CheckConstraint("max_capacity >= 1", name="ck_routes_capacity_min"),
        db.CheckConstraint("current_point_index >= 0", name="ck_routes_point_index_nonneg"),
        db.CheckConstraint("current_passengers <= max_capacity", name="ck_routes_within_capacity"),
    )

    # ── Relationships ────────────────────────────────────────────────────────
    driver = db.relationship("User", back_populates="routes", foreign_keys=[driver_id])

    route_points = db.relationship(
        "RoutePoint",
        back_populates="route",
        order_by="RoutePoint.order",
        cascade="all, delete-orphan",
    )

    # ── Validation ──────────────────────────────────────────────────────────
    @validates("current_passengers")
    def _check_passengers(self, _key, value):
        if value is not None and self.max_capacity is not None and value > self.max_capacity:
            raise ValueError(
                f"current_passengers ({value}) cannot exceed max_capacity ({self.max_capacity})"
            )
        return value

    @validates("max_capacity")
    def _check_capacity(self, _key, value):
        if value is not None and value < 1:
            raise ValueError("max_capacity must be at least 1")
        if value is not None and (self.current_passengers or 0) > value:
            raise ValueError(
                f"max_capacity ({value}) is below current_passengers ({self.current_passengers})"
            )
        return value
