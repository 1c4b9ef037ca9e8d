# models/route_point.py
from db import db
from sqlalchemy.orm import validates
from sqlalchemy.sql import func


class RoutePoint(db.Model):
    __tablename__ = "route_points"

    id             = db.Column(db.Integer, primary_key=True)
    route_id       = db.Column(db.Integer, db.ForeignKey("routes.id"), nullable=False, index=True)
    point_id       = db.Column(db.Integer, db.ForeignKey("points.id"), nullable=False, index=True)
    order          = db.Column("order", db.Integer, nullable=False)
    estimated_time = db.Column(db.Integer, nullable=True)   # minutes
    is_passed      = db.Column(db.Boolean, nullable=False, default=False)

    created_at     = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at     = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("route_id", "point_id", name="uq_route_point"),
        db.UniqueConstraint("route_id", "order", name="uq_route_order"),
    )

    route = db.relationship("Route", back_populates="route_points")
    point = db.relationship("Point", back_populates="route_points", lazy="joined")

    @validates("order", "estimated_time")
    def _check_non_negative(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} must be >= 0")
        return value
