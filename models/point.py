# models/point.py
from db import db
from sqlalchemy.sql import func


class Point(db.Model):
    __tablename__ = "points"

    id          = db.Column(db.Integer, primary_key=True)
    name        = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    address     = db.Column(db.String(255), nullable=True)
    latitude    = db.Column(db.Float, nullable=True)   # -90..90
    longitude   = db.Column(db.Float, nullable=True)   # -180..180
    is_active   = db.Column(db.Boolean, nullable=False, default=True)

    created_at  = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at  = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    route_points = db.relationship("RoutePoint", back_populates="point", cascade="all, delete-orphan")
