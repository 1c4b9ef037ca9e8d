#!/usr/bin/env python3
# seed.py

import os

from db import db
from models.point import Point
from models.route import Route
from models.route_point import RoutePoint
from models.user import User

ADMIN_EMAIL = os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.environ.get("SEED_ADMIN_PASSWORD", "admin123")
DRIVER_EMAIL = os.environ.get("SEED_DRIVER_EMAIL", "driver@example.com")
DRIVER_PASSWORD = os.environ.get("SEED_DRIVER_PASSWORD", "driver123")

DEMO_POINTS = [
    {"name": "Central Terminal", "address": "Av. Central, 100",   "latitude": -23.5505, "longitude": -46.6333},
    {"name": "City Hospital",    "address": "R. da Saude, 250",   "latitude": -23.5570, "longitude": -46.6390},
    {"name": "University",       "address": "Av. Campus, 1200",   "latitude": -23.5610, "longitude": -46.7300},
    {"name": "North Market",     "address": "R. do Mercado, 45",  "latitude": -23.5400, "longitude": -46.6200},
]

DEMO_ROUTES = [
    {"name": "Centro - Universidade", "bus_number": "101", "max_capacity": 50,
     "stops": [("Central Terminal", 0), ("City Hospital", 8), ("University", 20)]},
    {"name": "Centro - Mercado",      "bus_number": "202", "max_capacity": 40,
     "stops": [("Central Terminal", 0), ("North Market", 12)]},
]


def _upsert_user(email: str, name: str, role: str, password: str) -> User:
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email, name=name, role=role, is_active=True)
        user.set_password(password)
        db.session.add(user)
        print(f"➕ Created {role} `{email}`.")
    else:
        user.role = role
        user.is_active = True
        print(f"🔄 {role} `{email}` already present.")
    return user


def seed_demo() -> None:
    """
    Creates an admin, a driver, a few stops and two routes with their stops.
    Safe to run repeatedly; existing rows are reused, never duplicated.
    Must run inside an app context.
    """
    _upsert_user(ADMIN_EMAIL, "Admin", "admin", ADMIN_PASSWORD)
    driver = _upsert_user(DRIVER_EMAIL, "Demo Driver", "driver", DRIVER_PASSWORD)
    db.session.flush()

    points = {}
    for spec in DEMO_POINTS:
        p = Point.query.filter_by(name=spec["name"]).first()
        if not p:
            p = Point(is_active=True, **spec)
            db.session.add(p)
        points[spec["name"]] = p
    db.session.flush()

    for spec in DEMO_ROUTES:
        route = Route.query.filter_by(bus_number=spec["bus_number"]).first()
        if not route:
            route = Route(
                name=spec["name"],
                bus_number=spec["bus_number"],
                max_capacity=spec["max_capacity"],
                current_passengers=0,
                current_point_index=0,
                is_active=False,
                driver_id=driver.id,
            )
            db.session.add(route)
            db.session.flush()
            print(f"➕ Created route {spec['bus_number']} ({spec['name']}).")

        for order, (stop_name, eta) in enumerate(spec["stops"]):
            point = points[stop_name]
            exists = RoutePoint.query.filter_by(route_id=route.id, point_id=point.id).first()
            if not exists:
                db.session.add(RoutePoint(route_id=route.id, point_id=point.id, order=order, estimated_time=eta))

    db.session.commit()
    print("✅ Demo data seeded.")


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        db.create_all()
        seed_demo()
