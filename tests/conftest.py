# tests/conftest.py
from __future__ import annotations

import pytest

from app import create_app
from config import TestingConfig
from db import db
from models.point import Point
from models.route import Route
from models.route_point import RoutePoint
from models.user import User
from utils.tokens import issue_token


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(name, email, role, password="secret123", is_active=True) -> User:
    u = User(name=name, email=email, role=role, is_active=is_active)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def admin(app):
    return _user("Ana Admin", "admin@test.io", "admin")


@pytest.fixture
def driver(app):
    return _user("Dario Driver", "driver@test.io", "driver")


@pytest.fixture
def other_driver(app):
    return _user("Olga Other", "other@test.io", "driver")


@pytest.fixture
def make_route(app):
    def _make(bus_number="101", *, driver=None, max_capacity=50, orders=(0, 1, 2), **kw) -> Route:
        route = Route(
            name=f"Line {bus_number}",
            bus_number=bus_number,
            max_capacity=max_capacity,
            current_passengers=kw.pop("current_passengers", 0),
            current_point_index=kw.pop("current_point_index", 0),
            is_active=kw.pop("is_active", False),
            driver_id=driver.id if driver else None,
        )
        db.session.add(route)
        db.session.flush()
        for order in orders:
            p = Point(name=f"Stop {bus_number}-{order}", address=f"Street {order}", is_active=True)
            db.session.add(p)
            db.session.flush()
            db.session.add(RoutePoint(route_id=route.id, point_id=p.id, order=order, estimated_time=order * 5))
        db.session.commit()
        return route

    return _make


@pytest.fixture
def route(make_route, driver):
    return make_route("101", driver=driver)


@pytest.fixture
def auth_header(app):
    def _hdr(user) -> dict:
        return {"Authorization": f"Bearer {issue_token(user)}"}

    return _hdr


def passed_by_order(route_id: int) -> dict[int, bool]:
    rows = RoutePoint.query.filter_by(route_id=route_id).all()
    return {rp.order: bool(rp.is_passed) for rp in rows}
