# tests/test_api.py
from db import db
from models.route import Route
from models.route_point import RoutePoint
from models.user import User

from conftest import passed_by_order


# ── auth ─────────────────────────────────────────────────────────────────────
def test_register_defaults_to_driver(client):
    resp = client.post("/auth/register", json={"name": "New Driver", "email": "New@Test.io", "password": "hunter22"})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["data"]["user"]["role"] == "driver"
    assert body["data"]["user"]["email"] == "new@test.io"
    assert "password_hash" not in body["data"]["user"]
    assert body["data"]["token"]


def test_register_with_admin_key(client):
    resp = client.post(
        "/auth/register",
        json={"name": "Boss", "email": "boss@test.io", "password": "hunter22", "adminKey": "test-admin-key"},
    )
    assert resp.get_json()["data"]["user"]["role"] == "admin"


def test_register_validation_and_duplicates(client, driver):
    bad = client.post("/auth/register", json={"name": "x", "email": "nope", "password": "1"})
    assert bad.status_code == 400
    assert len(bad.get_json()["errors"]) == 3

    dup = client.post("/auth/register", json={"name": "Again", "email": driver.email, "password": "hunter22"})
    assert dup.status_code == 409


def test_login(client, driver):
    ok = client.post("/auth/login", json={"email": driver.email, "password": "secret123"})
    assert ok.status_code == 200
    assert ok.get_json()["data"]["token"]

    wrong = client.post("/auth/login", json={"email": driver.email, "password": "wrong-pass"})
    assert wrong.status_code == 401


def test_inactive_user_cannot_login_or_use_token(client, driver, auth_header):
    headers = auth_header(driver)
    driver.is_active = False
    db.session.commit()

    assert client.post("/auth/login", json={"email": driver.email, "password": "secret123"}).status_code == 401
    assert client.get("/auth/profile", headers=headers).status_code == 401


def test_profile_requires_token(client, driver, auth_header):
    assert client.get("/auth/profile").status_code == 401
    assert client.get("/auth/profile", headers={"Authorization": "Bearer garbage"}).status_code == 401

    resp = client.get("/auth/profile", headers=auth_header(driver))
    assert resp.get_json()["data"]["user"]["id"] == driver.id


def test_promote(client, driver):
    denied = client.post("/auth/promote", json={"userId": driver.id, "adminKey": "wrong"})
    assert denied.status_code == 403

    resp = client.post("/auth/promote", json={"userId": driver.id, "adminKey": "test-admin-key"})
    assert resp.status_code == 200
    assert db.session.get(User, driver.id).role == "admin"

    huge = client.post("/auth/promote", json={"userId": 2**63, "adminKey": "test-admin-key"})
    assert huge.status_code == 400
    unknown = client.post("/auth/promote", json={"userId": 2**31 - 1, "adminKey": "test-admin-key"})
    assert unknown.status_code == 404


# ── route status ─────────────────────────────────────────────────────────────
def test_owner_updates_status(client, route, driver, auth_header):
    resp = client.put(
        f"/routes/{route.id}/status",
        json={"currentPassengers": 20, "isActive": True, "currentPointIndex": 1},
        headers=auth_header(driver),
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]["route"]
    assert data["currentPassengers"] == 20
    assert data["occupancyPercentage"] == 40
    assert [p["isPassed"] for p in data["points"]] == [True, True, False]


def test_non_owner_is_forbidden_and_nothing_changes(client, route, other_driver, auth_header):
    resp = client.put(f"/routes/{route.id}/status", json={"currentPointIndex": 2}, headers=auth_header(other_driver))
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False

    db.session.expire_all()
    assert db.session.get(Route, route.id).current_point_index == 0
    assert not any(passed_by_order(route.id).values())


def test_admin_updates_any_route(client, route, admin, auth_header):
    resp = client.put(f"/routes/{route.id}/status", json={"isActive": True}, headers=auth_header(admin))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["route"]["isActive"] is True


def test_missing_route_status_is_404(client, driver, admin, auth_header):
    assert client.put("/routes/999/status", json={"isActive": True}, headers=auth_header(driver)).status_code == 404
    assert client.put("/routes/999/status", json={"isActive": True}, headers=auth_header(admin)).status_code == 404


def test_capacity_exceeded(client, route, driver, auth_header):
    resp = client.put(f"/routes/{route.id}/status", json={"currentPassengers": 51}, headers=auth_header(driver))
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "capacity_exceeded"


def test_malformed_status_payload(client, route, driver, auth_header):
    resp = client.put(
        f"/routes/{route.id}/status",
        json={"currentPassengers": "ten", "isActive": "yes", "currentPointIndex": -1},
        headers=auth_header(driver),
    )
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "validation_error"
    assert len(resp.get_json()["errors"]) == 3


def test_oversized_integers_are_validation_errors(client, route, driver, auth_header):
    resp = client.put(f"/routes/{route.id}/status", json={"currentPointIndex": 2**63}, headers=auth_header(driver))
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "validation_error"
    assert db.session.get(Route, route.id).current_point_index == 0


def test_oversized_route_id_is_404(client, driver, admin, auth_header):
    for user in (admin, driver):
        resp = client.put(f"/routes/{2**64}/status", json={"isActive": True}, headers=auth_header(user))
        assert resp.status_code == 404
        assert resp.get_json()["kind"] == "not_found"
    assert client.get(f"/routes/{2**64}", headers=auth_header(admin)).status_code == 404
    assert client.put(f"/routes/{2**64}/driver", json={"driverId": None}, headers=auth_header(admin)).status_code == 404


def test_non_object_body_is_rejected(client, route, driver, admin, auth_header):
    resp = client.put(f"/routes/{route.id}/status", json=[1], headers=auth_header(driver))
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "validation_error"

    assert client.post("/routes", json="900", headers=auth_header(admin)).status_code == 400
    assert client.post("/auth/login", json=[]).status_code == 400


# ── route admin ──────────────────────────────────────────────────────────────
def test_create_route(client, admin, driver, auth_header):
    resp = client.post(
        "/routes",
        json={"name": "Airport Express", "busNumber": "900", "driverId": driver.id},
        headers=auth_header(admin),
    )
    assert resp.status_code == 201
    data = resp.get_json()["data"]["route"]
    assert data["maxCapacity"] == 50
    assert data["isActive"] is False
    assert data["driver"]["id"] == driver.id

    dup = client.post("/routes", json={"name": "Copy", "busNumber": "900"}, headers=auth_header(admin))
    assert dup.status_code == 409


def test_create_route_checks_driver(client, admin, auth_header):
    missing = client.post("/routes", json={"name": "Line", "busNumber": "901", "driverId": 999}, headers=auth_header(admin))
    assert missing.status_code == 404

    not_driver = client.post(
        "/routes", json={"name": "Line", "busNumber": "902", "driverId": admin.id}, headers=auth_header(admin)
    )
    assert not_driver.status_code == 400


def test_drivers_cannot_create_routes(client, driver, auth_header):
    resp = client.post("/routes", json={"name": "Line", "busNumber": "903"}, headers=auth_header(driver))
    assert resp.status_code == 403


def test_assign_driver_then_driver_may_update(client, make_route, admin, other_driver, auth_header):
    route = make_route("904")
    resp = client.put(f"/routes/{route.id}/driver", json={"driverId": other_driver.id}, headers=auth_header(admin))
    assert resp.status_code == 200

    upd = client.put(f"/routes/{route.id}/status", json={"currentPassengers": 5}, headers=auth_header(other_driver))
    assert upd.status_code == 200


def test_clearing_the_driver_revokes_access(client, route, admin, driver, auth_header):
    resp = client.put(f"/routes/{route.id}/driver", json={"driverId": None}, headers=auth_header(admin))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["route"]["driverId"] is None

    upd = client.put(f"/routes/{route.id}/status", json={"currentPassengers": 5}, headers=auth_header(driver))
    assert upd.status_code == 403
    assert db.session.get(Route, route.id).current_passengers == 0


def test_driver_ids_accept_integral_floats(client, make_route, admin, other_driver, auth_header):
    hdr = auth_header(admin)
    route = make_route("905")
    resp = client.put(f"/routes/{route.id}/driver", json={"driverId": float(other_driver.id)}, headers=hdr)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["route"]["driverId"] == other_driver.id

    created = client.post(
        "/routes", json={"name": "Line", "busNumber": "906", "driverId": float(other_driver.id)}, headers=hdr
    )
    assert created.status_code == 201

    assert client.put(f"/routes/{route.id}/driver", json={"driverId": 1.5}, headers=hdr).status_code == 400
    assert client.put(f"/routes/{route.id}/driver", json={"driverId": True}, headers=hdr).status_code == 400


def test_oversized_capacity_is_rejected(client, admin, auth_header):
    resp = client.post("/routes", json={"name": "Line", "busNumber": "907", "maxCapacity": 2**40}, headers=auth_header(admin))
    assert resp.status_code == 400
    assert Route.query.filter_by(bus_number="907").first() is None


def test_list_and_get_routes(client, route, driver, auth_header):
    listed = client.get("/routes", headers=auth_header(driver)).get_json()["data"]["routes"]
    assert [r["busNumber"] for r in listed] == ["101"]

    one = client.get(f"/routes/{route.id}", headers=auth_header(driver))
    assert [p["order"] for p in one.get_json()["data"]["route"]["points"]] == [0, 1, 2]
    assert client.get("/routes/999", headers=auth_header(driver)).status_code == 404


# ── points ───────────────────────────────────────────────────────────────────
def test_point_crud(client, admin, auth_header):
    hdr = auth_header(admin)
    bad = client.post("/points", json={"name": "Pier", "latitude": 91}, headers=hdr)
    assert bad.status_code == 400

    created = client.post("/points", json={"name": "Pier", "latitude": -12.5, "longitude": 45.0}, headers=hdr)
    assert created.status_code == 201
    pid = created.get_json()["data"]["point"]["id"]

    upd = client.put(f"/points/{pid}", json={"address": "Dock 3", "isActive": False}, headers=hdr)
    assert upd.get_json()["data"]["point"]["address"] == "Dock 3"

    listed = client.get("/points", headers=hdr).get_json()["data"]["points"]
    assert pid not in [p["id"] for p in listed]


def test_add_and_remove_point_on_route(client, route, admin, auth_header):
    hdr = auth_header(admin)
    pid = client.post("/points", json={"name": "Depot"}, headers=hdr).get_json()["data"]["point"]["id"]

    added = client.post("/points/route", json={"routeId": route.id, "pointId": pid}, headers=hdr)
    assert added.status_code == 201
    assert added.get_json()["data"]["routePoint"]["order"] == 3

    again = client.post("/points/route", json={"routeId": route.id, "pointId": pid}, headers=hdr)
    assert again.status_code == 409

    point = client.get(f"/points/{pid}", headers=hdr).get_json()["data"]["point"]
    assert point["routes"][0]["busNumber"] == "101"

    assert client.delete(f"/points/route/{route.id}/{pid}", headers=hdr).status_code == 200
    assert client.delete(f"/points/route/{route.id}/{pid}", headers=hdr).status_code == 404
    assert RoutePoint.query.filter_by(route_id=route.id).count() == 3


def test_oversized_point_values(client, route, admin, auth_header):
    hdr = auth_header(admin)
    pid = client.post("/points", json={"name": "Depot"}, headers=hdr).get_json()["data"]["point"]["id"]

    resp = client.post("/points/route", json={"routeId": route.id, "pointId": pid, "order": 2**63}, headers=hdr)
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "validation_error"

    big_id = client.post("/points/route", json={"routeId": 2**40, "pointId": pid}, headers=hdr)
    assert big_id.status_code == 400

    assert client.get(f"/points/{2**64}", headers=hdr).status_code == 404
    assert client.put(f"/points/{2**64}", json={"address": "x"}, headers=hdr).status_code == 404
    assert client.delete(f"/points/route/{2**64}/{pid}", headers=hdr).status_code == 404
    assert RoutePoint.query.filter_by(point_id=pid).count() == 0


def test_association_is_admin_only(client, route, driver, auth_header):
    resp = client.post("/points/route", json={"routeId": route.id, "pointId": 1}, headers=auth_header(driver))
    assert resp.status_code == 403


# ── public ───────────────────────────────────────────────────────────────────
def test_public_bus_status(client, make_route):
    make_route("777", current_point_index=1, current_passengers=1, max_capacity=3)
    resp = client.get("/public/bus/777")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["occupancyPercentage"] == 33
    assert data["currentPoint"]["order"] == 1
    assert data["nextPoint"]["order"] == 2


def test_public_unknown_bus(client):
    resp = client.get("/public/bus/000")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "kind": "not_found", "message": "Bus not found"}


def test_health_and_unknown_endpoint(client):
    assert client.get("/public/health").get_json()["success"] is True
    assert client.get("/does-not-exist").status_code == 404
