# tests/test_public_view.py
import pytest

from services.errors import NotFound
from services.public_view import public_status
from services.route_status import StatusPatch, update_status

from conftest import passed_by_order


def test_current_and_next_stop(make_route):
    route = make_route("700", current_point_index=1, current_passengers=25)
    view = public_status("700")

    assert view["currentPoint"]["order"] == 1
    assert view["nextPoint"]["order"] == 2
    assert view["occupancyPercentage"] == 50
    assert view["routeName"] == route.name


def test_index_without_matching_stop(make_route):
    make_route("701", current_point_index=5)
    view = public_status("701")
    assert view["currentPoint"] is None
    assert view["nextPoint"] is None
    assert len(view["allPoints"]) == 3


def test_last_stop_has_no_next(make_route):
    make_route("702", current_point_index=2)
    view = public_status("702")
    assert view["currentPoint"]["order"] == 2
    assert view["nextPoint"] is None


def test_route_without_stops(make_route):
    make_route("703", orders=())
    view = public_status("703")
    assert view["currentPoint"] is None
    assert view["nextPoint"] is None
    assert view["allPoints"] == []


def test_all_points_sorted_with_stop_fields(make_route):
    route = make_route("704", orders=(4, 0, 2))
    update_status(route.id, StatusPatch(current_point_index=2))

    points = public_status("704")["allPoints"]
    assert [p["order"] for p in points] == [0, 2, 4]
    assert [p["isPassed"] for p in points] == [True, True, False]
    assert set(points[0]) >= {"id", "name", "address", "order", "isPassed", "estimatedTime"}


def test_read_does_not_touch_pass_state(make_route):
    route = make_route("705", current_point_index=2)
    # index was set directly, never through update_status
    before = passed_by_order(route.id)
    public_status("705")
    assert passed_by_order(route.id) == before == {0: False, 1: False, 2: False}


def test_unknown_bus(app):
    with pytest.raises(NotFound):
        public_status("nope")
