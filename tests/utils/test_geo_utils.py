import pytest

from utils.geo_utils import (
    GeoJsonPoint,
    WktPoint,
    classify_location,
    normalize_location,
    normalize_problem,
)


def _pair(coords):
    return coords.latitude, coords.longitude


def test_explicit_coordinates_win_over_location():
    raw = {"latitude": 12.5, "longitude": 77.1, "location": "POINT(1 2)"}
    assert _pair(normalize_location(raw)) == (12.5, 77.1)
    raw = {"latitude": 0.0, "longitude": 0.0, "location": {"coordinates": [9, 9]}}
    assert _pair(normalize_location(raw)) == (0.0, 0.0)


def test_geojson_location_swaps_axis_order():
    raw = {"location": {"type": "Point", "coordinates": [77.6, 12.9]}}
    assert _pair(normalize_location(raw)) == (12.9, 77.6)


def test_wkt_point():
    coords = normalize_location({"location": "POINT(10 20)"})
    assert coords.longitude == 10
    assert coords.latitude == 20


@pytest.mark.parametrize(
    "location",
    ["SRID=4326;POINT(10 20)", "point (10 20)", "  POINT(  10   20 )  "],
)
def test_wkt_point_variants(location):
    assert _pair(normalize_location({"location": location})) == (20.0, 10.0)


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"location": None},
        {"location": "POINT(abc 20)"},
        {"location": "POINT(10)"},
        {"location": "LINESTRING(1 2, 3 4)"},
        {"location": {"coordinates": [1]}},
        {"location": {"type": "Point"}},
        {"location": {"coordinates": ["x", "y"]}},
        {"location": {"coordinates": [float("nan"), 1]}},
        {"location": "POINT(inf 3)"},
        {"location": 42},
        {"latitude": True, "longitude": False},
    ],
)
def test_malformed_location_gives_null_pair(raw):
    assert _pair(normalize_location(raw)) == (None, None)


def test_non_mapping_input_gives_null_pair():
    assert _pair(normalize_location(None)) == (None, None)
    assert _pair(normalize_location("POINT(1 2)")) == (None, None)


def test_half_explicit_pair_falls_back_to_location():
    raw = {"latitude": 5, "longitude": None, "location": "POINT(10 20)"}
    assert _pair(normalize_location(raw)) == (20.0, 10.0)
    assert _pair(normalize_location({"latitude": 5})) == (None, None)


def test_numeric_strings_are_coerced():
    assert _pair(normalize_location({"latitude": "12.5", "longitude": "77"})) == (12.5, 77.0)
    raw = {"location": {"coordinates": ["77.6", "12.9"]}}
    assert _pair(normalize_location(raw)) == (12.9, 77.6)


def test_classify_location():
    assert classify_location({"coordinates": [1, 2]}) == GeoJsonPoint(longitude=1, latitude=2)
    assert classify_location("POINT(1 2)") == WktPoint(longitude="1", latitude="2")
    assert classify_location(["1", "2"]) is None


def test_normalize_is_deterministic():
    raw = {"location": {"coordinates": [3.5, 4.5]}}
    assert normalize_location(raw) == normalize_location(raw)


def test_normalize_problem_defaults_and_drops_location():
    problem = normalize_problem({"id": 7, "location": "POINT(10 20)", "votes_count": "4"})
    assert problem.id == "7"
    assert problem.title == "Untitled problem"
    assert problem.category == "other"
    assert problem.status == "reported"
    assert problem.votes_count == 4
    assert problem.comments_count == 0
    assert (problem.latitude, problem.longitude) == (20.0, 10.0)
    assert "location" not in problem.model_dump()


def test_normalize_problem_generates_id():
    problem = normalize_problem({"title": "Pothole", "pincode": 560001})
    assert problem.id.startswith("problem-")
    assert problem.title == "Pothole"
    assert problem.pincode == "560001"


def test_normalize_problem_coerces_text_fields():
    problem = normalize_problem(
        {"id": "a", "title": 123, "description": 4.5, "category": 0, "status": True}
    )
    assert problem.title == "123"
    assert problem.description == "4.5"
    assert problem.category == "0"
    assert problem.status == "True"
