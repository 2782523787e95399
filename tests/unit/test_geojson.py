"""Tests for GeoJSON validation and geodesic area."""

import math

import pytest

from geoflow.jobs.geojson import GeoJSONValidationError, geodesic_area, validate_geometry


WGS84_RADIUS = 6378137.0


def _rectangle_area(lon1, lat1, lon2, lat2):
    """Exact area between two meridians and two parallels on the sphere."""
    return (
        WGS84_RADIUS**2
        * abs(math.radians(lon2 - lon1))
        * abs(math.sin(math.radians(lat2)) - math.sin(math.radians(lat1)))
    )


SQUARE = [[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]


def test_polygon_area_matches_spherical_rectangle():
    area = geodesic_area({"type": "Polygon", "coordinates": [SQUARE]})
    assert area == pytest.approx(_rectangle_area(0, 0, 1, 1), rel=1e-9)


def test_polygon_area_ignores_winding_order():
    reversed_ring = list(reversed(SQUARE))
    assert geodesic_area({"type": "Polygon", "coordinates": [reversed_ring]}) == pytest.approx(
        geodesic_area({"type": "Polygon", "coordinates": [SQUARE]})
    )


def test_polygon_holes_are_subtracted():
    hole = [[0.25, 0.25], [0.25, 0.5], [0.5, 0.5], [0.5, 0.25], [0.25, 0.25]]
    area = geodesic_area({"type": "Polygon", "coordinates": [SQUARE, hole]})
    expected = _rectangle_area(0, 0, 1, 1) - _rectangle_area(0.25, 0.25, 0.5, 0.5)
    assert area == pytest.approx(expected, rel=1e-9)


def test_multipolygon_and_collection_sum_members():
    other = [[10, 10], [10, 11], [11, 11], [11, 10], [10, 10]]
    multi = {"type": "MultiPolygon", "coordinates": [[SQUARE], [other]]}
    expected = _rectangle_area(0, 0, 1, 1) + _rectangle_area(10, 10, 11, 11)
    assert geodesic_area(multi) == pytest.approx(expected, rel=1e-9)

    collection = {
        "type": "GeometryCollection",
        "geometries": [multi, {"type": "Point", "coordinates": [1, 2]}],
    }
    validate_geometry(collection)
    assert geodesic_area(collection) == pytest.approx(expected, rel=1e-9)


def test_non_areal_geometries_have_zero_area():
    assert geodesic_area({"type": "Point", "coordinates": [1, 2]}) == 0
    assert geodesic_area({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}) == 0


@pytest.mark.parametrize(
    "geometry",
    [
        {"type": "Point", "coordinates": [1, 2]},
        {"type": "MultiPoint", "coordinates": [[1, 2], [3, 4]]},
        {"type": "LineString", "coordinates": [[0, 0], [1.5, 1]]},
        {"type": "MultiLineString", "coordinates": [[[0, 0], [1, 1]]]},
        {"type": "Polygon", "coordinates": [SQUARE]},
        {"type": "MultiPolygon", "coordinates": [[SQUARE]]},
    ],
)
def test_valid_geometries(geometry):
    validate_geometry(geometry)


@pytest.mark.parametrize(
    "geometry, message",
    [
        (None, "null or undefined"),
        ({"type": "Feature"}, "Unsupported GeoJSON type: Feature"),
        ({"type": "Point", "coordinates": [1]}, "Point coordinates"),
        ({"type": "Point", "coordinates": [1, "2"]}, "Point coordinates"),
        ({"type": "Point", "coordinates": [True, 2]}, "Point coordinates"),
        ({"type": "LineString", "coordinates": [[0, 0]]}, "LineString coordinates"),
        ({"type": "Polygon", "coordinates": []}, "Polygon coordinates"),
        ({"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [0, 0]]]}, "Polygon coordinates"),
        (
            {"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0]]]},
            "Polygon coordinates",
        ),
        ({"type": "GeometryCollection", "geometries": []}, "GeometryCollection"),
        ({"type": "Polygon"}, "coordinates member"),
    ],
)
def test_invalid_geometries(geometry, message):
    with pytest.raises(GeoJSONValidationError, match=message):
        validate_geometry(geometry)


def test_area_is_a_float_for_every_geometry():
    assert isinstance(geodesic_area({"type": "Point", "coordinates": [1, 2]}), float)
    assert isinstance(geodesic_area({"type": "Polygon", "coordinates": [SQUARE]}), float)
