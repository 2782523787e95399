"""GeoJSON geometry validation and geodesic area.

Validation follows RFC 7946 section 3.1 for geometry objects. Area comes from
the ``area`` package, which implements the spherical-excess method used by
mapbox and turf on a sphere with the WGS84 equatorial radius.
"""

from __future__ import annotations

from typing import Any, Sequence

from area import area as geojson_area

GEOMETRY_TYPES = (
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryCollection",
)


class GeoJSONValidationError(ValueError):
    """The geometry does not satisfy RFC 7946."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 2
        and all(_is_number(coord) for coord in value)
    )


def _validate_point(coordinates: Any) -> None:
    if not _is_position(coordinates):
        raise GeoJSONValidationError(
            "Point coordinates must be an array of two numbers [x, y]"
        )


def _validate_line_string(coordinates: Any) -> None:
    if (
        not isinstance(coordinates, list)
        or len(coordinates) < 2
        or not all(_is_position(p) for p in coordinates)
    ):
        raise GeoJSONValidationError(
            "LineString coordinates must be an array of at least two positions [x, y]"
        )


def _is_closed_ring(ring: Sequence[Sequence[float]]) -> bool:
    return list(ring[0]) == list(ring[-1])


def _validate_polygon(coordinates: Any) -> None:
    if (
        not isinstance(coordinates, list)
        or not coordinates
        or any(
            not isinstance(ring, list)
            or len(ring) < 4
            or not all(_is_position(p) for p in ring)
            or not _is_closed_ring(ring)
            for ring in coordinates
        )
    ):
        raise GeoJSONValidationError(
            "Polygon coordinates must be an array of linear rings, where each ring "
            "is an array of at least four positions [x, y] and the first and last "
            "positions must be identical"
        )


def _validate_each(coordinates: Any, validator, geometry_type: str) -> None:
    if not isinstance(coordinates, list):
        raise GeoJSONValidationError(f"{geometry_type} coordinates must be an array")
    for item in coordinates:
        validator(item)


def validate_geometry(geometry: Any) -> None:
    """Raise :class:`GeoJSONValidationError` unless ``geometry`` is valid."""

    if not geometry:
        raise GeoJSONValidationError("GeoJSON is null or undefined")
    if not isinstance(geometry, dict):
        raise GeoJSONValidationError("GeoJSON geometry must be an object")

    geometry_type = geometry.get("type")
    if geometry_type not in GEOMETRY_TYPES:
        raise GeoJSONValidationError(f"Unsupported GeoJSON type: {geometry_type}")

    if geometry_type == "GeometryCollection":
        geometries = geometry.get("geometries")
        if not isinstance(geometries, list) or not geometries:
            raise GeoJSONValidationError(
                'GeometryCollection must have a "geometries" property with at least one geometry'
            )
        for member in geometries:
            validate_geometry(member)
        return

    if "coordinates" not in geometry:
        raise GeoJSONValidationError(f"{geometry_type} must have a coordinates member")
    coordinates = geometry["coordinates"]

    if geometry_type == "Point":
        _validate_point(coordinates)
    elif geometry_type == "LineString":
        _validate_line_string(coordinates)
    elif geometry_type == "Polygon":
        _validate_polygon(coordinates)
    elif geometry_type == "MultiPoint":
        _validate_each(coordinates, _validate_point, geometry_type)
    elif geometry_type == "MultiLineString":
        _validate_each(coordinates, _validate_line_string, geometry_type)
    elif geometry_type == "MultiPolygon":
        _validate_each(coordinates, _validate_polygon, geometry_type)


def geodesic_area(geometry: dict) -> float:
    """Return the area of a validated geometry in square meters.

    Polygon holes are subtracted and multi-part geometries are summed.
    Points and lines have no area.
    """

    return float(geojson_area(geometry))
