"""Shared geospatial utility functions.

Coordinates are always ``[longitude, latitude]`` pairs, the GeoJSON order
MongoDB stores and indexes.
"""

import math
from collections.abc import Sequence
from typing import Any

from pyproj import Geod
from shapely.geometry import Point, mapping, shape

WGS84_EQUATORIAL_RADIUS_M = 6378137.0
MEAN_EARTH_RADIUS_M = 6371000.0

# Arc length of one degree along the equator.
METERS_PER_DEGREE = math.pi * WGS84_EQUATORIAL_RADIUS_M / 180.0

# Geodesics on a sphere are great circles.
_SPHERE = Geod(a=MEAN_EARTH_RADIUS_M, f=0.0)


def delta_to_meters(delta: float) -> float:
    """Convert a fractional-degree search radius into meters.

    Args:
        delta: Radius in decimal degrees.

    Returns:
        Radius in meters.
    """
    return float(delta) * METERS_PER_DEGREE


def haversine_distance_km(point_a: Sequence[float], point_b: Sequence[float]) -> float:
    """Great-circle distance in kilometers between two [lon, lat] points.

    Args:
        point_a: First coordinate as [longitude, latitude].
        point_b: Second coordinate as [longitude, latitude].

    Returns:
        Distance in kilometers.
    """
    _, _, distance_m = _SPHERE.inv(
        float(point_a[0]), float(point_a[1]),
        float(point_b[0]), float(point_b[1]),
    )
    return distance_m / 1000.0


def geojson_point(lon: float, lat: float) -> dict[str, Any]:
    """Build a GeoJSON Point mapping suitable for a 2dsphere index."""
    geometry = mapping(Point(float(lon), float(lat)))
    return {"type": geometry["type"], "coordinates": list(geometry["coordinates"])}


def point_coordinates(geometry: dict[str, Any]) -> list[float]:
    """Extract [lon, lat] from a GeoJSON Point mapping."""
    point = shape(geometry)
    if point.geom_type != "Point":
        raise ValueError(f"Expected a Point geometry, got {point.geom_type}")
    return [point.x, point.y]
