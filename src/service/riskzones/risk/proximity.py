"""Nearby risk point search around a gravity point."""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog

from riskzones.config import LimitsConfig, get_config
from riskzones.errors import WrongDataFormatError
from riskzones.geo_utils import delta_to_meters, geojson_point, haversine_distance_km, point_coordinates
from riskzones.strings import Strings, get_strings
from riskzones.timeutils import relative_time
from riskzones.validation import validate_nearby_query

logger = structlog.get_logger()

# $geoNear reports meters for GeoJSON points; results are reported in km.
KILOMETERS_PER_METER = 0.001


@dataclass
class NearbyPoint:
    """A risk point found near the gravity point."""

    time: str
    title: str
    locpoint: list[float]
    radius: int
    risk: int
    distance: str | None = None  # km from the reference location, when one was given

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_distance(distance_km: float, max_distance_km: float) -> str:
    """Render a distance in km for display.

    Distances up to ``max_distance_km`` keep two decimals, farther ones are
    whole kilometers. An exact zero is not rounded. Ties round away from
    zero.
    """
    if distance_km == 0:
        return format(distance_km, "g")
    step = Decimal("0.01") if distance_km <= max_distance_km else Decimal("1")
    return str(Decimal(distance_km).quantize(step, rounding=ROUND_HALF_UP))


def nearby_pipeline(grvpoint: list[float], max_distance_m: float, limit: int) -> list[dict[str, Any]]:
    """Aggregation pipeline for the nearest risk points around a coordinate."""
    return [
        {
            "$geoNear": {
                "near": geojson_point(grvpoint[0], grvpoint[1]),
                "distanceField": "distance",
                "distanceMultiplier": KILOMETERS_PER_METER,
                "maxDistance": max_distance_m,
                "spherical": True,
            }
        },
        {"$limit": limit},
    ]


def to_nearby_point(
    document: dict[str, Any],
    locpoint: list[float] | None,
    max_distance_km: float,
    now: int | None = None,
) -> NearbyPoint:
    """Shape a raw $geoNear hit into a NearbyPoint."""
    coordinates = point_coordinates(document["location"])

    distance = None
    if locpoint is not None:
        distance = format_distance(haversine_distance_km(locpoint, coordinates), max_distance_km)

    return NearbyPoint(
        time=relative_time(document["inserted_time"], now),
        title=document["title"],
        locpoint=coordinates,
        radius=document["radius"],
        risk=document["risk"],
        distance=distance,
    )


async def get_near_points(
    collection: Any,
    args: dict[str, Any],
    limits: LimitsConfig | None = None,
    strings: Strings | None = None,
    now: int | None = None,
) -> list[NearbyPoint]:
    """Find risk points near a gravity point.

    Args:
        collection: Risk point collection.
        args: ``grvpoint`` ([lon, lat], required), ``delta`` (search radius in
            degrees, required) and ``locpoint`` ([lon, lat], optional
            reference used for the reported distance).
        limits: Configured bounds.
        strings: Message bundle for validation errors.
        now: Reference Unix timestamp for relative times.

    Returns:
        Points ordered nearest to the gravity point first.

    Raises:
        WrongDataFormatError: If the arguments are invalid.
    """
    limits = limits or get_config().limits

    result = validate_nearby_query(args, limits)
    if not result:
        raise WrongDataFormatError(strings or get_strings(get_config().locale), result.errors)
    query = result.value

    max_distance_m = delta_to_meters(query["delta"])
    cursor = await collection.aggregate(
        nearby_pipeline(query["grvpoint"], max_distance_m, limits.nearby_max_points)
    )
    documents = await cursor.to_list(None)

    points = [
        to_nearby_point(document, query["locpoint"], limits.max_distance_km, now)
        for document in documents
    ]

    logger.info(
        "Nearby search complete",
        num_points=len(points),
        max_distance_m=round(max_distance_m, 1),
    )

    return points
