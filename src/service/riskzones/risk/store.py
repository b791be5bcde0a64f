"""Persistent store for high-risk points."""

from typing import Any

import structlog

from riskzones.config import LimitsConfig, get_config
from riskzones.errors import WrongDataFormatError
from riskzones.geo_utils import geojson_point, point_coordinates
from riskzones.risk.proximity import NearbyPoint, get_near_points
from riskzones.strings import Strings, get_strings
from riskzones.timeutils import unix_now
from riskzones.validation import validate_batch, validate_coordinate

logger = structlog.get_logger()


def to_document(point: dict[str, Any], inserted_time: int) -> dict[str, Any]:
    """Convert a normalized batch record into a risk point document."""
    lon, lat = point["locpoint"]
    return {
        "inserted_time": inserted_time,
        "title": point["title"],
        "location": geojson_point(lon, lat),
        "radius": point["radius"],
        "risk": point["risk"],
    }


def to_record(document: dict[str, Any]) -> dict[str, Any]:
    """Convert a stored document back into the batch record shape."""
    return {
        "title": document["title"],
        "locpoint": point_coordinates(document["location"]),
        "radius": document["radius"],
        "risk": document["risk"],
        "inserted_time": document["inserted_time"],
    }


class RiskPointStore:
    """Owner of the risk point collection.

    Every write to the collection goes through this class. Pass a client
    session to ``add_batch(preserve=False)`` inside a transaction to make the
    truncate and the insert commit together.
    """

    def __init__(
        self,
        collection: Any,
        limits: LimitsConfig | None = None,
        strings: Strings | None = None,
    ):
        """Initialize the store.

        Args:
            collection: Risk point collection (async pymongo collection).
            limits: Bounds for validation and queries.
            strings: Message bundle for validation errors.
        """
        config = get_config()
        self.collection = collection
        self.limits = limits or config.limits
        self.strings = strings or get_strings(config.locale)

    @classmethod
    def from_database(cls, database: Any, **kwargs: Any) -> "RiskPointStore":
        """Build a store on the collection of a ``Database`` handle."""
        return cls(database.collection, **kwargs)

    async def add_batch(
        self,
        records: list[dict[str, Any]],
        preserve: bool = True,
        session: Any = None,
    ) -> bool:
        """Insert a batch of risk points.

        Args:
            records: List of ``{title, locpoint: [lon, lat], radius, risk}``.
            preserve: Keep existing points; when False the collection is
                truncated first, in the same session.
            session: Optional client session.

        Returns:
            True once every point is inserted.

        Raises:
            WrongDataFormatError: If any record or the batch size is invalid.
                Nothing is written in that case.
        """
        result = validate_batch(records, self.limits)
        if not result:
            logger.warning("Rejected risk point batch", errors=result.errors)
            raise WrongDataFormatError(self.strings, result.errors)

        if not preserve:
            await self.truncate(session=session)

        inserted_time = unix_now()
        documents = [to_document(point, inserted_time) for point in result.value]
        await self.collection.insert_many(documents, ordered=True, session=session)

        logger.info("Inserted risk points", count=len(documents), preserve=preserve)
        return True

    async def truncate(self, session: Any = None) -> bool:
        """Delete every risk point.

        Args:
            session: Optional client session.

        Returns:
            True once the collection is empty.
        """
        result = await self.collection.delete_many({}, session=session)
        logger.info("Truncated risk points", deleted=result.deleted_count)
        return True

    async def get_near_point(self, locpoint: list[float]) -> dict[str, Any] | None:
        """Find the risk point whose zone contains a location.

        Looks up the nearest point within ``radius_max`` meters and accepts it
        only when the location lies within that point's own radius.

        Args:
            locpoint: Location as [lon, lat].

        Returns:
            The matching document with its ``distance`` in meters, or None.

        Raises:
            WrongDataFormatError: If ``locpoint`` is not a valid coordinate.
        """
        result = validate_coordinate(locpoint)
        if not result:
            raise WrongDataFormatError(self.strings, result.errors)
        lon, lat = result.value

        cursor = await self.collection.aggregate([
            {
                "$geoNear": {
                    "near": geojson_point(lon, lat),
                    "distanceField": "distance",
                    "maxDistance": self.limits.radius_max,
                    "spherical": True,
                }
            },
            {"$limit": 1},
        ])
        documents = await cursor.to_list(None)

        if len(documents) != 1:
            return None

        document = documents[0]
        if document["distance"] <= document["radius"]:
            logger.debug("Location inside risk point", title=document["title"], distance_m=document["distance"])
            return document
        return None

    async def get_near_points(self, args: dict[str, Any], now: int | None = None) -> list[NearbyPoint]:
        """Find risk points near a gravity point. See ``proximity.get_near_points``."""
        return await get_near_points(self.collection, args, self.limits, self.strings, now=now)

    async def count(self, session: Any = None) -> int:
        """Number of stored risk points."""
        return await self.collection.count_documents({}, session=session)

    async def list_points(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Stored risk points as batch records, in insertion order."""
        cursor = self.collection.find({}, sort=[("_id", 1)], limit=limit or 0)
        return [to_record(document) for document in await cursor.to_list(None)]
