"""Risk point collection lifecycle: schema validator and 2dsphere index."""

from typing import Any

import structlog
from pymongo import GEOSPHERE

from riskzones.config import LimitsConfig, get_config

logger = structlog.get_logger()

LOCATION_INDEX_NAME = "location_2dsphere"


def risk_point_schema(limits: LimitsConfig) -> dict[str, Any]:
    """Build the ``$jsonSchema`` validator for risk point documents."""
    return {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["inserted_time", "title", "location", "radius", "risk"],
            "properties": {
                "inserted_time": {"bsonType": ["int", "long"], "minimum": 0},
                "title": {
                    "bsonType": "string",
                    "minLength": 1,
                    "maxLength": limits.title_max_length,
                },
                "location": {
                    "bsonType": "object",
                    "required": ["type", "coordinates"],
                    "properties": {
                        "type": {"enum": ["Point"]},
                        "coordinates": {
                            "bsonType": "array",
                            "minItems": 2,
                            "maxItems": 2,
                            "items": [
                                {"bsonType": "double", "minimum": -180, "maximum": 180},
                                {"bsonType": "double", "minimum": -90, "maximum": 90},
                            ],
                        },
                    },
                },
                "radius": {
                    "bsonType": ["int", "long"],
                    "minimum": limits.radius_min,
                    "maximum": limits.radius_max,
                },
                "risk": {
                    "bsonType": ["int", "long"],
                    "minimum": limits.risk_min,
                    "maximum": limits.risk_max,
                },
            },
        }
    }


async def initialize(database: Any, limits: LimitsConfig | None = None) -> Any:
    """Ensure the risk point collection and its 2dsphere index exist.

    Safe to call on every startup: the collection is only created when it is
    missing and index creation is a no-op when the index already exists.

    Args:
        database: A ``riskzones.db.client.Database`` handle.
        limits: Bounds used for the schema validator.

    Returns:
        The risk point collection.
    """
    limits = limits or get_config().limits
    name = database.collection_name

    existing = await database.db.list_collection_names(filter={"name": name})
    if name not in existing:
        await database.db.create_collection(name, validator=risk_point_schema(limits))
        logger.info("Created risk point collection", collection=name)
    else:
        logger.debug("Risk point collection already exists", collection=name)

    collection = database.collection
    await collection.create_index([("location", GEOSPHERE)], name=LOCATION_INDEX_NAME)

    return collection
