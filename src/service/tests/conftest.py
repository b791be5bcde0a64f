"""Shared test fixtures for riskzones tests."""

import copy
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId

from riskzones.config import LimitsConfig
from riskzones.geo_utils import haversine_distance_km
from riskzones.risk.store import RiskPointStore
from riskzones.strings import get_strings


class FakeCursor:
    """Minimal stand-in for pymongo's async cursors."""

    def __init__(self, documents: list[dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    """In-memory async collection supporting the calls the store makes.

    ``aggregate`` understands a leading ``$geoNear`` stage over GeoJSON
    points followed by ``$limit`` stages.
    """

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.pipelines: list[list[dict[str, Any]]] = []
        self.sessions: list[Any] = []

    async def insert_many(self, documents, ordered=True, session=None):
        self.sessions.append(session)
        inserted_ids = []
        for document in documents:
            stored = copy.deepcopy(document)
            stored.setdefault("_id", ObjectId())
            self.documents.append(stored)
            inserted_ids.append(stored["_id"])
        return SimpleNamespace(inserted_ids=inserted_ids)

    async def delete_many(self, filter, session=None):
        self.sessions.append(session)
        deleted = len(self.documents)
        self.documents.clear()
        return SimpleNamespace(deleted_count=deleted)

    async def count_documents(self, filter, session=None):
        return len(self.documents)

    def find(self, filter=None, sort=None, limit=0):
        documents = copy.deepcopy(self.documents)
        if limit:
            documents = documents[:limit]
        return FakeCursor(documents)

    async def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        geo_near = pipeline[0]["$geoNear"]
        near = geo_near["near"]["coordinates"]
        multiplier = geo_near.get("distanceMultiplier", 1)
        max_distance = geo_near.get("maxDistance")

        hits = []
        for document in self.documents:
            distance_m = haversine_distance_km(near, document["location"]["coordinates"]) * 1000
            if max_distance is not None and distance_m > max_distance:
                continue
            hit = copy.deepcopy(document)
            hit[geo_near["distanceField"]] = distance_m * multiplier
            hits.append(hit)
        hits.sort(key=lambda h: h[geo_near["distanceField"]])

        for stage in pipeline[1:]:
            if "$limit" in stage:
                hits = hits[:stage["$limit"]]

        return FakeCursor(hits)


@pytest.fixture
def limits():
    """Default bounds, independent of the environment."""
    return LimitsConfig()


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def store(collection, limits):
    return RiskPointStore(collection, limits=limits, strings=get_strings("en"))


@pytest.fixture
def sample_points():
    """Risk points around the USP campus in São Carlos, Brazil."""
    return [
        {"title": "USP University", "locpoint": [-47.898274, -22.002302], "radius": 5000, "risk": 10},
        {"title": "Pereire Lopes", "locpoint": [-47.900327, -22.002320], "radius": 1000, "risk": 5},
        {"title": "Parque do Kartódromo", "locpoint": [-47.898825, -21.998878], "radius": 2000, "risk": 10},
        {"title": "Cemitério Nossa Senhora do Carmo", "locpoint": [-47.890929, -21.998400], "radius": 1000, "risk": 10},
        {"title": "Praça Geraldo Eugenio T. Pizza", "locpoint": [-47.894427, -21.999275], "radius": 1000, "risk": 10},
    ]
