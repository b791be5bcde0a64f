"""MongoDB client for the risk zones service."""

from typing import Any

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from riskzones.config import get_config

logger = structlog.get_logger()


class Database:
    """Handle on the database that backs the risk point collection."""

    def __init__(
        self,
        uri: str | None = None,
        database: str | None = None,
        collection: str | None = None,
        timeout_ms: int | None = None,
    ):
        """Initialize the database handle.

        Args:
            uri: MongoDB connection string.
            database: Database name.
            collection: Risk point collection name.
            timeout_ms: Server selection timeout in milliseconds.
        """
        config = get_config()
        self.uri = uri or config.mongo.uri
        self.database_name = database or config.mongo.database
        self.collection_name = collection or config.mongo.collection
        self.timeout_ms = timeout_ms or config.mongo.timeout_ms

        self._client: AsyncMongoClient | None = None

    @property
    def client(self) -> AsyncMongoClient:
        """Get or create the MongoDB client."""
        if self._client is None:
            self._client = AsyncMongoClient(
                self.uri,
                serverSelectionTimeoutMS=self.timeout_ms,
                tz_aware=True,
            )
            logger.info("Connected to MongoDB", database=self.database_name)
        return self._client

    @property
    def db(self) -> AsyncDatabase:
        return self.client[self.database_name]

    @property
    def collection(self) -> AsyncCollection:
        """The risk point collection."""
        return self.db[self.collection_name]

    def start_session(self) -> AsyncClientSession:
        """Start a client session for transactional truncate-and-insert."""
        return self.client.start_session()

    async def ping(self) -> dict[str, Any]:
        """Check server availability."""
        return await self.client.admin.command("ping")

    async def close(self) -> None:
        """Close the MongoDB client."""
        if self._client:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
