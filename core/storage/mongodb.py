"""
MongoDB storage backend implementation.

Provides the MongoDB persistence gateway used by record models in
production. Driver errors (pymongo.errors.PyMongoError) are not wrapped;
they propagate unchanged to the caller of the record operation.
"""

from typing import Any, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from core.logging import get_logger
from core.storage.base import (
    BaseCollectionGateway,
    BaseDatabase,
    Filter,
    GatewayError,
    RemoveAcknowledgment,
    UpdateAcknowledgment,
    UpdateOperation,
)
from core.storage.filters import normalize_filter


logger = get_logger(__name__)


class MongoDBCollectionGateway(BaseCollectionGateway):
    """
    Gateway over a single motor collection.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection
        self.name = collection.name

    async def find(
        self,
        filter: Filter,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        cursor = self._collection.find(normalize_filter(filter))
        if skip:
            cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def find_one(self, filter: Filter) -> Optional[dict[str, Any]]:
        return await self._collection.find_one(normalize_filter(filter))

    async def update_one(
        self,
        filter: Filter,
        operation: UpdateOperation,
        *,
        upsert: bool = False,
    ) -> UpdateAcknowledgment:
        if operation.is_empty:
            raise GatewayError(
                f"Refusing to send an empty update to collection {self.name}"
            )

        result = await self._collection.update_one(
            normalize_filter(filter),
            operation.to_document(),
            upsert=upsert,
        )

        logger.debug(
            "MongoDB update applied",
            collection=self.name,
            matched=result.matched_count,
            upserted_id=result.upserted_id,
        )
        return UpdateAcknowledgment(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=result.upserted_id,
        )

    async def remove_one(self, filter: Filter) -> RemoveAcknowledgment:
        result = await self._collection.delete_one(normalize_filter(filter))
        return RemoveAcknowledgment(deleted_count=result.deleted_count)


class MongoDBDatabase(BaseDatabase):
    """
    MongoDB database handle.

    Collections are created lazily by MongoDB on first write, so setup()
    only opens the client.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str = "MAIN",
    ):
        """
        Initialize MongoDB database handle.

        Args:
            connection_string: MongoDB connection URI
            database_name: Database holding the model collections
        """
        self._connection_string = connection_string
        self._database_name = database_name
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    async def setup(self) -> None:
        """Open the motor client."""
        if self._client is not None:
            return

        self._client = AsyncIOMotorClient(self._connection_string)
        self._db = self._client[self._database_name]

        logger.info(
            "MongoDB database initialized",
            database=self._database_name,
        )

    def collection(self, name: str) -> MongoDBCollectionGateway:
        if self._db is None:
            raise RuntimeError(
                "Database not initialized. Call setup() first."
            )
        return MongoDBCollectionGateway(self._db[name])

    async def ensure_unique_index(self, collection: str, field: str) -> None:
        """Create a unique index on a model's id field."""
        if self._db is None:
            raise RuntimeError(
                "Database not initialized. Call setup() first."
            )
        await self._db[collection].create_index(field, unique=True)
        logger.info(
            "Unique index ensured",
            collection=collection,
            field=field,
        )

    async def close(self) -> None:
        """Close MongoDB connection."""
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None
        logger.info("MongoDB database closed")
