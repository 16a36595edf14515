"""
Abstract base classes for persistence gateways.

This module defines the contracts that every storage implementation must
follow. The record layer only ever talks to a collection through
BaseCollectionGateway, so backends can be swapped without touching models.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


# Value stored under each key of an unset clause
UNSET = ""

# A gateway filter is either a query document or a filter expression string
Filter = Union[Mapping[str, Any], str]


@dataclass
class UpdateOperation:
    """
    A partial update split into assignments and removals.

    Either clause may be None. An empty clause is never sent to a gateway;
    callers check is_empty before issuing the update. set_on_insert is only
    written when the update inserts a new document.
    """
    set: Optional[dict[str, Any]] = None
    unset: Optional[dict[str, str]] = None
    set_on_insert: Optional[dict[str, Any]] = None

    @property
    def is_empty(self) -> bool:
        return not self.set and not self.unset and not self.set_on_insert

    def to_document(self) -> dict[str, Any]:
        """Render as a MongoDB update document ($set / $unset / $setOnInsert)."""
        doc: dict[str, Any] = {}
        if self.set:
            doc["$set"] = dict(self.set)
        if self.unset:
            doc["$unset"] = dict(self.unset)
        if self.set_on_insert:
            doc["$setOnInsert"] = dict(self.set_on_insert)
        return doc


@dataclass
class UpdateAcknowledgment:
    """Result of an update_one call."""
    matched_count: int = 0
    modified_count: int = 0
    upserted_id: Optional[Any] = None

    @property
    def upserted(self) -> bool:
        return self.upserted_id is not None


@dataclass
class RemoveAcknowledgment:
    """Result of a remove_one call."""
    deleted_count: int = 0


class GatewayError(Exception):
    """Base exception for gateway-level failures."""
    pass


class BaseCollectionGateway(ABC):
    """
    Persistence operations against one named collection.

    All operations are coroutines. A single update_one or remove_one is
    assumed atomic at the storage layer; nothing above it adds locking.
    """

    name: str

    @abstractmethod
    async def find(
        self,
        filter: Filter,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Return every document matching the filter.

        Args:
            filter: Query document or filter expression string
            skip: Number of matching documents to skip
            limit: Maximum number of documents to return (None = all)
        """
        pass

    @abstractmethod
    async def find_one(self, filter: Filter) -> Optional[dict[str, Any]]:
        """Return the first document matching the filter, or None."""
        pass

    @abstractmethod
    async def update_one(
        self,
        filter: Filter,
        operation: UpdateOperation,
        *,
        upsert: bool = False,
    ) -> UpdateAcknowledgment:
        """
        Apply an UpdateOperation to the first matching document.

        With upsert=True a missing document is inserted, seeded from the
        equality fields of the filter.

        Raises:
            GatewayError: If the operation is empty
        """
        pass

    @abstractmethod
    async def remove_one(self, filter: Filter) -> RemoveAcknowledgment:
        """Delete the first document matching the filter."""
        pass


class BaseDatabase(ABC):
    """
    A database handle that hands out collection gateways by name.
    """

    @abstractmethod
    async def setup(self) -> None:
        """
        Open connections.

        This should be idempotent - safe to call multiple times.
        """
        pass

    @abstractmethod
    def collection(self, name: str) -> BaseCollectionGateway:
        """Get the gateway for a named collection."""
        pass

    @abstractmethod
    async def ensure_unique_index(self, collection: str, field: str) -> None:
        """
        Enforce uniqueness of a field within a collection.

        This should be idempotent.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (connections, pools)."""
        pass
