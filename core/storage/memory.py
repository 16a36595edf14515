"""
In-memory storage backend.

Simulates the MongoDB gateway without a server. Documents live in
per-collection lists and updates follow MongoDB's $set / $unset / upsert
semantics closely enough for the record layer to behave identically.

Key features:
- Query documents with equality and the common comparison operators
- Upsert seeded from the equality fields of the filter
- Call recording and failure injection for tests
"""

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Callable, Optional

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


class DuplicateKeyError(GatewayError):
    """A write would violate a unique index."""
    pass


@dataclass
class GatewayCall:
    """One recorded gateway invocation."""
    method: str
    filter: Any
    operation: Optional[UpdateOperation] = None
    upsert: Optional[bool] = None


_MISSING = object()


def _compare(op: str, actual: Any, expected: Any) -> bool:
    if op == "$ne":
        return actual is _MISSING or actual != expected
    if op == "$in":
        return actual is not _MISSING and actual in expected
    if op == "$nin":
        return actual is _MISSING or actual not in expected
    if op == "$exists":
        return (actual is not _MISSING) == bool(expected)
    if actual is _MISSING or actual is None:
        return False

    comparisons: dict[str, Callable[[Any, Any], bool]] = {
        "$gt": lambda a, b: a > b,
        "$gte": lambda a, b: a >= b,
        "$lt": lambda a, b: a < b,
        "$lte": lambda a, b: a <= b,
    }
    if op not in comparisons:
        raise GatewayError(f"Unsupported query operator: {op}")
    try:
        return comparisons[op](actual, expected)
    except TypeError:
        return False


def matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    """Check a document against a MongoDB-style query document."""
    for key, condition in query.items():
        actual = document.get(key, _MISSING)
        is_operator_doc = (
            isinstance(condition, dict)
            and condition
            and all(k.startswith("$") for k in condition)
        )
        if is_operator_doc:
            if not all(_compare(op, actual, value) for op, value in condition.items()):
                return False
        elif condition is None:
            # MongoDB matches both null and missing fields on {key: None}
            if actual is not _MISSING and actual is not None:
                return False
        elif actual is _MISSING or actual != condition:
            return False
    return True


def _equality_fields(query: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value
        for key, value in query.items()
        if not (isinstance(value, dict) and any(k.startswith("$") for k in value))
    }


class InMemoryCollectionGateway(BaseCollectionGateway):
    """
    In-memory collection with MongoDB update semantics.

    Operations are serialized with an asyncio.Lock so concurrent record
    operations see the same atomicity a single MongoDB document write gives.

    Usage:
        db = InMemoryDatabase()
        users = db.collection("users")
        await users.update_one({"id": "u1"}, UpdateOperation(set={"name": "a"}), upsert=True)
        assert await users.find_one({"id": "u1"}) is not None
    """

    def __init__(self, name: str):
        self.name = name
        self._documents: list[dict[str, Any]] = []
        self._unique_fields: set[str] = set()
        self._lock = asyncio.Lock()
        self._next_object_id = 1
        self._pending_error: Optional[Exception] = None
        self.calls: list[GatewayCall] = []

    async def find(
        self,
        filter: Filter,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        async with self._lock:
            self._record("find", filter)
            query = normalize_filter(filter)
            found = [copy.deepcopy(d) for d in self._documents if matches(d, query)]
        found = found[skip:]
        if limit:
            found = found[:limit]
        return found

    async def find_one(self, filter: Filter) -> Optional[dict[str, Any]]:
        async with self._lock:
            self._record("find_one", filter)
            document = self._first(normalize_filter(filter))
            return copy.deepcopy(document) if document is not None else None

    async def update_one(
        self,
        filter: Filter,
        operation: UpdateOperation,
        *,
        upsert: bool = False,
    ) -> UpdateAcknowledgment:
        async with self._lock:
            self._record("update_one", filter, operation=operation, upsert=upsert)
            if operation.is_empty:
                raise GatewayError(
                    f"Refusing to apply an empty update to collection {self.name}"
                )

            query = normalize_filter(filter)
            document = self._first(query)

            if document is None:
                if not upsert:
                    return UpdateAcknowledgment()
                document = _equality_fields(query)
                document["_id"] = self._new_object_id()
                self._apply(document, operation)
                for key, value in (operation.set_on_insert or {}).items():
                    document[key] = copy.deepcopy(value)
                self._check_unique(document)
                self._documents.append(document)
                return UpdateAcknowledgment(upserted_id=document["_id"])

            updated = copy.deepcopy(document)
            self._apply(updated, operation)
            self._check_unique(updated, exclude=document)
            modified = updated != document
            document.clear()
            document.update(updated)
            return UpdateAcknowledgment(
                matched_count=1,
                modified_count=1 if modified else 0,
            )

    async def remove_one(self, filter: Filter) -> RemoveAcknowledgment:
        async with self._lock:
            self._record("remove_one", filter)
            document = self._first(normalize_filter(filter))
            if document is None:
                return RemoveAcknowledgment()
            self._documents.remove(document)
            return RemoveAcknowledgment(deleted_count=1)

    def _first(self, query: dict[str, Any]) -> Optional[dict[str, Any]]:
        for document in self._documents:
            if matches(document, query):
                return document
        return None

    @staticmethod
    def _apply(document: dict[str, Any], operation: UpdateOperation) -> None:
        for key, value in (operation.set or {}).items():
            document[key] = copy.deepcopy(value)
        for key in operation.unset or {}:
            document.pop(key, None)

    def _check_unique(
        self,
        candidate: dict[str, Any],
        exclude: Optional[dict[str, Any]] = None,
    ) -> None:
        for field_name in self._unique_fields:
            if field_name not in candidate:
                continue
            for document in self._documents:
                if document is exclude:
                    continue
                if document.get(field_name, _MISSING) == candidate[field_name]:
                    raise DuplicateKeyError(
                        f"Duplicate key {field_name}={candidate[field_name]!r} "
                        f"in collection {self.name}"
                    )

    def _new_object_id(self) -> str:
        object_id = f"{self._next_object_id:024x}"
        self._next_object_id += 1
        return object_id

    def _record(self, method: str, filter: Any, **details: Any) -> None:
        self.calls.append(GatewayCall(method=method, filter=copy.deepcopy(filter), **details))
        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            raise error

    # =========================================
    # Testing utilities
    # =========================================

    def add_unique_field(self, field_name: str) -> None:
        self._unique_fields.add(field_name)

    async def insert_many(self, documents: list[dict[str, Any]]) -> None:
        """Seed documents directly, bypassing call recording."""
        async with self._lock:
            for document in documents:
                stored = copy.deepcopy(document)
                stored.setdefault("_id", self._new_object_id())
                self._check_unique(stored)
                self._documents.append(stored)

    def documents(self) -> list[dict[str, Any]]:
        """Snapshot of every stored document."""
        return copy.deepcopy(self._documents)

    def calls_to(self, method: str) -> list[GatewayCall]:
        return [call for call in self.calls if call.method == method]

    def fail_next(self, error: Exception) -> None:
        """Make the next gateway call raise the given error."""
        self._pending_error = error


class InMemoryDatabase(BaseDatabase):
    """
    In-memory database handle.

    Returns the same gateway instance for a collection name for the
    lifetime of the database, so tests can inspect what models wrote.
    """

    def __init__(self, database_name: str = "MAIN"):
        self._database_name = database_name
        self._collections: dict[str, InMemoryCollectionGateway] = {}

    async def setup(self) -> None:
        logger.info(
            "In-memory database initialized",
            database=self._database_name,
        )

    def collection(self, name: str) -> InMemoryCollectionGateway:
        if name not in self._collections:
            self._collections[name] = InMemoryCollectionGateway(name)
        return self._collections[name]

    async def ensure_unique_index(self, collection: str, field: str) -> None:
        self.collection(collection).add_unique_field(field)

    async def close(self) -> None:
        self._collections.clear()
        logger.info("In-memory database closed")
