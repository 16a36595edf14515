"""
Storage factory for creating database instances.

This module provides factory functions to create the appropriate
storage implementation based on configuration.
"""

from enum import Enum
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.storage.base import BaseDatabase


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MONGODB = "mongodb"
    MEMORY = "memory"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.

    Args:
        settings: Application settings

    Returns:
        The configured storage backend
    """
    backend_str = settings.storage_backend.lower()

    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_database(settings: "Settings") -> BaseDatabase:
    """
    Create a database instance based on settings.

    Args:
        settings: Application settings

    Returns:
        Configured database instance (not yet initialized)
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.MONGODB:
        from core.storage.mongodb import MongoDBDatabase

        logger.info(
            "Creating MongoDB database",
            database=settings.mongodb_database,
        )
        return MongoDBDatabase(
            connection_string=settings.mongodb_connection_string,
            database_name=settings.mongodb_database,
        )

    elif backend == StorageBackend.MEMORY:
        from core.storage.memory import InMemoryDatabase

        logger.info("Creating in-memory database")
        return InMemoryDatabase(database_name=settings.mongodb_database)

    else:
        raise ValueError(f"Unsupported backend: {backend}")
