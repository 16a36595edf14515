"""
Storage abstraction layer.

Provides the persistence gateways record models read and write through.

Supported backends:
- MongoDB (production, via motor)
- In-memory (tests and local development)
"""

from core.storage.base import (
    UNSET,
    BaseCollectionGateway,
    BaseDatabase,
    Filter,
    GatewayError,
    RemoveAcknowledgment,
    UpdateAcknowledgment,
    UpdateOperation,
)
from core.storage.factory import (
    create_database,
    get_storage_backend,
    StorageBackend,
)
from core.storage.filters import FilterSyntaxError, parse_filter_expression

__all__ = [
    # Abstract interfaces
    "BaseCollectionGateway",
    "BaseDatabase",
    "Filter",
    # Operations and acknowledgments
    "UNSET",
    "UpdateOperation",
    "UpdateAcknowledgment",
    "RemoveAcknowledgment",
    # Errors
    "GatewayError",
    "FilterSyntaxError",
    # Filter grammar
    "parse_filter_expression",
    # Factory functions
    "create_database",
    "get_storage_backend",
    "StorageBackend",
]
