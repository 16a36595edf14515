"""
Per-model static metadata and runtime bindings.

A concrete model declares a ModelConfig once, at class definition time:

    class User(RecordModel):
        config = ModelConfig(
            name="User",
            collection="users",
            endpoint="/users",
            schema=UserSchema,
            handlers={"pre-create": stamp_created_at},
        )

The ModelRuntime holds the capabilities the model needs to do I/O and is
bound separately, usually once at application startup.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from core.ids import IdGenerator, UUIDGenerator
from core.storage import BaseDatabase
from records.errors import ConfigurationError
from records.hooks import HandlerSpec, normalize_handlers
from records.validation import RecordSchema
from tools.service_api import ServiceClient


@dataclass(frozen=True)
class ModelConfig:
    """
    Static description of a model.

    Attributes:
        name: Model name, unique within a registry
        collection: Collection the records live in
        endpoint: Endpoint path transport adapters mount the model under
        schema: Pydantic model validating record payloads
        id_field: Field holding the record identifier
        handlers: Lifecycle key -> hook handler (callable or service descriptor)
        auth: Authentication strategy transport adapters should apply
    """
    name: str
    collection: str
    endpoint: str
    schema: type[BaseModel] = RecordSchema
    id_field: str = "id"
    handlers: Mapping[str, HandlerSpec] = field(default_factory=dict)
    auth: str = "token"

    def __post_init__(self) -> None:
        for attr in ("name", "collection", "endpoint", "id_field"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"{attr} must be a non-empty string for model {self.name!r}"
                )
        if not (isinstance(self.schema, type) and issubclass(self.schema, BaseModel)):
            raise ConfigurationError(
                f"schema must be a pydantic model class for model {self.name}"
            )
        object.__setattr__(self, "handlers", normalize_handlers(self.handlers))


@dataclass(frozen=True)
class OperationValidation:
    """
    What a transport adapter should validate for one operation.

    Each slot is a pydantic model class or None.
    """
    payload: Optional[type[BaseModel]] = None
    params: Optional[type[BaseModel]] = None
    query: Optional[type[BaseModel]] = None

    @property
    def is_empty(self) -> bool:
        return self.payload is None and self.params is None and self.query is None


@dataclass
class ModelRuntime:
    """
    Capabilities a model needs for I/O.

    Attributes:
        database: Hands out collection gateways by name
        id_generator: Source of identifiers for records saved without one
        services: Service client for delegated hooks (optional)
    """
    database: BaseDatabase
    id_generator: IdGenerator = field(default_factory=UUIDGenerator)
    services: Optional[ServiceClient] = None

    def describe(self) -> dict[str, Any]:
        return {
            "database": type(self.database).__name__,
            "id_generator": type(self.id_generator).__name__,
            "services": type(self.services).__name__ if self.services else None,
        }
