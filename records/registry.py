"""
Model registry.

Transport adapters look models up here by name or endpoint. Registration
happens once per model, at application startup.
"""

from typing import Iterator

from core.logging import get_logger
from records.base import RecordModel
from records.errors import ConfigurationError


logger = get_logger(__name__)


class ModelRegistry:
    """
    Named collection of concrete models.

    Usage:
        registry = ModelRegistry()

        @registry.register
        class User(RecordModel):
            config = ModelConfig(...)

        registry.by_endpoint("/users")  # -> User
    """

    def __init__(self) -> None:
        self._models: dict[str, type[RecordModel]] = {}

    def register(self, model: type[RecordModel]) -> type[RecordModel]:
        """
        Add a model. Returns the model so this works as a class decorator.

        Raises:
            ConfigurationError: If the model is unconfigured or its name or
                endpoint is already taken
        """
        name = model.model_name()
        endpoint = model.endpoint_name()

        if name in self._models:
            raise ConfigurationError(f"Model {name} is already registered")
        for existing in self._models.values():
            if existing.endpoint_name() == endpoint:
                raise ConfigurationError(
                    f"Endpoint {endpoint} of model {name} is already used by "
                    f"model {existing.model_name()}"
                )

        self._models[name] = model
        logger.debug(
            "Model registered",
            model=name,
            collection=model.collection_name(),
            endpoint=endpoint,
        )
        return model

    def get(self, name: str) -> type[RecordModel]:
        try:
            return self._models[name]
        except KeyError:
            raise KeyError(f"Model {name} is not registered") from None

    def by_endpoint(self, endpoint: str) -> type[RecordModel]:
        for model in self._models.values():
            if model.endpoint_name() == endpoint:
                return model
        raise KeyError(f"No model registered for endpoint {endpoint}")

    def models(self) -> list[type[RecordModel]]:
        return list(self._models.values())

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[type[RecordModel]]:
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)

    async def ensure_indexes(self) -> None:
        """Create a unique index on the id field of every registered model."""
        for model in self._models.values():
            await model.runtime().database.ensure_unique_index(
                model.collection_name(),
                model.id_field(),
            )
