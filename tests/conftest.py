"""
Pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path
from typing import Any, Optional

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from pydantic import BaseModel

from core.ids import IdGenerator
from core.storage.memory import InMemoryDatabase
from records import ModelConfig, ModelRuntime, RecordModel, RecordSchema
from tools.service_api import LocalServiceClient


class WidgetSchema(RecordSchema):
    """Schema used by most record tests: name is required."""
    id: Optional[str] = None
    name: str
    size: Optional[int] = None
    color: Optional[str] = None


class SequentialIds(IdGenerator):
    """Predictable ids so tests can assert on them."""

    def __init__(self, prefix: str = "gen-"):
        self.prefix = prefix
        self.issued: list[str] = []

    def new_id(self) -> str:
        new = f"{self.prefix}{len(self.issued) + 1}"
        self.issued.append(new)
        return new


@pytest.fixture
def database():
    """Fresh in-memory database per test."""
    return InMemoryDatabase()


@pytest.fixture
def services():
    return LocalServiceClient()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def runtime(database, services, ids):
    return ModelRuntime(database=database, id_generator=ids, services=services)


@pytest.fixture
def make_model(runtime):
    """
    Build a bound model class.

    Usage:
        Widget = make_model(handlers={"pre-create": fn})
    """
    created: list[type[RecordModel]] = []

    def factory(
        name: str = "Widget",
        schema: type[BaseModel] = WidgetSchema,
        handlers: Optional[dict[str, Any]] = None,
        **config: Any,
    ) -> type[RecordModel]:
        model_config = ModelConfig(
            name=name,
            collection=config.pop("collection", f"{name.lower()}s"),
            endpoint=config.pop("endpoint", f"/{name.lower()}s"),
            schema=schema,
            handlers=handlers or {},
            **config,
        )
        model = type(name, (RecordModel,), {"config": model_config})
        model.bind(runtime)
        created.append(model)
        return model

    yield factory

    for model in created:
        model.unbind()


@pytest.fixture
def Widget(make_model):
    return make_model()


@pytest.fixture
def widgets(database):
    """The gateway behind the default Widget model."""
    return database.collection("widgets")
