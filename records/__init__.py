"""
Persisted-record base layer.

Provides RecordModel, the base class every domain model builds on, along
with its configuration, hook and validation types.
"""

from records.base import RecordModel
from records.definition import ModelConfig, ModelRuntime, OperationValidation
from records.diff import build_update_operation
from records.errors import ConfigurationError, RestmodError, ValidationError
from records.hooks import Delegated, HandlerSpec, HookContext, Inline
from records.options import OperationOptions, resolve_filter
from records.registry import ModelRegistry
from records.validation import IdParams, ListQuery, RecordSchema

__all__ = [
    # Base model
    "RecordModel",
    "ModelConfig",
    "ModelRuntime",
    "ModelRegistry",
    "OperationOptions",
    "OperationValidation",
    # Hooks
    "Inline",
    "Delegated",
    "HandlerSpec",
    "HookContext",
    # Schemas
    "RecordSchema",
    "IdParams",
    "ListQuery",
    # Helpers
    "build_update_operation",
    "resolve_filter",
    # Errors
    "RestmodError",
    "ConfigurationError",
    "ValidationError",
]
