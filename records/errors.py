"""
Exceptions raised by the record layer.

Gateway failures are not wrapped here: GatewayError and driver errors
propagate unchanged from core.storage.
"""

from typing import Any, Optional


class RestmodError(Exception):
    """Base exception for record operations."""
    pass


class ConfigurationError(RestmodError):
    """A model is missing configuration or runtime bindings."""
    pass


class ValidationError(RestmodError):
    """
    Data did not match a model schema.

    Attributes:
        model: Name of the model whose schema rejected the data
        errors: Structured error list from the validation engine
    """

    def __init__(
        self,
        message: str,
        *,
        model: Optional[str] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.model = model
        self.errors = errors or []
