"""
Schema validation for records.

Model schemas are pydantic models. The helpers here run a schema against
raw record data and translate pydantic's errors into the record layer's
ValidationError.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic import ValidationError as PydanticValidationError

from records.errors import ValidationError


class RecordSchema(BaseModel):
    """
    Default model schema: accepts any fields.

    Concrete models subclass this (or any pydantic model) to declare fields.
    Subclasses keep accepting undeclared fields unless they override
    model_config.
    """

    model_config = ConfigDict(extra="allow")


class IdParams(BaseModel):
    """Route parameters for operations addressing one record."""

    id: str = Field(..., min_length=1)


class ListQuery(BaseModel):
    """Query parameters accepted by list operations."""

    model_config = ConfigDict(extra="ignore")

    filter: Optional[str] = None
    offset: Optional[NonNegativeInt] = None
    size: Optional[NonNegativeInt] = None


def validate(
    schema: type[BaseModel],
    value: Any,
    *,
    model: Optional[str] = None,
) -> BaseModel:
    """
    Validate a value against a schema.

    Raises:
        ValidationError: With pydantic's error list attached
    """
    try:
        return schema.model_validate(value)
    except PydanticValidationError as exc:
        label = model or schema.__name__
        raise ValidationError(
            f"{label} validation failed: {exc.error_count()} error(s)",
            model=model,
            errors=exc.errors(include_url=False),
        ) from exc


def normalize(
    schema: type[BaseModel],
    data: Mapping[str, Any],
    *,
    model: Optional[str] = None,
) -> dict[str, Any]:
    """
    Validate record data and return its normalized field mapping.

    Defaults filled in by the schema are kept, but fields that were neither
    provided nor given a non-null default are left out, so an optional
    field the caller never set does not turn into an explicit null.
    Fields are keyed by alias, the same names records are stored under.
    """
    validated = validate(schema, dict(data), model=model)
    dumped = validated.model_dump(by_alias=True)
    return {
        key: value
        for key, value in dumped.items()
        if value is not None or key in data
    }
