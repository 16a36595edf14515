"""
The options bag accepted by every record operation.

Transport adapters translate a request into an OperationOptions (or a
plain mapping with the same keys) and pass it through unchanged.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Union

from core.storage import Filter
from records.validation import ListQuery, validate


@dataclass
class OperationOptions:
    """
    Per-call options.

    Attributes:
        filter: Explicit filter for list operations
        params: Request parameters (route/query); may carry "filter",
            "offset" and "size" for list operations
        credentials: Caller credentials, forwarded to hooks untouched
        wrap: Return model instances instead of raw mappings from reads
    """
    filter: Optional[Filter] = None
    params: dict[str, Any] = field(default_factory=dict)
    credentials: Optional[Any] = None
    wrap: bool = False

    @classmethod
    def coerce(
        cls,
        options: Union["OperationOptions", Mapping[str, Any], None],
    ) -> "OperationOptions":
        """Accept an OperationOptions, a mapping, or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(options) - known
            if unknown:
                raise TypeError(f"Unknown operation options: {sorted(unknown)}")
            values = dict(options)
            values["params"] = dict(values.get("params") or {})
            return cls(**values)
        raise TypeError(f"Unsupported options type: {type(options).__name__}")


def resolve_filter(options: OperationOptions) -> Filter:
    """
    Pick the effective filter for a list operation.

    options.filter wins over params["filter"] whenever it is set, even to an
    empty query. None and "" count as unset. With neither, everything
    matches.
    """
    if _is_set(options.filter):
        return options.filter
    if _is_set(options.params.get("filter")):
        return options.params["filter"]
    return {}


def _is_set(value: Any) -> bool:
    return value is not None and value != ""


def resolve_paging(options: OperationOptions) -> tuple[int, Optional[int]]:
    """Read and validate offset/size from params as (skip, limit)."""
    query = validate(
        ListQuery,
        {
            key: options.params[key]
            for key in ("offset", "size")
            if options.params.get(key) is not None
        },
        model="list query",
    )
    return query.offset or 0, query.size
