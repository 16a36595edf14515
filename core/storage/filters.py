"""
Filter expression grammar shared by the bundled gateways.

A filter expression is a string of ';'-separated clauses, each of the form
key<op>value where op is one of =, !=, >, >=, <, <=:

    status=active;age>=18

It is parsed into a MongoDB-style query document:

    {"status": "active", "age": {"$gte": 18}}
"""

import re
from typing import Any, Mapping

from core.storage.base import Filter, GatewayError


_CLAUSE = re.compile(r"^\s*(?P<key>[^=!<>\s]+)\s*(?P<op>!=|>=|<=|=|>|<)\s*(?P<value>.*?)\s*$")

_OPERATORS = {
    "=": None,
    "!=": "$ne",
    ">": "$gt",
    ">=": "$gte",
    "<": "$lt",
    "<=": "$lte",
}

_LITERALS = {"true": True, "false": False, "null": None}


class FilterSyntaxError(GatewayError):
    """A filter expression could not be parsed."""
    pass


def _coerce(raw: str) -> Any:
    if raw in _LITERALS:
        return _LITERALS[raw]
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def parse_filter_expression(expression: str) -> dict[str, Any]:
    """
    Parse a filter expression string into a query document.

    Clauses on the same key are combined, so "age>1;age<5" yields
    {"age": {"$gt": 1, "$lt": 5}}. An empty expression matches everything.

    Raises:
        FilterSyntaxError: If a clause is malformed or mixes an equality
            with a comparison on the same key
    """
    query: dict[str, Any] = {}
    for clause in expression.split(";"):
        if not clause.strip():
            continue
        match = _CLAUSE.match(clause)
        if match is None:
            raise FilterSyntaxError(f"Invalid filter clause: {clause!r}")

        key = match.group("key")
        operator = _OPERATORS[match.group("op")]
        value = _coerce(match.group("value"))

        if operator is None:
            if key in query:
                raise FilterSyntaxError(f"Conflicting clauses for {key!r}")
            query[key] = value
            continue

        existing = query.setdefault(key, {})
        if not isinstance(existing, dict):
            raise FilterSyntaxError(f"Conflicting clauses for {key!r}")
        existing[operator] = value

    return query


def normalize_filter(filter: Filter) -> dict[str, Any]:
    """Turn any accepted filter form into a plain query document."""
    if filter is None:
        return {}
    if isinstance(filter, str):
        return parse_filter_expression(filter)
    if isinstance(filter, Mapping):
        return dict(filter)
    raise GatewayError(f"Unsupported filter type: {type(filter).__name__}")
