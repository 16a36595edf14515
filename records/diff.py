"""
Partial-update diffing.

A patch maps field names to values. Omitted fields stay untouched, a None
value clears the field, and any other value assigns it:

    build_update_operation({"name": "a", "nickname": None, "id": "x"}, "id")
    -> UpdateOperation(set={"name": "a"}, unset={"nickname": ""})
"""

from typing import Any, Mapping

from core.storage import UNSET, UpdateOperation


# Identity key assigned by the storage layer itself
INTERNAL_ID_KEY = "_id"


def build_update_operation(data: Mapping[str, Any], id_field: str) -> UpdateOperation:
    """
    Partition a patch into set and unset clauses.

    The id field and the internal identity key are never assigned; a None
    value is unset whatever the key. Empty clauses are left as None.
    """
    to_set: dict[str, Any] = {}
    to_unset: dict[str, str] = {}

    for key, value in data.items():
        if value is None:
            to_unset[key] = UNSET
        elif key not in (id_field, INTERNAL_ID_KEY):
            to_set[key] = value

    return UpdateOperation(
        set=to_set or None,
        unset=to_unset or None,
    )
