"""
Tests for partial-update diffing.
"""

from core.storage import UNSET, UpdateOperation
from records.diff import build_update_operation


def test_null_fields_are_unset_and_others_set():
    """Test that null fields are unset and the rest are set."""
    operation = build_update_operation({"name": "a", "color": None}, "id")

    assert operation.set == {"name": "a"}
    assert operation.unset == {"color": UNSET}


def test_id_field_and_internal_id_never_set():
    """Test that the id field and _id never reach the set clause."""
    operation = build_update_operation(
        {"id": "x", "_id": "507f1f77bcf86cd799439011", "name": "a"},
        "id",
    )

    assert operation.set == {"name": "a"}
    assert operation.unset is None


def test_custom_id_field_is_excluded():
    """Test that a custom id field is excluded."""
    operation = build_update_operation({"slug": "s", "id": "kept"}, "slug")

    assert operation.set == {"id": "kept"}


def test_empty_clauses_are_omitted():
    """Test that empty clauses are omitted."""
    only_set = build_update_operation({"name": "a"}, "id")
    only_unset = build_update_operation({"name": None}, "id")

    assert only_set.unset is None
    assert only_unset.set is None
    assert only_set.to_document() == {"$set": {"name": "a"}}
    assert only_unset.to_document() == {"$unset": {"name": UNSET}}


def test_id_only_patch_is_empty():
    """Test that an id-only patch is empty."""
    operation = build_update_operation({"id": "x"}, "id")

    assert operation.is_empty
    assert operation.to_document() == {}


def test_falsy_values_are_assigned_not_cleared():
    """Test that falsy values are assigned, not cleared."""
    operation = build_update_operation({"count": 0, "flag": False, "label": ""}, "id")

    assert operation.set == {"count": 0, "flag": False, "label": ""}
    assert operation.unset is None


def test_update_operation_defaults_to_empty():
    """Test that UpdateOperation defaults to empty."""
    assert UpdateOperation().is_empty
