"""
Record identifier generation.

Records that reach save() without an id get one from an IdGenerator
bound to their model runtime.
"""

import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """Produces fresh, globally unique string identifiers on demand."""

    @abstractmethod
    def new_id(self) -> str:
        pass


class UUIDGenerator(IdGenerator):
    """
    Random identifiers from uuid4.

    Args:
        prefix: Optional string prepended to every id (e.g. "usr-")
        length: Number of hex characters kept from the uuid (max 32)
    """

    def __init__(self, prefix: str = "", length: int = 32):
        if not 0 < length <= 32:
            raise ValueError(f"length must be between 1 and 32, got {length}")
        self._prefix = prefix
        self._length = length

    def new_id(self) -> str:
        return f"{self._prefix}{uuid.uuid4().hex[:self._length]}"
