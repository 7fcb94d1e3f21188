"""Abstract key-value storage for the persisted cart.

Defined in the domain layer so the cart store never depends on
infrastructure.  Concrete implementations (JSON file, in-memory)
live in the infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStorage(ABC):

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the record stored under *key*, or None."""

    @abstractmethod
    def set(self, key: str, record: dict[str, Any]) -> None:
        """Persist *record* under *key*, replacing any previous value."""
