"""In-memory fakes for testing.

``InMemoryStorage`` implements the same abstract interface as the JSON
storage but keeps everything in a dict.  The remote fetchers stand in
for the HTTP client.  No file I/O, no network.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

from cartcore.domain.exceptions import RemoteCartError
from cartcore.domain.repository.cart_storage import KeyValueStorage


class InMemoryStorage(KeyValueStorage):

    def __init__(self, records: dict[str, Any] | None = None) -> None:
        self._store: dict[str, Any] = copy.deepcopy(records or {})
        self.writes = 0

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._store.get(key))

    def set(self, key: str, record: dict[str, Any]) -> None:
        self._store[key] = copy.deepcopy(record)
        self.writes += 1


class BrokenStorage(KeyValueStorage):
    """Every operation fails like a full or unreadable disk."""

    def get(self, key: str) -> Any | None:
        raise OSError("disk unreadable")

    def set(self, key: str, record: dict[str, Any]) -> None:
        raise OSError("disk full")


class FakeRemoteCart:
    """Async fetcher returning a fixed remote cart."""

    def __init__(self, entries: list[dict[str, Any]] | None = None) -> None:
        self.entries = entries or []
        self.calls = 0

    async def __call__(self) -> list[dict[str, Any]]:
        self.calls += 1
        return copy.deepcopy(self.entries)


class FailingRemoteCart:

    def __init__(self, message: str = "401 Unauthorized") -> None:
        self.message = message

    async def __call__(self) -> list[dict[str, Any]]:
        raise RemoteCartError(self.message)


class HangingRemoteCart:
    """Never answers in any reasonable time."""

    async def __call__(self) -> list[dict[str, Any]]:
        await asyncio.sleep(3600)
        return []


def remote_entry(
    product_id: int | str,
    quantity: int,
    name: str = "Remote Product",
    price: str | None = "5.00",
    stock: int | None = 50,
) -> dict[str, Any]:
    """Build a remote cart entry shaped like the API response."""
    return {
        "product": {
            "id": product_id,
            "name": name,
            "price": price,
            "thumbnail_url": f"https://cdn.example.com/{product_id}_thumb.jpg",
            "image_url": f"https://cdn.example.com/{product_id}.jpg",
            "slug": f"product-{product_id}",
            "stock": stock,
        },
        "quantity": quantity,
    }
