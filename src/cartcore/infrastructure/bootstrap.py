"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from cartcore.application.cart_store import CartStore
from cartcore.infrastructure.config import Settings, load_settings
from cartcore.infrastructure.persistence.json_cart_storage import (
    JsonKeyValueStorage,
)
from cartcore.infrastructure.remote.http_cart_api import HttpCartApi

STORAGE_FILE = "storage.json"


def cart_storage(settings: Settings | None = None) -> JsonKeyValueStorage:
    settings = settings or load_settings()
    return JsonKeyValueStorage(settings.data_dir / STORAGE_FILE)


def cart_store(settings: Settings | None = None) -> CartStore:
    return CartStore(cart_storage(settings))


def remote_cart_api(
    settings: Settings | None = None,
    api_url: str | None = None,
    token: str | None = None,
) -> HttpCartApi:
    settings = settings or load_settings()
    return HttpCartApi(
        base_url=api_url or settings.api_url,
        token=token or settings.api_token,
        timeout=settings.sync_timeout,
    )
