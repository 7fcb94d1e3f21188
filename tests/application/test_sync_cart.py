"""Integration tests for the SyncCart use case.

Uses the in-memory storage and fake remote carts — no network.
"""

import pytest

from cartcore.application.cart_store import CartStore
from cartcore.application.sync_cart import SyncCartHandler
from tests.fakes import (
    FailingRemoteCart,
    FakeRemoteCart,
    HangingRemoteCart,
    InMemoryStorage,
    remote_entry,
)


def _store_with(*products: tuple[int, int]) -> CartStore:
    store = CartStore(InMemoryStorage())
    for product_id, quantity in products:
        store.add_item(
            {"id": product_id, "name": f"Local {product_id}", "price": "2.00", "stock": 50},
            quantity,
        )
    return store


class TestSyncCartHappyPath:

    @pytest.mark.asyncio
    async def test_merge_is_applied_to_store(self):
        store = _store_with((1, 1), (2, 5))
        remote = FakeRemoteCart([remote_entry(1, 4), remote_entry(2, 1), remote_entry(3, 2)])

        result = await SyncCartHandler(store, remote).handle()

        assert result.success
        assert result.change_count == 2
        assert [(item.id, item.quantity) for item in store.items] == [(1, 4), (2, 5), (3, 2)]
        assert store.total_items == 11

    @pytest.mark.asyncio
    async def test_subscribers_see_one_complete_update(self):
        store = _store_with((1, 1))
        seen = []
        store.subscribe(seen.append)

        await SyncCartHandler(store, FakeRemoteCart([remote_entry(2, 1), remote_entry(3, 1)])).handle()

        assert len(seen) == 1
        assert [item.id for item in seen[0].items] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_up_to_date_cart_is_not_rewritten(self):
        store = _store_with((1, 3))
        seen = []
        store.subscribe(seen.append)

        result = await SyncCartHandler(store, FakeRemoteCart([remote_entry(1, 1)])).handle()

        assert result.message == "Cart is up to date"
        assert seen == []

    @pytest.mark.asyncio
    async def test_changes_made_during_fetch_are_kept(self):
        store = _store_with((1, 1))

        class SlowRemote(FakeRemoteCart):
            async def __call__(self):
                store.add_item({"id": 9, "name": "Added meanwhile", "price": "1.00"})
                return await super().__call__()

        await SyncCartHandler(store, SlowRemote([remote_entry(1, 2)])).handle()

        assert [(item.id, item.quantity) for item in store.items] == [(1, 2), (9, 1)]


class TestSyncCartFailures:

    @pytest.mark.asyncio
    async def test_remote_error_leaves_cart_untouched(self):
        store = _store_with((1, 2))
        before = store.snapshot

        result = await SyncCartHandler(store, FailingRemoteCart()).handle()

        assert not result.success
        assert result.message == "Failed to sync with server, using local cart"
        assert store.snapshot == before

    @pytest.mark.asyncio
    async def test_timeout_leaves_cart_untouched(self):
        store = _store_with((1, 2))
        before = store.snapshot

        result = await SyncCartHandler(store, HangingRemoteCart(), timeout=0.01).handle()

        assert not result.success
        assert store.snapshot == before

    @pytest.mark.asyncio
    async def test_unusable_remote_items_are_not_reported_as_synced(self):
        store = CartStore(InMemoryStorage())

        result = await SyncCartHandler(store, FakeRemoteCart([remote_entry(7, 2, price=None)])).handle()

        assert result.success
        assert result.change_count == 0
        assert result.message == "Cart is up to date"
        assert store.items == []
