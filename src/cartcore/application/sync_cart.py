"""Application service: Sync Cart use case.

Runs after a successful login.  Reconciles the local cart with the
remote cart and applies the merge to the store in a single step, so
subscribers never see a half-merged cart.  The store stays usable while
the fetch is in flight.
"""

from __future__ import annotations

from cartcore.application.cart_store import CartStore
from cartcore.domain.model.cart import ReconcileResult
from cartcore.domain.service.cart_reconciliation import (
    RemoteCartFetcher,
    reconcile_with_remote,
)


class SyncCartHandler:

    def __init__(
        self,
        store: CartStore,
        fetch_remote: RemoteCartFetcher,
        timeout: float | None = None,
    ) -> None:
        self._store = store
        self._fetch_remote = fetch_remote
        self._timeout = timeout

    async def handle(self) -> ReconcileResult:
        # Read the live items once the fetch resolves, not before.
        result = await reconcile_with_remote(
            lambda: self._store.items,
            self._fetch_remote,
            timeout=self._timeout,
        )
        if result.success and result.change_count:
            self._store.replace_items(result.merged_items)
        return result
