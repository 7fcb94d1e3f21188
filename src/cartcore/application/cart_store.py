"""CartStore — the single mutable source of truth for the shopping cart.

The store is constructed explicitly and handed to whoever needs it
(the CLI, the sync handler, tests); there is no module-level instance.

Every mutator follows the same path:

1. build the new item list from the current snapshot;
2. repair it: drop structurally invalid entries and repeated ids;
3. derive ``total_items`` / ``total_price`` with the validation service;
4. persist the snapshot and notify subscribers.

Mutators never raise.  The stock ceiling recorded on an item is
advisory at this layer: ``update_quantity`` stores a quantity above
``stock`` and ``validate_line_item`` reports it.  Callers that want to
block such a change must check before calling.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable, Iterable

from cartcore.domain.model.cart import EMPTY_SNAPSHOT, CartSnapshot
from cartcore.domain.model.line_item import LineItem, ProductId
from cartcore.domain.repository.cart_storage import KeyValueStorage
from cartcore.domain.service.cart_validation import (
    calculate_cart_totals,
    clean_cart,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart-storage"
STORAGE_VERSION = 0

CartListener = Callable[[CartSnapshot], None]


class CartStore:

    def __init__(self, storage: KeyValueStorage, storage_key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._listeners: list[CartListener] = []
        self._snapshot = self._load()

    # --- Read API -------------------------------------------------------------

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def items(self) -> list[LineItem]:
        return list(self._snapshot.items)

    @property
    def total_items(self) -> int:
        return self._snapshot.total_items

    @property
    def total_price(self) -> Decimal:
        return self._snapshot.total_price

    def get_item(self, product_id: ProductId) -> LineItem | None:
        """Return the line item for *product_id*, or None."""
        for item in self._snapshot.items:
            if item.id == product_id:
                return item
        return None

    # --- Mutators -------------------------------------------------------------

    def add_item(self, product: Mapping[str, Any] | LineItem, quantity: int = 1) -> None:
        """Add *quantity* units of *product*.

        An existing line with the same id has its quantity incremented;
        otherwise a new line is appended.  No stock check happens here.
        """
        items = list(self._snapshot.items)

        if not _is_positive_int(quantity):
            logger.warning("Ignoring add of %r with invalid quantity %r", product, quantity)
            self._commit(items)
            return

        new_item = LineItem.from_product(product, quantity)
        index = _index_of(items, new_item.id)
        if index is None:
            items.append(new_item)
        else:
            existing = items[index]
            items[index] = existing.with_quantity(existing.quantity + quantity)

        self._commit(items)

    def update_quantity(self, product_id: ProductId, quantity: int) -> None:
        """Replace the quantity of *product_id*.

        Unknown ids leave the items untouched.  A quantity that is not a
        positive integer makes the line invalid and it is dropped.
        """
        items = [
            item.with_quantity(quantity) if item.id == product_id else item
            for item in self._snapshot.items
        ]
        self._commit(items)

    def remove_item(self, product_id: ProductId) -> None:
        items = [item for item in self._snapshot.items if item.id != product_id]
        self._commit(items)

    def clear_cart(self) -> None:
        self._commit([])

    def replace_items(self, items: Iterable[LineItem]) -> None:
        """Swap in a whole new item list in one step (used by sync)."""
        self._commit(list(items))

    # --- Subscriptions --------------------------------------------------------

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call *listener* with the new snapshot after every change.

        Returns a function that removes the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reload(self) -> None:
        """Re-read the persisted cart after another writer changed it.

        Last writer wins; nothing is merged.
        """
        self._snapshot = self._load()
        self._notify()

    # --- Internal helpers -----------------------------------------------------

    def _commit(self, items: list[LineItem]) -> None:
        self._snapshot = _derive(items)
        self._persist()
        self._notify()

    def _persist(self) -> None:
        record = {
            "items": [item.to_dict() for item in self._snapshot.items],
            "totalItems": self._snapshot.total_items,
            "totalPrice": str(self._snapshot.total_price),
            "version": STORAGE_VERSION,
        }
        try:
            self._storage.set(self._storage_key, record)
        except OSError:
            logger.exception("Could not persist cart under %r", self._storage_key)

    def _notify(self) -> None:
        snapshot = self._snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener %r failed", listener)

    def _load(self) -> CartSnapshot:
        try:
            raw = self._storage.get(self._storage_key)
        except OSError:
            logger.exception("Could not read cart under %r", self._storage_key)
            return EMPTY_SNAPSHOT

        if raw is None:
            return EMPTY_SNAPSHOT
        if not isinstance(raw, Mapping) or not isinstance(raw.get("items"), list):
            logger.warning("Discarding unreadable cart record under %r", self._storage_key)
            return EMPTY_SNAPSHOT

        # Stored totalItems / totalPrice are ignored and re-derived.
        items = []
        for entry in raw["items"]:
            if isinstance(entry, Mapping):
                items.append(LineItem.from_dict(entry))
            else:
                logger.warning("Discarding malformed cart entry %r", entry)
        return _derive(items)


# --- Module helpers -----------------------------------------------------------


def _derive(items: list[LineItem]) -> CartSnapshot:
    repaired = _drop_duplicates(clean_cart(items, check_stock=False))
    if not repaired:
        return EMPTY_SNAPSHOT
    totals = calculate_cart_totals(repaired)
    return CartSnapshot(
        items=tuple(repaired),
        total_items=totals.total_items,
        total_price=totals.subtotal,
    )


def _drop_duplicates(items: list[LineItem]) -> list[LineItem]:
    seen: set = set()
    unique = []
    for item in items:
        if item.id in seen:
            logger.warning("Removing duplicate cart item %r", item)
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def _index_of(items: list[LineItem], product_id: ProductId) -> int | None:
    for index, item in enumerate(items):
        if item.id == product_id:
            return index
    return None


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
