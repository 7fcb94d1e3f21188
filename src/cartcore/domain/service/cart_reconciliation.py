"""Domain service: reconcile the local cart with the remote one.

Runs after the shopper authenticates.  The remote cart is fetched through
an injected async callable, so this module stays free of any HTTP code.

Merge rules:
- a product present on both sides keeps the larger quantity;
- a product only on the remote side is appended;
- a product only on the local side is kept as-is.

Reconciliation is never destructive.  If the fetch fails, times out or
returns something unreadable, the local cart comes back untouched in a
``success=False`` result instead of an exception.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence, Union

from cartcore.domain.exceptions import RemoteCartError
from cartcore.domain.model.cart import ReconcileResult
from cartcore.domain.model.line_item import LineItem
from cartcore.domain.service.cart_validation import validate_line_item

logger = logging.getLogger(__name__)

RemoteCartFetcher = Callable[[], Awaitable[Sequence[Mapping[str, Any]]]]
LocalItems = Union[Sequence[LineItem], Callable[[], Sequence[LineItem]]]

FAILURE_MESSAGE = "Failed to sync with server, using local cart"
UP_TO_DATE_MESSAGE = "Cart is up to date"


def merge_remote_items(
    local_items: Sequence[LineItem],
    remote_entries: Sequence[Mapping[str, Any]],
) -> tuple[list[LineItem], int]:
    """Merge remote entries into a copy of the local items.

    Returns the merged list and the number of raised or appended entries.
    A remote entry that does not make a valid line item is logged and
    skipped.  Raises KeyError/TypeError when an entry lacks the
    ``{product, quantity}`` shape.
    """
    merged = list(local_items)
    changes = 0

    for entry in remote_entries:
        remote = LineItem.from_remote_entry(entry)
        result = validate_line_item(remote, check_stock=False)
        if not result.is_valid:
            logger.warning(
                "Skipping invalid remote cart item %r: %s", entry, "; ".join(result.errors)
            )
            continue
        index = _index_of(merged, remote.id)
        if index is None:
            merged.append(remote)
            changes += 1
        elif remote.quantity > merged[index].quantity:
            merged[index] = merged[index].with_quantity(remote.quantity)
            changes += 1

    return merged, changes


async def reconcile_with_remote(
    local_items: LocalItems,
    fetch_remote: RemoteCartFetcher,
    timeout: float | None = None,
) -> ReconcileResult:
    """Fetch the remote cart and merge it into the local one.

    ``local_items`` may be a zero-argument callable; it is then read
    after the fetch resolves, so changes made while the fetch was in
    flight take part in the merge.
    """
    try:
        if timeout is None:
            entries = await fetch_remote()
        else:
            entries = await asyncio.wait_for(fetch_remote(), timeout)
        merged, changes = merge_remote_items(_resolve(local_items), entries)
    except (RemoteCartError, OSError, asyncio.TimeoutError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Failed to sync cart with backend: %r", exc)
        return ReconcileResult(
            success=False,
            merged_items=list(_resolve(local_items)),
            change_count=0,
            message=FAILURE_MESSAGE,
            error=str(exc) or type(exc).__name__,
        )

    message = f"Synced {changes} items with server" if changes else UP_TO_DATE_MESSAGE
    logger.info(message)
    return ReconcileResult(
        success=True,
        merged_items=merged,
        change_count=changes,
        message=message,
    )


# --- Internal helpers ---------------------------------------------------------


def _resolve(local_items: LocalItems) -> Sequence[LineItem]:
    return local_items() if callable(local_items) else local_items


def _index_of(items: list[LineItem], product_id: Any) -> int | None:
    for index, item in enumerate(items):
        if item.id == product_id:
            return index
    return None
