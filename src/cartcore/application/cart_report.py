"""Application service: cart reports (queries).

Builds the totals breakdown, the health report and the arithmetic
self-check from the store's current snapshot.
"""

from __future__ import annotations

from decimal import Decimal

from cartcore.application.cart_store import CartStore
from cartcore.application.dto import (
    CartHealthDTO,
    CartLineDTO,
    CartSummaryDTO,
    FieldMismatchDTO,
    VerificationDTO,
)
from cartcore.domain.model.line_item import LineItem
from cartcore.domain.model.value_objects import format_money
from cartcore.domain.service.cart_validation import (
    SHIPPING_COST,
    TAX_RATE,
    calculate_cart_totals,
    get_cart_health,
    verify_calculations,
)


class CartReportHandler:

    def __init__(self, store: CartStore) -> None:
        self._store = store

    def summary(self) -> CartSummaryDTO:
        items = self._store.items
        totals = calculate_cart_totals(items)
        return CartSummaryDTO(
            items=[self._to_line_dto(item) for item in items],
            total_items=totals.total_items,
            subtotal=format_money(totals.subtotal),
            tax=format_money(totals.tax),
            shipping=format_money(totals.shipping),
            total=format_money(totals.total),
            errors=list(totals.validation.errors),
            warnings=list(totals.validation.warnings),
        )

    def health(self) -> CartHealthDTO:
        health = get_cart_health(self._store.items)
        return CartHealthDTO(
            is_healthy=health.is_healthy,
            item_count=health.item_count,
            total_items=health.total_items,
            total_value=format_money(health.total_value),
            errors=health.errors,
            warnings=health.warnings,
            last_checked=health.last_checked.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )

    def verify(self) -> VerificationDTO:
        """Check the rounded totals against an unrounded recomputation.

        Any field off by more than one cent is reported.
        """
        items = self._store.items
        subtotal = sum((item.line_total for item in items), Decimal("0"))
        tax = subtotal * TAX_RATE
        expected = {
            "subtotal": subtotal,
            "tax": tax,
            "shipping": SHIPPING_COST,
            "total": subtotal + tax + SHIPPING_COST,
            "total_items": sum(item.quantity for item in items),
        }

        check = verify_calculations(calculate_cart_totals(items), expected)
        return VerificationDTO(
            is_valid=check.is_valid,
            mismatches=[
                FieldMismatchDTO(
                    field=name,
                    current=str(diff.current),
                    expected=str(diff.expected),
                    difference=str(diff.difference),
                )
                for name, diff in check.differences.items()
            ],
        )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_line_dto(item: LineItem) -> CartLineDTO:
        return CartLineDTO(
            product_id=str(item.id),
            name=item.name,
            quantity=item.quantity,
            unit_price=format_money(item.price),  # type: ignore[arg-type]
            line_total=format_money(item.line_total),
            stock=item.stock,
            over_stock=item.stock is not None and item.quantity > item.stock,
        )
