"""Cart-level value types: the persisted snapshot and the derived reports.

None of these types compute anything.  Derivation lives in the
validation service so it stays pure and testable on raw data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from cartcore.domain.model.line_item import LineItem


@dataclass(frozen=True)
class CartSnapshot:
    """The full cart state at a point in time.

    Invariant: ``total_items`` and ``total_price`` always agree with
    ``items``.  ``total_price`` is the pre-tax subtotal.
    """

    items: tuple[LineItem, ...] = ()
    total_items: int = 0
    total_price: Decimal = Decimal("0.00")

    @property
    def is_empty(self) -> bool:
        return not self.items


EMPTY_SNAPSHOT = CartSnapshot()


@dataclass(frozen=True)
class LineItemValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CartValidationResult:
    """Errors make a cart invalid; warnings never do."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CartTotals:
    """Price breakdown of a cart, rounded to cents at output."""

    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    total_items: int
    validation: CartValidationResult


@dataclass(frozen=True)
class FieldDifference:
    current: Decimal
    expected: Decimal
    difference: Decimal


@dataclass(frozen=True)
class CalculationCheck:
    is_valid: bool
    differences: dict[str, FieldDifference] = field(default_factory=dict)


@dataclass(frozen=True)
class CartHealth:
    is_healthy: bool
    item_count: int
    total_items: int
    total_value: Decimal
    errors: list[str]
    warnings: list[str]
    last_checked: datetime


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of merging the local cart with the remote one.

    On failure ``merged_items`` is the untouched local cart.
    """

    success: bool
    merged_items: list[LineItem]
    change_count: int
    message: str
    error: str | None = None
