"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry formatted cart data from the application layer to the CLI
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CartLineDTO:
    """Output: a single cart line as displayed to the user."""

    product_id: str
    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    stock: int | None
    over_stock: bool


@dataclass(frozen=True)
class CartSummaryDTO:
    """Output: the cart with its price breakdown."""

    items: list[CartLineDTO]
    total_items: int
    subtotal: str
    tax: str
    shipping: str
    total: str
    errors: list[str]
    warnings: list[str]


@dataclass(frozen=True)
class CartHealthDTO:
    is_healthy: bool
    item_count: int
    total_items: int
    total_value: str
    errors: list[str]
    warnings: list[str]
    last_checked: str


@dataclass(frozen=True)
class FieldMismatchDTO:
    field: str
    current: str
    expected: str
    difference: str


@dataclass(frozen=True)
class VerificationDTO:
    is_valid: bool
    mismatches: list[FieldMismatchDTO]
