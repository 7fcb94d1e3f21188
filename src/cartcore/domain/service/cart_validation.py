"""Domain service: cart validation and arithmetic.

Pure functions with no I/O.  They accept ``LineItem`` instances as well
as raw mappings (a persisted blob, a remote payload) so that corrupt data
can be inspected before it is normalized.

Validation never raises.  Problems are reported as lists of human-readable
strings, and totals are computed best-effort even over invalid entries:
an unparseable price or quantity counts as zero so a single bad entry
cannot make checkout unavailable.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from cartcore.domain.model.cart import (
    CalculationCheck,
    CartHealth,
    CartTotals,
    CartValidationResult,
    FieldDifference,
    LineItemValidation,
)
from cartcore.domain.model.value_objects import (
    parse_decimal,
    parse_int,
    round_cents,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
TAX_RATE = Decimal("0.10")
SHIPPING_COST = Decimal("0.00")
MAX_CART_LINES = 100
VERIFY_TOLERANCE = Decimal("0.01")

_VERIFIED_FIELDS = ("subtotal", "tax", "shipping", "total", "total_items")
_CAMEL_CASE = {"total_items": "totalItems"}


def validate_line_item(item: Any, check_stock: bool = True) -> LineItemValidation:
    """Check one entry against the line item rules.

    Every failing rule is reported, not just the first one.  With
    ``check_stock=False`` the advisory stock ceiling is not enforced;
    a malformed ``stock`` value is still an error.
    """
    errors: list[str] = []

    item_id = _field(item, "id")
    if isinstance(item_id, bool) or not isinstance(item_id, (int, str)) or not item_id:
        errors.append(f"Invalid product ID: {item_id}")

    name = _field(item, "name")
    if not isinstance(name, str) or not name:
        errors.append("Product name is required")

    raw_price = _field(item, "price")
    price = parse_decimal(raw_price)
    if price is None or price < 0:
        errors.append(f"Invalid price: {raw_price}")

    quantity = _field(item, "quantity")
    if not _is_int(quantity) or quantity <= 0:
        errors.append(f"Invalid quantity: {quantity}")

    stock = _field(item, "stock")
    if stock is not None and (not _is_int(stock) or stock < 0):
        errors.append(f"Invalid stock: {stock}")

    if check_stock and _is_int(stock) and _is_int(quantity) and quantity > stock:
        errors.append(f"Quantity ({quantity}) exceeds available stock ({stock})")

    return LineItemValidation(is_valid=not errors, errors=errors)


def validate_cart(items: Any) -> CartValidationResult:
    """Validate a whole cart.

    Per-item problems become one labeled error per failing item.
    Duplicate ids and oversized carts are warnings only.
    """
    if not _is_sequence(items):
        return CartValidationResult(
            is_valid=False, errors=["Cart items must be a list"], warnings=[]
        )

    errors: list[str] = []
    warnings: list[str] = []

    for index, item in enumerate(items, start=1):
        result = validate_line_item(item)
        if not result.is_valid:
            label = _field(item, "name") or "Unknown"
            errors.append(f"Item {index} ({label}): {', '.join(result.errors)}")

    ids = [_field(item, "id") for item in items]
    duplicates = [item_id for index, item_id in enumerate(ids) if ids.index(item_id) != index]
    if duplicates:
        warnings.append(
            f"Duplicate items found: {', '.join(str(d) for d in duplicates)}"
        )

    if len(items) > MAX_CART_LINES:
        warnings.append(f"Cart has too many items (>{MAX_CART_LINES})")

    return CartValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def calculate_cart_totals(items: Any) -> CartTotals:
    """Compute subtotal, tax, shipping and total.

    Always returns a result; validation problems travel in
    ``validation``.  Sums are exact and rounded to cents once, at output.
    """
    validation = validate_cart(items)
    if not validation.is_valid:
        logger.warning("Cart validation failed: %s", "; ".join(validation.errors))

    entries = items if _is_sequence(items) else []

    subtotal = Decimal("0")
    total_items = 0
    for item in entries:
        price = parse_decimal(_field(item, "price")) or Decimal("0")
        quantity = parse_int(_field(item, "quantity")) or 0
        subtotal += price * quantity
        total_items += quantity

    tax = subtotal * TAX_RATE
    shipping = SHIPPING_COST
    total = subtotal + tax + shipping

    return CartTotals(
        subtotal=round_cents(subtotal),
        tax=round_cents(tax),
        shipping=round_cents(shipping),
        total=round_cents(total),
        total_items=total_items,
        validation=validation,
    )


def verify_calculations(current: Any, expected: Any) -> CalculationCheck:
    """Compare two totals field by field with a one-cent tolerance.

    Either side may be a ``CartTotals`` or a mapping; camelCase
    ``totalItems`` is accepted.  Missing or non-numeric fields read as 0.
    """
    differences: dict[str, FieldDifference] = {}
    for name in _VERIFIED_FIELDS:
        current_value = _totals_field(current, name)
        expected_value = _totals_field(expected, name)
        diff = abs(current_value - expected_value)
        if diff > VERIFY_TOLERANCE:
            differences[name] = FieldDifference(
                current=current_value, expected=expected_value, difference=diff
            )
    return CalculationCheck(is_valid=not differences, differences=differences)


def clean_cart(items: Iterable[Any], check_stock: bool = True) -> list[Any]:
    """Return the entries that pass ``validate_line_item``.

    Dropped entries are logged; nothing is raised.
    """
    cleaned = []
    for item in items:
        result = validate_line_item(item, check_stock=check_stock)
        if result.is_valid:
            cleaned.append(item)
        else:
            logger.warning(
                "Removing invalid cart item %r: %s", item, "; ".join(result.errors)
            )
    return cleaned


def get_cart_health(items: Any) -> CartHealth:
    """Diagnostic summary combining validation and totals."""
    validation = validate_cart(items)
    totals = calculate_cart_totals(items)

    errors = list(validation.errors)
    errors += [e for e in totals.validation.errors if e not in errors]
    warnings = list(validation.warnings)
    warnings += [w for w in totals.validation.warnings if w not in warnings]

    return CartHealth(
        is_healthy=validation.is_valid and totals.validation.is_valid,
        item_count=len(items) if _is_sequence(items) else 0,
        total_items=totals.total_items,
        total_value=totals.total,
        errors=errors,
        warnings=warnings,
        last_checked=datetime.now(timezone.utc),
    )


# --- Internal helpers ---------------------------------------------------------


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _totals_field(totals: Any, name: str) -> Decimal:
    if isinstance(totals, Mapping):
        value = totals.get(name, totals.get(_CAMEL_CASE.get(name, name)))
    else:
        value = getattr(totals, name, None)
    return parse_decimal(value) or Decimal("0")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
