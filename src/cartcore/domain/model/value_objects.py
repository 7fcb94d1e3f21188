"""Value Objects and normalization helpers shared across the domain.

Prices arrive from the catalog, from persisted carts and from the remote
API either as numbers or as strings.  They are parsed to ``Decimal`` at
the edge by the helpers below and never carried around as an ambiguous
string/number union.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

CENT = Decimal("0.01")

# Amounts at or above 10**MAX_EXPONENT are not treated as prices.
MAX_EXPONENT = 100


def parse_decimal(value: object) -> Decimal | None:
    """Coerce a number or numeric string to a finite Decimal.

    Returns None for anything that is not a number: missing values,
    booleans, blank or non-numeric strings, NaN, infinities and
    magnitudes of 10**MAX_EXPONENT or more.
    Floats go through ``str()`` so ``7.99`` becomes ``Decimal("7.99")``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    else:
        return None
    if not result.is_finite() or (result and result.adjusted() >= MAX_EXPONENT):
        return None
    return result


def parse_int(value: object) -> int | None:
    """Lenient integer coercion used by best-effort totals.

    ``"3"`` -> 3, ``2.7`` -> 2 (truncated), junk -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    number = parse_decimal(value)
    if number is None:
        return None
    return int(number)


def round_cents(amount: Decimal) -> Decimal:
    """Round to two places, halves away from zero (6.947 -> 6.95).

    Precision is widened to hold every integer digit of *amount*, so a
    very large price still rounds.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Display form of an amount: ``$`` and exactly two decimals."""
    return f"${round_cents(amount)}"
