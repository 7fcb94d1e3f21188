"""LineItem — one product's presence in the cart.

A LineItem is a plain data carrier.  It normalizes the price at
construction time but does not validate itself: a corrupt persisted
entry must still be representable so it can be reported and repaired
by the validation service.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Mapping, Union

from cartcore.domain.model.value_objects import parse_decimal

ProductId = Union[int, str]


@dataclass(frozen=True)
class LineItem:
    """A product in the cart with the quantity the shopper wants.

    ``stock`` is the catalog ceiling recorded when the item was added.
    It is advisory: nothing re-checks it against the server.
    ``image`` and ``slug`` are display-only.
    """

    id: ProductId
    name: str
    price: Decimal | None
    quantity: int
    stock: int | None = None
    image: str | None = None
    slug: str | None = None

    @property
    def line_total(self) -> Decimal:
        if self.price is None or not isinstance(self.quantity, int):
            return Decimal("0")
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> LineItem:
        return replace(self, quantity=quantity)

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def from_product(product: Mapping[str, Any] | LineItem, quantity: int = 1) -> LineItem:
        """Build a new line item from a catalog product."""
        if isinstance(product, LineItem):
            return product.with_quantity(quantity)
        return LineItem(
            id=product.get("id"),  # type: ignore[arg-type]
            name=product.get("name"),  # type: ignore[arg-type]
            price=parse_decimal(product.get("price")),
            quantity=quantity,
            stock=product.get("stock"),
            image=product.get("image"),
            slug=product.get("slug"),
        )

    @staticmethod
    def from_remote_entry(entry: Mapping[str, Any]) -> LineItem:
        """Convert a remote cart entry ``{product: {...}, quantity}``.

        Raises KeyError/TypeError when the entry is malformed.
        """
        product = entry["product"]
        return LineItem(
            id=product["id"],
            name=product["name"],
            price=parse_decimal(product.get("price")),
            quantity=entry["quantity"],
            stock=product.get("stock"),
            image=product.get("thumbnail_url") or product.get("image_url"),
            slug=product.get("slug"),
        )

    # --- Serialization --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": None if self.price is None else str(self.price),
            "quantity": self.quantity,
            "stock": self.stock,
            "image": self.image,
            "slug": self.slug,
        }

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> LineItem:
        return LineItem.from_product(raw, quantity=raw.get("quantity"))  # type: ignore[arg-type]
