"""
Cart types — line items, catalog candidates, cart errors.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from cartflow._types import Money, money
from cartflow.submit._types import ClassifiedError, ErrorKind


# ═══════════════════════════════════════════════════════════════════════════════
# Item Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ItemKind(Enum):
    """What a line sells. Only products carry a stock ceiling."""

    PRODUCT = "product"
    SERVICE = "service"


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Item — candidate for add_item()
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogItem:
    """
    Something a cashier or shopper can put into the cart.

    ref=None marks a manually-entered item; it gets a session-unique key.
    """

    ref: int | str | None
    name: str
    price: Money
    kind: ItemKind = ItemKind.PRODUCT
    stock: int | None = None
    _manual_key: str = field(default_factory=lambda: uuid.uuid4().hex, repr=False)

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(f"price must be >= 0, got {self.price} for {self.name!r}")

    @classmethod
    def manual(
        cls,
        name: str,
        price: Money | int | float | str,
        kind: ItemKind = ItemKind.SERVICE,
    ) -> CatalogItem:
        return cls(ref=None, name=name, price=money(price), kind=kind)

    @property
    def key(self) -> str:
        """Identity inside a cart: catalog ref + kind, or a manual key."""
        if self.ref is None:
            return f"manual-{self._manual_key}"
        return f"{self.kind.value}-{self.ref}"


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item — owned by CartStore
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One priced, quantified entry in a cart.

    Invariant: quantity >= 1 while present. Services never carry a stock.
    """

    key: str
    name: str
    unit_price: Money
    quantity: int
    kind: ItemKind
    catalog_ref: int | str | None = None
    stock: int | None = None

    def __post_init__(self) -> None:
        if self.unit_price < 0:
            raise ValueError(f"unit_price must be >= 0, got {self.unit_price} for {self.name!r}")

    @classmethod
    def from_catalog(cls, item: CatalogItem, quantity: int = 1) -> LineItem:
        return cls(
            key=item.key,
            name=item.name,
            unit_price=money(item.price),
            quantity=quantity,
            kind=item.kind,
            catalog_ref=item.ref,
            stock=item.stock if item.kind is ItemKind.PRODUCT else None,
        )

    @property
    def line_total(self) -> Money:
        return money(self.unit_price * self.quantity)

    def with_quantity(self, quantity: int) -> LineItem:
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "kind": self.kind.value,
            "catalog_ref": self.catalog_ref,
            "stock": self.stock,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        return cls(
            key=data["key"],
            name=data["name"],
            unit_price=money(data["unit_price"]),
            quantity=int(data["quantity"]),
            kind=ItemKind(data["kind"]),
            catalog_ref=data.get("catalog_ref"),
            stock=data.get("stock"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StockLimitExceeded:
    """Requested quantity is above the product's stock ceiling. Cart unchanged."""

    key: str
    name: str
    ceiling: int
    requested: int

    @property
    def message(self) -> str:
        return f"Only {self.ceiling} units available in stock"

    def classified(self) -> ClassifiedError:
        return ClassifiedError(kind=ErrorKind.STOCK_LIMIT, message=self.message)


@dataclass(frozen=True, slots=True)
class ItemNotFound:
    """No line with this key in the cart."""

    key: str

    @property
    def message(self) -> str:
        return f"No cart item with key {self.key!r}"


type CartError = StockLimitExceeded | ItemNotFound


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ItemKind",
    "CatalogItem",
    "LineItem",
    "StockLimitExceeded",
    "ItemNotFound",
    "CartError",
)
