"""
Cart store — the mutable line-item collection of one checkout session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from kungfu import Result, Ok, Error

from cartflow._types import TenantId
from cartflow.cart._types import (
    CatalogItem,
    LineItem,
    ItemKind,
    StockLimitExceeded,
    ItemNotFound,
)
from cartflow.cart._port import CartRepository, StoreError
from cartflow.pricing import DiscountSpec, NO_DISCOUNT, PriceBreakdown, TaxPolicy, NO_TAX, price

logger = logging.getLogger(__name__)


def _check_stock(item: LineItem, requested: int) -> Result[None, StockLimitExceeded]:
    if item.kind is ItemKind.PRODUCT and item.stock is not None and requested > item.stock:
        return Error(StockLimitExceeded(
            key=item.key,
            name=item.name,
            ceiling=item.stock,
            requested=requested,
        ))
    return Ok(None)


class CartStore:
    """
    Owns the line items of one tenant's cart.

    Every mutation is mirrored to the tenant's slot in the repository right
    after it is applied. Rejected mutations leave both untouched.

    Example:
        cart = CartStore.open("acme", repo)
        match cart.add_item(shampoo):
            case Ok(line):
                ...
            case Error(limit):
                show(limit.message)  # "Only 3 units available in stock"
    """

    def __init__(
        self,
        tenant: TenantId,
        repository: CartRepository,
        items: tuple[LineItem, ...] = (),
    ) -> None:
        self.tenant = tenant
        self.repository = repository
        self._items: dict[str, LineItem] = {item.key: item for item in items}
        self.last_store_error: StoreError | None = None

    @classmethod
    def open(cls, tenant: TenantId, repository: CartRepository) -> CartStore:
        """Hydrate from the tenant's slot. No slot (or unreadable slot) ⇒ empty cart."""
        match repository.load(tenant):
            case Ok(items):
                logger.info("Hydrated cart for tenant %s with %d item(s)", tenant, len(items))
                return cls(tenant, repository, items)
            case Error(e):
                logger.error("Could not hydrate cart for tenant %s: %s", tenant, e.message)
                store = cls(tenant, repository)
                store.last_store_error = e
                return store

    # ───────────────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items.values())

    def get(self, key: str) -> LineItem | None:
        return self._items.get(key)

    @property
    def count(self) -> int:
        """Total units across all lines."""
        return sum(item.quantity for item in self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def breakdown(
        self,
        discount: DiscountSpec = NO_DISCOUNT,
        tax: TaxPolicy = NO_TAX,
    ) -> PriceBreakdown:
        """Recomputed on every call."""
        return price(self.items, discount, tax)

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def add_item(self, candidate: CatalogItem) -> Result[LineItem, StockLimitExceeded]:
        """Same key ⇒ quantity + 1, else a new line with quantity 1. Stock-checked."""
        existing = self._items.get(candidate.key)
        # Candidate carries the latest known stock for this product.
        line = LineItem.from_catalog(candidate, quantity=existing.quantity if existing else 0)
        requested = line.quantity + 1

        match _check_stock(line, requested):
            case Error(limit):
                logger.debug("Rejected add of %s: %s", line.key, limit.message)
                return Error(limit)
            case Ok(_):
                pass

        updated = line.with_quantity(requested)
        self._items[updated.key] = updated
        self._persist()
        return Ok(updated)

    def set_quantity(
        self, key: str, quantity: int
    ) -> Result[LineItem | None, StockLimitExceeded | ItemNotFound]:
        """quantity <= 0 removes the line (Ok(None)); otherwise stock-checked."""
        line = self._items.get(key)
        if line is None:
            return Error(ItemNotFound(key))

        if quantity <= 0:
            self.remove_item(key)
            return Ok(None)

        match _check_stock(line, quantity):
            case Error(limit):
                logger.debug("Rejected quantity %d for %s: %s", quantity, key, limit.message)
                return Error(limit)
            case Ok(_):
                pass

        updated = line.with_quantity(quantity)
        self._items[key] = updated
        self._persist()
        return Ok(updated)

    def increment(
        self, key: str, delta: int
    ) -> Result[LineItem | None, StockLimitExceeded | ItemNotFound]:
        """POS +/- buttons."""
        line = self._items.get(key)
        if line is None:
            return Error(ItemNotFound(key))
        return self.set_quantity(key, line.quantity + delta)

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._persist()

    def clear(self) -> None:
        self._items.clear()
        self._persist()

    def discard(self) -> None:
        """Clear and drop the persisted slot entirely."""
        self._items.clear()
        match self.repository.discard(self.tenant):
            case Ok(_):
                self.last_store_error = None
            case Error(e):
                self._store_failed(e)

    # ───────────────────────────────────────────────────────────────────────────
    # Persistence
    # ───────────────────────────────────────────────────────────────────────────

    def _persist(self) -> None:
        match self.repository.save(self.tenant, self.items):
            case Ok(_):
                self.last_store_error = None
            case Error(e):
                self._store_failed(e)

    def _store_failed(self, error: StoreError) -> None:
        # In-memory cart stays authoritative for this session.
        self.last_store_error = error
        logger.error(
            "Cart slot write failed for tenant %s: %s",
            self.tenant,
            error.message,
            exc_info=error.cause,
        )


__all__ = ("CartStore",)
