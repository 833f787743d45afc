"""
Cart — line items for one checkout session, persisted per tenant.

    from cartflow import cart as K

    repo = K.MemoryCartRepository()
    cart = K.CartStore.open("acme", repo)

    shampoo = K.CatalogItem(ref=2, name="Shampoo", price=money("12.99"), stock=3)
    cart.add_item(shampoo)          # Ok(LineItem(quantity=1))
    cart.add_item(shampoo)          # Ok(LineItem(quantity=2)), same line
    cart.set_quantity(shampoo.key, 4)  # Error(StockLimitExceeded(ceiling=3))
    cart.set_quantity(shampoo.key, 0)  # Ok(None), line removed

Persistence is a narrow port (CartRepository: load/save/discard). The slot is
written after every mutation and read once when the store is opened.
"""

from cartflow.cart._types import (
    ItemKind,
    CatalogItem,
    LineItem,
    StockLimitExceeded,
    ItemNotFound,
    CartError,
)
from cartflow.cart._port import (
    StoreError,
    CartRepository,
    MemoryCartRepository,
)
from cartflow.cart._store import CartStore
from cartflow.cart._sqlalchemy import (
    CartSlotBase,
    CartSlotTable,
    SQLAlchemyCartRepository,
)

__all__ = (
    # Types
    "ItemKind",
    "CatalogItem",
    "LineItem",
    "StockLimitExceeded",
    "ItemNotFound",
    "CartError",
    # Port
    "StoreError",
    "CartRepository",
    "MemoryCartRepository",
    # Store
    "CartStore",
    # SQLAlchemy
    "CartSlotBase",
    "CartSlotTable",
    "SQLAlchemyCartRepository",
)
