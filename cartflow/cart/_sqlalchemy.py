"""
SQLAlchemy integration — durable cart slots, one row per tenant.

Usage:
    engine = create_engine("sqlite:///carts.db")
    CartSlotBase.metadata.create_all(engine)

    repo = SQLAlchemyCartRepository(sessionmaker(engine))
    cart = CartStore.open("acme", repo)

Note: Uses a synchronous Session. Cart mutations run to completion inside
one UI event and never suspend, so the slot write is inline.
"""

from datetime import datetime, timezone

from sqlalchemy import select, delete, String, DateTime, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from kungfu import Result, Ok, Error

from cartflow._types import TenantId
from cartflow.cart._types import LineItem
from cartflow.cart._port import StoreError, dump_items, parse_items


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class CartSlotBase(DeclarativeBase):
    pass


class CartSlotTable(CartSlotBase):
    """
    Serialized cart per tenant.

    Columns:
    - tenant: owning tenant (primary key, stringified)
    - items: JSON list of LineItem.to_dict()
    - updated_at: last write
    """

    __tablename__ = "cart_slots"

    tenant: Mapped[str] = mapped_column(String(255), primary_key=True)
    items: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Repository
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCartRepository:
    """CartRepository backed by the `cart_slots` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def load(self, tenant: TenantId) -> Result[tuple[LineItem, ...], StoreError]:
        try:
            with self.session_factory() as session:
                row = session.execute(
                    select(CartSlotTable).where(CartSlotTable.tenant == str(tenant))
                ).scalar_one_or_none()
                if row is None:
                    return Ok(())
                raw = row.items
        except SQLAlchemyError as e:
            return Error(StoreError(f"Failed to load cart for {tenant}", e))
        return parse_items(raw)

    def save(
        self, tenant: TenantId, items: tuple[LineItem, ...]
    ) -> Result[None, StoreError]:
        try:
            with self.session_factory() as session, session.begin():
                row = session.get(CartSlotTable, str(tenant))
                now = datetime.now(timezone.utc).replace(tzinfo=None)
                if row is None:
                    session.add(CartSlotTable(
                        tenant=str(tenant),
                        items=dump_items(items),
                        updated_at=now,
                    ))
                else:
                    row.items = dump_items(items)
                    row.updated_at = now
            return Ok(None)
        except SQLAlchemyError as e:
            return Error(StoreError(f"Failed to save cart for {tenant}", e))

    def discard(self, tenant: TenantId) -> Result[bool, StoreError]:
        try:
            with self.session_factory() as session, session.begin():
                result = session.execute(
                    delete(CartSlotTable).where(CartSlotTable.tenant == str(tenant))
                )
                return Ok(bool(result.rowcount))
        except SQLAlchemyError as e:
            return Error(StoreError(f"Failed to discard cart for {tenant}", e))


__all__ = (
    "CartSlotBase",
    "CartSlotTable",
    "SQLAlchemyCartRepository",
)
