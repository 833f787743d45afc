"""
Cart persistence port — one slot per tenant.

CartRepository — load/save/discard the serialized line items of a tenant.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

import json
from decimal import InvalidOperation
from dataclasses import dataclass
from typing import Protocol

from kungfu import Result, Ok, Error

from cartflow._types import TenantId
from cartflow.cart._types import LineItem


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Repository Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CartRepository(Protocol):
    """
    Tenant-scoped cart slot.

    Note: Synchronous. The slot is written inline after every mutation.
    """

    def load(self, tenant: TenantId) -> Result[tuple[LineItem, ...], StoreError]:
        """Items persisted for tenant. Missing slot ⇒ Ok(())."""
        ...

    def save(
        self, tenant: TenantId, items: tuple[LineItem, ...]
    ) -> Result[None, StoreError]:
        """Overwrite the tenant's slot."""
        ...

    def discard(self, tenant: TenantId) -> Result[bool, StoreError]:
        """Remove the slot. Returns Ok(True) if it existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Serialization
# ═══════════════════════════════════════════════════════════════════════════════


def dump_items(items: tuple[LineItem, ...]) -> str:
    return json.dumps([item.to_dict() for item in items])


def parse_items(raw: str) -> Result[tuple[LineItem, ...], StoreError]:
    try:
        data = json.loads(raw)
        return Ok(tuple(LineItem.from_dict(entry) for entry in data))
    except (ValueError, KeyError, TypeError, InvalidOperation) as e:
        return Error(StoreError("Corrupt cart slot", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Repository — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartRepository:
    """
    In-memory cart slots, stored in serialized form.

    Note: Only for a single process / tests. Keeping the JSON form means a
    round trip exercises the same path a durable backend does.
    """

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def load(self, tenant: TenantId) -> Result[tuple[LineItem, ...], StoreError]:
        raw = self._slots.get(str(tenant))
        if raw is None:
            return Ok(())
        return parse_items(raw)

    def save(
        self, tenant: TenantId, items: tuple[LineItem, ...]
    ) -> Result[None, StoreError]:
        self._slots[str(tenant)] = dump_items(items)
        return Ok(None)

    def discard(self, tenant: TenantId) -> Result[bool, StoreError]:
        return Ok(self._slots.pop(str(tenant), None) is not None)

    def raw(self, tenant: TenantId) -> str | None:
        """Serialized slot contents, for inspection."""
        return self._slots.get(str(tenant))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "StoreError",
    "CartRepository",
    "dump_items",
    "parse_items",
    "MemoryCartRepository",
)
