"""Shared fixtures for cartflow tests."""

from __future__ import annotations

from kungfu import Result, Ok, Error
import pytest

from cartflow import cart as K
from cartflow._types import money
from cartflow.cart import StoreError


class SleepRecorder:
    """Stands in for asyncio.sleep; records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class BrokenRepository:
    """CartRepository whose every write fails."""

    def __init__(self, load_error: bool = False):
        self.load_error = load_error
        self.saves = 0

    def load(self, tenant) -> Result:
        if self.load_error:
            return Error(StoreError("disk unavailable"))
        return Ok(())

    def save(self, tenant, items) -> Result:
        self.saves += 1
        return Error(StoreError("disk full", OSError(28, "No space left on device")))

    def discard(self, tenant) -> Result:
        return Error(StoreError("disk unavailable"))


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def repo():
    return K.MemoryCartRepository()


@pytest.fixture
def cart(repo):
    return K.CartStore.open("acme", repo)


@pytest.fixture
def shampoo():
    return K.CatalogItem(ref=2, name="Shampoo", price=money("12.99"), stock=3)


@pytest.fixture
def haircut():
    return K.CatalogItem(ref=7, name="Haircut", price=money("30.00"), kind=K.ItemKind.SERVICE)


@pytest.fixture
def item_a():
    return K.CatalogItem(ref="A", name="Item A", price=money(10), stock=50)


@pytest.fixture
def item_b():
    return K.CatalogItem(ref="B", name="Item B", price=money(5), stock=50)
