"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass, field
from typing import Any

from kungfu import Result, Ok, Error

from cartflow import cart as K
from cartflow._types import money
from cartflow.submit import Request, Response, TransportFailure


# Catalog
CATALOG = {
    "shampoo": K.CatalogItem(ref=2, name="Argan Shampoo", price=money("12.99"), stock=3),
    "conditioner": K.CatalogItem(ref=3, name="Conditioner", price=money("10.00"), stock=10),
    "haircut": K.CatalogItem(ref=7, name="Haircut", price=money("30.00"), kind=K.ItemKind.SERVICE),
}


# Fake backend
@dataclass(slots=True)
class FakeBackend:
    """
    Transport that answers like the receipts/bookings server.

    outages: statuses returned (in order) before the real handler runs.
    """

    outages: list[int | str] = field(default_factory=list)
    seen_keys: dict[str, Mapping[str, Any]] = field(default_factory=dict)
    calls: int = 0
    _numbers: itertools.count = field(default_factory=lambda: itertools.count(1))

    async def send(self, request: Request, headers: Mapping[str, str]) -> Result[Response, TransportFailure]:
        await asyncio.sleep(0.01)
        self.calls += 1
        replay = headers.get("Idempotency-Replay") == "true"
        print(f"    → {request.method} {request.path} (attempt {self.calls}{', replay' if replay else ''})")

        if self.outages:
            outage = self.outages.pop(0)
            if outage == "timeout":
                return Error(TransportFailure("read timeout", timeout=True))
            return Ok(Response(int(outage), {"success": False, "message": "Service unavailable"}))

        key = headers.get("Idempotency-Key", "")
        if key in self.seen_keys:
            return Ok(Response(201, self.seen_keys[key]))

        body = self._handle(request, headers)
        if body.get("success"):
            self.seen_keys[key] = body
        return Ok(Response(201 if body.get("success") else 401, body))

    def _handle(self, request: Request, headers: Mapping[str, str]) -> dict[str, Any]:
        payload = dict(request.body or {})
        if request.path == "/bookings/customer":
            return {"success": True, "data": {"id": 501, "staff_id": payload.get("staff_id") or 4, "duration": 45, "price": 30}}
        if request.path == "/receipts" and "Authorization" not in headers:
            return {"success": False, "message": "Access token required"}
        number = f"RCP-{next(self._numbers):05d}"
        return {"success": True, "data": {"receipt": {**payload, "id": 1, "receipt_number": number}, "receipt_number": number}}


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


async def no_wait(delay: float) -> None:
    print(f"    … waiting {delay:.0f}s")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
