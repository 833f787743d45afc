"""
Transport — how a request reaches the server. Knows nothing about retries.

Transport.send() returns Result: Ok(Response) for any HTTP status,
Error(TransportFailure) when no response arrived at all.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Protocol

import httpx
from combinators import lift as L
from kungfu import Result, Ok, Error

from cartflow.submit._types import Request, Response, TransportFailure


# ═══════════════════════════════════════════════════════════════════════════════
# Transport Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Transport(Protocol):
    async def send(
        self, request: Request, headers: Mapping[str, str]
    ) -> Result[Response, TransportFailure]:
        """Dispatch once. Headers are final (auth + idempotency already set)."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# httpx Transport
# ═══════════════════════════════════════════════════════════════════════════════


def _failure(e: Exception) -> TransportFailure:
    if isinstance(e, httpx.TimeoutException):
        return TransportFailure(f"Timed out: {e}", timeout=True, cause=e)
    return TransportFailure(f"{type(e).__name__}: {e}", cause=e)


class HttpxTransport:
    """
    Transport over an httpx.AsyncClient.

    Note: base_url and timeout live on the client, see config.build_client().
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def _dispatch(self, request: Request, headers: Mapping[str, str]) -> Response:
        response = await self.client.request(
            request.method,
            request.path,
            json=request.body,
            headers=dict(headers),
        )
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        return Response(
            status=response.status_code,
            body=body,
            headers={k.lower(): v for k, v in response.headers.items()},
        )

    async def send(
        self, request: Request, headers: Mapping[str, str]
    ) -> Result[Response, TransportFailure]:
        return await L.catching_async(
            lambda: self._dispatch(request, headers),
            on_error=_failure,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


# ═══════════════════════════════════════════════════════════════════════════════
# Scripted Transport — For Testing
# ═══════════════════════════════════════════════════════════════════════════════

type Scripted = int | Response | TransportFailure


class ScriptedTransport:
    """
    Replays a fixed sequence of outcomes and records every call.

    Example:
        transport = ScriptedTransport(500, 500, 500, Response(200, {"ok": True}))

    Note: hold (if given) is awaited before each reply, letting a test keep a
    submission in flight. Running past the end of the script is a test bug.
    """

    def __init__(self, *script: Scripted, hold: asyncio.Event | None = None) -> None:
        self._script: deque[Scripted] = deque(script)
        self.hold = hold
        self.calls: list[tuple[Request, dict[str, str]]] = []

    def extend(self, script: Iterable[Scripted]) -> None:
        self._script.extend(script)

    async def send(
        self, request: Request, headers: Mapping[str, str]
    ) -> Result[Response, TransportFailure]:
        self.calls.append((request, dict(headers)))
        if self.hold is not None:
            await self.hold.wait()
        if not self._script:
            raise AssertionError(f"Unscripted call #{len(self.calls)}: {request.method} {request.path}")

        step = self._script.popleft()
        match step:
            case TransportFailure():
                return Error(step)
            case Response():
                return Ok(step)
            case int(status):
                return Ok(Response(status=status, body={"success": 200 <= status < 300}))

    @property
    def attempts(self) -> int:
        return len(self.calls)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Transport",
    "HttpxTransport",
    "ScriptedTransport",
)
