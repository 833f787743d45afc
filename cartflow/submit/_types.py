"""
Submission types — requests, responses, classified errors.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum, auto
from typing import Any


# ═══════════════════════════════════════════════════════════════════════════════
# Error Taxonomy
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """Kinds of classified errors."""

    VALIDATION = auto()  # Wizard field missing/malformed, never hits the network
    STOCK_LIMIT = auto()  # Cart rejected a quantity
    RATE_LIMITED = auto()  # 429 after retries were exhausted
    TRANSIENT = auto()  # >=500 / timeout / network after retries were exhausted
    CLIENT = auto()  # Other 4xx, never retried
    AUTH = auto()  # 401, left to the integrating app
    IN_FLIGHT = auto()  # Same session already has a submission pending


@dataclass(frozen=True, slots=True)
class RateLimitNotice:
    """
    What to tell the user after a 429.

    Published even when no retry follows, so a banner can count down.
    """

    wait: timedelta
    message: str

    @property
    def seconds(self) -> int:
        return max(int(round(self.wait.total_seconds())), 0)

    @property
    def display(self) -> str:
        return (
            f"Rate limit exceeded. Please wait {self.seconds} seconds "
            "before trying again."
        )


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    """
    Error value tagged with a taxonomy kind.

    Note: message is user-facing. For CLIENT errors it is the server's
    message verbatim when one was provided.
    """

    kind: ErrorKind
    message: str
    status: int | None = None
    attempts: int = 0
    rate_limit: RateLimitNotice | None = None
    details: tuple[str, ...] = ()

    @property
    def retryable(self) -> bool:
        """Whether asking the user to try again later makes sense."""
        return self.kind in (ErrorKind.RATE_LIMITED, ErrorKind.TRANSIENT, ErrorKind.IN_FLIGHT)

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# Request / Response
# ═══════════════════════════════════════════════════════════════════════════════


def new_idempotency_key() -> str:
    return uuid.uuid4().hex


_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class Request:
    """
    One logical outbound call. Every retry re-sends it unchanged.

    idempotency_key: sent as Idempotency-Key on every attempt.
    session_key: checkout session owning the call; at most one in flight.
    """

    method: str
    path: str
    body: Mapping[str, Any] | None = None
    idempotency_key: str = field(default_factory=new_idempotency_key)
    session_key: str | None = None

    @property
    def is_write(self) -> bool:
        return self.method.upper() in _WRITE_METHODS


@dataclass(frozen=True, slots=True)
class Response:
    """Transport-neutral response. Header names are matched case-insensitively."""

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True, slots=True)
class TransportFailure:
    """No response at all: timeout or network error."""

    message: str
    timeout: bool = False
    cause: Exception | None = None


type Outcome = Response | TransportFailure


@dataclass(frozen=True, slots=True)
class Delivery:
    """
    Successful submission with metadata.

    replayed: a retry followed an attempt that may already have been
    committed server-side; deduplication relied on the idempotency key.
    """

    body: Any
    status: int
    attempts: int
    idempotency_key: str
    replayed: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Server message extraction
# ═══════════════════════════════════════════════════════════════════════════════


def server_message(body: Any) -> tuple[str | None, tuple[str, ...]]:
    """
    `message` and validation `errors[].msg` from a JSON error body.
    """
    if not isinstance(body, Mapping):
        return None, ()
    message = body.get("message")
    errors = body.get("errors")
    details: tuple[str, ...] = ()
    if isinstance(errors, list):
        details = tuple(
            str(err.get("msg") or "Validation error") if isinstance(err, Mapping) else str(err)
            for err in errors
        )
    return (str(message) if message else None), details


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ErrorKind",
    "RateLimitNotice",
    "ClassifiedError",
    "new_idempotency_key",
    "Request",
    "Response",
    "TransportFailure",
    "Outcome",
    "Delivery",
    "server_message",
)
