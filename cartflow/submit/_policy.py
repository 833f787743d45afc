"""
Retry policy — which outcomes are retried, and after how long.

Pure: no I/O, no clock except when parsing an HTTP-date Retry-After.
Tested against scripted outcomes, independent of any transport.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from enum import Enum, auto

from cartflow.submit._types import (
    ClassifiedError,
    ErrorKind,
    Outcome,
    RateLimitNotice,
    Response,
    TransportFailure,
    server_message,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Verdict — what a single attempt's outcome means
# ═══════════════════════════════════════════════════════════════════════════════


class Verdict(Enum):
    SUCCESS = auto()
    TRANSIENT = auto()  # >=500, 408, timeout, network; may have been committed
    RATE_LIMITED = auto()  # 429
    AUTH = auto()  # 401
    CLIENT = auto()  # any other 4xx (and unexpected 1xx/3xx)


def verdict_of(outcome: Outcome) -> Verdict:
    match outcome:
        case TransportFailure():
            return Verdict.TRANSIENT
        case Response(status=status) if 200 <= status < 300:
            return Verdict.SUCCESS
        case Response(status=429):
            return Verdict.RATE_LIMITED
        case Response(status=401):
            return Verdict.AUTH
        case Response(status=408):
            return Verdict.TRANSIENT
        case Response(status=status) if status >= 500:
            return Verdict.TRANSIENT
        case _:
            return Verdict.CLIENT


# ═══════════════════════════════════════════════════════════════════════════════
# Decision
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of consulting the policy after one attempt."""

    verdict: Verdict
    retry: bool
    delay: timedelta = timedelta(0)
    notice: RateLimitNotice | None = None


RETRY_AFTER_CEILING = timedelta(hours=1)


def parse_retry_after(value: str | None, now: datetime | None = None) -> timedelta | None:
    """
    Retry-After as seconds or HTTP-date. Unparseable or non-finite ⇒ None.

    Note: Waits are clamped to [0, RETRY_AFTER_CEILING].
    """
    if value is None:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            return None
        return timedelta(seconds=min(max(seconds, 0), RETRY_AFTER_CEILING.total_seconds()))

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    return min(max(when - current, timedelta(0)), RETRY_AFTER_CEILING)


# ═══════════════════════════════════════════════════════════════════════════════
# Retry Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Retry configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            RetryPolicy()
            .with_max_retries(3)
            .with_backoff(base=timedelta(seconds=1), multiplier=2)
        )

    Note: max_retries counts retries after the first attempt, so the default
    allows 4 attempts in total. Delays grow as base * multiplier ** retry_index
    (1s, 2s, 4s), capped by backoff_max. A server Retry-After is honored up
    to RETRY_AFTER_CEILING.
    """

    max_retries: int = 3
    base_delay: timedelta = timedelta(seconds=1)
    backoff_multiplier: float = 2.0
    backoff_max: timedelta = timedelta(seconds=30)
    retry_rate_limited: bool = True

    def with_max_retries(self, retries: int) -> RetryPolicy:
        return replace(self, max_retries=max(retries, 0))

    def with_backoff(
        self,
        *,
        base: timedelta | None = None,
        multiplier: float | None = None,
        maximum: timedelta | None = None,
    ) -> RetryPolicy:
        return replace(
            self,
            base_delay=base if base is not None else self.base_delay,
            backoff_multiplier=multiplier if multiplier is not None else self.backoff_multiplier,
            backoff_max=maximum if maximum is not None else self.backoff_max,
        )

    def without_rate_limit_retry(self) -> RetryPolicy:
        """Surface 429 immediately instead of waiting it out."""
        return replace(self, retry_rate_limited=False)

    def backoff(self, retry_index: int) -> timedelta:
        """Delay before retry number retry_index (0-based)."""
        delay = self.base_delay * (self.backoff_multiplier ** retry_index)
        return min(delay, self.backoff_max)

    def decide(self, outcome: Outcome, retries_done: int) -> Decision:
        """
        Decide what follows an attempt, given how many retries already ran.
        """
        verdict = verdict_of(outcome)
        budget_left = retries_done < self.max_retries

        match (verdict, outcome):
            case (Verdict.TRANSIENT, _):
                return Decision(
                    verdict,
                    retry=budget_left,
                    delay=self.backoff(retries_done) if budget_left else timedelta(0),
                )
            case (Verdict.RATE_LIMITED, Response() as response):
                hint = parse_retry_after(response.header("Retry-After"))
                wait = hint if hint is not None else self.backoff(retries_done)
                message, _ = server_message(response.body)
                notice = RateLimitNotice(wait=wait, message=message or "Too many requests")
                retry = budget_left and self.retry_rate_limited
                return Decision(
                    verdict,
                    retry=retry,
                    delay=wait if retry else timedelta(0),
                    notice=notice,
                )
            case _:
                return Decision(verdict, retry=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Classification of a final failure
# ═══════════════════════════════════════════════════════════════════════════════


def classify_failure(outcome: Outcome, decision: Decision, attempts: int) -> ClassifiedError:
    """Turn the last attempt's outcome into a ClassifiedError."""
    match outcome:
        case TransportFailure(timeout=True):
            return ClassifiedError(
                kind=ErrorKind.TRANSIENT,
                message="Request timed out. Please check your connection and try again.",
                attempts=attempts,
            )
        case TransportFailure():
            return ClassifiedError(
                kind=ErrorKind.TRANSIENT,
                message="Network error. Please check your connection and try again.",
                attempts=attempts,
            )
        case Response():
            return _classify_response(outcome, decision, attempts)


def _classify_response(outcome: Response, decision: Decision, attempts: int) -> ClassifiedError:
    message, details = server_message(outcome.body)

    match decision.verdict:
        case Verdict.RATE_LIMITED:
            notice = decision.notice
            return ClassifiedError(
                kind=ErrorKind.RATE_LIMITED,
                message=notice.display if notice else "Too many requests. Please try again shortly.",
                status=outcome.status,
                attempts=attempts,
                rate_limit=notice,
            )
        case Verdict.AUTH:
            return ClassifiedError(
                kind=ErrorKind.AUTH,
                message=message or "Authentication required",
                status=outcome.status,
                attempts=attempts,
            )
        case Verdict.TRANSIENT:
            return ClassifiedError(
                kind=ErrorKind.TRANSIENT,
                message=message or "An unexpected error occurred. Please try again later.",
                status=outcome.status,
                attempts=attempts,
            )
        case _:
            text = message or "An error occurred"
            if details:
                text = f"{text}: {', '.join(details)}"
            return ClassifiedError(
                kind=ErrorKind.CLIENT,
                message=text,
                status=outcome.status,
                attempts=attempts,
                details=details,
            )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Verdict",
    "verdict_of",
    "Decision",
    "RETRY_AFTER_CEILING",
    "parse_retry_after",
    "RetryPolicy",
    "classify_failure",
)
