"""
Submission client — policy-driven retries around a transport.

Every outbound call of the engine goes through SubmissionClient.submit():
auth header → idempotency headers → transport → policy decision →
(sleep, retry) | Ok(Delivery) | Error(ClassifiedError).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from kungfu import Result, Ok, Error, LazyCoroResult

from cartflow.submit._types import (
    ClassifiedError,
    Delivery,
    ErrorKind,
    Outcome,
    RateLimitNotice,
    Request,
    Response,
)
from cartflow.submit._policy import RetryPolicy, Verdict, classify_failure
from cartflow.submit._transport import Transport
from cartflow.submit._guard import InFlightGuard

logger = logging.getLogger(__name__)

type Credentials = Callable[[], str | None]
"""Reads the caller's bearer token right before each attempt."""

type Sleep = Callable[[float], Awaitable[None]]

type RateLimitListener = Callable[[RateLimitNotice], None]

IDEMPOTENCY_HEADER = "Idempotency-Key"
REPLAY_HEADER = "Idempotency-Replay"


def _no_credentials() -> str | None:
    return None


class SubmissionClient:
    """
    Resilient request/response pipeline parameterized by a RetryPolicy.

    Example:
        client = SubmissionClient(
            HttpxTransport(httpx.AsyncClient(base_url=...)),
            RetryPolicy(),
            credentials=lambda: session.token,
        )
        match await client.submit(Request("POST", "/receipts", body)):
            case Ok(delivery):
                ...
            case Error(e) if e.kind is ErrorKind.AUTH:
                prompt_login()

    Note: Owns no state beyond the in-flight guard and the last rate-limit
    notice. A request whose session_key is already in flight is refused
    without touching the transport.
    """

    def __init__(
        self,
        transport: Transport,
        policy: RetryPolicy | None = None,
        *,
        credentials: Credentials = _no_credentials,
        sleep: Sleep = asyncio.sleep,
        on_rate_limit: RateLimitListener | None = None,
        guard: InFlightGuard | None = None,
    ) -> None:
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.credentials = credentials
        self.sleep = sleep
        self.on_rate_limit = on_rate_limit
        self.guard = guard or InFlightGuard()
        self.rate_limit: RateLimitNotice | None = None

    def _headers(self, request: Request, *, replay: bool) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            IDEMPOTENCY_HEADER: request.idempotency_key,
        }
        token = self.credentials()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if replay:
            headers[REPLAY_HEADER] = "true"
        return headers

    def _publish(self, notice: RateLimitNotice) -> None:
        self.rate_limit = notice
        logger.warning("Rate limited: %s (wait %ss)", notice.message, notice.seconds)
        if self.on_rate_limit is not None:
            self.on_rate_limit(notice)

    async def submit(self, request: Request) -> Result[Delivery, ClassifiedError]:
        """Dispatch with retries. Refuses if the session already has one in flight."""
        key = request.session_key
        if key is not None and not self.guard.acquire(key):
            logger.info("Refused %s %s: session %s already in flight", request.method, request.path, key)
            return Error(ClassifiedError(
                kind=ErrorKind.IN_FLIGHT,
                message="This checkout is already being submitted. Please wait.",
            ))
        try:
            return await self._run(request)
        finally:
            if key is not None:
                self.guard.release(key)

    async def _run(self, request: Request) -> Result[Delivery, ClassifiedError]:
        retries = 0
        # An earlier attempt may have been committed server-side.
        ambiguous = False

        while True:
            attempt = retries + 1
            headers = self._headers(request, replay=ambiguous)
            logger.debug(
                "%s %s attempt %d (auth: %s)",
                request.method,
                request.path,
                attempt,
                "present" if "Authorization" in headers else "missing",
            )

            outcome: Outcome
            match await self.transport.send(request, headers):
                case Ok(response):
                    outcome = response
                case Error(failure):
                    outcome = failure

            decision = self.policy.decide(outcome, retries)
            if decision.notice is not None:
                self._publish(decision.notice)

            match (decision.verdict, outcome):
                case (Verdict.SUCCESS, Response() as response):
                    logger.info(
                        "%s %s succeeded after %d attempt(s)", request.method, request.path, attempt
                    )
                    return Ok(Delivery(
                        body=response.body,
                        status=response.status,
                        attempts=attempt,
                        idempotency_key=request.idempotency_key,
                        replayed=ambiguous,
                    ))

            if not decision.retry:
                error = classify_failure(outcome, decision, attempts=attempt)
                logger.warning(
                    "%s %s failed after %d attempt(s): %s", request.method, request.path, attempt, error
                )
                return Error(error)

            if decision.verdict is Verdict.TRANSIENT and request.is_write:
                ambiguous = True
                logger.warning(
                    "Retrying %s %s that may already be committed (key %s)",
                    request.method,
                    request.path,
                    request.idempotency_key,
                )

            delay = decision.delay.total_seconds()
            logger.warning(
                "%s %s attempt %d got %s, retrying in %.1fs",
                request.method,
                request.path,
                attempt,
                decision.verdict.name,
                delay,
            )
            await self.sleep(delay)
            retries += 1

    def __call__(self, request: Request) -> LazyCoroResult[Delivery, ClassifiedError]:
        """Lazy form: nothing is sent until awaited."""
        async def inner() -> Result[Delivery, ClassifiedError]:
            return await self.submit(request)
        return LazyCoroResult(inner)


__all__ = (
    "Credentials",
    "Sleep",
    "RateLimitListener",
    "IDEMPOTENCY_HEADER",
    "REPLAY_HEADER",
    "SubmissionClient",
)
