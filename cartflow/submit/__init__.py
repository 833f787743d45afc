"""
Submit — resilient outbound calls: auth, retries, rate limits, idempotency.

    from cartflow import submit as X

    client = X.SubmissionClient(
        X.HttpxTransport(httpx.AsyncClient(base_url="http://localhost:3001/api")),
        X.RetryPolicy().with_max_retries(3),
        credentials=lambda: auth.token,
    )
    result = await client.submit(X.Request("POST", "/receipts", payload, session_key=sid))

Architecture — policy separated from transport:

    Request
       │
       ▼
    InFlightGuard ── already pending ──▶ Error(IN_FLIGHT)
       │
       ▼
    headers (Authorization, Idempotency-Key, Idempotency-Replay)
       │
       ▼
    Transport.send ──▶ Response | TransportFailure
       │
       ▼
    RetryPolicy.decide ──▶ Decision(verdict, retry, delay, notice)
       │                           │
       │ retry                     │ final
       ▼                           ▼
    sleep(delay) ─▶ loop      Ok(Delivery) | Error(ClassifiedError)
"""

from cartflow.submit._types import (
    ErrorKind,
    RateLimitNotice,
    ClassifiedError,
    new_idempotency_key,
    Request,
    Response,
    TransportFailure,
    Outcome,
    Delivery,
    server_message,
)
from cartflow.submit._policy import (
    Verdict,
    verdict_of,
    Decision,
    RETRY_AFTER_CEILING,
    parse_retry_after,
    RetryPolicy,
    classify_failure,
)
from cartflow.submit._transport import (
    Transport,
    HttpxTransport,
    ScriptedTransport,
)
from cartflow.submit._guard import InFlightGuard
from cartflow.submit._client import (
    Credentials,
    Sleep,
    RateLimitListener,
    IDEMPOTENCY_HEADER,
    REPLAY_HEADER,
    SubmissionClient,
)

__all__ = (
    # Types
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
    # Policy
    "Verdict",
    "verdict_of",
    "Decision",
    "RETRY_AFTER_CEILING",
    "parse_retry_after",
    "RetryPolicy",
    "classify_failure",
    # Transport
    "Transport",
    "HttpxTransport",
    "ScriptedTransport",
    # Guard
    "InFlightGuard",
    # Client
    "Credentials",
    "Sleep",
    "RateLimitListener",
    "IDEMPOTENCY_HEADER",
    "REPLAY_HEADER",
    "SubmissionClient",
)
