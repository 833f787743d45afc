"""
Client configuration — where the API lives and how hard to try.

    config = ClientConfig.from_env().with_timeout(timedelta(seconds=5))
    client = build_client(config, credentials=lambda: auth.token)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta

import httpx

from cartflow.submit import Credentials, HttpxTransport, RateLimitListener, RetryPolicy, SubmissionClient

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = timedelta(seconds=15)

ENV_API_URL = "CARTFLOW_API_URL"
ENV_TIMEOUT = "CARTFLOW_TIMEOUT"
ENV_MAX_RETRIES = "CARTFLOW_MAX_RETRIES"
ENV_BASE_DELAY = "CARTFLOW_BASE_DELAY"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """
    Immutable client settings. Builders return new instances.

    Example:
        config = (
            ClientConfig()
            .with_base_url("https://shop.example.com/api")
            .with_retry(RetryPolicy().with_max_retries(5))
        )
    """

    base_url: str = DEFAULT_API_URL
    timeout: timedelta = DEFAULT_TIMEOUT
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def with_base_url(self, base_url: str) -> ClientConfig:
        return replace(self, base_url=base_url.rstrip("/"))

    def with_timeout(self, timeout: timedelta) -> ClientConfig:
        return replace(self, timeout=timeout)

    def with_retry(self, retry: RetryPolicy) -> ClientConfig:
        return replace(self, retry=retry)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """
        Defaults overridden by CARTFLOW_* variables.

        CARTFLOW_TIMEOUT and CARTFLOW_BASE_DELAY are seconds (float).
        Malformed values raise ValueError naming the variable.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if url := env.get(ENV_API_URL):
            config = config.with_base_url(url)
        if raw := env.get(ENV_TIMEOUT):
            config = config.with_timeout(timedelta(seconds=_number(ENV_TIMEOUT, raw)))

        retry = config.retry
        if raw := env.get(ENV_MAX_RETRIES):
            retries = int(_number(ENV_MAX_RETRIES, raw))
            if retries < 0:
                raise ValueError(f"{ENV_MAX_RETRIES} must be >= 0, got {raw!r}")
            retry = retry.with_max_retries(retries)
        if raw := env.get(ENV_BASE_DELAY):
            retry = retry.with_backoff(base=timedelta(seconds=_number(ENV_BASE_DELAY, raw)))
        return config.with_retry(retry)


def _number(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def build_client(
    config: ClientConfig | None = None,
    *,
    credentials: Credentials | None = None,
    on_rate_limit: RateLimitListener | None = None,
    http: httpx.AsyncClient | None = None,
) -> SubmissionClient:
    """
    SubmissionClient over httpx, configured from `config`.

    Pass `http` to reuse an existing AsyncClient (tests hand in one with an
    ASGI transport); its base_url and timeout are then left alone.
    """
    config = config or ClientConfig()
    if http is None:
        http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout.total_seconds(),
        )
    logger.debug("Submission client for %s (timeout %s)", config.base_url, config.timeout)
    if credentials is None:
        return SubmissionClient(HttpxTransport(http), config.retry, on_rate_limit=on_rate_limit)
    return SubmissionClient(
        HttpxTransport(http),
        config.retry,
        credentials=credentials,
        on_rate_limit=on_rate_limit,
    )


__all__ = (
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "ENV_API_URL",
    "ENV_TIMEOUT",
    "ENV_MAX_RETRIES",
    "ENV_BASE_DELAY",
    "ClientConfig",
    "build_client",
)
