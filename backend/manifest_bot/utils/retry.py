"""Bounded exponential-backoff retry built on tenacity."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 16.0


def build_retrying(
    policy: RetryPolicy,
    retryable: Callable[[BaseException], bool],
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncRetrying:
    """Return an AsyncRetrying that retries only exceptions accepted by ``retryable``.

    The last exception is re-raised once attempts are exhausted so the caller can
    translate it into a domain error.
    """
    return AsyncRetrying(
        sleep=sleep,
        reraise=True,
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, min=0, max=policy.max_delay),
        retry=retry_if_exception(retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
