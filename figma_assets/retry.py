"""
Retry with backoff for remote export jobs.

A policy is a list of rules; each rule pairs a predicate over the raised
exception with a delay schedule. Both failure channels (HTTP transport errors
and in-band job failures) go through the same loop and share one attempt
counter.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

from .exceptions import JobFailed, RemoteError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class RetryRule:
    name: str
    predicate: Callable[[BaseException], bool]
    # attempt number that just failed (1-based) -> seconds to wait
    delay: Callable[[int], float]


class RetryPolicy:
    def __init__(self, rules: List[RetryRule], max_attempts: int = MAX_ATTEMPTS,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.rules = rules
        self.max_attempts = max_attempts
        self.sleep = sleep

    def match(self, error: BaseException) -> Optional[RetryRule]:
        for rule in self.rules:
            if rule.predicate(error):
                return rule
        return None

    async def run(self, operation: Callable[[], Awaitable[T]], description: str = 'operation') -> T:
        """Run operation until it succeeds, a non-retryable error occurs, or attempts run out"""
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                rule = self.match(e)
                if rule is None or attempt >= self.max_attempts:
                    if rule is not None:
                        logger.error(f"Max retries reached for {description}: {e}")
                    raise
                delay = rule.delay(attempt)
                logger.warning(
                    f"{description} attempt {attempt}/{self.max_attempts} failed ({rule.name}): {e}; "
                    f"retrying in {delay * 1000:.0f}ms"
                )
                await self.sleep(delay)
                attempt += 1


def is_expired_job(error: BaseException) -> bool:
    return isinstance(error, JobFailed) and error.is_expired


def is_transient_http(error: BaseException) -> bool:
    return isinstance(error, RemoteError) and error.is_transient


def exponential_backoff(base: float = 1.0, cap: float = 5.0) -> Callable[[int], float]:
    def delay(attempt: int) -> float:
        return min(base * 2 ** (attempt - 1), cap)
    return delay


def jittered_delay(base: float = 0.8, spread: float = 0.5,
                   rand: Callable[[], float] = random.random) -> Callable[[int], float]:
    def delay(attempt: int) -> float:
        return base + rand() * spread
    return delay


def default_export_policy(max_attempts: int = MAX_ATTEMPTS,
                          sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                          rand: Callable[[], float] = random.random) -> RetryPolicy:
    """Expired/timed-out jobs retry after 800-1300ms; HTTP 429/5xx back off 1s, 2s, 4s... capped at 5s"""
    return RetryPolicy(
        rules=[
            RetryRule('job expired', is_expired_job, jittered_delay(rand=rand)),
            RetryRule('transient HTTP error', is_transient_http, exponential_backoff()),
        ],
        max_attempts=max_attempts,
        sleep=sleep
    )
