"""Bounded exponential-backoff retry around the thread page transport."""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from ngaweb.config import config
from ngaweb.errors import TransientFetchError
from ngaweb.parse.models import RawDocument, RequestKey

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str, int, Optional[str]], Awaitable[RawDocument]]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt ceiling and backoff shape, all durations in seconds."""

    max_attempts: int = config.MAX_ATTEMPTS
    min_backoff: float = config.MIN_BACKOFF
    max_backoff: float = config.MAX_BACKOFF
    jitter: float = config.JITTER
    min_sleep: float = config.MIN_SLEEP

    def backoff(self, failed_attempts: int, rand: Callable[[float, float], float] = random.uniform) -> float:
        """Delay after the ``failed_attempts``-th failure."""
        base = min(self.max_backoff, self.min_backoff * 2 ** (failed_attempts - 1))
        return max(self.min_sleep, base + rand(-self.jitter, self.jitter))


class RetryingFetcher:
    """
    Call ``fetch`` until it succeeds or ``policy.max_attempts`` is reached.

    Only TransientFetchError is retried; anything else (InvalidRequestError
    included) goes straight through. After the last attempt the last error
    is re-raised as is.
    """

    def __init__(
        self,
        fetch: FetchFunc,
        policy: Optional[RetryPolicy] = None,
        sleep: SleepFunc = asyncio.sleep,
        rand: Callable[[float, float], float] = random.uniform,
    ):
        self.fetch_func = fetch
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.rand = rand
        self.retry_count = 0
        self.backoff_time_total = 0.0

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.policy.backoff(retry_state.attempt_number, self.rand)

    def _before_sleep(self, key: RequestKey, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        self.retry_count += 1
        self.backoff_time_total += delay
        logger.warning(
            f"Fetch {key} attempt {retry_state.attempt_number}/{self.policy.max_attempts} failed "
            f"({type(error).__name__}: {error}), retrying in {delay:.2f}s"
        )

    async def fetch(self, key: RequestKey, referer: Optional[str] = None) -> RawDocument:
        """Fetch the page for ``key`` with retries."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(TransientFetchError),
            sleep=self.sleep,
            before_sleep=lambda state: self._before_sleep(key, state),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.fetch_func(key.tid, key.page, referer)
