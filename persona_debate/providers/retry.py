"""Exponential backoff for rate-limited provider calls.

The retry loop is an explicit state machine (``RetryState``) so the delay
formula and attempt accounting can be tested without real sleeping: both the
sleep coroutine and the jitter source are injectable.
"""

import asyncio
import logging
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from persona_debate.providers.base import ProviderError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

BASE_DELAY_MS = 1000
MAX_DELAY_MS = 30000
JITTER_RATIO = 0.3


def backoff_delay_ms(attempt: int, rand: Callable[[], float] = random.random) -> int:
    """Delay before retrying after 0-indexed *attempt*.

    ``min(1000 * 2**attempt, 30000)`` plus up to 30% jitter of that value.
    """
    delay = min(BASE_DELAY_MS * 2 ** attempt, MAX_DELAY_MS)
    jitter = rand() * JITTER_RATIO * delay
    return math.floor(delay + jitter)


@dataclass
class RetryState:
    max_attempts: int
    attempt: int = 0                        # attempts made so far
    last_error: ProviderError | None = None
    delay_ms: int = 0                       # delay before the next attempt

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def record_failure(
        self,
        error: ProviderError,
        rand: Callable[[], float] = random.random,
    ) -> bool:
        """Record a failed attempt. Returns True if another attempt should follow."""
        self.attempt += 1
        self.last_error = error
        if not isinstance(error, RateLimitError) or self.exhausted:
            self.delay_ms = 0
            return False
        self.delay_ms = backoff_delay_ms(self.attempt - 1, rand)
        return True


async def call_with_retry(
    call: Callable[[], Awaitable[T]],
    max_attempts: int,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
    label: str = "provider",
) -> T:
    """Run *call*, retrying only on RateLimitError, at most *max_attempts* times in total.

    Any other ProviderError propagates immediately. When the budget runs out
    the last rate-limit error is re-raised.
    """
    state = RetryState(max_attempts=max(1, max_attempts))
    while True:
        try:
            return await call()
        except ProviderError as exc:
            if not state.record_failure(exc, rand):
                if isinstance(exc, RateLimitError):
                    logger.warning(
                        "%s still rate limited after %d attempts, giving up",
                        label, state.attempt,
                    )
                raise
            logger.warning(
                "%s rate limited (attempt %d/%d). Waiting %dms before retry...",
                label, state.attempt, state.max_attempts, state.delay_ms,
            )
            await sleep(state.delay_ms / 1000)
