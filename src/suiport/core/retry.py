"""Bounded retry with linear backoff for external calls.

Every external call made by the price cascade and the wallet aggregation
goes through RetryPolicy. Failures are retried up to ``max_attempts`` times,
waiting ``base_delay * attempt_number`` seconds between attempts. When all
attempts fail the policy returns None instead of raising, so callers can
treat None as "source unavailable".

Usage:
    policy = RetryPolicy(max_attempts=3, base_delay=1.0)
    metadata = await policy.run(lambda: rpc.get_coin_metadata(coin_type), name="coin_metadata")
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from suiport.constants.pricing import BASE_DELAY_SECONDS, MAX_ATTEMPTS

log = structlog.get_logger(__name__)

T = TypeVar("T")


def linear_backoff(base_delay: float) -> Any:
    """Wait strategy sleeping ``base_delay * attempt_number`` after each failure."""
    return wait_incrementing(start=base_delay, increment=base_delay)


@dataclass
class RetryPolicy:
    """Retry combinator parameterized by attempt count and delay function.

    Attributes:
        max_attempts: Total attempts before giving up (default 3).
        base_delay: Linear backoff unit in seconds (default 1.0).
        wait: Optional tenacity wait strategy replacing the linear backoff.
        sleep: Awaitable sleep function, injectable for tests.
    """

    max_attempts: int = MAX_ATTEMPTS
    base_delay: float = BASE_DELAY_SECONDS
    wait: Any = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        name: str = "operation",
    ) -> T | None:
        """Run ``operation`` until it returns or attempts are exhausted.

        A returned value (including None) is final and never retried.

        Args:
            operation: Zero-argument coroutine factory.
            name: Operation name for log events.

        Returns:
            The operation's result, or None after ``max_attempts`` failures.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait if self.wait is not None else linear_backoff(self.base_delay),
            retry=retry_if_exception_type(Exception),
            sleep=self.sleep,
            before_sleep=self._log_backoff(name),
            reraise=False,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await operation()
        except RetryError as e:
            error = e.last_attempt.exception()
            log.warning(
                "retry_attempts_exhausted",
                operation=name,
                attempts=self.max_attempts,
                error=str(error),
            )
        return None

    @staticmethod
    def _log_backoff(name: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log.debug(
                "retry_backoff",
                operation=name,
                attempt=retry_state.attempt_number,
                wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
                error=str(error),
            )

        return before_sleep
