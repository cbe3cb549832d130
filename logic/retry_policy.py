"""Bounded retry loop shared by every provider call in the pipeline."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from logic.errors import (
    ErrorKind,
    RetryExhaustedError,
    as_photoshoot_error,
    classify,
)
from studio_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
T = TypeVar("T")

AttemptHook = Callable[[int], None]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class RetryPolicy:
    """Retry transient failures with capped exponential back-off.

    ``max_attempts`` counts every call, including the first. Credential and
    fatal errors are raised after the attempt that produced them.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 8.0
    sleep: Sleeper = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Back-off before the retry that follows ``attempt`` (0-based)."""

        return min(self.base_delay * (2 ** attempt), self.max_delay)

    def with_attempts(self, max_attempts: int) -> "RetryPolicy":
        return RetryPolicy(
            max_attempts=max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            sleep=self.sleep,
        )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_attempt: Optional[AttemptHook] = None,
        operation_name: str = "provider_call",
    ) -> T:
        last_error: Optional[BaseException] = None
        for attempt in range(self.max_attempts):
            if on_attempt is not None:
                on_attempt(attempt)
            try:
                return await operation()
            except Exception as exc:
                kind = classify(exc)
                if kind is not ErrorKind.TRANSIENT:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "provider_call_rejected",
                        operation=operation_name,
                        attempt=attempt + 1,
                        error_kind=kind.value,
                        error=str(exc),
                    )
                    error = as_photoshoot_error(exc)
                    if error is exc:
                        raise
                    raise error from exc

                last_error = exc
                if attempt + 1 >= self.max_attempts:
                    break
                delay = self.delay_for(attempt)
                log_event(
                    LOGGER,
                    logging.INFO,
                    "provider_call_retrying",
                    operation=operation_name,
                    attempt=attempt + 1,
                    max_attempts=self.max_attempts,
                    delay_seconds=delay,
                    error=str(exc),
                )
                await self.sleep(delay)

        log_event(
            LOGGER,
            logging.ERROR,
            "provider_call_exhausted",
            operation=operation_name,
            attempts=self.max_attempts,
            error=str(last_error),
        )
        raise RetryExhaustedError(
            f"{operation_name} failed after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
        ) from last_error


async def with_retry(operation: Callable[[], Awaitable[T]], max_attempts: int) -> T:
    """Run ``operation`` under a default :class:`RetryPolicy`."""

    return await RetryPolicy(max_attempts=max_attempts).run(operation)


__all__ = ["RetryPolicy", "with_retry"]
