"""Bounded polling: retry a predicate at an interval until it holds or the budget runs out."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from ..exceptions import HttpResponseError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: Exception) -> bool:
    """Network failures and 5xx responses are worth another attempt."""
    if isinstance(exc, TransportError):
        return True
    return isinstance(exc, HttpResponseError) and (exc.status_code or 0) >= 500


class RetryablePredicate(Generic[T]):
    """Calls ``predicate(value)`` until it is truthy or the attempt/time budget is spent.

    Returns True as soon as the predicate holds and False once the budget is
    exhausted or ``stop_event`` is set. Exceptions accepted by ``retry_on``
    count as a failed attempt; any other exception propagates.
    """

    def __init__(
        self,
        predicate: Callable[[T], bool],
        interval: float,
        max_attempts: int | None = None,
        timeout: float | None = None,
        max_interval: float | None = None,
        backoff: float = 1.0,
        retry_on: Callable[[Exception], bool] = is_transient,
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts is None and timeout is None:
            raise ValueError("RetryablePredicate needs max_attempts, timeout, or both")
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if backoff < 1:
            raise ValueError("backoff must be >= 1")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._predicate = predicate
        self._interval = interval
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._max_interval = max_interval
        self._backoff = backoff
        self._retry_on = retry_on
        self._stop_event = stop_event
        self._clock = clock
        self._sleep = sleep

    @property
    def predicate(self) -> Callable[[T], bool]:
        """The wrapped predicate, for callers that need state it kept from the last attempt."""
        return self._predicate

    def __call__(self, value: T) -> bool:
        start = self._clock()
        deadline = start + self._timeout if self._timeout is not None else None
        delay = self._interval
        attempt = 0

        while not self._stopped():
            attempt += 1
            try:
                if self._predicate(value):
                    logger.debug(
                        "Predicate satisfied for %s on attempt %d", value, attempt,
                        extra={"attempt": attempt, "elapsed_seconds": round(self._clock() - start, 2)},
                    )
                    return True
            except Exception as exc:
                if not self._retry_on(exc):
                    raise
                logger.warning(
                    "Attempt %d for %s failed, will retry: %s", attempt, value, exc,
                    extra={"attempt": attempt},
                )

            if self._max_attempts is not None and attempt >= self._max_attempts:
                logger.info("Giving up on %s after %d attempts", value, attempt, extra={"attempt": attempt})
                return False

            wait = delay
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    logger.info(
                        "Giving up on %s after %.1fs", value, self._timeout,
                        extra={"attempt": attempt, "elapsed_seconds": round(self._clock() - start, 2)},
                    )
                    return False
                wait = min(wait, remaining)

            self._wait(wait)
            delay = self._next_delay(delay)

        logger.info("Polling for %s cancelled", value)
        return False

    def _next_delay(self, delay: float) -> float:
        delay *= self._backoff
        if self._max_interval is not None:
            delay = min(delay, self._max_interval)
        return delay

    def _stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    def _wait(self, seconds: float) -> None:
        """Sleep, waking early if the stop event is set."""
        if self._stop_event is not None:
            self._stop_event.wait(seconds)
        else:
            self._sleep(seconds)
