"""Pending result that applies a transform lazily, when the caller asks for the value."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Generic, TypeVar

F = TypeVar("F")
T = TypeVar("T")

_PENDING = "pending"
_COMPLETED = "completed"
_FAILED = "failed"


class TransformingFuture(Generic[F, T]):
    """Wraps a future of F and a function F -> T.

    ``cancel``/``done``/``cancelled``/``running`` go straight to the inner
    future. The transform runs at most once, on the first ``result()`` or
    ``exception()`` call after the inner future completes. A timed wait that
    expires re-raises ``TimeoutError`` without transforming.
    """

    def __init__(self, inner: Future, transform: Callable[[F], T]):
        self._inner = inner
        self._transform = transform
        self._lock = threading.Lock()
        self._state = _PENDING
        self._value: T | None = None
        self._error: BaseException | None = None

    # ── Delegated to the inner future ───────────────────────────────

    def cancel(self) -> bool:
        return self._inner.cancel()

    def cancelled(self) -> bool:
        return self._inner.cancelled()

    def running(self) -> bool:
        return self._inner.running()

    def done(self) -> bool:
        return self._inner.done()

    def add_done_callback(self, fn: Callable[[TransformingFuture[F, T]], Any]) -> None:
        self._inner.add_done_callback(lambda _inner: fn(self))

    # ── Value access ────────────────────────────────────────────────

    def result(self, timeout: float | None = None) -> T:
        self._resolve(timeout)
        if self._state == _FAILED:
            raise self._error  # type: ignore[misc]
        return self._value  # type: ignore[return-value]

    def exception(self, timeout: float | None = None) -> BaseException | None:
        self._resolve(timeout)
        return self._error

    def _resolve(self, timeout: float | None) -> None:
        if self._state != _PENDING:
            return
        # TimeoutError and CancelledError propagate from here untransformed
        inner_error = self._inner.exception(timeout)
        with self._lock:
            if self._state != _PENDING:
                return
            if inner_error is not None:
                self._error = inner_error
                self._state = _FAILED
                return
            try:
                self._value = self._transform(self._inner.result())
                self._state = _COMPLETED
            except Exception as exc:
                self._error = exc
                self._state = _FAILED

    def __repr__(self) -> str:
        return f"<TransformingFuture state={self._state} inner={self._inner!r}>"
