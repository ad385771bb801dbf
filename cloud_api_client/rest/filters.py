"""Ordered chain of request filters applied before transmission."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..exceptions import CloudAPIError, RequestFilterError
from . import RequestFilter
from .request import Request

logger = logging.getLogger(__name__)


class FilterChain:
    """Applies filters in registration order, each receiving the previous output."""

    def __init__(self, filters: Iterable[RequestFilter] = ()):
        self._filters: list[RequestFilter] = list(filters)

    def append(self, request_filter: RequestFilter) -> None:
        self._filters.append(request_filter)

    @property
    def filters(self) -> tuple[RequestFilter, ...]:
        return tuple(self._filters)

    def apply(self, request: Request) -> Request:
        """Run every filter. Any failure aborts the invocation before anything is sent."""
        for request_filter in self._filters:
            name = type(request_filter).__name__
            try:
                request = request_filter.filter(request)
            except CloudAPIError:
                logger.debug("Filter %s rejected %s", name, request.command)
                raise
            except Exception as exc:
                raise RequestFilterError(f"Filter {name} failed on {request.command}: {exc}") from exc
        return request


class HeaderFilter:
    """Adds a fixed header to every request."""

    def __init__(self, name: str, value: str):
        self._name = name
        self._value = value

    def filter(self, request: Request) -> Request:
        return request.with_header(self._name, self._value)
