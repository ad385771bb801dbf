"""Declarative REST invocation: strategy Protocols shared by every provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import requests

    from ..exceptions import HttpResponseError
    from .request import Request


@runtime_checkable
class RequestFilter(Protocol):
    """Transform applied to a built request before it is sent."""

    def filter(self, request: Request) -> Request:
        """Return the request to hand to the next filter (or the transport)."""
        ...


@runtime_checkable
class ResponseParser(Protocol):
    """Turns a successful response into the operation's result value."""

    def parse(self, response: requests.Response) -> Any:
        ...


@runtime_checkable
class ExceptionParser(Protocol):
    """Resolves an HTTP error into a default value or a typed exception."""

    def handle(self, error: HttpResponseError) -> Any:
        ...
