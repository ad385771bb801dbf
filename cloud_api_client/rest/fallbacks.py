"""Exception parser strategies: how an operation resolves a non-2xx response."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import (
    AuthorizationError,
    BadRequestError,
    HttpResponseError,
    ResourceConflictError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

_TYPED_4XX: dict[int, type[HttpResponseError]] = {
    400: BadRequestError,
    401: AuthorizationError,
    403: AuthorizationError,
    404: ResourceNotFoundError,
    409: ResourceConflictError,
}


class MapHttp4xxCodesToExceptions:
    """Raises a typed exception for mapped 4xx codes; anything else is re-raised unchanged."""

    def handle(self, error: HttpResponseError) -> Any:
        typed = _TYPED_4XX.get(error.status_code or 0)
        if typed is None:
            raise error
        raise typed.from_error(error) from error

    def __repr__(self) -> str:
        return "MapHttp4xxCodesToExceptions()"


class _OnNotFound(MapHttp4xxCodesToExceptions):
    def _default(self) -> Any:
        return None

    def handle(self, error: HttpResponseError) -> Any:
        if error.status_code == 404:
            logger.debug("%s returned 404, resolving to %r", error.command, self._default())
            return self._default()
        return super().handle(error)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReturnNullOnNotFound(_OnNotFound):
    """404 on a lookup means the resource does not exist: return None."""


class ReturnEmptySetOnNotFound(_OnNotFound):
    """404 on a list means nothing to list: return an empty collection."""

    def _default(self) -> list[Any]:
        return []


class ReturnVoidOnNotFound(_OnNotFound):
    """404 on a delete or update means the work is already done."""
