"""Invocation facade: descriptor + arguments in, typed result (or typed error) out."""

from __future__ import annotations

import functools
import logging
from typing import Any

import requests

from ..exceptions import HttpResponseError
from .builder import RequestBuilder
from .descriptor import OperationDescriptor
from .filters import FilterChain
from .futures import TransformingFuture
from .options import QueryOptions
from .request import Request
from .transport import TransportInvoker

logger = logging.getLogger(__name__)


class RestClient:
    """Runs the build -> filter -> send -> parse pipeline for any operation descriptor."""

    def __init__(self, builder: RequestBuilder, filters: FilterChain, transport: TransportInvoker):
        self._builder = builder
        self._filters = filters
        self._transport = transport

    def build_request(
        self,
        descriptor: OperationDescriptor,
        *args: Any,
        options: QueryOptions | None = None,
        **kwargs: Any,
    ) -> Request:
        """Build and filter a request without sending it."""
        request = self._builder.build(descriptor, *args, options=options, **kwargs)
        return self._filters.apply(request)

    def invoke(
        self,
        descriptor: OperationDescriptor,
        *args: Any,
        options: QueryOptions | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send the operation and block for its parsed result."""
        request = self.build_request(descriptor, *args, options=options, **kwargs)
        response = self._transport.send(request)
        return self._handle(descriptor, request, response)

    def invoke_async(
        self,
        descriptor: OperationDescriptor,
        *args: Any,
        options: QueryOptions | None = None,
        **kwargs: Any,
    ) -> TransformingFuture:
        """Send the operation on the worker pool.

        Building and filtering happen here, in the caller's thread, so contract
        and filter errors raise immediately. Parsing happens on ``result()``.
        """
        request = self.build_request(descriptor, *args, options=options, **kwargs)
        future = self._transport.submit(request)
        return TransformingFuture(future, functools.partial(self._handle, descriptor, request))

    def _handle(self, descriptor: OperationDescriptor, request: Request, response: requests.Response) -> Any:
        if response.status_code >= 400:
            error = HttpResponseError(
                f"HTTP {response.status_code} on {request.method} {descriptor.command}: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
                command=descriptor.command,
            )
            logger.debug(
                "%s failed with %d, resolving via %r", descriptor.name, response.status_code, descriptor.fallback,
                extra={"command": descriptor.command, "status_code": response.status_code},
            )
            return descriptor.fallback.handle(error)
        return descriptor.parser.parse(response)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
