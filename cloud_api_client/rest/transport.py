"""HTTP transport: sends filtered requests synchronously or on a worker pool."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import requests

from ..exceptions import TransportError
from ..logging_config import redact_query
from .request import Request

logger = logging.getLogger(__name__)


class TransportInvoker:
    """Sends requests over a shared ``requests.Session``.

    Status codes are not interpreted here; only network-level failures raise.
    """

    def __init__(
        self,
        timeout: float = 30,
        verify_ssl: bool = True,
        max_workers: int = 8,
        session: requests.Session | None = None,
    ):
        self._session = session or requests.Session()
        self._session.verify = verify_ssl
        self._timeout = timeout
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def send(self, request: Request) -> requests.Response:
        """Send and block until the response arrives."""
        logger.debug(
            "%s %s", request.method, redact_query(request.url),
            extra={"command": request.command, "method": request.method},
        )
        try:
            resp = self._session.request(
                request.method,
                request.url,
                headers={name: ", ".join(values) for name, values in request.header_map.items()},
                data=request.body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(
                redact_query(f"Request failed: {exc}"),
                request_line=redact_query(request.request_line),
            ) from exc

        logger.debug(
            "%s %s -> %d", request.method, request.command, resp.status_code,
            extra={"command": request.command, "status_code": resp.status_code},
        )
        return resp

    def submit(self, request: Request) -> Future:
        """Queue the request on the worker pool and return immediately."""
        return self._pool().submit(self.send, request)

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="cloud-api",
                )
            return self._executor

    def close(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
        self._session.close()

    def __enter__(self) -> TransportInvoker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
