"""Custom exception hierarchy for the cloud API client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .cloudstack.jobs import AsyncJob


class CloudAPIError(Exception):
    """Base exception for all client errors."""


class ConfigError(CloudAPIError):
    """Invalid or missing configuration."""


class RequestContractError(CloudAPIError):
    """Arguments or options do not satisfy the operation. Nothing was sent."""


class RequestFilterError(CloudAPIError):
    """A request filter rejected the request before transmission (e.g. missing credential)."""


class TransportError(CloudAPIError):
    """Network-level failure (connect, DNS, timeout) while sending a request."""

    def __init__(self, message: str, request_line: str | None = None):
        super().__init__(message)
        self.request_line = request_line


class HttpResponseError(CloudAPIError):
    """The remote API answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        command: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.command = command

    @classmethod
    def from_error(cls, error: HttpResponseError) -> HttpResponseError:
        """Re-type an untyped HTTP error, keeping its status, body and command."""
        return cls(
            str(error),
            status_code=error.status_code,
            response_body=error.response_body,
            command=error.command,
        )


class BadRequestError(HttpResponseError):
    """HTTP 400."""


class AuthorizationError(HttpResponseError):
    """HTTP 401 or 403: credentials rejected or operation not permitted."""


class ResourceNotFoundError(HttpResponseError):
    """HTTP 404."""


class ResourceConflictError(HttpResponseError):
    """HTTP 409: the resource is in a state that conflicts with the request."""


class ResponseParseError(CloudAPIError):
    """The response body did not match the envelope the operation declares."""

    def __init__(self, message: str, response_body: Any = None):
        super().__init__(message)
        self.response_body = response_body


class AsyncJobFailure(CloudAPIError):
    """Base for asynchronous job outcomes surfaced as exceptions."""

    def __init__(self, message: str, job_id: str):
        super().__init__(message)
        self.job_id = job_id


class JobFailedError(AsyncJobFailure):
    """The job reached a terminal FAILED state."""

    def __init__(self, job: AsyncJob):
        super().__init__(f"Job {job.job_id} failed: {job.error}", job.job_id)
        self.job = job


class JobTimeoutError(AsyncJobFailure):
    """The polling budget ran out before the job reached a terminal state."""

    def __init__(self, job_id: str, last_job: AsyncJob | None = None):
        super().__init__(f"Job {job_id} did not complete within the polling budget", job_id)
        self.last_job = last_job
