"""Asynchronous job handles, job status, and the job-completion predicate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .client import CloudStackClient

logger = logging.getLogger(__name__)


class _CodedEnum(IntEnum):
    @classmethod
    def from_value(cls, value: Any):
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNKNOWN  # type: ignore[attr-defined]


class JobStatus(_CodedEnum):
    IN_PROGRESS = 0
    SUCCEEDED = 1
    FAILED = 2
    UNKNOWN = -1

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


class ResultCode(_CodedEnum):
    SUCCESS = 0
    FAIL = 530
    UNKNOWN = -1


class ErrorCode(_CodedEnum):
    INTERNAL_ERROR = 530
    ACCOUNT_ERROR = 531
    ACCOUNT_RESOURCE_LIMIT_ERROR = 532
    INSUFFICIENT_CAPACITY_ERROR = 533
    RESOURCE_UNAVAILABLE_ERROR = 534
    RESOURCE_ALLOCATION_ERROR = 535
    RESOURCE_IN_USE_ERROR = 536
    NETWORK_RULE_CONFLICT_ERROR = 537
    UNKNOWN = -1


@dataclass(frozen=True)
class AsyncCreateResponse:
    """Job handle returned by mutating calls. Does not imply the job has finished."""

    job_id: str
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AsyncCreateResponse:
        resource_id = data.get("id")
        return cls(job_id=str(data["jobid"]), id=str(resource_id) if resource_id is not None else None)


@dataclass(frozen=True)
class AsyncJobError:
    error_code: ErrorCode
    error_text: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AsyncJobError:
        return cls(
            error_code=ErrorCode.from_value(data.get("errorcode")),
            error_text=str(data.get("errortext", "")),
        )

    def __str__(self) -> str:
        return f"{self.error_code.name}({self.error_code.value}): {self.error_text}"


@dataclass(frozen=True)
class AsyncJob:
    """Snapshot of ``queryAsyncJobResult``.

    ``result`` is the payload inside ``jobresult`` (its only value when the
    provider wraps it, e.g. ``{"virtualmachine": {...}}``). ``error`` is set
    when the job failed.
    """

    job_id: str
    status: JobStatus
    result_code: ResultCode = ResultCode.UNKNOWN
    result_type: str | None = None
    result: Any = None
    error: AsyncJobError | None = None
    command: str | None = None
    account_id: str | None = None
    user_id: str | None = None
    instance_type: str | None = None
    instance_id: str | None = None
    progress: int | None = None
    created: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is JobStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is JobStatus.FAILED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AsyncJob:
        status = JobStatus.from_value(data.get("jobstatus"))
        raw_result = data.get("jobresult")

        result: Any = None
        error: AsyncJobError | None = None
        if isinstance(raw_result, dict) and (status is JobStatus.FAILED or "errorcode" in raw_result):
            error = AsyncJobError.from_dict(raw_result)
        elif isinstance(raw_result, dict) and len(raw_result) == 1:
            result = next(iter(raw_result.values()))
        else:
            result = raw_result

        progress = data.get("jobprocstatus")
        return cls(
            job_id=str(data["jobid"]),
            status=status,
            result_code=ResultCode.from_value(data.get("jobresultcode")),
            result_type=data.get("jobresulttype"),
            result=result,
            error=error,
            command=data.get("cmd"),
            account_id=_opt_str(data.get("accountid")),
            user_id=_opt_str(data.get("userid")),
            instance_type=data.get("jobinstancetype"),
            instance_id=_opt_str(data.get("jobinstanceid")),
            progress=int(progress) if progress is not None else None,
            created=data.get("created"),
        )


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


class JobComplete:
    """Predicate: has the job reached a terminal state?

    True means "stop polling", not "succeeded": a FAILED job is also terminal.
    Inspect ``last_job`` (or use ``CloudStackClient.wait_for_job``) to tell
    them apart.
    """

    def __init__(self, client: CloudStackClient):
        self._client = client
        self.last_job: AsyncJob | None = None

    def __call__(self, job_id: str) -> bool:
        job = self._client.query_async_job_result(job_id)
        self.last_job = job
        if job is None:
            logger.debug("Job %s not found yet", job_id, extra={"job_id": job_id})
            return False
        logger.debug(
            "Job %s status %s", job_id, job.status.name,
            extra={"job_id": job_id, "job_status": job.status.name},
        )
        return job.status.is_terminal
