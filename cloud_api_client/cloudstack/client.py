"""Client for the CloudStack query API."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import requests

from ..config import AppConfig, CloudStackConfig, ExecutorConfig, JobPollingConfig
from ..exceptions import JobFailedError, JobTimeoutError
from ..rest.builder import RequestBuilder
from ..rest.client import RestClient
from ..rest.descriptor import OperationDescriptor
from ..rest.filters import FilterChain, HeaderFilter
from ..rest.futures import TransformingFuture
from ..rest.options import QueryOptions
from ..rest.predicates import RetryablePredicate
from ..rest.request import Request
from ..rest.transport import TransportInvoker
from . import commands
from .jobs import AsyncCreateResponse, AsyncJob, JobComplete
from .options import (
    CreateFirewallRuleOptions,
    DeployVirtualMachineOptions,
    ListAsyncJobsOptions,
    ListFirewallRulesOptions,
    ListVirtualMachinesOptions,
    ListZonesOptions,
)
from .signer import QuerySigner

logger = logging.getLogger(__name__)

USER_AGENT = "cloud-api-client/0.1"


class CloudStackClient:
    """Signed CloudStack API client.

    Mutating commands return an ``AsyncCreateResponse`` job handle right away;
    use ``wait_for_job`` (or a ``JobComplete`` predicate) to follow the job.
    """

    def __init__(
        self,
        config: CloudStackConfig,
        executor: ExecutorConfig | None = None,
        polling: JobPollingConfig | None = None,
        session: requests.Session | None = None,
    ):
        executor = executor or ExecutorConfig()
        self._polling = polling or JobPollingConfig()
        builder = RequestBuilder(config.endpoint, base_params=commands.BASE_PARAMS)
        filters = FilterChain([
            HeaderFilter("User-Agent", USER_AGENT),
            QuerySigner(config.api_key, config.secret_key),
        ])
        transport = TransportInvoker(
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            max_workers=executor.max_workers,
            session=session,
        )
        self._rest = RestClient(builder, filters, transport)

    @classmethod
    def from_config(cls, config: AppConfig, session: requests.Session | None = None) -> CloudStackClient:
        return cls(config.cloudstack, executor=config.executor, polling=config.jobs, session=session)

    # ── Generic invocation ──────────────────────────────────────────

    def build_request(
        self, descriptor: OperationDescriptor, *args: Any, options: QueryOptions | None = None, **kwargs: Any
    ) -> Request:
        return self._rest.build_request(descriptor, *args, options=options, **kwargs)

    def invoke(
        self, descriptor: OperationDescriptor, *args: Any, options: QueryOptions | None = None, **kwargs: Any
    ) -> Any:
        return self._rest.invoke(descriptor, *args, options=options, **kwargs)

    def invoke_async(
        self, descriptor: OperationDescriptor, *args: Any, options: QueryOptions | None = None, **kwargs: Any
    ) -> TransformingFuture:
        return self._rest.invoke_async(descriptor, *args, options=options, **kwargs)

    # ── Zones ───────────────────────────────────────────────────────

    def list_zones(self, options: ListZonesOptions | None = None) -> list[dict[str, Any]]:
        return self.invoke(commands.LIST_ZONES, options=options)

    def get_zone(self, zone_id: str) -> dict[str, Any] | None:
        return self.invoke(commands.GET_ZONE, zone_id)

    # ── Firewall rules ──────────────────────────────────────────────

    def list_firewall_rules(self, options: ListFirewallRulesOptions | None = None) -> list[dict[str, Any]]:
        return self.invoke(commands.LIST_FIREWALL_RULES, options=options)

    def get_firewall_rule(self, rule_id: str) -> dict[str, Any] | None:
        return self.invoke(commands.GET_FIREWALL_RULE, rule_id)

    def create_firewall_rule(
        self, ip_address_id: str, protocol: str, options: CreateFirewallRuleOptions | None = None
    ) -> AsyncCreateResponse:
        return self.invoke(commands.CREATE_FIREWALL_RULE, ip_address_id, protocol, options=options)

    def delete_firewall_rule(self, rule_id: str) -> None:
        self.invoke(commands.DELETE_FIREWALL_RULE, rule_id)

    # ── Virtual machines ────────────────────────────────────────────

    def list_virtual_machines(self, options: ListVirtualMachinesOptions | None = None) -> list[dict[str, Any]]:
        return self.invoke(commands.LIST_VIRTUAL_MACHINES, options=options)

    def get_virtual_machine(self, vm_id: str) -> dict[str, Any] | None:
        return self.invoke(commands.GET_VIRTUAL_MACHINE, vm_id)

    def deploy_virtual_machine(
        self,
        zone_id: str,
        service_offering_id: str,
        template_id: str,
        options: DeployVirtualMachineOptions | None = None,
    ) -> AsyncCreateResponse:
        return self.invoke(
            commands.DEPLOY_VIRTUAL_MACHINE, zone_id, service_offering_id, template_id, options=options
        )

    def destroy_virtual_machine(self, vm_id: str) -> AsyncCreateResponse | None:
        """Returns the destroy job handle, or None when the VM is already gone."""
        return self.invoke(commands.DESTROY_VIRTUAL_MACHINE, vm_id)

    # ── Async jobs ──────────────────────────────────────────────────

    def query_async_job_result(self, job_id: str) -> AsyncJob | None:
        return self.invoke(commands.QUERY_ASYNC_JOB_RESULT, job_id)

    def list_async_jobs(self, options: ListAsyncJobsOptions | None = None) -> list[AsyncJob]:
        return self.invoke(commands.LIST_ASYNC_JOBS, options=options)

    def job_complete(self, stop_event: threading.Event | None = None) -> RetryablePredicate[str]:
        """A polling predicate over ``JobComplete`` using the configured budget.

        ``True`` only means the job is terminal. The job seen on the final poll is
        ``job_complete().predicate.last_job``; check ``failed`` on it.
        """
        return self._retrying(JobComplete(self), stop_event)

    def wait_for_job(self, job: str | AsyncCreateResponse, stop_event: threading.Event | None = None) -> AsyncJob:
        """Poll until the job is terminal. Raises JobFailedError or JobTimeoutError."""
        job_id = job.job_id if isinstance(job, AsyncCreateResponse) else job
        complete = JobComplete(self)
        start = time.monotonic()

        if not self._retrying(complete, stop_event)(job_id):
            raise JobTimeoutError(job_id, complete.last_job)

        finished = complete.last_job
        elapsed = round(time.monotonic() - start, 2)
        if finished.failed:
            logger.warning(
                "Job %s failed: %s", job_id, finished.error,
                extra={"job_id": job_id, "job_status": finished.status.name, "elapsed_seconds": elapsed},
            )
            raise JobFailedError(finished)

        logger.info(
            "Job %s completed", job_id,
            extra={"job_id": job_id, "job_status": finished.status.name, "elapsed_seconds": elapsed},
        )
        return finished

    def wait_for_result(self, job: str | AsyncCreateResponse, stop_event: threading.Event | None = None) -> Any:
        """Poll until the job succeeds and return its result payload."""
        return self.wait_for_job(job, stop_event).result

    def _retrying(self, predicate: JobComplete, stop_event: threading.Event | None) -> RetryablePredicate[str]:
        polling = self._polling
        return RetryablePredicate(
            predicate,
            interval=polling.interval_seconds,
            max_attempts=polling.max_attempts,
            timeout=polling.timeout_seconds,
            max_interval=polling.max_interval_seconds,
            backoff=polling.backoff,
            stop_event=stop_event,
        )

    # ── Lifecycle ───────────────────────────────────────────────────

    def close(self) -> None:
        self._rest.close()

    def __enter__(self) -> CloudStackClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
