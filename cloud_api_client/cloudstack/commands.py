"""CloudStack operation table: one immutable descriptor per remote command."""

from __future__ import annotations

from ..rest.descriptor import OperationDescriptor, Param
from ..rest.fallbacks import (
    MapHttp4xxCodesToExceptions,
    ReturnEmptySetOnNotFound,
    ReturnNullOnNotFound,
    ReturnVoidOnNotFound,
)
from ..rest.parsers import (
    ReleasePayloadAndReturnVoid,
    UnwrapFirstNamedValue,
    UnwrapNestedValue,
    UnwrapNestedValueInSet,
)
from .jobs import AsyncCreateResponse, AsyncJob
from .options import (
    CreateFirewallRuleOptions,
    DeployVirtualMachineOptions,
    ListAsyncJobsOptions,
    ListFirewallRulesOptions,
    ListVirtualMachinesOptions,
    ListZonesOptions,
)

BASE_PARAMS: tuple[tuple[str, str], ...] = (("response", "json"),)

_LIST = frozenset({"list"})
_MAP_4XX = MapHttp4xxCodesToExceptions()
_EMPTY_ON_404 = ReturnEmptySetOnNotFound()
_NULL_ON_404 = ReturnNullOnNotFound()
_VOID_ON_404 = ReturnVoidOnNotFound()


def wrapper(command: str) -> str:
    """Envelope key CloudStack wraps a command's result in: listZones -> listzonesresponse."""
    return f"{command.lower()}response"


def _list(name: str, command: str, key: str, options_type, into=None) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        command=command,
        parser=UnwrapNestedValueInSet(wrapper(command), key, into=into),
        fallback=_EMPTY_ON_404,
        options_type=options_type,
        tags=_LIST,
    )


def _get(name: str, command: str, key: str) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        command=command,
        params=(Param("id"),),
        parser=UnwrapNestedValue(wrapper(command), key),
        fallback=_NULL_ON_404,
    )


def _async_create(name: str, command: str, params: tuple[Param, ...], options_type=None) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        command=command,
        params=params,
        parser=UnwrapFirstNamedValue(wrapper(command), into=AsyncCreateResponse.from_dict),
        fallback=_MAP_4XX,
        options_type=options_type,
    )


# ── Zones ───────────────────────────────────────────────────────────

LIST_ZONES = _list("list_zones", "listZones", "zone", ListZonesOptions)
GET_ZONE = _get("get_zone", "listZones", "zone")

# ── Firewall rules ──────────────────────────────────────────────────

LIST_FIREWALL_RULES = _list("list_firewall_rules", "listFirewallRules", "firewallrule", ListFirewallRulesOptions)
GET_FIREWALL_RULE = _get("get_firewall_rule", "listFirewallRules", "firewallrule")
CREATE_FIREWALL_RULE = _async_create(
    "create_firewall_rule",
    "createFirewallRule",
    (Param("ip_address_id", "ipaddressid"), Param("protocol")),
    CreateFirewallRuleOptions,
)
DELETE_FIREWALL_RULE = OperationDescriptor(
    name="delete_firewall_rule",
    command="deleteFirewallRule",
    params=(Param("id"),),
    parser=ReleasePayloadAndReturnVoid(),
    fallback=_VOID_ON_404,
    accept=None,
)

# ── Virtual machines ────────────────────────────────────────────────

LIST_VIRTUAL_MACHINES = _list(
    "list_virtual_machines", "listVirtualMachines", "virtualmachine", ListVirtualMachinesOptions
)
GET_VIRTUAL_MACHINE = _get("get_virtual_machine", "listVirtualMachines", "virtualmachine")
DEPLOY_VIRTUAL_MACHINE = _async_create(
    "deploy_virtual_machine",
    "deployVirtualMachine",
    (
        Param("zone_id", "zoneid"),
        Param("service_offering_id", "serviceofferingid"),
        Param("template_id", "templateid"),
    ),
    DeployVirtualMachineOptions,
)
DESTROY_VIRTUAL_MACHINE = OperationDescriptor(
    name="destroy_virtual_machine",
    command="destroyVirtualMachine",
    params=(Param("id"),),
    parser=UnwrapFirstNamedValue(wrapper("destroyVirtualMachine"), into=AsyncCreateResponse.from_dict),
    fallback=_VOID_ON_404,
)

# ── Async jobs ──────────────────────────────────────────────────────

QUERY_ASYNC_JOB_RESULT = OperationDescriptor(
    name="query_async_job_result",
    command="queryAsyncJobResult",
    params=(Param("job_id", "jobid"),),
    parser=UnwrapFirstNamedValue(wrapper("queryAsyncJobResult"), into=AsyncJob.from_dict),
    fallback=_NULL_ON_404,
)
LIST_ASYNC_JOBS = _list("list_async_jobs", "listAsyncJobs", "asyncjobs", ListAsyncJobsOptions, into=AsyncJob.from_dict)

ALL_OPERATIONS: tuple[OperationDescriptor, ...] = (
    LIST_ZONES,
    GET_ZONE,
    LIST_FIREWALL_RULES,
    GET_FIREWALL_RULE,
    CREATE_FIREWALL_RULE,
    DELETE_FIREWALL_RULE,
    LIST_VIRTUAL_MACHINES,
    GET_VIRTUAL_MACHINE,
    DEPLOY_VIRTUAL_MACHINE,
    DESTROY_VIRTUAL_MACHINE,
    QUERY_ASYNC_JOB_RESULT,
    LIST_ASYNC_JOBS,
)

LIST_OPERATIONS = tuple(op for op in ALL_OPERATIONS if op.is_list)
