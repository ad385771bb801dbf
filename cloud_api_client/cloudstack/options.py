"""Optional query parameters for CloudStack commands, emitted in the order they are set."""

from __future__ import annotations

from collections.abc import Iterable

from ..rest.options import QueryOptions


class ListOptions(QueryOptions):
    """Parameters every CloudStack list command accepts."""

    def id(self, resource_id: str):
        return self._set("id", resource_id)

    def keyword(self, keyword: str):
        return self._set("keyword", keyword)

    def list_all(self, list_all: bool = True):
        return self._set("listAll", list_all)

    def account_in_domain(self, account: str, domain_id: str):
        self._set("account", account)
        return self._set("domainid", domain_id)

    def domain_id(self, domain_id: str):
        return self._set("domainid", domain_id)

    def project_id(self, project_id: str):
        return self._set("projectid", project_id)

    def page(self, page: int):
        return self._set("page", page)

    def page_size(self, page_size: int):
        return self._set("pagesize", page_size)


class ListZonesOptions(ListOptions):
    def available(self, available: bool):
        return self._set("available", available)

    def network_type(self, network_type: str):
        return self._set("networktype", network_type)


class ListFirewallRulesOptions(ListOptions):
    def ip_address_id(self, ip_address_id: str):
        return self._set("ipaddressid", ip_address_id)


class CreateFirewallRuleOptions(QueryOptions):
    def cidr_list(self, cidrs: Iterable[str]):
        return self._set("cidrlist", list(cidrs))

    def start_port(self, port: int):
        return self._set("startport", port)

    def end_port(self, port: int):
        return self._set("endport", port)

    def icmp_code(self, code: int):
        return self._set("icmpcode", code)

    def icmp_type(self, icmp_type: int):
        return self._set("icmptype", icmp_type)


class ListVirtualMachinesOptions(ListOptions):
    def zone_id(self, zone_id: str):
        return self._set("zoneid", zone_id)

    def state(self, state: str):
        return self._set("state", state)

    def name(self, name: str):
        return self._set("name", name)


class DeployVirtualMachineOptions(QueryOptions):
    def name(self, name: str):
        return self._set("name", name)

    def display_name(self, display_name: str):
        return self._set("displayname", display_name)

    def network_ids(self, network_ids: Iterable[str]):
        return self._set("networkids", list(network_ids))

    def security_group_ids(self, group_ids: Iterable[str]):
        return self._set("securitygroupids", list(group_ids))

    def keypair(self, keypair: str):
        return self._set("keypair", keypair)

    def user_data(self, user_data: str):
        return self._set("userdata", user_data)

    def account_in_domain(self, account: str, domain_id: str):
        self._set("account", account)
        return self._set("domainid", domain_id)


class ListAsyncJobsOptions(ListOptions):
    def start_date(self, start_date: str):
        return self._set("startdate", start_date)
