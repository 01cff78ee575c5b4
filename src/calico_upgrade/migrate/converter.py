"""
Resource converter: legacy v1 resources to v3 resources.

The converter is pure. It takes data that has already been read and never
touches a datastore, so validation and migration produce identical reports
for the same input.

Conversion of one resource proceeds in three steps:

1. Dispatch on the legacy kind. Kinds without a v3 mapping are Skipped.
2. Validate the legacy fields against the kind's v1 schema. Every schema
   violation is reported with its v1 field path and offending value.
3. Apply the kind's semantic rules and build the ModernResource.

A resource whose v3 identity already exists in the v3 datastore fails
with a collision unless ignore_existing_v3 is set, in which case the
write overwrites the existing resource.

Usage:
    >>> from calico_upgrade.migrate.converter import convert, convert_all
    >>>
    >>> outcome = convert(pool)
    >>> for outcome in convert_all(resources, existing=identities):
    ...     builder.record(outcome)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Set
from typing import Any, NoReturn, TypeVar, assert_never

from pydantic import ValidationError

from calico_upgrade.migrate.exceptions import CollisionError, ConversionError, NameClashError
from calico_upgrade.migrate.outcomes import ConversionOutcome, Converted, Failed, Skipped
from calico_upgrade.resources.legacy import (
    LegacyBGPConfigFields,
    LegacyBGPPeerFields,
    LegacyEntityRule,
    LegacyFields,
    LegacyHostEndpointFields,
    LegacyIPPoolFields,
    LegacyKind,
    LegacyNodeFields,
    LegacyPolicyFields,
    LegacyProfileFields,
    LegacyResource,
    LegacyRule,
    LegacyWorkloadEndpointFields,
)
from calico_upgrade.resources.modern import (
    ModernKind,
    ModernResource,
    ResourceIdentity,
    ResourceMetadata,
)
from calico_upgrade.resources.names import address_to_name, is_valid_name, normalize_name

logger = logging.getLogger(__name__)

FieldsT = TypeVar("FieldsT", bound=LegacyFields)

KUBERNETES_ORCHESTRATOR = "k8s"
NAMESPACE_LABEL = "projectcalico.org/namespace"
DEFAULT_NAMESPACE = "default"
MAX_IPV4_POOL_PREFIX = 26
MAX_IPV6_POOL_PREFIX = 122

_RULE_ACTIONS = {
    "allow": "Allow",
    "deny": "Deny",
    "log": "Log",
    "next-tier": "Pass",
}

_PROTOCOLS = {
    "tcp": "TCP",
    "udp": "UDP",
    "icmp": "ICMP",
    "icmpv6": "ICMPv6",
    "sctp": "SCTP",
    "udplite": "UDPLite",
}

_LOG_SEVERITIES = {
    "debug": "Debug",
    "info": "Info",
    "warning": "Warning",
    "error": "Error",
    "critical": "Fatal",
    "none": "Fatal",
}


class _SkipResource(Exception):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class _InvalidResource(Exception):
    def __init__(self, errors: list[ConversionError]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} conversion error(s)")


class _Problems:
    """Collects conversion errors for one legacy resource."""

    def __init__(self, resource: LegacyResource) -> None:
        self._resource = resource
        self.errors: list[ConversionError] = []

    def add(self, reason: str, *, field: str | None = None, value: Any = None) -> None:
        self.errors.append(
            ConversionError(self._resource.identity, reason, field=field, value=value)
        )

    def validate(self, model: type[FieldsT], data: dict[str, Any]) -> FieldsT:
        """Validate legacy fields; schema errors end the conversion."""
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            for error in exc.errors():
                self.add(
                    error["msg"].removeprefix("Value error, "),
                    field=".".join(str(part) for part in error["loc"]),
                    value=None if error["type"] == "missing" else error.get("input"),
                )
            self.fail()

    def name(self, name: str) -> str:
        """Check a converted v3 name, recording an error if it is unusable."""
        if not is_valid_name(name):
            self.add(
                f"cannot be converted to a valid v3 name (got {name!r})",
                field="name",
                value=self._resource.name,
            )
        return name

    def require_node(self) -> str:
        node = self._resource.node
        if not node:
            self.add("node is required", field="node")
            return ""
        return node

    def fail(self) -> NoReturn:
        raise _InvalidResource(self.errors)

    def check(self) -> None:
        if self.errors:
            self.fail()


def convert(
    resource: LegacyResource,
    existing: Set[ResourceIdentity] | None = None,
    ignore_existing_v3: bool = False,
) -> ConversionOutcome:
    """
    Convert one legacy resource.

    Args:
        resource: The legacy resource.
        existing: Identities already present in the v3 datastore, or None
            when collision checking is not in force.
        ignore_existing_v3: Convert even if the identity already exists;
            the write will then overwrite it.

    Returns:
        Converted, Skipped or Failed. Never raises for bad data.
    """
    kind = resource.legacy_kind
    if kind is None:
        reason = f"legacy kind '{resource.kind}' has no v3 equivalent"
        logger.debug("Skipping %s: %s", resource.identity, reason)
        return Skipped(resource, reason)

    try:
        modern = _convert_kind(kind, resource)
    except _SkipResource as exc:
        logger.debug("Skipping %s: %s", resource.identity, exc.reason)
        return Skipped(resource, exc.reason)
    except _InvalidResource as exc:
        logger.debug("Failed to convert %s: %d error(s)", resource.identity, len(exc.errors))
        return Failed(resource, tuple(exc.errors))

    identity = modern.identity
    if existing is not None and identity in existing and not ignore_existing_v3:
        logger.debug("%s collides with existing %s", resource.identity, identity)
        return Failed(resource, (CollisionError(resource.identity, identity),))

    logger.debug("Converted %s to %s", resource.identity, identity)
    return Converted(resource, modern)


def convert_all(
    resources: Iterable[LegacyResource],
    existing: Set[ResourceIdentity] | None = None,
    ignore_existing_v3: bool = False,
) -> Iterator[ConversionOutcome]:
    """
    Convert resources in order, detecting v3 name clashes between them.

    The first legacy resource to claim a v3 identity keeps it; any later
    resource converting to the same identity fails with a NameClashError.

    Args:
        resources: Legacy resources in encounter order.
        existing: Identities already present in the v3 datastore.
        ignore_existing_v3: See convert().

    Yields:
        One outcome per resource, in input order.
    """
    claimed: dict[ResourceIdentity, str] = {}
    for resource in resources:
        outcome = convert(resource, existing, ignore_existing_v3)
        if isinstance(outcome, Converted):
            identity = outcome.resource.identity
            first = claimed.get(identity)
            if first is not None:
                logger.debug("%s clashes with %s on %s", resource.identity, first, identity)
                outcome = Failed(resource, (NameClashError(resource.identity, identity, first),))
            else:
                claimed[identity] = resource.identity
        yield outcome


def _convert_kind(kind: LegacyKind, resource: LegacyResource) -> ModernResource:
    if kind is LegacyKind.IP_POOL:
        return _convert_ip_pool(resource)
    elif kind is LegacyKind.BGP_CONFIG:
        return _convert_bgp_config(resource)
    elif kind is LegacyKind.NODE:
        return _convert_node(resource)
    elif kind is LegacyKind.BGP_PEER:
        return _convert_bgp_peer(resource)
    elif kind is LegacyKind.PROFILE:
        return _convert_profile(resource)
    elif kind is LegacyKind.POLICY:
        return _convert_policy(resource)
    elif kind is LegacyKind.HOST_ENDPOINT:
        return _convert_host_endpoint(resource)
    elif kind is LegacyKind.WORKLOAD_ENDPOINT:
        return _convert_workload_endpoint(resource)
    else:
        assert_never(kind)


# =============================================================================
# Per-kind conversions
# =============================================================================


def _convert_ip_pool(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyIPPoolFields, {**resource.fields, "cidr": resource.name})

    cidr = fields.cidr
    max_prefix = MAX_IPV4_POOL_PREFIX if cidr.version == 4 else MAX_IPV6_POOL_PREFIX
    if cidr.prefixlen > max_prefix:
        problems.add(
            f"IPv{cidr.version} pools must be /{max_prefix} or larger",
            field="cidr",
            value=str(cidr),
        )

    ipip_mode = "Never"
    if fields.ipip is not None and fields.ipip.enabled:
        if cidr.version == 6:
            problems.add(
                "IPIP is not supported on IPv6 pools",
                field="ipip.enabled",
                value=True,
            )
        ipip_mode = "CrossSubnet" if fields.ipip.mode == "cross-subnet" else "Always"

    name = problems.name(address_to_name(str(cidr)))
    problems.check()

    return ModernResource(
        kind=ModernKind.IP_POOL,
        metadata=ResourceMetadata(name=name),
        spec={
            "cidr": str(cidr),
            "ipipMode": ipip_mode,
            "natOutgoing": fields.nat_outgoing,
            "disabled": fields.disabled,
        },
    )


def _convert_bgp_config(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyBGPConfigFields, resource.fields)

    spec: dict[str, Any] = {
        "logSeverityScreen": _LOG_SEVERITIES[fields.log_level],
        "nodeToNodeMeshEnabled": fields.node_to_node_mesh,
    }
    if fields.as_number is not None:
        spec["asNumber"] = fields.as_number

    # The v3 BGP configuration is a singleton.
    return ModernResource(
        kind=ModernKind.BGP_CONFIGURATION,
        metadata=ResourceMetadata(name="default"),
        spec=spec,
    )


def _convert_node(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyNodeFields, resource.fields)

    spec: dict[str, Any] = {}
    if fields.bgp is not None:
        bgp = fields.bgp
        if bgp.ipv4_address is None and bgp.ipv6_address is None:
            problems.add(
                "BGP configuration needs an IPv4 or IPv6 address",
                field="bgp.ipv4Address",
            )
        node_bgp: dict[str, Any] = {}
        if bgp.ipv4_address is not None:
            node_bgp["ipv4Address"] = str(bgp.ipv4_address)
        if bgp.ipv6_address is not None:
            node_bgp["ipv6Address"] = str(bgp.ipv6_address)
        if bgp.as_number is not None:
            node_bgp["asNumber"] = bgp.as_number
        spec["bgp"] = node_bgp

    name = problems.name(normalize_name(resource.name))
    problems.check()

    return ModernResource(
        kind=ModernKind.NODE,
        metadata=ResourceMetadata(name=name),
        spec=spec,
    )


def _convert_bgp_peer(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyBGPPeerFields, {**resource.fields, "peerIP": resource.name})

    peer_name = address_to_name(str(fields.peer_ip))
    spec: dict[str, Any] = {
        "peerIP": str(fields.peer_ip),
        "asNumber": fields.as_number,
    }
    if resource.node:
        spec["node"] = normalize_name(resource.node)
        name = normalize_name(f"{resource.node}.{peer_name}")
    else:
        name = f"global.{peer_name}"

    name = problems.name(name)
    problems.check()

    return ModernResource(
        kind=ModernKind.BGP_PEER,
        metadata=ResourceMetadata(name=name),
        spec=spec,
    )


def _convert_profile(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyProfileFields, resource.fields)

    # Tags have no v3 equivalent; each becomes a label with an empty value.
    labels_to_apply = {tag: "" for tag in fields.tags}
    labels_to_apply.update(fields.labels)

    name = problems.name(normalize_name(resource.name))
    problems.check()

    spec: dict[str, Any] = {
        "ingress": [_convert_rule(rule) for rule in fields.ingress],
        "egress": [_convert_rule(rule) for rule in fields.egress],
    }
    if labels_to_apply:
        spec["labelsToApply"] = labels_to_apply

    return ModernResource(
        kind=ModernKind.PROFILE,
        metadata=ResourceMetadata(name=name),
        spec=spec,
    )


def _convert_policy(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    fields = problems.validate(LegacyPolicyFields, resource.fields)

    if fields.do_not_track and fields.pre_dnat:
        problems.add(
            "doNotTrack and preDNAT cannot both be set",
            field="preDNAT",
            value=True,
        )
    if fields.pre_dnat and fields.egress:
        problems.add(
            "preDNAT policies cannot have egress rules",
            field="egress",
            value=resource.fields.get("egress"),
        )

    if fields.types is not None:
        types = [policy_type.capitalize() for policy_type in fields.types]
    else:
        types = ["Ingress", "Egress"] if fields.egress else ["Ingress"]

    name = problems.name(normalize_name(resource.name))
    problems.check()

    spec: dict[str, Any] = {
        "selector": fields.selector,
        "types": types,
        "ingress": [_convert_rule(rule) for rule in fields.ingress],
        "egress": [_convert_rule(rule) for rule in fields.egress],
        "doNotTrack": fields.do_not_track,
        "preDNAT": fields.pre_dnat,
        # Untracked and pre-DNAT policies only take effect on forwarded traffic.
        "applyOnForward": fields.apply_on_forward or fields.do_not_track or fields.pre_dnat,
    }
    if fields.order is not None:
        spec["order"] = fields.order

    return ModernResource(
        kind=ModernKind.GLOBAL_NETWORK_POLICY,
        metadata=ResourceMetadata(name=name),
        spec=spec,
    )


def _convert_host_endpoint(resource: LegacyResource) -> ModernResource:
    problems = _Problems(resource)
    node = problems.require_node()
    fields = problems.validate(LegacyHostEndpointFields, resource.fields)

    if not fields.interface_name and not fields.expected_ips:
        problems.add(
            "either interfaceName or expectedIPs is required",
            field="interfaceName",
        )

    # v1 host endpoint names are only unique per node.
    name = problems.name(normalize_name(f"{node}.{resource.name}"))
    problems.check()

    spec: dict[str, Any] = {
        "node": normalize_name(node),
        "expectedIPs": [str(ip) for ip in fields.expected_ips],
        "profiles": [normalize_name(profile) for profile in fields.profiles],
    }
    if fields.interface_name:
        spec["interfaceName"] = fields.interface_name

    return ModernResource(
        kind=ModernKind.HOST_ENDPOINT,
        metadata=ResourceMetadata(name=name, labels=fields.labels),
        spec=spec,
    )


def _convert_workload_endpoint(resource: LegacyResource) -> ModernResource:
    if resource.fields.get("orchestrator") == KUBERNETES_ORCHESTRATOR:
        raise _SkipResource(
            "Kubernetes workload endpoints are managed through the Kubernetes API datastore"
        )

    problems = _Problems(resource)
    node = problems.require_node()
    fields = problems.validate(LegacyWorkloadEndpointFields, resource.fields)

    namespace = normalize_name(fields.labels.get(NAMESPACE_LABEL, DEFAULT_NAMESPACE))
    if not is_valid_name(namespace):
        problems.add(
            "namespace label is not a valid v3 namespace",
            field=f"labels.{NAMESPACE_LABEL}",
            value=fields.labels.get(NAMESPACE_LABEL),
        )

    name = problems.name(
        normalize_name(f"{node}-{fields.orchestrator}-{fields.workload}-{resource.name}")
    )
    problems.check()

    spec: dict[str, Any] = {
        "node": normalize_name(node),
        "orchestrator": fields.orchestrator,
        "workload": fields.workload,
        "endpoint": resource.name,
        "interfaceName": fields.interface_name,
        "ipNetworks": [str(network) for network in fields.ip_networks],
        "profiles": [normalize_name(profile) for profile in fields.profiles],
    }
    if fields.mac is not None:
        spec["mac"] = fields.mac.lower()

    return ModernResource(
        kind=ModernKind.WORKLOAD_ENDPOINT,
        metadata=ResourceMetadata(name=name, namespace=namespace, labels=fields.labels),
        spec=spec,
    )


# =============================================================================
# Rules
# =============================================================================


def _convert_rule(rule: LegacyRule) -> dict[str, Any]:
    converted: dict[str, Any] = {"action": _RULE_ACTIONS[rule.action]}
    if rule.protocol is not None:
        converted["protocol"] = _convert_protocol(rule.protocol)
    if rule.not_protocol is not None:
        converted["notProtocol"] = _convert_protocol(rule.not_protocol)
    if rule.ip_version is not None:
        converted["ipVersion"] = rule.ip_version

    source = _convert_entity_rule(rule.source)
    if source:
        converted["source"] = source
    destination = _convert_entity_rule(rule.destination)
    if destination:
        converted["destination"] = destination
    return converted


def _convert_protocol(protocol: int | str) -> int | str:
    if isinstance(protocol, str):
        return _PROTOCOLS[protocol]
    return protocol


def _convert_entity_rule(entity: LegacyEntityRule) -> dict[str, Any]:
    converted: dict[str, Any] = {}

    selector = _combine_selector(entity.selector, entity.tag, " && ")
    if selector:
        converted["selector"] = selector
    # not(selector) && not(has(tag)) == not(selector || has(tag))
    not_selector = _combine_selector(entity.not_selector, entity.not_tag, " || ")
    if not_selector:
        converted["notSelector"] = not_selector

    nets = [str(net) for net in ([entity.net] if entity.net else []) + list(entity.nets)]
    if nets:
        converted["nets"] = nets
    not_nets = [
        str(net) for net in ([entity.not_net] if entity.not_net else []) + list(entity.not_nets)
    ]
    if not_nets:
        converted["notNets"] = not_nets

    if entity.ports:
        converted["ports"] = list(entity.ports)
    if entity.not_ports:
        converted["notPorts"] = list(entity.not_ports)
    return converted


def _combine_selector(selector: str | None, tag: str | None, operator: str) -> str | None:
    if tag is None:
        return selector
    tag_selector = f"has({tag})"
    if not selector:
        return tag_selector
    return f"({selector}){operator}{tag_selector}"


__all__ = [
    "convert",
    "convert_all",
]
