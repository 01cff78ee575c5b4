"""
Resource types for the legacy v1 data model.

A LegacyResource is what the legacy datastore hands back: a kind tag, an
identity and an opaque field set. The kind is kept as a plain string
because the legacy schema may contain kinds this package has no mapping
for; the converter skips those.

The per-kind ``Legacy*Fields`` models describe the v1 field schema. They
are only used to validate a resource's ``fields`` during conversion, so
that any schema violation is reported with the v1 field path and value.
"""

from __future__ import annotations

import re
from enum import Enum
from ipaddress import IPv4Interface, IPv6Interface
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, IPvAnyNetwork, PlainValidator


class LegacyKind(Enum):
    """
    Legacy kinds that have a v3 equivalent.

    Member order matches ModernKind and is the order report sections and
    datastore writes follow.
    """

    IP_POOL = "ipPool"
    BGP_CONFIG = "bgpConfig"
    NODE = "node"
    BGP_PEER = "bgpPeer"
    PROFILE = "profile"
    POLICY = "policy"
    HOST_ENDPOINT = "hostEndpoint"
    WORKLOAD_ENDPOINT = "workloadEndpoint"

    @classmethod
    def lookup(cls, kind: str) -> LegacyKind | None:
        """
        Find the LegacyKind for a kind tag.

        Args:
            kind: The kind tag read from the legacy datastore.

        Returns:
            The matching LegacyKind, or None if the kind has no v3 mapping.
        """
        try:
            return cls(kind)
        except ValueError:
            return None


class LegacyResource(BaseModel):
    """
    A resource read from the legacy datastore.

    Attributes:
        kind: Legacy kind tag (e.g. "ipPool").
        name: Legacy resource name. For IP pools this is the pool CIDR.
        node: Owning node for node-scoped kinds, otherwise None.
        fields: The legacy field set, unvalidated.

    Example:
        >>> pool = LegacyResource(
        ...     kind="ipPool",
        ...     name="10.0.0.0/16",
        ...     fields={"nat-outgoing": True},
        ... )
        >>> pool.identity
        'ipPool/10.0.0.0/16'
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str
    node: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def identity(self) -> str:
        """Get a readable identity used in reports and log messages."""
        if self.node:
            return f"{self.kind}/{self.node}/{self.name}"
        return f"{self.kind}/{self.name}"

    @property
    def legacy_kind(self) -> LegacyKind | None:
        """Get the LegacyKind, or None for kinds without a v3 mapping."""
        return LegacyKind.lookup(self.kind)


# =============================================================================
# Legacy field schemas
# =============================================================================

ASNumber = Annotated[int, Field(ge=1, le=4294967295)]

PROTOCOL_NAMES = ("tcp", "udp", "icmp", "icmpv6", "sctp", "udplite")

_PORT_RANGE = re.compile(r"^(\d{1,5}):(\d{1,5})$")


def _parse_port(value: Any) -> int | str:
    if isinstance(value, bool):
        raise ValueError("port must be a number or a range 'min:max'")
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, int):
        if 0 <= value <= 65535:
            return value
        raise ValueError("port must be between 0 and 65535")
    if isinstance(value, str):
        match = _PORT_RANGE.match(value)
        if match and int(match.group(1)) <= int(match.group(2)) <= 65535:
            return value
    raise ValueError("port must be a number or a range 'min:max'")


def _parse_protocol(value: Any) -> int | str:
    if isinstance(value, str) and value.lower() in PROTOCOL_NAMES:
        return value.lower()
    if isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 255:
        return value
    raise ValueError(f"protocol must be one of {', '.join(PROTOCOL_NAMES)} or a number 1-255")


Port = Annotated[int | str, PlainValidator(_parse_port)]
RuleProtocol = Annotated[int | str, PlainValidator(_parse_protocol)]


class LegacyFields(BaseModel):
    """Base for v1 field schemas: immutable, alias-aware, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class LegacyIPIPConfig(LegacyFields):
    enabled: bool = False
    mode: Literal["", "always", "cross-subnet"] = ""


class LegacyIPPoolFields(LegacyFields):
    cidr: IPvAnyNetwork
    ipip: LegacyIPIPConfig | None = None
    nat_outgoing: bool = Field(default=False, alias="nat-outgoing")
    disabled: bool = False


class LegacyEntityRule(LegacyFields):
    tag: str | None = None
    net: IPvAnyNetwork | None = None
    nets: list[IPvAnyNetwork] = Field(default_factory=list)
    selector: str | None = None
    ports: list[Port] = Field(default_factory=list)
    not_tag: str | None = Field(default=None, alias="notTag")
    not_net: IPvAnyNetwork | None = Field(default=None, alias="notNet")
    not_nets: list[IPvAnyNetwork] = Field(default_factory=list, alias="notNets")
    not_selector: str | None = Field(default=None, alias="notSelector")
    not_ports: list[Port] = Field(default_factory=list, alias="notPorts")


class LegacyRule(LegacyFields):
    action: Literal["allow", "deny", "log", "next-tier"]
    protocol: RuleProtocol | None = None
    not_protocol: RuleProtocol | None = Field(default=None, alias="notProtocol")
    ip_version: Literal[4, 6] | None = Field(default=None, alias="ipVersion")
    source: LegacyEntityRule = Field(default_factory=LegacyEntityRule)
    destination: LegacyEntityRule = Field(default_factory=LegacyEntityRule)


class LegacyPolicyFields(LegacyFields):
    order: float | None = None
    selector: str
    ingress: list[LegacyRule] = Field(default_factory=list)
    egress: list[LegacyRule] = Field(default_factory=list)
    types: list[Literal["ingress", "egress"]] | None = None
    do_not_track: bool = Field(default=False, alias="doNotTrack")
    pre_dnat: bool = Field(default=False, alias="preDNAT")
    apply_on_forward: bool = Field(default=False, alias="applyOnForward")


class LegacyProfileFields(LegacyFields):
    tags: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    ingress: list[LegacyRule] = Field(default_factory=list)
    egress: list[LegacyRule] = Field(default_factory=list)


class LegacyHostEndpointFields(LegacyFields):
    interface_name: str | None = Field(default=None, alias="interfaceName")
    expected_ips: list[IPvAnyAddress] = Field(default_factory=list, alias="expectedIPs")
    profiles: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)


class LegacyWorkloadEndpointFields(LegacyFields):
    orchestrator: str = Field(min_length=1)
    workload: str = Field(min_length=1)
    interface_name: str = Field(min_length=1, alias="interfaceName")
    mac: str | None = Field(default=None, pattern=r"^([0-9a-fA-F]{2}:){5}[0-9a-fA-F]{2}$")
    ip_networks: list[IPvAnyNetwork] = Field(default_factory=list, alias="ipNetworks")
    profiles: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)


class LegacyNodeBGP(LegacyFields):
    ipv4_address: IPv4Interface | None = Field(default=None, alias="ipv4Address")
    ipv6_address: IPv6Interface | None = Field(default=None, alias="ipv6Address")
    as_number: ASNumber | None = Field(default=None, alias="asNumber")


class LegacyNodeFields(LegacyFields):
    bgp: LegacyNodeBGP | None = None


class LegacyBGPPeerFields(LegacyFields):
    peer_ip: IPvAnyAddress = Field(alias="peerIP")
    as_number: ASNumber = Field(alias="asNumber")


class LegacyBGPConfigFields(LegacyFields):
    as_number: ASNumber | None = Field(default=None, alias="asNumber")
    log_level: Literal["debug", "info", "warning", "error", "critical", "none"] = Field(
        default="info", alias="logLevel"
    )
    node_to_node_mesh: bool = Field(default=True, alias="nodeToNodeMesh")


__all__ = [
    "LegacyKind",
    "LegacyResource",
    "LegacyFields",
    "LegacyIPIPConfig",
    "LegacyIPPoolFields",
    "LegacyEntityRule",
    "LegacyRule",
    "LegacyPolicyFields",
    "LegacyProfileFields",
    "LegacyHostEndpointFields",
    "LegacyWorkloadEndpointFields",
    "LegacyNodeBGP",
    "LegacyNodeFields",
    "LegacyBGPPeerFields",
    "LegacyBGPConfigFields",
]
