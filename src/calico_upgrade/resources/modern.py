"""
Resource types for the v3 data model.

ModernResource instances are produced only by the converter and are never
mutated afterwards. Their identity (kind, name, namespace) is what the
collision check and the datastore's upsert semantics are keyed on.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

API_VERSION = "projectcalico.org/v3"


class ModernKind(Enum):
    """
    v3 resource kinds produced by the upgrade.

    Member order is the order resources are written in: pools and global
    BGP configuration first, endpoints last, so that every reference an
    endpoint carries already exists when it lands.
    """

    IP_POOL = "IPPool"
    BGP_CONFIGURATION = "BGPConfiguration"
    NODE = "Node"
    BGP_PEER = "BGPPeer"
    PROFILE = "Profile"
    GLOBAL_NETWORK_POLICY = "GlobalNetworkPolicy"
    HOST_ENDPOINT = "HostEndpoint"
    WORKLOAD_ENDPOINT = "WorkloadEndpoint"

    @property
    def namespaced(self) -> bool:
        """Check if resources of this kind live in a namespace."""
        return self == ModernKind.WORKLOAD_ENDPOINT


class ResourceIdentity(BaseModel):
    """
    Hashable identity of a v3 resource.

    Two resources with the same identity occupy the same key in the v3
    datastore; writing one overwrites the other.

    Attributes:
        kind: The v3 kind.
        name: The v3 resource name.
        namespace: Namespace for namespaced kinds, otherwise None.
    """

    model_config = ConfigDict(frozen=True)

    kind: ModernKind
    name: str
    namespace: str | None = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind.value}({self.namespace}/{self.name})"
        return f"{self.kind.value}({self.name})"


class ResourceMetadata(BaseModel):
    """Metadata block of a v3 resource."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)


class ModernResource(BaseModel):
    """
    A v3 resource ready to be written to the datastore.

    Attributes:
        kind: The v3 kind.
        metadata: Name, namespace and labels.
        spec: The v3 spec payload, keyed with v3 (camelCase) field names.

    Example:
        >>> pool = ModernResource(
        ...     kind=ModernKind.IP_POOL,
        ...     metadata=ResourceMetadata(name="10-0-0-0-16"),
        ...     spec={"cidr": "10.0.0.0/16", "ipipMode": "Never"},
        ... )
        >>> str(pool.identity)
        'IPPool(10-0-0-0-16)'
    """

    model_config = ConfigDict(frozen=True)

    kind: ModernKind
    metadata: ResourceMetadata
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def identity(self) -> ResourceIdentity:
        """Get the datastore identity of this resource."""
        return ResourceIdentity(
            kind=self.kind,
            name=self.metadata.name,
            namespace=self.metadata.namespace,
        )

    def to_manifest(self) -> dict[str, Any]:
        """
        Render the resource as a v3 API manifest.

        Returns:
            Dictionary with apiVersion, kind, metadata and spec.
        """
        metadata: dict[str, Any] = {"name": self.metadata.name}
        if self.metadata.namespace is not None:
            metadata["namespace"] = self.metadata.namespace
        if self.metadata.labels:
            metadata["labels"] = dict(self.metadata.labels)
        return {
            "apiVersion": API_VERSION,
            "kind": self.kind.value,
            "metadata": metadata,
            "spec": self.spec,
        }


__all__ = [
    "API_VERSION",
    "ModernKind",
    "ModernResource",
    "ResourceIdentity",
    "ResourceMetadata",
]
