"""
Resource models for the v1 and v3 data models.

- LegacyResource / LegacyKind: records read from the v1 datastore
- ModernResource / ModernKind / ResourceIdentity: v3 resources
- normalize_name / address_to_name: v1 to v3 name conversion
"""

from calico_upgrade.resources.legacy import LegacyKind, LegacyResource
from calico_upgrade.resources.modern import (
    API_VERSION,
    ModernKind,
    ModernResource,
    ResourceIdentity,
    ResourceMetadata,
)
from calico_upgrade.resources.names import (
    MAX_NAME_LENGTH,
    address_to_name,
    is_valid_name,
    normalize_name,
)

__all__ = [
    "API_VERSION",
    "LegacyKind",
    "LegacyResource",
    "ModernKind",
    "ModernResource",
    "ResourceIdentity",
    "ResourceMetadata",
    "MAX_NAME_LENGTH",
    "address_to_name",
    "is_valid_name",
    "normalize_name",
]
