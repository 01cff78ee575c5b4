"""
JSON serialization utilities for upgrade reports.

Report payloads mix plain containers with enums, IP address objects,
pydantic models and error objects. This module renders all of them to
JSON without every caller having to pre-convert.

Example:
    >>> from calico_upgrade.serialization import json_dumps
    >>> from ipaddress import ip_network
    >>>
    >>> json_dumps({"cidr": ip_network("10.0.0.0/16")})
    '{"cidr": "10.0.0.0/16"}'
"""

import json
from datetime import datetime
from enum import Enum
from ipaddress import IPv4Address, IPv4Interface, IPv4Network, IPv6Address, IPv6Interface, IPv6Network
from typing import Any

from pydantic import BaseModel

_IP_TYPES = (IPv4Address, IPv6Address, IPv4Network, IPv6Network, IPv4Interface, IPv6Interface)


class UpgradeJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for the types that appear in upgrade reports.

    Supports:
    - Enum members: their value
    - ipaddress objects: their string form
    - datetime objects: ISO 8601 string
    - pydantic models: ``model_dump(mode="json", by_alias=True)``
    - objects with a ``to_dict()`` method (errors, outcomes)
    """

    def default(self, obj: Any) -> Any:
        """
        Convert non-serializable objects to JSON-serializable formats.

        Args:
            obj: Object to serialize

        Returns:
            JSON-serializable representation

        Raises:
            TypeError: If object type is not supported
        """
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, _IP_TYPES):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        to_dict = getattr(obj, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return super().default(obj)


def json_dumps(obj: Any, *, indent: int | None = None) -> str:
    """
    Serialize object to JSON string using UpgradeJSONEncoder.

    Args:
        obj: Object to serialize
        indent: Indentation passed to json.dumps (None for compact output)

    Returns:
        JSON string representation
    """
    return json.dumps(obj, cls=UpgradeJSONEncoder, indent=indent)


def json_loads(s: str) -> Any:
    """
    Deserialize JSON string to Python object.

    Note: values are returned as plain JSON types; enums and addresses are
    not restored.
    """
    return json.loads(s)


__all__ = [
    "UpgradeJSONEncoder",
    "json_dumps",
    "json_loads",
]
