"""
Serialization utilities for calico_upgrade.

Example:
    >>> from calico_upgrade.serialization import json_dumps
    >>> json_str = json_dumps(report.to_dict(), indent=2)
"""

from calico_upgrade.serialization.json import (
    UpgradeJSONEncoder,
    json_dumps,
    json_loads,
)

__all__ = [
    "UpgradeJSONEncoder",
    "json_dumps",
    "json_loads",
]
