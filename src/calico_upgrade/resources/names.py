"""
Name conversion from v1 names to v3 resource names.

v3 names must be DNS-1123 subdomains: lowercase alphanumerics, '-' and
'.', at most 253 characters, every dot-separated label starting and ending
with an alphanumeric. v1 names were far less restricted (mixed case,
underscores, CIDRs as pool names), so most kinds need their names
converted. The report records every conversion that changed a name.
"""

from __future__ import annotations

import re

MAX_NAME_LENGTH = 253

_INVALID_CHARS = re.compile(r"[^a-z0-9.-]+")
_DASH_RUNS = re.compile(r"-{2,}")
_DOT_RUNS = re.compile(r"\.{2,}")
_LABEL_EDGE_DASHES = re.compile(r"-*\.-*")
_ADDRESS_SEPARATORS = re.compile(r"[./:]+")
_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


def normalize_name(name: str) -> str:
    """
    Convert a v1 name to a v3-compatible name.

    Args:
        name: The v1 name.

    Returns:
        The converted name. May still be invalid (e.g. empty or too long);
        check with is_valid_name().

    Example:
        >>> normalize_name("My_Profile")
        'my-profile'
    """
    converted = _INVALID_CHARS.sub("-", name.lower())
    converted = _DASH_RUNS.sub("-", converted)
    converted = _DOT_RUNS.sub(".", converted)
    converted = _LABEL_EDGE_DASHES.sub(".", converted)
    return converted.strip("-.")


def address_to_name(address: str) -> str:
    """
    Convert an IP address or CIDR to a v3 name.

    Dots, colons and slashes all become dashes so the result is a single
    DNS label (e.g. "10.0.0.0/16" -> "10-0-0-0-16").
    """
    return normalize_name(_ADDRESS_SEPARATORS.sub("-", address))


def is_valid_name(name: str) -> bool:
    """Check whether a name is a valid v3 resource name."""
    return 0 < len(name) <= MAX_NAME_LENGTH and _SUBDOMAIN.match(name) is not None


__all__ = [
    "MAX_NAME_LENGTH",
    "address_to_name",
    "is_valid_name",
    "normalize_name",
]
