"""
Standard span attributes for calico_upgrade.

Attribute names are shared by every traced component so that spans from
listing, conversion and writing can be correlated in one trace. They
follow OpenTelemetry semantic conventions where applicable.

Example:
    >>> from calico_upgrade.observability.attributes import (
    ...     ATTR_UPGRADE_MODE,
    ...     ATTR_RESOURCE_COUNT,
    ... )
    >>>
    >>> with tracer.span(
    ...     "calico_upgrade.orchestrator.list",
    ...     {ATTR_UPGRADE_MODE: "migrate", ATTR_RESOURCE_COUNT: 12},
    ... ):
    ...     pass
"""

# =============================================================================
# Upgrade Run Attributes
# =============================================================================

ATTR_UPGRADE_MODE = "calico_upgrade.mode"
"""Run mode: 'migrate', 'validate' or 'abort'."""

ATTR_UPGRADE_STATE = "calico_upgrade.state"
"""Orchestrator state when the run ended (done or aborted)."""

ATTR_UPGRADE_RESULT = "calico_upgrade.result"
"""Final result code of the run."""

ATTR_IGNORE_EXISTING_V3 = "calico_upgrade.ignore_existing_v3"
"""Whether existing v3 data is overwritten instead of reported as a collision."""

# =============================================================================
# Resource Attributes
# =============================================================================

ATTR_RESOURCE_KIND = "calico_upgrade.resource.kind"
"""Kind of the resource being processed."""

ATTR_RESOURCE_NAME = "calico_upgrade.resource.name"
"""Name of the resource being processed."""

ATTR_RESOURCE_COUNT = "calico_upgrade.resource.count"
"""Number of resources handled by the operation."""

ATTR_RESOURCES_CONVERTED = "calico_upgrade.resources.converted"
"""Number of resources converted to v3."""

ATTR_RESOURCES_SKIPPED = "calico_upgrade.resources.skipped"
"""Number of resources skipped during conversion."""

ATTR_RESOURCES_FAILED = "calico_upgrade.resources.failed"
"""Number of resources that failed conversion or writing."""

ATTR_RESOURCES_WRITTEN = "calico_upgrade.resources.written"
"""Number of v3 resources written to the datastore."""

# =============================================================================
# Error Attributes
# =============================================================================

ATTR_ERROR_TYPE = "error.type"
"""Exception class name (OTEL semantic convention)."""

ATTR_ERROR_CODE = "calico_upgrade.error.code"
"""Error code from the error classification."""


__all__ = [
    "ATTR_UPGRADE_MODE",
    "ATTR_UPGRADE_STATE",
    "ATTR_UPGRADE_RESULT",
    "ATTR_IGNORE_EXISTING_V3",
    "ATTR_RESOURCE_KIND",
    "ATTR_RESOURCE_NAME",
    "ATTR_RESOURCE_COUNT",
    "ATTR_RESOURCES_CONVERTED",
    "ATTR_RESOURCES_SKIPPED",
    "ATTR_RESOURCES_FAILED",
    "ATTR_RESOURCES_WRITTEN",
    "ATTR_ERROR_TYPE",
    "ATTR_ERROR_CODE",
]
