"""
Observability utilities for calico_upgrade.

This module provides the injectable tracer abstraction and the standard
span attribute names used by the upgrade engine.

Example:
    >>> from calico_upgrade.observability import create_tracer
    >>>
    >>> class MyComponent:
    ...     def __init__(self, enable_tracing: bool = True):
    ...         self._tracer = create_tracer(__name__, enable_tracing)
    ...         self._enable_tracing = self._tracer.enabled
"""

from calico_upgrade.observability.attributes import (
    ATTR_ERROR_CODE,
    ATTR_ERROR_TYPE,
    ATTR_IGNORE_EXISTING_V3,
    ATTR_RESOURCE_COUNT,
    ATTR_RESOURCE_KIND,
    ATTR_RESOURCE_NAME,
    ATTR_RESOURCES_CONVERTED,
    ATTR_RESOURCES_FAILED,
    ATTR_RESOURCES_SKIPPED,
    ATTR_RESOURCES_WRITTEN,
    ATTR_UPGRADE_MODE,
    ATTR_UPGRADE_RESULT,
    ATTR_UPGRADE_STATE,
)
from calico_upgrade.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
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
