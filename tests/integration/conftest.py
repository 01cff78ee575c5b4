"""
Shared pytest fixtures for integration tests.

Integration tests drive full upgrade runs through the public entry points
against the in-memory datastores, with a real OpenTelemetry SDK
TracerProvider installed so emitted spans can be inspected.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for integration tests."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


# ============================================================================
# OpenTelemetry Fixtures
# ============================================================================

# Module-level storage for the global test provider
_test_provider = None


@pytest.fixture(scope="session", autouse=True)
def setup_test_tracing() -> Generator[Any, None, None]:
    """
    Set up a global TracerProvider for all tests at session scope.

    The global provider can only be set once per process, so individual
    tests attach their own exporter through the trace_exporter fixture.
    """
    global _test_provider

    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider

    current_provider = trace.get_tracer_provider()

    # Only set up if not already configured
    if current_provider.__class__.__name__ == "ProxyTracerProvider":
        _test_provider = TracerProvider()
        trace.set_tracer_provider(_test_provider)
    else:
        _test_provider = current_provider

    yield _test_provider


@pytest.fixture
def trace_exporter(setup_test_tracing: Any) -> Generator[Any, None, None]:
    """
    Create an in-memory span exporter for testing.

    The exporter is attached to the session provider and captures every
    span finished while the test runs.

    Yields:
        InMemorySpanExporter instance with captured spans
    """
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import SimpleSpanProcessor
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

    exporter = InMemorySpanExporter()

    if isinstance(_test_provider, TracerProvider):
        _test_provider.add_span_processor(SimpleSpanProcessor(exporter))

    yield exporter

    # Processors cannot be removed from a provider; clearing is enough
    exporter.clear()


@pytest.fixture
def get_spans(trace_exporter: Any) -> Callable[[], list[Any]]:
    """
    Helper fixture to retrieve finished spans from the exporter.

    Returns:
        Callable that returns list of finished spans
    """

    def _get_spans() -> list[Any]:
        return list(trace_exporter.get_finished_spans())

    return _get_spans
