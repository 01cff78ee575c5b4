"""
Shared pytest fixtures for the calico_upgrade tests.

This module provides:
- Legacy resource fixtures (clean_resources, legacy_pool, legacy_policy)
- In-memory datastore fixtures (legacy_store, modern_store)
- Orchestrator fixtures (mock_tracer, status_messages, orchestrator)
"""

from __future__ import annotations

import pytest

from calico_upgrade.migrate.in_memory import InMemoryLegacyDatastore, InMemoryModernDatastore
from calico_upgrade.migrate.models import MigrationConfig
from calico_upgrade.migrate.orchestrator import UpgradeOrchestrator
from calico_upgrade.observability import MockTracer
from calico_upgrade.resources.legacy import LegacyResource
from tests.fixtures import clean_legacy_set, make_ip_pool, make_policy

# ============================================================================
# Legacy Resource Fixtures
# ============================================================================


@pytest.fixture
def clean_resources() -> list[LegacyResource]:
    """One valid legacy resource of every kind."""
    return clean_legacy_set()


@pytest.fixture
def legacy_pool() -> LegacyResource:
    return make_ip_pool()


@pytest.fixture
def legacy_policy() -> LegacyResource:
    return make_policy()


# ============================================================================
# Datastore Fixtures
# ============================================================================


@pytest.fixture
def legacy_store(clean_resources: list[LegacyResource]) -> InMemoryLegacyDatastore:
    """Legacy datastore holding the clean resource set."""
    return InMemoryLegacyDatastore(clean_resources)


@pytest.fixture
def modern_store() -> InMemoryModernDatastore:
    """Empty v3 datastore."""
    return InMemoryModernDatastore()


# ============================================================================
# Orchestrator Fixtures
# ============================================================================


@pytest.fixture
def mock_tracer() -> MockTracer:
    return MockTracer()


@pytest.fixture
def status_messages() -> list[str]:
    """Collects status messages printed by an orchestrator."""
    return []


@pytest.fixture
def upgrade_config(status_messages: list[str]) -> MigrationConfig:
    """Config printing status messages into status_messages."""
    return MigrationConfig(
        display_status_messages=True,
        status_printer=status_messages.append,
        operation_timeout=1.0,
    )


@pytest.fixture
def orchestrator(
    legacy_store: InMemoryLegacyDatastore,
    modern_store: InMemoryModernDatastore,
    upgrade_config: MigrationConfig,
    mock_tracer: MockTracer,
) -> UpgradeOrchestrator:
    return UpgradeOrchestrator(
        legacy_store,
        modern_store,
        config=upgrade_config,
        tracer=mock_tracer,
    )
