"""
calico_upgrade - Migrate Calico data from the v1 to the v3 data model.

This library provides:
- Conversion of every legacy v1 resource kind to its v3 resource
- A per-kind report of converted, skipped and failed resources
- Validation runs that never touch the cluster
- Migration runs that pause networking, write v3 data and resume
- Abort runs that resume networking after a failed migration
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("calico-upgrade")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from calico_upgrade.migrate import (
    InMemoryLegacyDatastore,
    InMemoryModernDatastore,
    LegacyDatastore,
    MigrationConfig,
    MigrationReport,
    ModernDatastore,
    Result,
    UpgradeError,
    UpgradeOrchestrator,
    run_abort,
    run_migration,
    run_validation,
)
from calico_upgrade.resources import (
    LegacyKind,
    LegacyResource,
    ModernKind,
    ModernResource,
    ResourceIdentity,
)

__all__ = [
    "__version__",
    # Operations
    "run_migration",
    "run_validation",
    "run_abort",
    "UpgradeOrchestrator",
    "MigrationConfig",
    "MigrationReport",
    "Result",
    "UpgradeError",
    # Datastores
    "LegacyDatastore",
    "ModernDatastore",
    "InMemoryLegacyDatastore",
    "InMemoryModernDatastore",
    # Resources
    "LegacyKind",
    "LegacyResource",
    "ModernKind",
    "ModernResource",
    "ResourceIdentity",
]
