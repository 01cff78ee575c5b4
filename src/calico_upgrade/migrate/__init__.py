"""
Upgrade engine: conversion, reporting and orchestration.

Key Components:
    - convert / convert_all: Pure v1 to v3 resource conversion
    - ReportBuilder / MigrationReport: Per-kind outcome report
    - LegacyDatastore / ModernDatastore: Datastore access interfaces
    - UpgradeOrchestrator: Runs validate, migrate and abort

Run Results:
    1. OK: Completed successfully
    2. FAIL: Nothing was touched; see the report or the logs
    3. FAIL_NEEDS_RETRY: Networking is running; rerun the command
    4. FAIL_NEEDS_ABORT: Networking may be paused; run abort

Usage:
    >>> from calico_upgrade.migrate import run_validation, run_migration, Result
    >>>
    >>> report, result = await run_validation(v3_client, v1_client)
    >>> if result is Result.OK:
    ...     report, result = await run_migration(v3_client, v1_client)
"""

from calico_upgrade.migrate.converter import convert, convert_all
from calico_upgrade.migrate.datastore import LegacyDatastore, ModernDatastore
from calico_upgrade.migrate.exceptions import (
    CollisionError,
    ConversionError,
    DatastoreAccessError,
    ErrorClassification,
    ErrorRecoverability,
    ErrorSeverity,
    NameClashError,
    PauseError,
    ResumeError,
    UpgradeError,
    UpgradeInProgressError,
    UpgradeStateError,
    WriteError,
    classify_exception,
)
from calico_upgrade.migrate.in_memory import InMemoryLegacyDatastore, InMemoryModernDatastore
from calico_upgrade.migrate.models import MigrationConfig, MigrationMode, Result, UpgradeState
from calico_upgrade.migrate.orchestrator import (
    UpgradeOrchestrator,
    run_abort,
    run_migration,
    run_validation,
)
from calico_upgrade.migrate.outcomes import ConversionOutcome, Converted, Failed, Skipped
from calico_upgrade.migrate.report import (
    MigrationReport,
    NameConversion,
    ReportBuilder,
    ReportSection,
)
from calico_upgrade.migrate.report_writer import (
    format_result_message,
    format_summary,
    write_report,
)

__all__ = [
    # Conversion
    "convert",
    "convert_all",
    "ConversionOutcome",
    "Converted",
    "Skipped",
    "Failed",
    # Report
    "MigrationReport",
    "NameConversion",
    "ReportBuilder",
    "ReportSection",
    "format_result_message",
    "format_summary",
    "write_report",
    # Datastores
    "LegacyDatastore",
    "ModernDatastore",
    "InMemoryLegacyDatastore",
    "InMemoryModernDatastore",
    # Orchestration
    "UpgradeOrchestrator",
    "run_abort",
    "run_migration",
    "run_validation",
    # Models
    "MigrationConfig",
    "MigrationMode",
    "Result",
    "UpgradeState",
    # Exceptions
    "ErrorClassification",
    "ErrorRecoverability",
    "ErrorSeverity",
    "UpgradeError",
    "DatastoreAccessError",
    "ConversionError",
    "CollisionError",
    "NameClashError",
    "WriteError",
    "PauseError",
    "ResumeError",
    "UpgradeStateError",
    "UpgradeInProgressError",
    "classify_exception",
]
