"""
UpgradeOrchestrator - Runs validation, migration and abort.

The orchestrator sequences the upgrade of one cluster:

1. List legacy resources (and, for collision checks, existing v3 identities)
2. Convert every legacy resource into the report
3. Validate: stop here
4. Migrate: pause networking, write every converted resource, resume

It owns the mapping from datastore failures to Result codes. The central
guarantee is that a migration never returns with Calico networking paused
unless it returns FAIL_NEEDS_ABORT:

- Listing fails: FAIL, no report, nothing touched
- Conversion errors: FAIL with report, networking never paused
- Pause fails: FAIL_NEEDS_RETRY, nothing written
- Pause fails outside the datastore contract: resume as after a write failure
- A write fails: resume; FAIL_NEEDS_RETRY if resumed, else FAIL_NEEDS_ABORT
- Resume after all writes fails: FAIL_NEEDS_ABORT

Usage:
    >>> from calico_upgrade import run_migration, Result
    >>>
    >>> report, result = await run_migration(v3_client, v1_client)
    >>> if result is Result.FAIL_NEEDS_ABORT:
    ...     await run_abort(v1_client)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import TYPE_CHECKING, TypeVar

from calico_upgrade.migrate.converter import convert_all
from calico_upgrade.migrate.datastore import LegacyDatastore, ModernDatastore
from calico_upgrade.migrate.exceptions import (
    DatastoreAccessError,
    PauseError,
    ResumeError,
    UpgradeError,
    UpgradeInProgressError,
    UpgradeStateError,
    WriteError,
)
from calico_upgrade.migrate.models import MigrationConfig, MigrationMode, Result, UpgradeState
from calico_upgrade.migrate.outcomes import Converted, Failed, Skipped
from calico_upgrade.migrate.report import MigrationReport, ReportBuilder
from calico_upgrade.observability import (
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
    Tracer,
    create_tracer,
)
from calico_upgrade.resources.modern import ModernResource

if TYPE_CHECKING:
    from opentelemetry.trace import Span

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpgradeOrchestrator:
    """
    Sequences listing, conversion, pausing, writing and resuming.

    One orchestrator serves one cluster. Runs on the same instance must
    not overlap; a second concurrent call raises UpgradeInProgressError.

    Example:
        >>> orchestrator = UpgradeOrchestrator(
        ...     legacy=v1_client,
        ...     modern=v3_client,
        ...     config=MigrationConfig(display_status_messages=True),
        ... )
        >>> report, result = await orchestrator.validate()
        >>> if result.succeeded:
        ...     report, result = await orchestrator.migrate()

    Attributes:
        state: The state of the current (or last) run.
    """

    def __init__(
        self,
        legacy: LegacyDatastore,
        modern: ModernDatastore | None = None,
        *,
        config: MigrationConfig | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            legacy: Legacy v1 datastore client.
            modern: v3 datastore client. Required for validate() and
                migrate(); abort() only needs the legacy client.
            config: Run configuration (uses defaults if None).
            tracer: Optional custom Tracer instance.
            enable_tracing: Whether to enable OpenTelemetry tracing.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._legacy = legacy
        self._modern = modern
        self._config = config or MigrationConfig()
        self._state = UpgradeState.START
        self._running = False

    @property
    def state(self) -> UpgradeState:
        return self._state

    # =========================================================================
    # Public operations
    # =========================================================================

    async def validate(
        self, ignore_existing_v3: bool = False
    ) -> tuple[MigrationReport | None, Result]:
        """
        Check that the legacy data converts cleanly, without writing.

        Args:
            ignore_existing_v3: Do not report collisions with existing v3
                data (the v3 datastore is then not read).

        Returns:
            (None, FAIL) if a datastore could not be read,
            (report, FAIL) if any resource failed to convert,
            (report, OK) otherwise.
        """
        with self._run(MigrationMode.VALIDATE, ignore_existing_v3) as span:
            modern = self._require_modern()
            report = await self._prepare(modern, ignore_existing_v3)
            if report is None:
                result = Result.FAIL
            elif report.has_errors():
                self._status("Validation failed: some v1 data could not be converted")
                self._transition(UpgradeState.DONE)
                result = Result.FAIL
            else:
                self._status("Validation succeeded")
                self._transition(UpgradeState.DONE)
                result = Result.OK
            self._finish(span, MigrationMode.VALIDATE, result)
            return report, result

    async def migrate(
        self, ignore_existing_v3: bool = False
    ) -> tuple[MigrationReport | None, Result]:
        """
        Convert the legacy data and write it to the v3 datastore.

        Networking is paused only once every resource has converted
        cleanly, and only if there is something to write.

        Args:
            ignore_existing_v3: Overwrite existing v3 resources instead of
                reporting them as collisions.

        Returns:
            The report (None if a datastore could not be read) and the
            Result code.

        Raises:
            asyncio.CancelledError: If cancelled. When cancelled while
                networking may be paused, a resume is attempted first.
        """
        with self._run(MigrationMode.MIGRATE, ignore_existing_v3) as span:
            modern = self._require_modern()
            report = await self._prepare(modern, ignore_existing_v3)
            if report is None:
                result = Result.FAIL
            elif report.has_errors():
                self._status("Migration aborted: some v1 data could not be converted")
                self._transition(UpgradeState.DONE)
                result = Result.FAIL
            elif not report.converted_resources:
                self._status("No v1 data to migrate")
                self._transition(UpgradeState.DONE)
                result = Result.OK
            else:
                try:
                    report, result = await self._pause_write_resume(modern, report)
                except asyncio.CancelledError:
                    await self._resume_after_cancel()
                    raise
            self._finish(span, MigrationMode.MIGRATE, result)
            return report, result

    async def abort(self) -> Result:
        """
        Resume Calico networking after a failed migration.

        Safe to run at any time, including when networking is not paused.

        Returns:
            OK if networking was resumed, FAIL_NEEDS_ABORT otherwise.
        """
        with self._run(MigrationMode.ABORT, False) as span:
            self._transition(UpgradeState.RESUMING)
            result = await self._resume(Result.OK)
            self._finish(span, MigrationMode.ABORT, result)
            return result

    # =========================================================================
    # Phases
    # =========================================================================

    async def _prepare(
        self, modern: ModernDatastore, ignore_existing_v3: bool
    ) -> MigrationReport | None:
        """List and convert. Returns None if a datastore could not be read."""
        self._transition(UpgradeState.LISTING)
        self._status("Reading v1 data")
        try:
            with self._tracer.span("calico_upgrade.orchestrator.list"):
                resources = await self._call(
                    self._legacy.list_all(),
                    lambda exc: DatastoreAccessError("list_legacy", cause=exc),
                )
                existing = None
                if not ignore_existing_v3:
                    self._status("Checking for existing v3 data")
                    identities = await self._call(
                        modern.list_all(),
                        lambda exc: DatastoreAccessError("list_v3", cause=exc),
                    )
                    existing = set(identities)
        except DatastoreAccessError as exc:
            logger.error("Failed to read the datastore: %s", exc)
            self._status(f"Error accessing the Calico datastore: {exc}")
            self._transition(UpgradeState.DONE)
            return None

        logger.info("Read %d legacy resources", len(resources))
        if existing is not None:
            logger.info("Found %d existing v3 resources", len(existing))

        self._transition(UpgradeState.CONVERTING)
        self._status("Converting v1 data to v3 format")
        with self._tracer.span(
            "calico_upgrade.orchestrator.convert",
            {ATTR_RESOURCE_COUNT: len(resources)},
        ) as span:
            builder = ReportBuilder()
            for outcome in convert_all(resources, existing, ignore_existing_v3):
                builder.record(outcome)
            report = builder.finalize()
            if span:
                span.set_attribute(ATTR_RESOURCES_CONVERTED, report.converted_count)
                span.set_attribute(ATTR_RESOURCES_SKIPPED, report.skipped_count)
                span.set_attribute(ATTR_RESOURCES_FAILED, report.failed_count)

        logger.info(
            "Converted %d resources: %d converted, %d skipped, %d failed",
            report.total_count,
            report.converted_count,
            report.skipped_count,
            report.failed_count,
        )
        return report

    async def _pause_write_resume(
        self, modern: ModernDatastore, report: MigrationReport
    ) -> tuple[MigrationReport, Result]:
        self._transition(UpgradeState.PAUSING)
        self._status("Pausing Calico networking")
        try:
            with self._tracer.span("calico_upgrade.orchestrator.pause"):
                await self._call(
                    self._legacy.pause_networking(),
                    lambda exc: PauseError(cause=exc),
                )
        except PauseError as exc:
            logger.warning("Failed to pause networking, nothing was written: %s", exc)
            self._status(f"Error pausing Calico networking: {exc}")
            self._transition(UpgradeState.DONE)
            return report, Result.FAIL_NEEDS_RETRY
        except Exception as exc:
            # Outside the datastore contract: the pause may have partly applied
            pause_error = PauseError(cause=exc)
            logger.error("Unexpected failure pausing networking, resuming: %s", pause_error)
            self._status(f"Error pausing Calico networking: {pause_error}")
            self._transition(UpgradeState.RESUMING)
            return report, await self._resume(Result.FAIL_NEEDS_RETRY)

        self._transition(UpgradeState.WRITING)
        resources = report.converted_resources
        self._status(f"Storing v3 data ({len(resources)} resources)")
        written, error = await self._write_all(modern, resources)

        self._transition(UpgradeState.RESUMING)
        if error is None:
            return report, await self._resume(Result.OK)

        report = _report_after_write_failure(report, written, error)
        return report, await self._resume(Result.FAIL_NEEDS_RETRY)

    async def _write_all(
        self, modern: ModernDatastore, resources: list[ModernResource]
    ) -> tuple[int, WriteError | None]:
        """
        Write resources in order, stopping at the first failure.

        Returns:
            The number of resources written and the write error, if any.
        """
        written = 0
        with self._tracer.span(
            "calico_upgrade.orchestrator.write",
            {ATTR_RESOURCE_COUNT: len(resources)},
        ) as span:
            for resource in resources:
                try:
                    await self._call(
                        modern.write(resource),
                        lambda exc, identity=resource.identity: WriteError(identity, cause=exc),
                    )
                except WriteError as exc:
                    error = exc
                except Exception as exc:
                    error = WriteError(resource.identity, cause=exc)
                else:
                    written += 1
                    logger.debug("Wrote %s", resource.identity)
                    continue

                logger.warning(
                    "Failed to write %s after %d successful writes: %s",
                    resource.identity,
                    written,
                    error,
                )
                self._status(f"Error storing v3 data: {error}")
                if span:
                    span.set_attribute(ATTR_RESOURCES_WRITTEN, written)
                    span.set_attribute(ATTR_RESOURCE_KIND, resource.kind.value)
                    span.set_attribute(ATTR_RESOURCE_NAME, resource.metadata.name)
                    span.set_attribute(ATTR_ERROR_CODE, error.error_code)
                return written, error

            if span:
                span.set_attribute(ATTR_RESOURCES_WRITTEN, written)
        logger.info("Wrote %d v3 resources", written)
        return written, None

    async def _resume(self, result_if_resumed: Result) -> Result:
        """
        Resume networking from the RESUMING state.

        Returns:
            result_if_resumed, or FAIL_NEEDS_ABORT if the resume failed.
        """
        self._status("Resuming Calico networking")
        try:
            with self._tracer.span("calico_upgrade.orchestrator.resume"):
                await self._call(
                    self._legacy.resume_networking(),
                    lambda exc: ResumeError(cause=exc),
                )
        except ResumeError as exc:
            error = exc
        except Exception as exc:
            error = ResumeError(cause=exc)
        else:
            self._transition(UpgradeState.DONE)
            return result_if_resumed

        logger.error("Failed to resume networking, it may still be paused: %s", error)
        self._status(f"Error resuming Calico networking: {error}")
        self._transition(UpgradeState.ABORTED)
        return Result.FAIL_NEEDS_ABORT

    async def _resume_after_cancel(self) -> None:
        """Best-effort resume when a migration is cancelled mid-window."""
        if not self._state.in_pause_window:
            return
        logger.warning("Migration cancelled while in %s, resuming networking", self._state.value)
        if self._state != UpgradeState.RESUMING:
            self._transition(UpgradeState.RESUMING)
        try:
            await self._call(
                self._legacy.resume_networking(),
                lambda exc: ResumeError(cause=exc),
            )
        except Exception as exc:
            logger.error("Failed to resume networking after cancellation: %s", exc)
            self._transition(UpgradeState.ABORTED)
        else:
            self._transition(UpgradeState.DONE)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_modern(self) -> ModernDatastore:
        if self._modern is None:
            raise ValueError("A v3 datastore client is required to validate or migrate")
        return self._modern

    @contextlib.contextmanager
    def _run(self, mode: MigrationMode, ignore_existing_v3: bool) -> Iterator[Span | None]:
        if self._running:
            raise UpgradeInProgressError()
        self._running = True
        self._state = UpgradeState.START
        logger.info("Starting %s (config: %s)", mode.value, self._config.to_dict())
        try:
            with self._tracer.span(
                f"calico_upgrade.orchestrator.{mode.value}",
                {
                    ATTR_UPGRADE_MODE: mode.value,
                    ATTR_IGNORE_EXISTING_V3: ignore_existing_v3,
                },
            ) as span:
                try:
                    yield span
                except BaseException as exc:
                    if span:
                        span.set_attribute(ATTR_ERROR_TYPE, type(exc).__name__)
                        span.set_attribute(ATTR_UPGRADE_STATE, self._state.value)
                    raise
        finally:
            self._running = False

    def _finish(self, span: Span | None, mode: MigrationMode, result: Result) -> None:
        log = logger.info if result.succeeded else logger.warning
        if result.needs_abort:
            log = logger.error
        log("%s finished with result %s", mode.value.capitalize(), result.value)
        if span:
            span.set_attribute(ATTR_UPGRADE_RESULT, result.value)
            span.set_attribute(ATTR_UPGRADE_STATE, self._state.value)

    def _transition(self, target: UpgradeState) -> None:
        if not self._state.can_transition_to(target):
            raise UpgradeStateError(self._state, target)
        logger.debug("Upgrade state %s -> %s", self._state.value, target.value)
        self._state = target

    def _status(self, message: str) -> None:
        logger.info(message)
        if self._config.display_status_messages:
            self._config.status_printer(message)

    async def _call(
        self,
        awaitable: Awaitable[T],
        error: Callable[[BaseException], UpgradeError],
    ) -> T:
        """Await a datastore call, turning a timeout into the given error."""
        try:
            return await asyncio.wait_for(awaitable, self._config.operation_timeout)
        except TimeoutError as exc:
            raise error(exc) from exc


def _report_after_write_failure(
    report: MigrationReport, written: int, error: WriteError
) -> MigrationReport:
    """
    Rebuild the report to show which resources actually reached the datastore.

    The first `written` converted resources stay Converted, the one that
    failed becomes Failed, and every later one becomes Skipped.
    """
    builder = ReportBuilder()
    index = 0
    for outcome in report.outcomes:
        if isinstance(outcome, Converted):
            if index == written:
                outcome = Failed(outcome.source, (error,))
            elif index > written:
                outcome = Skipped(
                    outcome.source,
                    f"not written: {error.identity} failed to write first",
                )
            index += 1
        builder.record(outcome)
    return builder.finalize()


# =============================================================================
# Command-layer entry points
# =============================================================================


async def run_migration(
    v3_client: ModernDatastore,
    v1_client: LegacyDatastore,
    ignore_existing_v3: bool = False,
    *,
    config: MigrationConfig | None = None,
) -> tuple[MigrationReport | None, Result]:
    """
    Migrate all legacy data to v3.

    Args:
        v3_client: v3 datastore client.
        v1_client: Legacy datastore client.
        ignore_existing_v3: Overwrite existing v3 data instead of failing
            on collisions.
        config: Run configuration.

    Returns:
        (report, result). The report is None only when a datastore could
        not be read.
    """
    orchestrator = UpgradeOrchestrator(v1_client, v3_client, config=config)
    return await orchestrator.migrate(ignore_existing_v3)


async def run_validation(
    v3_client: ModernDatastore,
    v1_client: LegacyDatastore,
    *,
    config: MigrationConfig | None = None,
) -> tuple[MigrationReport | None, Result]:
    """Validate that all legacy data converts, without writing anything."""
    orchestrator = UpgradeOrchestrator(v1_client, v3_client, config=config)
    return await orchestrator.validate()


async def run_abort(
    v1_client: LegacyDatastore,
    *,
    config: MigrationConfig | None = None,
) -> Result:
    """Resume Calico networking; OK or FAIL_NEEDS_ABORT."""
    orchestrator = UpgradeOrchestrator(v1_client, config=config)
    return await orchestrator.abort()


__all__ = [
    "UpgradeOrchestrator",
    "run_migration",
    "run_validation",
    "run_abort",
]
