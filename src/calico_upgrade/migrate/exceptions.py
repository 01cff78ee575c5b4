"""
Exceptions for the calico_upgrade migration engine.

Exception Hierarchy:
    UpgradeError (base)
    +-- DatastoreAccessError
    +-- ConversionError
    |   +-- CollisionError
    |   +-- NameClashError
    +-- WriteError
    +-- PauseError
    +-- ResumeError
    +-- UpgradeStateError
    +-- UpgradeInProgressError

Every UpgradeError carries an ErrorClassification. The classification's
recoverability is what separates "retry the command" from "run abort":

- RECOVERABLE: operator fixes something and reruns (conversion errors).
- TRANSIENT: safe to rerun as-is (pause failed, a write failed but
  networking was resumed).
- FATAL: the run cannot continue, or networking may still be paused.

ConversionErrors never escape the engine; they are recorded as Failed
outcomes in the report. The datastore errors are raised by datastore
implementations and mapped to Result codes by the orchestrator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from calico_upgrade.migrate.models import UpgradeState
    from calico_upgrade.resources.modern import ResourceIdentity


class ErrorSeverity(Enum):
    """
    Severity level of upgrade errors.

    Attributes:
        CRITICAL: Cluster may be left with networking paused.
        ERROR: The run failed and needs operator attention.
        WARNING: The run failed but rerunning is expected to succeed.
        INFO: Informational condition, not a failure.
    """

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def log_level(self) -> int:
        """
        Get the corresponding Python logging level.

        Returns:
            Python logging level constant.
        """
        level_map = {
            ErrorSeverity.CRITICAL: logging.CRITICAL,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.INFO: logging.INFO,
        }
        return level_map[self]


class ErrorRecoverability(Enum):
    """
    Recoverability classification for upgrade errors.

    Attributes:
        RECOVERABLE: Operator must fix data or configuration, then rerun.
        TRANSIENT: Rerunning the same command is safe.
        FATAL: The run cannot proceed, or the cluster state is unknown.
    """

    RECOVERABLE = "recoverable"
    TRANSIENT = "transient"
    FATAL = "fatal"

    @property
    def should_retry(self) -> bool:
        """True only for TRANSIENT errors."""
        return self == ErrorRecoverability.TRANSIENT

    @property
    def should_abort(self) -> bool:
        """True only for FATAL errors."""
        return self == ErrorRecoverability.FATAL


@dataclass(frozen=True)
class ErrorClassification:
    """
    Metadata describing how an error should be handled.

    Attributes:
        severity: The severity level of the error.
        recoverability: How the error can be recovered from.
        error_code: Unique error code for programmatic handling.
        category: Error category for grouping related errors.
        suggested_action: Human-readable guidance for operators.
    """

    severity: ErrorSeverity
    recoverability: ErrorRecoverability
    error_code: str
    category: str
    suggested_action: str

    def to_dict(self) -> dict[str, Any]:
        """Convert classification to dictionary for serialization."""
        return {
            "severity": self.severity.value,
            "recoverability": self.recoverability.value,
            "error_code": self.error_code,
            "category": self.category,
            "suggested_action": self.suggested_action,
        }


class UpgradeError(Exception):
    """
    Base exception for all upgrade errors.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception, if any.
        classification: Error classification metadata.
    """

    _default_classification: ErrorClassification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="UPGRADE_ERROR",
        category="general",
        suggested_action="Review the upgrade logs",
    )

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    @property
    def classification(self) -> ErrorClassification:
        """Get the error classification for this exception."""
        return self._default_classification

    @property
    def severity(self) -> ErrorSeverity:
        return self.classification.severity

    @property
    def recoverability(self) -> ErrorRecoverability:
        return self.classification.recoverability

    @property
    def error_code(self) -> str:
        return self.classification.error_code

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for reports and logging.

        Returns:
            Dictionary representation of the error.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result


class DatastoreAccessError(UpgradeError):
    """
    Raised when a datastore cannot be reached or read.

    Not retried internally: listing failures end the run immediately with
    no report.

    Attributes:
        operation: The datastore operation that failed (e.g. "list_legacy").
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="DATASTORE_ACCESS",
        category="datastore",
        suggested_action="Check the datastore connection configuration and connectivity",
    )

    def __init__(self, operation: str, *, cause: BaseException | None = None) -> None:
        self.operation = operation
        super().__init__(f"Error accessing the datastore during {operation}", cause=cause)


class ConversionError(UpgradeError):
    """
    A single resource could not be converted to v3.

    Always recovered into a Failed outcome; never aborts the run.

    Attributes:
        resource: Identity of the legacy resource (e.g. "policy/allow-dns").
        field: Dotted path of the offending legacy field, if any.
        value: The offending value (None for a missing field).
        reason: What is wrong with the value.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.RECOVERABLE,
        error_code="CONVERSION_ERROR",
        category="conversion",
        suggested_action="Fix the legacy resource and rerun the command",
    )

    def __init__(
        self,
        resource: str,
        reason: str,
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.resource = resource
        self.reason = reason
        self.field = field
        self.value = value
        if field is not None:
            message = f"{resource}: field '{field}' (value {value!r}): {reason}"
        else:
            message = f"{resource}: {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["resource"] = self.resource
        result["reason"] = self.reason
        if self.field is not None:
            result["field"] = self.field
            result["value"] = _jsonable(self.value)
        return result


class CollisionError(ConversionError):
    """
    The converted resource already exists in the v3 datastore.

    Raised instead of silently overwriting v3 data the operator may have
    created. Rerunning with ignore_existing_v3 overwrites it.

    Attributes:
        identity: The v3 identity that already exists.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.RECOVERABLE,
        error_code="V3_COLLISION",
        category="conversion",
        suggested_action=(
            "Remove the existing v3 data, or rerun with ignore-v3-data to overwrite it"
        ),
    )

    def __init__(self, resource: str, identity: ResourceIdentity) -> None:
        self.identity = identity
        super().__init__(resource, f"{identity} already exists in the v3 datastore")


class NameClashError(ConversionError):
    """
    Two legacy resources convert to the same v3 identity.

    Attributes:
        identity: The clashing v3 identity.
        other: Identity of the legacy resource that claimed it first.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.RECOVERABLE,
        error_code="NAME_CLASH",
        category="conversion",
        suggested_action="Rename one of the legacy resources so their v3 names differ",
    )

    def __init__(self, resource: str, identity: ResourceIdentity, other: str) -> None:
        self.identity = identity
        self.other = other
        super().__init__(resource, f"converts to {identity}, which {other} also converts to")


class WriteError(UpgradeError):
    """
    Writing a v3 resource failed.

    Attributes:
        identity: Identity of the resource being written.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.WARNING,
        recoverability=ErrorRecoverability.TRANSIENT,
        error_code="WRITE_FAILED",
        category="datastore",
        suggested_action="Retry the command; existing v3 data will be reconciled",
    )

    def __init__(self, identity: ResourceIdentity, *, cause: BaseException | None = None) -> None:
        self.identity = identity
        super().__init__(f"Failed to write {identity}", cause=cause)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["resource"] = str(self.identity)
        return result


class PauseError(UpgradeError):
    """Pausing networking failed; nothing has been written."""

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.WARNING,
        recoverability=ErrorRecoverability.TRANSIENT,
        error_code="PAUSE_FAILED",
        category="networking",
        suggested_action="Retry the command",
    )

    def __init__(self, *, cause: BaseException | None = None) -> None:
        super().__init__("Failed to pause Calico networking", cause=cause)


class ResumeError(UpgradeError):
    """Resuming networking could not be confirmed; it may still be paused."""

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.CRITICAL,
        recoverability=ErrorRecoverability.FATAL,
        error_code="RESUME_FAILED",
        category="networking",
        suggested_action="Run the abort command to ensure Calico networking is unpaused",
    )

    def __init__(self, *, cause: BaseException | None = None) -> None:
        super().__init__("Failed to resume Calico networking", cause=cause)


class UpgradeStateError(UpgradeError):
    """
    Raised on an invalid orchestrator state transition.

    Attributes:
        current_state: The state the orchestrator was in.
        target_state: The state that was requested.
    """

    def __init__(self, current_state: UpgradeState, target_state: UpgradeState) -> None:
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid upgrade state transition: {current_state.value} -> {target_state.value}"
        )


class UpgradeInProgressError(UpgradeError):
    """Raised when an orchestrator is invoked while a run is already in progress."""

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="UPGRADE_IN_PROGRESS",
        category="state",
        suggested_action="Wait for the running upgrade command to finish",
    )

    def __init__(self) -> None:
        super().__init__("An upgrade run is already in progress for this cluster")


def classify_exception(exc: BaseException) -> ErrorClassification:
    """
    Classify any exception and return its error classification.

    Args:
        exc: The exception to classify.

    Returns:
        The UpgradeError's own classification, or a generic FATAL
        classification for anything else.
    """
    if isinstance(exc, UpgradeError):
        return exc.classification

    return ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="UNKNOWN_ERROR",
        category="unknown",
        suggested_action="An unexpected error occurred. Review the upgrade logs.",
    )


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, list | tuple):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return str(value)


__all__ = [
    "ErrorSeverity",
    "ErrorRecoverability",
    "ErrorClassification",
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
