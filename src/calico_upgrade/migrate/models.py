"""
Data models for the upgrade engine.

Enums:
    - Result: Outcome code of a whole run
    - MigrationMode: Which operation the orchestrator is running
    - UpgradeState: Orchestrator state machine

Configuration:
    - MigrationConfig: Per-call configuration for a run
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Result(Enum):
    """
    Outcome code of a migration, validation or abort run.

    Attributes:
        OK: The run completed successfully.
        FAIL: The run failed without touching the cluster. Either a
            datastore could not be read (no report) or the report contains
            conversion errors.
        FAIL_NEEDS_RETRY: The run failed in a way that is safe to rerun;
            networking is known to be running.
        FAIL_NEEDS_ABORT: Networking may still be paused. The operator must
            run the abort command before anything else touches the cluster.
    """

    OK = "ok"
    FAIL = "fail"
    FAIL_NEEDS_RETRY = "fail_needs_retry"
    FAIL_NEEDS_ABORT = "fail_needs_abort"

    @property
    def succeeded(self) -> bool:
        return self == Result.OK

    @property
    def needs_retry(self) -> bool:
        return self == Result.FAIL_NEEDS_RETRY

    @property
    def needs_abort(self) -> bool:
        return self == Result.FAIL_NEEDS_ABORT


class MigrationMode(Enum):
    """Which operation a run performs."""

    MIGRATE = "migrate"
    VALIDATE = "validate"
    ABORT = "abort"


class UpgradeState(Enum):
    """
    Orchestrator state machine.

    State machine transitions:
        START -> LISTING -> CONVERTING -> DONE                    (validate)
        START -> LISTING -> CONVERTING -> PAUSING -> WRITING
              -> RESUMING -> DONE                                 (migrate)
        PAUSING -> RESUMING                                       (cancelled)
        PAUSING/WRITING/RESUMING -> ABORTED
        START -> RESUMING -> DONE | ABORTED                       (abort)

    Any state before PAUSING may also go straight to DONE when the run
    fails early; nothing has been mutated at that point.

    Attributes:
        START: No work done yet.
        LISTING: Reading legacy (and, for collision checks, v3) data.
        CONVERTING: Converting every legacy resource into the report.
        PAUSING: Pausing networking before any write.
        WRITING: Writing v3 resources one at a time.
        RESUMING: Resuming networking.
        DONE: Terminal; the cluster is known to be in a safe state.
        ABORTED: Terminal; networking may still be paused.
    """

    START = "start"
    LISTING = "listing"
    CONVERTING = "converting"
    PAUSING = "pausing"
    WRITING = "writing"
    RESUMING = "resuming"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (UpgradeState.DONE, UpgradeState.ABORTED)

    @property
    def in_pause_window(self) -> bool:
        """Check if networking may be paused while in this state."""
        return self in (UpgradeState.PAUSING, UpgradeState.WRITING, UpgradeState.RESUMING)

    def can_transition_to(self, target: UpgradeState) -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target: The target state to transition to.

        Returns:
            True if the transition is valid.
        """
        if self.is_terminal:
            return False

        if target == UpgradeState.ABORTED:
            return self.in_pause_window

        valid_transitions: dict[UpgradeState, list[UpgradeState]] = {
            UpgradeState.START: [
                UpgradeState.LISTING,
                UpgradeState.RESUMING,
                UpgradeState.DONE,
            ],
            UpgradeState.LISTING: [UpgradeState.CONVERTING, UpgradeState.DONE],
            UpgradeState.CONVERTING: [UpgradeState.PAUSING, UpgradeState.DONE],
            UpgradeState.PAUSING: [
                UpgradeState.WRITING,
                UpgradeState.RESUMING,
                UpgradeState.DONE,
            ],
            UpgradeState.WRITING: [UpgradeState.RESUMING],
            UpgradeState.RESUMING: [UpgradeState.DONE],
        }

        return target in valid_transitions.get(self, [])


@dataclass(frozen=True)
class MigrationConfig:
    """
    Configuration for one upgrade run, passed at call time.

    Attributes:
        display_status_messages: Print human-readable progress messages
            through status_printer. Messages are logged either way.
        status_printer: Receives progress strings when
            display_status_messages is set (default: print).
        operation_timeout: Seconds to wait for any single datastore call,
            or None to wait indefinitely. A call that times out is treated
            as a failure of that call.

    Example:
        >>> config = MigrationConfig(display_status_messages=True)
        >>> config.operation_timeout
        60.0
    """

    display_status_messages: bool = False
    status_printer: Callable[[str], None] = field(default=print, repr=False)
    operation_timeout: float | None = 60.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.operation_timeout is not None and self.operation_timeout <= 0:
            raise ValueError(f"operation_timeout must be > 0, got {self.operation_timeout}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "display_status_messages": self.display_status_messages,
            "operation_timeout": self.operation_timeout,
        }


__all__ = [
    "Result",
    "MigrationMode",
    "UpgradeState",
    "MigrationConfig",
]
