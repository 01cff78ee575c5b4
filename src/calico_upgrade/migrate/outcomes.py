"""
Per-resource conversion outcomes.

Every LegacyResource produces exactly one outcome:

- Converted: the v3 resource that will be written
- Skipped: the resource has no v3 equivalent, or was not written
- Failed: one or more errors, each bound to the legacy resource
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from calico_upgrade.migrate.exceptions import UpgradeError
from calico_upgrade.resources.legacy import LegacyResource
from calico_upgrade.resources.modern import ModernResource


@dataclass(frozen=True)
class Converted:
    """A legacy resource converted to a v3 resource."""

    source: LegacyResource
    resource: ModernResource

    @property
    def kind(self) -> str:
        return self.source.kind

    @property
    def renamed(self) -> bool:
        """Check if the v3 name differs from the legacy name."""
        return self.source.name != self.resource.metadata.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource": self.source.identity,
            "status": "converted",
            "v3": self.resource.to_manifest(),
        }


@dataclass(frozen=True)
class Skipped:
    """A legacy resource that produced no v3 resource."""

    source: LegacyResource
    reason: str

    @property
    def kind(self) -> str:
        return self.source.kind

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource": self.source.identity,
            "status": "skipped",
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Failed:
    """A legacy resource that could not be converted or written."""

    source: LegacyResource
    errors: tuple[UpgradeError, ...]

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError(f"Failed outcome for {self.source.identity} needs at least one error")

    @property
    def kind(self) -> str:
        return self.source.kind

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource": self.source.identity,
            "status": "failed",
            "errors": [error.to_dict() for error in self.errors],
        }


ConversionOutcome = Converted | Skipped | Failed


__all__ = [
    "Converted",
    "Skipped",
    "Failed",
    "ConversionOutcome",
]
