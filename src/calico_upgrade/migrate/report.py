"""
Migration report: per-resource outcomes grouped by legacy kind.

The report is built incrementally while converting (ReportBuilder) and
then frozen (MigrationReport). Sections follow the fixed legacy kind
order; legacy kinds with no v3 mapping follow in the order they were first
seen. Within a section, outcomes keep the order resources were recorded.

Example:
    >>> builder = ReportBuilder()
    >>> for outcome in convert_all(resources):
    ...     builder.record(outcome)
    >>> report = builder.finalize()
    >>> if report.has_errors():
    ...     for outcome in report.failed:
    ...         print(outcome.source.identity)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from calico_upgrade.migrate.outcomes import ConversionOutcome, Converted, Failed, Skipped
from calico_upgrade.resources.legacy import LegacyKind
from calico_upgrade.resources.modern import ModernResource


@dataclass(frozen=True)
class NameConversion:
    """
    A legacy resource whose v3 name differs from its legacy name.

    Attributes:
        resource: Identity of the legacy resource.
        kind: Legacy kind tag.
        original: The legacy name.
        converted: The v3 name.
    """

    resource: str
    kind: str
    original: str
    converted: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource": self.resource,
            "kind": self.kind,
            "original": self.original,
            "converted": self.converted,
        }


@dataclass(frozen=True)
class ReportSection:
    """
    All outcomes for one legacy kind.

    Attributes:
        kind: Legacy kind tag.
        outcomes: Outcomes in the order they were recorded.
    """

    kind: str
    outcomes: tuple[ConversionOutcome, ...]

    @property
    def converted(self) -> list[Converted]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, Converted)]

    @property
    def skipped(self) -> list[Skipped]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, Skipped)]

    @property
    def failed(self) -> list[Failed]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, Failed)]

    @property
    def error_count(self) -> int:
        """Total number of errors across all Failed outcomes in the section."""
        return sum(len(outcome.errors) for outcome in self.failed)

    def has_errors(self) -> bool:
        return any(isinstance(outcome, Failed) for outcome in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "converted": len(self.converted),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


class MigrationReport:
    """
    Immutable result of converting a full legacy data set.

    Created once per invocation by ReportBuilder.finalize(). Never
    persisted by the engine; see report_writer for rendering.

    Attributes:
        sections: Sections in report order.
    """

    def __init__(self, sections: tuple[ReportSection, ...], failure_count: int) -> None:
        self._sections = sections
        self._failure_count = failure_count
        self._by_kind = {section.kind: section for section in sections}

    @property
    def sections(self) -> tuple[ReportSection, ...]:
        return self._sections

    def section(self, kind: str | LegacyKind) -> ReportSection | None:
        """
        Get the section for a legacy kind.

        Args:
            kind: Legacy kind tag or LegacyKind member.

        Returns:
            The section, or None if no resource of that kind was recorded.
        """
        key = kind.value if isinstance(kind, LegacyKind) else kind
        return self._by_kind.get(key)

    def has_errors(self) -> bool:
        """Check if any resource failed to convert or write."""
        return self._failure_count > 0

    @property
    def outcomes(self) -> list[ConversionOutcome]:
        """All outcomes, flattened in section order."""
        return [outcome for section in self._sections for outcome in section.outcomes]

    @property
    def converted(self) -> list[Converted]:
        return [outcome for section in self._sections for outcome in section.converted]

    @property
    def skipped(self) -> list[Skipped]:
        return [outcome for section in self._sections for outcome in section.skipped]

    @property
    def failed(self) -> list[Failed]:
        return [outcome for section in self._sections for outcome in section.failed]

    @property
    def converted_resources(self) -> list[ModernResource]:
        """v3 resources in the order they are written."""
        return [outcome.resource for outcome in self.converted]

    @property
    def name_conversions(self) -> list[NameConversion]:
        """Converted resources whose v3 name differs from the legacy name."""
        return [
            NameConversion(
                resource=outcome.source.identity,
                kind=outcome.kind,
                original=outcome.source.name,
                converted=outcome.resource.metadata.name,
            )
            for outcome in self.converted
            if outcome.renamed
        ]

    @property
    def total_count(self) -> int:
        return sum(len(section.outcomes) for section in self._sections)

    @property
    def converted_count(self) -> int:
        return len(self.converted)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return self._failure_count

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "has_errors": self.has_errors(),
            "total": self.total_count,
            "converted": self.converted_count,
            "skipped": self.skipped_count,
            "failed": self.failed_count,
            "sections": [section.to_dict() for section in self._sections],
            "name_conversions": [conversion.to_dict() for conversion in self.name_conversions],
        }

    def __repr__(self) -> str:
        return (
            f"MigrationReport(total={self.total_count}, converted={self.converted_count}, "
            f"skipped={self.skipped_count}, failed={self.failed_count})"
        )


class ReportBuilder:
    """
    Accumulates conversion outcomes into a MigrationReport.

    Example:
        >>> builder = ReportBuilder()
        >>> builder.record(Skipped(resource, "no v3 equivalent"))
        >>> builder.has_errors()
        False
        >>> report = builder.finalize()
    """

    def __init__(self) -> None:
        self._outcomes: dict[str, list[ConversionOutcome]] = {}
        self._failure_count = 0
        self._finalized = False

    def record(self, outcome: ConversionOutcome) -> None:
        """
        Record the outcome for one legacy resource.

        Raises:
            RuntimeError: If the report has already been finalized.
        """
        if self._finalized:
            raise RuntimeError("Cannot record outcomes after the report is finalized")
        self._outcomes.setdefault(outcome.kind, []).append(outcome)
        if isinstance(outcome, Failed):
            self._failure_count += 1

    def has_errors(self) -> bool:
        return self._failure_count > 0

    def finalize(self) -> MigrationReport:
        """
        Freeze the recorded outcomes into a report.

        Raises:
            RuntimeError: If called more than once.
        """
        if self._finalized:
            raise RuntimeError("Report has already been finalized")
        self._finalized = True

        known = [kind.value for kind in LegacyKind if kind.value in self._outcomes]
        unknown = [kind for kind in self._outcomes if LegacyKind.lookup(kind) is None]
        sections = tuple(
            ReportSection(kind=kind, outcomes=tuple(self._outcomes[kind]))
            for kind in known + unknown
        )
        return MigrationReport(sections, self._failure_count)


__all__ = [
    "MigrationReport",
    "NameConversion",
    "ReportBuilder",
    "ReportSection",
]
