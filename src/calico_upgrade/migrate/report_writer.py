"""
Rendering of migration reports for operators.

The engine never persists a report; a command layer uses these helpers to
print a summary and store the details next to the upgrade logs.

Files written by write_report():

- ``<kind>.json``: one per report section, every outcome for that kind
- ``unknown-<kind>.json``: sections for legacy kinds with no v3 mapping,
  named after the normalized kind tag
- ``name-conversions.json``: legacy names that changed during conversion
"""

from __future__ import annotations

import logging
from pathlib import Path

from calico_upgrade.migrate.models import MigrationMode, Result
from calico_upgrade.migrate.report import MigrationReport
from calico_upgrade.resources.legacy import LegacyKind
from calico_upgrade.resources.names import normalize_name
from calico_upgrade.serialization import json_dumps

logger = logging.getLogger(__name__)

NAME_CONVERSIONS_FILE = "name-conversions.json"
UNKNOWN_KIND_PREFIX = "unknown-"


def write_report(report: MigrationReport, output_dir: Path | str) -> list[Path]:
    """
    Write the report as JSON files into an existing directory.

    Args:
        report: The report to write.
        output_dir: Target directory. Must already exist.

    Returns:
        Paths of the files written, in report order.

    Raises:
        NotADirectoryError: If output_dir does not exist or is not a
            directory.
        ValueError: If a section file would land outside output_dir.
    """
    directory = Path(output_dir)
    if not directory.is_dir():
        raise NotADirectoryError(f"Report directory {directory} does not exist")

    root = directory.resolve()
    paths: list[Path] = []
    used: set[str] = set()
    for index, section in enumerate(report.sections):
        filename = _section_filename(section.kind, index, used)
        used.add(filename)
        path = directory / filename
        if path.resolve().parent != root:
            raise ValueError(f"Report file {filename!r} is outside {directory}")
        path.write_text(json_dumps(section, indent=2) + "\n", encoding="utf-8")
        paths.append(path)

    conversions = report.name_conversions
    if conversions:
        path = directory / NAME_CONVERSIONS_FILE
        path.write_text(json_dumps(conversions, indent=2) + "\n", encoding="utf-8")
        paths.append(path)

    logger.info("Wrote %d report files to %s", len(paths), directory)
    return paths


def _section_filename(kind: str, index: int, used: set[str]) -> str:
    """
    File name for a report section.

    Known kinds use their tag as is. Unknown tags come straight from the
    legacy datastore, so they are normalized to a single safe name and
    made unique within the report.
    """
    if LegacyKind.lookup(kind) is not None:
        return f"{kind}.json"
    stem = normalize_name(kind.replace(".", "-")) or str(index)
    filename = f"{UNKNOWN_KIND_PREFIX}{stem}.json"
    if filename in used:
        filename = f"{UNKNOWN_KIND_PREFIX}{stem}-{index}.json"
    return filename


def format_summary(report: MigrationReport) -> list[str]:
    """
    Summarize a report as human-readable lines.

    Example:
        >>> for line in format_summary(report):
        ...     print(line)
        ipPool: 2 converted
        policy: 1 converted, 1 failed
          policy/allow-dns: field 'selector' (value None): Field required
    """
    lines: list[str] = []
    for section in report.sections:
        counts = [
            f"{count} {label}"
            for count, label in (
                (len(section.converted), "converted"),
                (len(section.skipped), "skipped"),
                (len(section.failed), "failed"),
            )
            if count
        ]
        lines.append(f"{section.kind}: {', '.join(counts)}")
        for failed in section.failed:
            lines.extend(f"  {error}" for error in failed.errors)

    if report.name_conversions:
        lines.append(f"{len(report.name_conversions)} resource name(s) changed during conversion")
    return lines


_RESULT_HEADLINES: dict[MigrationMode, tuple[str, str]] = {
    MigrationMode.MIGRATE: (
        "Successfully migrated Calico v1 data to v3 format.",
        "Failed to migrate Calico v1 data to v3 format.",
    ),
    MigrationMode.VALIDATE: (
        "Successfully validated v1 to v3 conversion.",
        "Failed to validate v1 to v3 conversion.",
    ),
    MigrationMode.ABORT: (
        "Successfully resumed Calico networking.",
        "Failed to resume Calico networking.",
    ),
}

_SUCCESS_DETAILS: dict[MigrationMode, str] = {
    MigrationMode.MIGRATE: "Follow the remaining upgrade instructions to complete the upgrade.",
    MigrationMode.VALIDATE: "See the report for details of the conversion.",
    MigrationMode.ABORT: "Calico networking is no longer paused.",
}


def format_result_message(
    result: Result,
    report: MigrationReport | None,
    mode: MigrationMode = MigrationMode.MIGRATE,
) -> str:
    """
    Final message for the operator after a run.

    Args:
        result: The run result.
        report: The report, or None if the datastore could not be read.
        mode: Which operation produced the result.

    Example:
        >>> print(format_result_message(Result.OK, report, MigrationMode.VALIDATE))
        Successfully validated v1 to v3 conversion.
        See the report for details of the conversion.
    """
    success, failure = _RESULT_HEADLINES[mode]
    if result.succeeded:
        return success + "\n" + _SUCCESS_DETAILS[mode]

    if report is not None and report.has_errors():
        message = failure + "\nSee the report for details of any conversion errors."
    else:
        message = failure + "\nSee previous messages for details."

    if result.needs_retry:
        message += "\n\nPlease retry the command."
    elif result.needs_abort:
        message += (
            "\n\nPlease run the abort command to ensure Calico networking is unpaused."
        )
    return message


__all__ = [
    "NAME_CONVERSIONS_FILE",
    "UNKNOWN_KIND_PREFIX",
    "format_result_message",
    "format_summary",
    "write_report",
]
