"""
Unit tests for report rendering.

Tests cover:
- JSON files written per section
- Name conversion file
- Summary lines
- Final result messages
"""

from __future__ import annotations

from pathlib import Path

import pytest

from calico_upgrade.migrate.converter import convert_all
from calico_upgrade.migrate.models import MigrationMode, Result
from calico_upgrade.migrate.report import MigrationReport, ReportBuilder
from calico_upgrade.migrate.report_writer import (
    NAME_CONVERSIONS_FILE,
    format_result_message,
    format_summary,
    write_report,
)
from calico_upgrade.resources.legacy import LegacyResource
from calico_upgrade.serialization import json_loads
from tests.fixtures import make_ip_pool, make_policy, make_profile


def _build(resources: list[LegacyResource]) -> MigrationReport:
    builder = ReportBuilder()
    for outcome in convert_all(resources):
        builder.record(outcome)
    return builder.finalize()


@pytest.fixture
def report() -> MigrationReport:
    return _build([make_ip_pool(), make_policy(drop=("selector",)), make_profile()])


class TestWriteReport:
    """Tests for write_report()."""

    def test_writes_file_per_section(self, report: MigrationReport, tmp_path: Path) -> None:
        """Test one JSON file per section plus name conversions."""
        paths = write_report(report, tmp_path)

        assert [path.name for path in paths] == [
            "ipPool.json",
            "profile.json",
            "policy.json",
            NAME_CONVERSIONS_FILE,
        ]
        assert all(path.exists() for path in paths)

    def test_section_contents(self, report: MigrationReport, tmp_path: Path) -> None:
        """Test section files contain outcomes with errors."""
        write_report(report, tmp_path)

        policy = json_loads((tmp_path / "policy.json").read_text())
        assert policy["kind"] == "policy"
        assert policy["failed"] == 1
        (outcome,) = policy["outcomes"]
        assert outcome["errors"][0]["field"] == "selector"

        pool = json_loads((tmp_path / "ipPool.json").read_text())
        assert pool["outcomes"][0]["v3"]["metadata"]["name"] == "10-0-0-0-16"

    def test_name_conversions_file(self, report: MigrationReport, tmp_path: Path) -> None:
        """Test the name conversion file lists renamed resources."""
        write_report(report, tmp_path)

        conversions = json_loads((tmp_path / NAME_CONVERSIONS_FILE).read_text())
        assert conversions == [
            {
                "resource": "ipPool/10.0.0.0/16",
                "kind": "ipPool",
                "original": "10.0.0.0/16",
                "converted": "10-0-0-0-16",
            }
        ]

    def test_no_name_conversions_file_when_unchanged(self, tmp_path: Path) -> None:
        """Test the name conversion file is omitted when nothing was renamed."""
        paths = write_report(_build([make_profile("frontend")]), tmp_path)

        assert [path.name for path in paths] == ["profile.json"]

    def test_unknown_kind_with_slash(self, tmp_path: Path) -> None:
        """Test an unknown kind tag with a slash gets a flat file name."""
        report = _build([LegacyResource(kind="config/felix", name="default"), make_profile()])

        paths = write_report(report, tmp_path)

        assert [path.name for path in paths] == ["profile.json", "unknown-config-felix.json"]
        assert all(path.parent == tmp_path for path in paths)
        section = json_loads((tmp_path / "unknown-config-felix.json").read_text())
        assert section["kind"] == "config/felix"
        assert section["skipped"] == 1

    def test_unknown_kind_cannot_escape_directory(self, tmp_path: Path) -> None:
        """Test a path-like unknown kind tag is written inside the directory."""
        output = tmp_path / "out"
        output.mkdir()
        report = _build([LegacyResource(kind="../escaped", name="x")])

        (path,) = write_report(report, output)

        assert path == output / "unknown-escaped.json"
        assert list(tmp_path.iterdir()) == [output]

    def test_unknown_kinds_normalizing_alike_stay_apart(self, tmp_path: Path) -> None:
        """Test two unknown kinds with the same normalized name get separate files."""
        report = _build(
            [
                LegacyResource(kind="Config/Felix", name="a"),
                LegacyResource(kind="config/felix", name="b"),
            ]
        )

        paths = write_report(report, tmp_path)

        assert len({path.name for path in paths}) == 2

    def test_missing_directory(self, report: MigrationReport, tmp_path: Path) -> None:
        """Test the output directory must exist."""
        with pytest.raises(NotADirectoryError):
            write_report(report, tmp_path / "missing")


class TestFormatting:
    """Tests for summary and result messages."""

    def test_summary_lines(self, report: MigrationReport) -> None:
        """Test the summary has counts per section and error lines."""
        lines = format_summary(report)

        assert lines[0] == "ipPool: 1 converted"
        assert lines[1] == "profile: 1 converted"
        assert lines[2] == "policy: 1 failed"
        assert lines[3].startswith("  policy/allow-dns: field 'selector'")
        assert lines[-1] == "1 resource name(s) changed during conversion"

    def test_success_message(self) -> None:
        """Test the success message."""
        assert format_result_message(Result.OK, None).startswith("Successfully migrated")

    def test_conversion_failure_message(self, report: MigrationReport) -> None:
        """Test failures with conversion errors refer to the report."""
        message = format_result_message(Result.FAIL, report)

        assert "See the report" in message

    def test_retry_message(self) -> None:
        """Test a retryable failure asks for a retry."""
        message = format_result_message(Result.FAIL_NEEDS_RETRY, None)

        assert "See previous messages" in message
        assert message.endswith("Please retry the command.")

    def test_validation_success_message(self, report: MigrationReport) -> None:
        """Test validation has its own success message."""
        message = format_result_message(Result.OK, report, MigrationMode.VALIDATE)

        assert message == (
            "Successfully validated v1 to v3 conversion.\n"
            "See the report for details of the conversion."
        )

    def test_validation_failure_messages(self, report: MigrationReport) -> None:
        """Test validation failures refer to the report or previous messages."""
        with_errors = format_result_message(Result.FAIL, report, MigrationMode.VALIDATE)
        without_report = format_result_message(Result.FAIL, None, MigrationMode.VALIDATE)

        assert with_errors.startswith("Failed to validate v1 to v3 conversion.")
        assert "See the report" in with_errors
        assert without_report.endswith("See previous messages for details.")

    def test_migration_is_default_mode(self) -> None:
        """Test the migration messages are used without a mode."""
        assert format_result_message(Result.FAIL, None).startswith("Failed to migrate")

    def test_abort_message(self) -> None:
        """Test a failure needing abort asks for the abort command."""
        message = format_result_message(Result.FAIL_NEEDS_ABORT, None)

        assert "abort command" in message
