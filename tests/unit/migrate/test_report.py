"""
Unit tests for ReportBuilder and MigrationReport.

Tests cover:
- Section ordering by legacy kind, unknown kinds last
- Encounter order within a section
- has_errors() and counts
- Write order of converted resources
- Name conversions
- Finalize-once semantics
"""

from __future__ import annotations

import pytest

from calico_upgrade.migrate.converter import convert, convert_all
from calico_upgrade.migrate.exceptions import ConversionError
from calico_upgrade.migrate.outcomes import Failed, Skipped
from calico_upgrade.migrate.report import MigrationReport, ReportBuilder
from calico_upgrade.resources.legacy import LegacyKind, LegacyResource
from calico_upgrade.resources.modern import ModernKind
from tests.fixtures import clean_legacy_set, make_ip_pool, make_policy, make_profile


def _build(resources: list[LegacyResource]) -> MigrationReport:
    builder = ReportBuilder()
    for outcome in convert_all(resources):
        builder.record(outcome)
    return builder.finalize()


class TestReportBuilder:
    """Tests for ReportBuilder."""

    def test_empty_report(self) -> None:
        """Test a report with no outcomes has no sections and no errors."""
        report = ReportBuilder().finalize()

        assert report.sections == ()
        assert report.has_errors() is False
        assert report.total_count == 0

    def test_has_errors_tracks_failures(self) -> None:
        """Test has_errors() flips on the first Failed outcome."""
        builder = ReportBuilder()
        builder.record(convert(make_ip_pool()))
        assert builder.has_errors() is False

        builder.record(convert(make_policy(drop=("selector",))))
        assert builder.has_errors() is True

    def test_skipped_is_not_an_error(self) -> None:
        """Test Skipped outcomes do not count as errors."""
        builder = ReportBuilder()
        builder.record(Skipped(LegacyResource(kind="tier", name="t"), "no v3 equivalent"))

        assert builder.finalize().has_errors() is False

    def test_finalize_twice_raises(self) -> None:
        """Test finalize() can only be called once."""
        builder = ReportBuilder()
        builder.finalize()

        with pytest.raises(RuntimeError):
            builder.finalize()

    def test_record_after_finalize_raises(self) -> None:
        """Test recording into a finalized builder fails."""
        builder = ReportBuilder()
        builder.finalize()

        with pytest.raises(RuntimeError):
            builder.record(convert(make_ip_pool()))


class TestSections:
    """Tests for report section ordering."""

    def test_sections_follow_kind_order(self) -> None:
        """Test sections are ordered by legacy kind, not encounter order."""
        report = _build(clean_legacy_set())

        assert [section.kind for section in report.sections] == [kind.value for kind in LegacyKind]

    def test_unknown_kinds_follow_in_encounter_order(self) -> None:
        """Test unmapped kinds come after known kinds."""
        resources = [
            LegacyResource(kind="zeta", name="z"),
            make_policy(),
            LegacyResource(kind="alpha", name="a"),
        ]

        report = _build(resources)

        assert [section.kind for section in report.sections] == ["policy", "zeta", "alpha"]

    def test_empty_kinds_have_no_section(self) -> None:
        """Test kinds without resources are omitted."""
        report = _build([make_ip_pool()])

        assert report.section(LegacyKind.POLICY) is None
        assert report.section("ipPool") is not None

    def test_encounter_order_within_section(self) -> None:
        """Test outcomes within a kind keep their recorded order."""
        report = _build([make_policy("b"), make_ip_pool(), make_policy("a")])

        section = report.section(LegacyKind.POLICY)
        assert section is not None
        assert [outcome.source.name for outcome in section.outcomes] == ["b", "a"]

    def test_clean_section_has_zero_errors(self) -> None:
        """Test a fully converted kind has a section with no errors."""
        report = _build([make_ip_pool()])

        section = report.section(LegacyKind.IP_POOL)
        assert section is not None
        assert section.has_errors() is False
        assert section.error_count == 0

    def test_section_error_count(self) -> None:
        """Test error_count sums errors across Failed outcomes."""
        report = _build(
            [make_policy(doNotTrack=True, preDNAT=True, egress=[{"action": "allow"}])]
        )

        section = report.section(LegacyKind.POLICY)
        assert section is not None
        assert section.error_count == 2
        assert len(section.failed) == 1


class TestMigrationReport:
    """Tests for MigrationReport accessors."""

    def test_counts(self) -> None:
        """Test converted, skipped and failed counts."""
        report = _build(
            [
                make_ip_pool(),
                make_policy(drop=("selector",)),
                LegacyResource(kind="tier", name="t"),
            ]
        )

        assert report.total_count == 3
        assert report.converted_count == 1
        assert report.skipped_count == 1
        assert report.failed_count == 1
        assert report.has_errors() is True

    def test_converted_resources_in_write_order(self) -> None:
        """Test converted resources follow section order."""
        report = _build(clean_legacy_set())

        kinds = [resource.kind for resource in report.converted_resources]
        assert kinds == list(ModernKind)

    def test_name_conversions(self) -> None:
        """Test only renamed resources are listed."""
        report = _build([make_ip_pool("10.0.0.0/16"), make_profile("frontend")])

        (conversion,) = report.name_conversions
        assert conversion.resource == "ipPool/10.0.0.0/16"
        assert conversion.original == "10.0.0.0/16"
        assert conversion.converted == "10-0-0-0-16"

    def test_failed_outcome_errors(self) -> None:
        """Test failed outcomes carry their conversion errors."""
        report = _build([make_policy(drop=("selector",))])

        (failed,) = report.failed
        assert isinstance(failed, Failed)
        assert isinstance(failed.errors[0], ConversionError)

    def test_to_dict(self) -> None:
        """Test serialization includes sections and totals."""
        report = _build([make_ip_pool(), make_policy(drop=("selector",))])

        data = report.to_dict()

        assert data["has_errors"] is True
        assert data["converted"] == 1
        assert data["failed"] == 1
        assert [section["kind"] for section in data["sections"]] == ["ipPool", "policy"]
        failed = data["sections"][1]["outcomes"][0]
        assert failed["status"] == "failed"
        assert failed["errors"][0]["field"] == "selector"
        assert failed["errors"][0]["value"] is None
