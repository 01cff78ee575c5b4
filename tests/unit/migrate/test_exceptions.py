"""
Unit tests for upgrade exceptions and error classification.

Tests cover:
- Exception hierarchy
- Classification of each error type
- Error messages and to_dict() serialization
- classify_exception() for foreign exceptions
"""

from __future__ import annotations

import logging
from ipaddress import ip_network

import pytest

from calico_upgrade.migrate.exceptions import (
    CollisionError,
    ConversionError,
    DatastoreAccessError,
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
from calico_upgrade.migrate.models import UpgradeState
from calico_upgrade.resources.modern import ModernKind, ResourceIdentity

POOL = ResourceIdentity(kind=ModernKind.IP_POOL, name="10-0-0-0-16")


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [
            DatastoreAccessError("list_legacy"),
            ConversionError("policy/a", "bad"),
            CollisionError("ipPool/10.0.0.0/16", POOL),
            NameClashError("profile/b", POOL, "profile/B"),
            WriteError(POOL),
            PauseError(),
            ResumeError(),
            UpgradeStateError(UpgradeState.START, UpgradeState.WRITING),
            UpgradeInProgressError(),
        ],
    )
    def test_all_are_upgrade_errors(self, error: UpgradeError) -> None:
        """Test every error derives from UpgradeError."""
        assert isinstance(error, UpgradeError)

    def test_collision_and_clash_are_conversion_errors(self) -> None:
        """Test collisions and clashes are reported as conversion errors."""
        assert issubclass(CollisionError, ConversionError)
        assert issubclass(NameClashError, ConversionError)


class TestClassification:
    """Tests for error classification."""

    def test_conversion_error_is_recoverable(self) -> None:
        """Test conversion errors need an operator fix, not a retry."""
        error = ConversionError("policy/a", "bad")

        assert error.recoverability == ErrorRecoverability.RECOVERABLE
        assert error.recoverability.should_retry is False

    @pytest.mark.parametrize("error", [WriteError(POOL), PauseError()])
    def test_retryable_errors(self, error: UpgradeError) -> None:
        """Test write and pause failures are safe to retry."""
        assert error.recoverability.should_retry is True
        assert error.recoverability.should_abort is False

    def test_resume_error_needs_abort(self) -> None:
        """Test a failed resume is critical and needs abort."""
        error = ResumeError()

        assert error.severity == ErrorSeverity.CRITICAL
        assert error.recoverability.should_abort is True
        assert error.error_code == "RESUME_FAILED"
        assert "abort" in error.classification.suggested_action

    def test_severity_log_levels(self) -> None:
        """Test severities map to logging levels."""
        assert ErrorSeverity.CRITICAL.log_level == logging.CRITICAL
        assert ErrorSeverity.WARNING.log_level == logging.WARNING

    def test_classify_upgrade_error(self) -> None:
        """Test classify_exception returns the error's own classification."""
        error = CollisionError("ipPool/10.0.0.0/16", POOL)

        assert classify_exception(error).error_code == "V3_COLLISION"

    def test_classify_foreign_exception(self) -> None:
        """Test unknown exceptions are classified as fatal."""
        classification = classify_exception(RuntimeError("boom"))

        assert classification.error_code == "UNKNOWN_ERROR"
        assert classification.recoverability == ErrorRecoverability.FATAL

    def test_classification_to_dict(self) -> None:
        """Test classification serialization."""
        data = PauseError().classification.to_dict()

        assert data["error_code"] == "PAUSE_FAILED"
        assert data["recoverability"] == "transient"


class TestMessages:
    """Tests for error messages and serialization."""

    def test_conversion_error_message(self) -> None:
        """Test the message names resource, field and value."""
        error = ConversionError("policy/a", "Field required", field="selector", value=None)

        assert str(error) == "policy/a: field 'selector' (value None): Field required"

    def test_conversion_error_without_field(self) -> None:
        """Test the message for an error not tied to a field."""
        assert str(ConversionError("policy/a", "bad")) == "policy/a: bad"

    def test_conversion_error_to_dict(self) -> None:
        """Test values are made JSON-safe."""
        error = ConversionError(
            "ipPool/10.0.0.0/28",
            "too small",
            field="cidr",
            value=ip_network("10.0.0.0/28"),
        )

        data = error.to_dict()

        assert data == {
            "error_code": "CONVERSION_ERROR",
            "message": str(error),
            "resource": "ipPool/10.0.0.0/28",
            "reason": "too small",
            "field": "cidr",
            "value": "10.0.0.0/28",
        }

    def test_cause_in_message(self) -> None:
        """Test the underlying cause is included."""
        error = DatastoreAccessError("list_legacy", cause=ConnectionError("refused"))

        assert str(error) == "Error accessing the datastore during list_legacy: refused"
        assert error.to_dict()["cause"] == "refused"

    def test_write_error_to_dict(self) -> None:
        """Test write errors name the v3 resource."""
        assert WriteError(POOL).to_dict()["resource"] == "IPPool(10-0-0-0-16)"

    def test_name_clash_message(self) -> None:
        """Test the clash message names the other resource."""
        error = NameClashError("profile/b", POOL, "profile/B")

        assert "profile/B" in str(error)
        assert error.other == "profile/B"

    def test_state_error_message(self) -> None:
        """Test invalid transition message."""
        error = UpgradeStateError(UpgradeState.START, UpgradeState.WRITING)

        assert str(error) == "Invalid upgrade state transition: start -> writing"
