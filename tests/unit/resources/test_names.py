"""Unit tests for v1 to v3 name conversion."""

from __future__ import annotations

import pytest

from calico_upgrade.resources.names import (
    MAX_NAME_LENGTH,
    address_to_name,
    is_valid_name,
    normalize_name,
)


class TestNormalizeName:
    """Tests for normalize_name()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("frontend", "frontend"),
            ("My_Profile", "my-profile"),
            ("a__b", "a-b"),
            ("-leading.and.trailing-", "leading.and.trailing"),
            ("a..b", "a.b"),
            ("a-.b", "a.b"),
            ("a.-b", "a.b"),
            ("k8s_ns.default", "k8s-ns.default"),
        ],
    )
    def test_normalize(self, name: str, expected: str) -> None:
        """Test names are lowercased and cleaned up."""
        assert normalize_name(name) == expected

    def test_result_is_valid(self) -> None:
        """Test a messy name normalizes to a valid name."""
        assert is_valid_name(normalize_name("__Web Tier!!v2__"))

    def test_nothing_left(self) -> None:
        """Test a name with no usable characters normalizes to empty."""
        assert normalize_name("___") == ""


class TestAddressToName:
    """Tests for address_to_name()."""

    @pytest.mark.parametrize(
        ("address", "expected"),
        [
            ("10.0.0.0/16", "10-0-0-0-16"),
            ("192.168.0.1", "192-168-0-1"),
            ("fd00::/64", "fd00-64"),
            ("2001:db8::1", "2001-db8-1"),
        ],
    )
    def test_address_to_name(self, address: str, expected: str) -> None:
        """Test separators become single dashes."""
        assert address_to_name(address) == expected


class TestIsValidName:
    """Tests for is_valid_name()."""

    @pytest.mark.parametrize("name", ["a", "frontend", "node-1.eth0", "10-0-0-0-16"])
    def test_valid(self, name: str) -> None:
        assert is_valid_name(name) is True

    @pytest.mark.parametrize("name", ["", "Upper", "-start", "end-", "a..b", "a_b"])
    def test_invalid(self, name: str) -> None:
        assert is_valid_name(name) is False

    def test_length_limit(self) -> None:
        """Test names longer than the limit are invalid."""
        assert is_valid_name("a" * MAX_NAME_LENGTH) is True
        assert is_valid_name("a" * (MAX_NAME_LENGTH + 1)) is False
