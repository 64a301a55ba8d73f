"""Unit tests for address validation."""

import pytest

from rebase_vault.config.constants import ZERO_ADDRESS
from rebase_vault.utils.exceptions import InvalidAddress
from rebase_vault.utils.validation import (
    is_zero_address,
    normalize_address,
    validate_address,
)


class TestValidateAddress:
    """Tests for address format validation."""

    def test_empty_address_invalid(self):
        assert validate_address("") == (False, "Address is empty")

    def test_non_string_invalid(self):
        assert validate_address(123)[0] is False

    def test_no_0x_prefix_invalid(self):
        assert validate_address("1" * 40) == (False, "Address must start with 0x")

    def test_short_address_invalid(self):
        assert validate_address("0x1234")[0] is False

    def test_invalid_hex_characters(self):
        assert validate_address("0x" + "z" * 40) == (False, "Invalid address format")

    @pytest.mark.parametrize(
        "address",
        ["0x-" + "1" * 39, "0x+" + "1" * 39, "0x_" + "1" * 39, "0x 1" + "1" * 38],
    )
    def test_int_literal_characters_rejected(self, address):
        """Signs, underscores and spaces are not hex digits."""
        assert validate_address(address) == (False, "Invalid address format")

    @pytest.mark.parametrize(
        "address",
        [
            "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
            ZERO_ADDRESS,
            "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF",
        ],
    )
    def test_valid_addresses(self, address):
        assert validate_address(address) == (True, None)


class TestNormalizeAddress:
    """Tests for checksum normalisation."""

    def test_case_insensitive(self):
        lower = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
        assert normalize_address(lower) == normalize_address(lower.upper().replace("0X", "0x"))

    def test_strips_whitespace(self):
        assert normalize_address("  " + ZERO_ADDRESS + " ") == ZERO_ADDRESS

    def test_invalid_raises(self):
        with pytest.raises(InvalidAddress) as exc_info:
            normalize_address("not-an-address")
        assert isinstance(exc_info.value, ValueError)

    def test_signed_hex_raises_invalid_address(self):
        with pytest.raises(InvalidAddress):
            normalize_address("0x-" + "1" * 39)

    def test_zero_address_forbidden_when_asked(self):
        with pytest.raises(InvalidAddress):
            normalize_address(ZERO_ADDRESS, allow_zero=False)

    def test_is_zero_address(self):
        assert is_zero_address(ZERO_ADDRESS)
        assert not is_zero_address("0x" + "11" * 20)
