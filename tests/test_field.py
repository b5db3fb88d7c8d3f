"""Tests for the BN254 scalar field helpers."""

import pytest

from primitives.field import (
    BN254_PRIME,
    Fr,
    field_to_bytes,
    field_to_hex,
    hex_to_field,
    to_field,
)


class TestToField:
    """Tests for integer reduction into Fr."""

    def test_small_value(self) -> None:
        """Small integers are unchanged."""
        assert int(to_field(42)) == 42

    def test_negative_value(self) -> None:
        """Negative integers wrap around the modulus."""
        assert int(to_field(-1)) == BN254_PRIME - 1

    def test_modulus_reduces_to_zero(self) -> None:
        """The modulus itself is zero."""
        assert int(to_field(BN254_PRIME)) == 0

    def test_field_arithmetic(self) -> None:
        """Inverse times value is one."""
        x = to_field(123456789)
        assert int(x * x ** -1) == 1


class TestHexEncoding:
    """Tests for 0x-prefixed hex conversion."""

    def test_round_trip(self) -> None:
        """Encoding then decoding returns the same element."""
        x = Fr(BN254_PRIME - 5)
        assert int(hex_to_field(field_to_hex(x))) == BN254_PRIME - 5

    def test_fixed_width(self) -> None:
        """Hex output is always 64 digits."""
        assert field_to_hex(Fr(1)) == "0x" + "0" * 63 + "1"

    def test_wide_value_is_reduced(self) -> None:
        """Values above the modulus are reduced."""
        assert int(hex_to_field(hex(BN254_PRIME + 3))) == 3

    def test_missing_prefix_rejected(self) -> None:
        """Strings without 0x raise ValueError."""
        with pytest.raises(ValueError):
            hex_to_field("1234")

    def test_bytes_big_endian(self) -> None:
        """Byte encoding is 32 bytes, big-endian."""
        encoded = field_to_bytes(Fr(258))
        assert len(encoded) == 32
        assert encoded[-2:] == b"\x01\x02"
