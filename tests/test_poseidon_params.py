"""Tests for Poseidon round parameter tables."""

import pytest

from plonk.errors import ConfigurationError
from primitives.field import BN254_PRIME, hex_to_field
from primitives.poseidon_params import RoundParams, generate_round_params


def _tables(width=3, full_rounds=2, partial_rounds=1):
    rc = [hex(i + 1) for i in range((full_rounds + partial_rounds) * width)]
    mds = [[hex(i * width + j + 1) for j in range(width)] for i in range(width)]
    return rc, mds


class TestFromHex:
    """Tests for RoundParams.from_hex validation."""

    def test_valid_tables(self) -> None:
        """Well-formed tables load."""
        rc, mds = _tables()
        params = RoundParams.from_hex(3, 2, 1, rc, mds)
        assert params.round_constants_count == 9
        assert int(params.round_constants[0]) == 1
        assert int(params.mds[2][2]) == 9

    def test_wrong_constant_count(self) -> None:
        """A missing round constant is a configuration error."""
        rc, mds = _tables()
        with pytest.raises(ConfigurationError, match="round constants"):
            RoundParams.from_hex(3, 2, 1, rc[:-1], mds)

    def test_non_square_mds(self) -> None:
        """A ragged MDS matrix is a configuration error."""
        rc, mds = _tables()
        mds[1] = mds[1][:2]
        with pytest.raises(ConfigurationError, match="MDS"):
            RoundParams.from_hex(3, 2, 1, rc, mds)

    def test_mds_wrong_size(self) -> None:
        """An MDS matrix of the wrong dimension is a configuration error."""
        rc, _ = _tables()
        _, mds = _tables(width=2)
        with pytest.raises(ConfigurationError):
            RoundParams.from_hex(3, 2, 1, rc, mds)

    def test_odd_full_rounds(self) -> None:
        """Full rounds must split evenly around the partial rounds."""
        rc, mds = _tables(full_rounds=3)
        with pytest.raises(ConfigurationError, match="even"):
            RoundParams.from_hex(3, 3, 1, rc, mds)

    def test_unsupported_exponent(self) -> None:
        """Only the x^5 S-box is supported."""
        rc, mds = _tables()
        with pytest.raises(ConfigurationError, match="exponent"):
            RoundParams.from_hex(3, 2, 1, rc, mds, sbox_exponent=3)

    def test_malformed_hex(self) -> None:
        """Unparseable entries are configuration errors, not ValueErrors."""
        rc, mds = _tables()
        rc[0] = "12"
        with pytest.raises(ConfigurationError, match="malformed"):
            RoundParams.from_hex(3, 2, 1, rc, mds)

    def test_slices(self) -> None:
        """Constant slices follow the three phases."""
        rc, mds = _tables(width=2, full_rounds=4, partial_rounds=3)
        params = RoundParams.from_hex(2, 4, 3, rc, mds)
        first, second, third = params.round_constant_slices()
        assert len(first) == 4
        assert len(second) == 6
        assert len(third) == 4
        assert int(first[0]) == 1
        assert int(second[0]) == 5
        assert int(third[-1]) == 14


class TestGeneratedParams:
    """Tests for Grain-derived BN254 tables."""

    def test_shape(self, params) -> None:
        """Width 5 set has 340 constants and a 5x5 matrix."""
        assert params.width == 5
        assert params.full_rounds == 8
        assert params.partial_rounds == 60
        assert len(params.round_constants) == (8 + 60) * 5
        assert len(params.mds) == 5
        assert all(len(row) == 5 for row in params.mds)

    def test_generation_is_deterministic(self) -> None:
        """Same inputs give the same tables."""
        assert generate_round_params(3, 8, 57) == generate_round_params(3, 8, 57)

    def test_constants_below_modulus(self) -> None:
        """Rejection sampling keeps every constant below r."""
        rc, _ = generate_round_params(3, 8, 57)
        assert all(int(c, 16) < BN254_PRIME for c in rc)

    def test_mds_is_cauchy(self) -> None:
        """Every MDS entry is invertible and entries are pairwise distinct per row."""
        _, mds = generate_round_params(3, 8, 57)
        for row in mds:
            values = [int(hex_to_field(v)) for v in row]
            assert 0 not in values
            assert len(set(values)) == len(values)
