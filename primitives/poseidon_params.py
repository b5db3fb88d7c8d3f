"""Poseidon round parameters (round constants and MDS matrix).

A RoundParams value is the data-only parameter set shared by the native
permutation and the permutation gadget. Tables are carried as 0x-prefixed
big-endian hex strings and parsed once; the constant count and matrix shape
are checked when the set is built.

The BN254 tables are derived with the Grain LFSR procedure of the Poseidon
reference parameter script:

1. An 80-bit LFSR is seeded with field type (2 bits), S-box type (4 bits),
   field size (12 bits), width (12 bits), full rounds (10 bits), partial
   rounds (10 bits) and thirty 1 bits.
2. The first 160 output bits are discarded.
3. Bits are drawn in pairs (b1, b2); b2 is emitted only when b1 == 1.
4. Round constants are FIELD_BITS-wide draws below the modulus (rejection
   sampling), in round-major order.
5. The MDS matrix is the Cauchy matrix M[i][j] = 1 / (x_i + y_j) over
   2 * width further draws reduced modulo r, redrawn if any value repeats
   or any denominator vanishes.
"""

import logging
from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Sequence, Tuple

from plonk.errors import ConfigurationError
from primitives.field import BN254_PRIME, FIELD_BITS, Fr, field_to_hex, hex_to_field

logger = logging.getLogger(__name__)

SUPPORTED_SBOX_EXPONENTS = (5,)

# Grain seed fields: prime field, x^alpha S-box
_GRAIN_FIELD_PRIME = 1
_GRAIN_SBOX_POWER = 0


@dataclass(frozen=True)
class RoundParams:
    """Parameter set for one permutation width.

    Attributes:
        width: State width (number of lanes)
        full_rounds: Total full rounds, split evenly before and after the
            partial rounds
        partial_rounds: Rounds applying the S-box to lane 0 only
        round_constants: Flat round-major list, (full + partial) * width long
        mds: width x width mixing matrix
        sbox_exponent: S-box exponent (x -> x^5)
    """
    width: int
    full_rounds: int
    partial_rounds: int
    round_constants: Tuple[Fr, ...]
    mds: Tuple[Tuple[Fr, ...], ...]
    sbox_exponent: int = 5

    @classmethod
    def from_hex(
        cls,
        width: int,
        full_rounds: int,
        partial_rounds: int,
        round_constants_hex: Sequence[str],
        mds_hex: Sequence[Sequence[str]],
        sbox_exponent: int = 5,
    ) -> 'RoundParams':
        """Parse and validate hex tables.

        Raises:
            ConfigurationError: On a wrong constant count, a non-square or
                wrongly sized matrix, an odd full round count or an
                unsupported S-box exponent
        """
        if width < 2:
            raise ConfigurationError(f"width must be at least 2, got {width}")
        if full_rounds % 2 != 0:
            raise ConfigurationError(
                f"full_rounds must be even to split around the partial rounds, got {full_rounds}"
            )
        if sbox_exponent not in SUPPORTED_SBOX_EXPONENTS:
            raise ConfigurationError(f"unsupported S-box exponent {sbox_exponent}")

        expected = (full_rounds + partial_rounds) * width
        if len(round_constants_hex) != expected:
            raise ConfigurationError(
                f"expected {expected} round constants "
                f"(({full_rounds} + {partial_rounds}) * {width}), got {len(round_constants_hex)}"
            )
        if len(mds_hex) != width or any(len(row) != width for row in mds_hex):
            shape = [len(row) for row in mds_hex]
            raise ConfigurationError(f"MDS matrix must be {width}x{width}, got rows of lengths {shape}")

        try:
            round_constants = tuple(hex_to_field(c) for c in round_constants_hex)
            mds = tuple(tuple(hex_to_field(v) for v in row) for row in mds_hex)
        except ValueError as e:
            raise ConfigurationError(f"malformed parameter table: {e}") from e

        return cls(width, full_rounds, partial_rounds, round_constants, mds, sbox_exponent)

    @property
    def half_full_rounds(self) -> int:
        return self.full_rounds // 2

    @property
    def round_constants_count(self) -> int:
        return (self.full_rounds + self.partial_rounds) * self.width

    def round_constant_slices(self) -> Tuple[Tuple[Fr, ...], Tuple[Fr, ...], Tuple[Fr, ...]]:
        """Split the constants into (first full, partial, second full) phases."""
        first = self.half_full_rounds * self.width
        second = first + self.partial_rounds * self.width
        rc = self.round_constants
        return rc[:first], rc[first:second], rc[second:]

    def sbox(self, x):
        """x -> x^5, for scalars, arrays and gate expressions alike."""
        x2 = x * x
        return x2 * x2 * x


# --- Grain LFSR ---

def _bits(value: int, width: int) -> List[int]:
    return [int(b) for b in format(value, f"0{width}b")]


def _grain_stream(field: int, sbox: int, n: int, t: int, r_f: int, r_p: int) -> Iterator[int]:
    """Self-shrinking Grain LFSR output bits."""
    state = deque(
        _bits(field, 2) + _bits(sbox, 4) + _bits(n, 12) + _bits(t, 12)
        + _bits(r_f, 10) + _bits(r_p, 10) + [1] * 30
    )

    def clock() -> int:
        new_bit = state[62] ^ state[51] ^ state[38] ^ state[23] ^ state[13] ^ state[0]
        state.popleft()
        state.append(new_bit)
        return new_bit

    for _ in range(160):
        clock()

    while True:
        first = clock()
        second = clock()
        if first == 1:
            yield second


def _draw(stream: Iterator[int], num_bits: int) -> int:
    """Read num_bits from the stream as a big-endian integer."""
    value = 0
    for _ in range(num_bits):
        value = (value << 1) | next(stream)
    return value


def generate_round_params(width: int, full_rounds: int, partial_rounds: int) -> Tuple[List[str], List[List[str]]]:
    """Derive BN254 round constants and MDS matrix as hex tables.

    Returns:
        (round_constants_hex, mds_hex)
    """
    stream = _grain_stream(
        _GRAIN_FIELD_PRIME, _GRAIN_SBOX_POWER, FIELD_BITS, width, full_rounds, partial_rounds
    )

    constants: List[int] = []
    for _ in range((full_rounds + partial_rounds) * width):
        while True:
            candidate = _draw(stream, FIELD_BITS)
            if candidate < BN254_PRIME:
                break
        constants.append(candidate)

    while True:
        draws = [_draw(stream, FIELD_BITS) % BN254_PRIME for _ in range(2 * width)]
        if len(set(draws)) != len(draws):
            continue
        xs, ys = draws[:width], draws[width:]
        if any((x + y) % BN254_PRIME == 0 for x in xs for y in ys):
            continue
        break

    mds = [[Fr((x + y) % BN254_PRIME) ** -1 for y in ys] for x in xs]

    rc_hex = [field_to_hex(Fr(c)) for c in constants]
    mds_hex = [[field_to_hex(v) for v in row] for row in mds]
    return rc_hex, mds_hex


@lru_cache(maxsize=None)
def params_5x5_bn254() -> RoundParams:
    """Width 5, x^5 S-box, 8 full and 60 partial rounds over BN254."""
    width, full_rounds, partial_rounds = 5, 8, 60
    rc_hex, mds_hex = generate_round_params(width, full_rounds, partial_rounds)
    params = RoundParams.from_hex(width, full_rounds, partial_rounds, rc_hex, mds_hex)
    logger.info(
        "Generated Poseidon parameters: width=%d full=%d partial=%d constants=%d",
        width, full_rounds, partial_rounds, params.round_constants_count,
    )
    return params
