"""BN254 scalar field GF(r).

Uses galois library for all field arithmetic. Fr is the native field of the
circuits: every witness, fixed value and gate evaluation is an Fr element or
an Fr array.

The prime is 254 bits wide, so galois runs in its python-int calculation
mode. Passing the primitive element skips the factorisation of r - 1 that
galois would otherwise do on construction.
"""

from typing import List, Sequence

import galois

# --- Field Construction ---

BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

Fr = galois.GF(BN254_PRIME, primitive_element=5, verify=False)
"""Scalar field of BN254 (the proof system's native field)."""

FIELD_BITS = 254

ZERO = Fr(0)
ONE = Fr(1)


def to_field(value: int) -> Fr:
    """Reduce any Python integer (negative included) into Fr."""
    return Fr(int(value) % BN254_PRIME)


def to_fields(values: Sequence[int]) -> List[Fr]:
    """Reduce a sequence of integers into a list of Fr scalars."""
    return [to_field(v) for v in values]


# --- Hex Encoding ---
# Parameter tables are stored as 0x-prefixed big-endian hex strings.


def hex_to_field(s: str) -> Fr:
    """Parse a 0x-prefixed big-endian hex string into Fr.

    Values wider than the modulus are reduced, matching a wide (512-bit)
    little-endian load of the same bytes.

    Raises:
        ValueError: If the string is not 0x-prefixed hex
    """
    if not s.startswith("0x"):
        raise ValueError(f"expected 0x-prefixed hex, got {s!r}")
    return to_field(int(s[2:], 16))


def field_to_hex(x: Fr) -> str:
    """Encode a field element as 0x-prefixed, 64-digit big-endian hex."""
    return "0x" + format(int(x), "064x")


def field_to_bytes(x: Fr) -> bytes:
    """Encode a field element as 32 big-endian bytes."""
    return int(x).to_bytes(32, "big")
