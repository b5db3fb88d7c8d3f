"""Native ECDSA over secp256k1.

Signatures, keys and message hashes here live on a different curve than the
proof's native field, so in-circuit they are "foreign" values. This module
signs and checks them out of circuit; it backs both witness generation and
the signature gadget's verification cell.

Curve arithmetic comes from py_ecc's secp256k1 module. Points are affine
(x, y) integer pairs, scalars are integers modulo the group order N.
"""

import secrets
from dataclasses import dataclass
from typing import Tuple

from py_ecc.secp256k1 import secp256k1

Point = Tuple[int, int]

BASE_MODULUS = secp256k1.P
"""Prime of the secp256k1 base field (point coordinates)."""

SCALAR_MODULUS = secp256k1.N
"""Order of the secp256k1 group (signature scalars, message hashes)."""

GENERATOR: Point = secp256k1.G
INFINITY: Point = (0, 0)

CURVE_B = 7


@dataclass(frozen=True)
class SigData:
    """ECDSA signature components (r, s), both scalars modulo N."""
    r: int
    s: int

    @classmethod
    def from_bytes(cls, r: bytes, s: bytes) -> 'SigData':
        """Build from 32-byte big-endian encodings."""
        return cls(int.from_bytes(r, "big"), int.from_bytes(s, "big"))


def is_on_curve(point: Point) -> bool:
    """Check y^2 = x^3 + 7 over the base field."""
    if point == INFINITY:
        return False
    x, y = point
    return (y * y - x * x * x - CURVE_B) % BASE_MODULUS == 0


def scalar_mul(point: Point, scalar: int) -> Point:
    return secp256k1.multiply(point, scalar % SCALAR_MODULUS)


def point_add(a: Point, b: Point) -> Point:
    return secp256k1.add(a, b)


def public_key(secret: int) -> Point:
    return secp256k1.privtopub(secret.to_bytes(32, "big"))


def generate_keypair() -> Tuple[int, Point]:
    """Random secret key and its public key."""
    secret = secrets.randbelow(SCALAR_MODULUS - 1) + 1
    return secret, public_key(secret)


def generate_signature(secret: int, msg_hash: int) -> SigData:
    """Sign msg_hash with a fresh random nonce.

    r is the x coordinate of k*G reduced modulo N, and
    s = k^-1 * (msg_hash + r * secret) mod N.
    """
    z = msg_hash % SCALAR_MODULUS
    while True:
        k = secrets.randbelow(SCALAR_MODULUS - 1) + 1
        x, _ = scalar_mul(GENERATOR, k)
        r = x % SCALAR_MODULUS
        if r == 0:
            continue
        s = secp256k1.inv(k, SCALAR_MODULUS) * (z + r * secret) % SCALAR_MODULUS
        if s == 0:
            continue
        return SigData(r, s)


def sign(secret: int, msg_hash: int) -> SigData:
    """Deterministic (RFC 6979 style) signature, low-s normalised."""
    _, r, s = secp256k1.ecdsa_raw_sign(
        (msg_hash % SCALAR_MODULUS).to_bytes(32, "big"),
        secret.to_bytes(32, "big"),
    )
    return SigData(r, s)


def verify_signature(sig: SigData, public_key: Point, msg_hash: int) -> bool:
    """Check the ECDSA equation x(u1*G + u2*Q) == r (mod N)."""
    if not (0 < sig.r < SCALAR_MODULUS and 0 < sig.s < SCALAR_MODULUS):
        return False
    if not is_on_curve(public_key):
        return False

    w = secp256k1.inv(sig.s, SCALAR_MODULUS)
    u1 = (msg_hash % SCALAR_MODULUS) * w % SCALAR_MODULUS
    u2 = sig.r * w % SCALAR_MODULUS
    point = point_add(scalar_mul(GENERATOR, u1), scalar_mul(public_key, u2))
    if point == INFINITY:
        return False
    return point[0] % SCALAR_MODULUS == sig.r
