"""Primitives - Native field, Poseidon and ECDSA reference implementations."""

from primitives.field import (
    BN254_PRIME,
    FIELD_BITS,
    Fr,
    ONE,
    ZERO,
    field_to_bytes,
    field_to_hex,
    hex_to_field,
    to_field,
    to_fields,
)
from primitives.poseidon_params import (
    RoundParams,
    generate_round_params,
    params_5x5_bn254,
)
from primitives.poseidon import (
    PoseidonSponge,
    permute,
    sponge_hash,
)
from primitives.ecdsa import (
    Point,
    SigData,
    generate_keypair,
    generate_signature,
    public_key,
    sign,
    verify_signature,
)

__all__ = [
    # Field
    "Fr",
    "BN254_PRIME",
    "FIELD_BITS",
    "ZERO",
    "ONE",
    "to_field",
    "to_fields",
    "hex_to_field",
    "field_to_hex",
    "field_to_bytes",
    # Poseidon
    "RoundParams",
    "generate_round_params",
    "params_5x5_bn254",
    "permute",
    "PoseidonSponge",
    "sponge_hash",
    # ECDSA
    "Point",
    "SigData",
    "generate_keypair",
    "generate_signature",
    "public_key",
    "sign",
    "verify_signature",
]
