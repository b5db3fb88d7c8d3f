"""Gadgets - Chips built on the arithmetization layer."""

from gadgets.main_gate import MainGate, MainGateConfig, RegionCtx
from gadgets.poseidon import PoseidonChip, PoseidonConfig
from gadgets.sponge import SpongeChip, SpongeConfig
from gadgets.accumulator import AccumulatorChip, AccumulatorConfig
from gadgets.ecdsa import (
    AssignedInteger,
    AssignedPoint,
    AssignedSignature,
    EcdsaChip,
    EcdsaConfig,
    EcdsaInstructions,
)

__all__ = [
    # Main gate
    "MainGate",
    "MainGateConfig",
    "RegionCtx",
    # Poseidon
    "PoseidonChip",
    "PoseidonConfig",
    "SpongeChip",
    "SpongeConfig",
    # Accumulation
    "AccumulatorChip",
    "AccumulatorConfig",
    # Signatures
    "EcdsaInstructions",
    "EcdsaChip",
    "EcdsaConfig",
    "AssignedInteger",
    "AssignedPoint",
    "AssignedSignature",
]
