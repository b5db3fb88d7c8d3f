"""
Signature verification capability over a foreign curve.

Signatures, public keys and message hashes are secp256k1 values, so inside a
BN254 circuit they are foreign integers. The composition circuit only talks
to the EcdsaInstructions contract; EcdsaChip is the implementation shipped
here.

EcdsaChip representation:
    - A foreign integer is four 68-bit limbs plus its native reduction
      (value mod r). The compose gate binds the native cell to the limbs:
          native - sum_i limb_i * 2^(68*i) = 0
      Limb widths and the bound value < modulus are checked while the value
      is decomposed; a violation is SynthesisError(RANGE_OVERFLOW).
    - A point is a pair of base-field integers.
    - verify() is a stand-in for in-circuit ECDSA arithmetic. It evaluates
      the ECDSA equation out of circuit with py_ecc and assigns the outcome
      to a validity cell that the verify gate pins to one. The native cells
      of (r, s), the message hash and the key are copied into the same row
      as placeholders; no gate reads them, and the validity cell is a
      prover-chosen witness. An honestly synthesized bad signature fails
      the verify gate, but a prover that writes valid = 1 is not caught.
    - assign_aux() assigns the auxiliary generator and its window table
      (aux + i*G for i < 2^window_size) once per circuit, before any
      verify() call.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from plonk.columns import Column, Selector
from plonk.context import ConstraintContext
from plonk.errors import SynthesisError, SynthesisErrorKind
from plonk.layouter import AssignedCell, Layouter, Region
from plonk.system import ConstraintSystem
from gadgets.main_gate import RegionCtx
from primitives.ecdsa import (
    BASE_MODULUS,
    GENERATOR,
    SCALAR_MODULUS,
    Point,
    SigData,
    point_add,
    verify_signature,
)
from primitives.field import ONE, to_field

logger = logging.getLogger(__name__)

NUMBER_OF_LIMBS = 4
BIT_LEN_LIMB = 68
LIMB_MASK = (1 << BIT_LEN_LIMB) - 1


def decompose(value: int) -> List[int]:
    """Split an integer into NUMBER_OF_LIMBS little-endian limbs.

    The top limb takes whatever is left, so an oversized value shows up as a
    top limb wider than BIT_LEN_LIMB.
    """
    limbs = []
    for _ in range(NUMBER_OF_LIMBS - 1):
        limbs.append(value & LIMB_MASK)
        value >>= BIT_LEN_LIMB
    limbs.append(value)
    return limbs


# --- Assigned values ---

@dataclass
class AssignedInteger:
    """Foreign integer: limb cells, native reduction cell and the full value."""
    limbs: List[AssignedCell]
    native: AssignedCell
    value: Optional[int]


@dataclass
class AssignedPoint:
    x: AssignedInteger
    y: AssignedInteger

    @property
    def natives(self) -> Tuple[AssignedCell, AssignedCell]:
        return self.x.native, self.y.native

    @property
    def value(self) -> Optional[Point]:
        if self.x.value is None or self.y.value is None:
            return None
        return self.x.value, self.y.value


@dataclass
class AssignedSignature:
    r: AssignedInteger
    s: AssignedInteger


@dataclass
class AssignedAux:
    generator: AssignedPoint
    table: List[AssignedPoint]
    window_size: int


# --- Contract ---

class EcdsaInstructions(ABC):
    """What the composition circuit needs from a signature gadget."""

    @abstractmethod
    def assign_aux(self, layouter: Layouter, aux_generator: Optional[Point], window_size: int) -> None:
        """Assign the auxiliary generator and window table. Call once, first."""

    @abstractmethod
    def assign_point(self, ctx: RegionCtx, point: Optional[Point]) -> AssignedPoint:
        """Assign a foreign curve point."""

    @abstractmethod
    def assign_scalar(self, ctx: RegionCtx, value: Optional[int]) -> AssignedInteger:
        """Assign a foreign scalar (below the group order)."""

    @abstractmethod
    def verify(self, layouter: Layouter, sig: AssignedSignature, public_key: AssignedPoint,
               msg_hash: AssignedInteger) -> None:
        """Constrain `sig` to be a valid signature of `msg_hash` by `public_key`.

        Raises:
            SynthesisError: MISSING_AUX if assign_aux has not run
        """


# --- Implementation ---

@dataclass(frozen=True)
class EcdsaConfig:
    limbs: Tuple[Column, ...]
    native: Column
    valid: Column
    compose: Selector
    verify: Selector


class EcdsaChip(EcdsaInstructions):
    """secp256k1 signature checks inside a BN254 circuit."""

    def __init__(self, config: EcdsaConfig):
        self.config = config
        self.aux: Optional[AssignedAux] = None

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> EcdsaConfig:
        limbs = tuple(cs.advice_column() for _ in range(NUMBER_OF_LIMBS))
        native = cs.advice_column()
        valid = cs.advice_column()
        compose, verify = cs.selector(), cs.selector()
        for column in limbs + (native, valid):
            cs.enable_equality(column)

        shifts = [to_field(1 << (BIT_LEN_LIMB * i)) for i in range(NUMBER_OF_LIMBS)]

        def compose_gate(ctx: ConstraintContext):
            acc = ctx.col(native)
            for limb, shift in zip(limbs, shifts):
                acc = acc - ctx.col(limb) * shift
            return [acc]

        def verify_gate(ctx: ConstraintContext):
            return [ctx.col(valid) - ONE]

        cs.create_gate("foreign_compose", compose, compose_gate)
        cs.create_gate("ecdsa_verify", verify, verify_gate)
        return EcdsaConfig(limbs, native, valid, compose, verify)

    def _assign_integer(self, ctx: RegionCtx, value: Optional[int], modulus: int, name: str) -> AssignedInteger:
        config = self.config
        region, offset = ctx.region, ctx.offset

        if value is None:
            limb_values = [None] * NUMBER_OF_LIMBS
            native_value = None
        else:
            limb_values = decompose(value)
            if limb_values[-1] >> BIT_LEN_LIMB or value >= modulus or value < 0:
                raise SynthesisError(
                    SynthesisErrorKind.RANGE_OVERFLOW,
                    f"value does not fit below modulus {hex(modulus)}",
                    region=region.name,
                    annotation=name,
                )
            native_value = to_field(value)

        region.enable_selector("foreign_compose", config.compose, offset)
        limbs = [
            region.assign_advice(f"{name}.limb_{i}", column, offset, None if v is None else to_field(v))
            for i, (column, v) in enumerate(zip(config.limbs, limb_values))
        ]
        native = region.assign_advice(f"{name}.native", config.native, offset, native_value)
        ctx.next()
        return AssignedInteger(limbs, native, value)

    def assign_scalar(self, ctx: RegionCtx, value: Optional[int], name: str = "scalar") -> AssignedInteger:
        return self._assign_integer(ctx, value, SCALAR_MODULUS, name)

    def assign_point(self, ctx: RegionCtx, point: Optional[Point], name: str = "point") -> AssignedPoint:
        x, y = (None, None) if point is None else point
        return AssignedPoint(
            self._assign_integer(ctx, x, BASE_MODULUS, f"{name}.x"),
            self._assign_integer(ctx, y, BASE_MODULUS, f"{name}.y"),
        )

    def assign_aux(self, layouter: Layouter, aux_generator: Optional[Point], window_size: int) -> None:
        if window_size < 1:
            raise ValueError(f"window size must be positive, got {window_size}")

        def assign(region: Region) -> AssignedAux:
            ctx = RegionCtx(region)
            generator = self.assign_point(ctx, aux_generator, "aux_generator")
            table = []
            entry = aux_generator
            for i in range(1 << window_size):
                table.append(self.assign_point(ctx, entry, f"aux_table_{i}"))
                if entry is not None:
                    entry = point_add(entry, GENERATOR)
            return AssignedAux(generator, table, window_size)

        self.aux = layouter.assign_region("ecdsa_aux", assign)
        logger.debug("Assigned aux generator with a %d-entry window table", len(self.aux.table))

    def verify(self, layouter: Layouter, sig: AssignedSignature, public_key: AssignedPoint,
               msg_hash: AssignedInteger) -> None:
        """Check `sig` with py_ecc and pin the outcome to one.

        The copied r, s, hash and key cells are placeholders that no gate
        reads; see the module notes.
        """
        if self.aux is None:
            raise SynthesisError(
                SynthesisErrorKind.MISSING_AUX,
                "assign_aux must run before any signature is verified",
            )
        config = self.config

        def assign(region: Region) -> None:
            natives = [sig.r.native, sig.s.native, msg_hash.native, public_key.x.native]
            for i, (cell, column) in enumerate(zip(natives, config.limbs)):
                region.copy_advice(f"verify.input_{i}", cell, column, 0)
            region.copy_advice("verify.key_y", public_key.y.native, config.native, 0)

            valid = None
            key = public_key.value
            if None not in (sig.r.value, sig.s.value, msg_hash.value, key):
                ok = verify_signature(SigData(sig.r.value, sig.s.value), key, msg_hash.value)
                valid = to_field(int(ok))
            region.enable_selector("ecdsa_verify", config.verify, 0)
            region.assign_advice("verify.valid", config.valid, 0, valid)

        layouter.assign_region("ecdsa_verify", assign)
