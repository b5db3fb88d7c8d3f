"""
Poseidon permutation gadget.

The permutation is laid out as three regions, one per phase:

    full_rounds_a   half the full rounds
    partial_rounds  every partial round
    full_rounds_b   the remaining full rounds

Each phase region holds one row per round plus a final row carrying the
phase output. On a round row the state, that round's constants and the MDS
matrix sit side by side, and the round gate ties the next row's state to

    next[i] = sum_j MDS[i][j] * sbox(state[j] + rc[j])      (full round)
    next[i] = sum_j MDS[i][j] * mixed[j]                    (partial round)

where in a partial round mixed[0] = sbox(state[0] + rc[0]) and
mixed[j] = state[j] + rc[j] for the other lanes. The whole state is carried
from one phase region into the next with copy constraints.

Round constants and MDS entries live in fixed columns. Witness values are
computed with the native round functions from primitives.poseidon, so the
gadget reproduces the native permutation exactly when every gate holds.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from plonk.columns import Column, Selector
from plonk.context import ConstraintContext
from plonk.layouter import AssignedCell, Layouter, Region, Value
from plonk.system import ConstraintSystem
from primitives.field import Fr
from primitives.poseidon import full_round, partial_round
from primitives.poseidon_params import RoundParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoseidonConfig:
    """Columns and selectors of the permutation gadget.

    Attributes:
        state: One advice column per lane (equality enabled)
        rc: One fixed column per lane for the round constants
        mds: width x width fixed columns holding the MDS matrix
        full_round: Selector of the full-round gate
        partial_round: Selector of the partial-round gate
    """
    state: Tuple[Column, ...]
    rc: Tuple[Column, ...]
    mds: Tuple[Tuple[Column, ...], ...]
    full_round: Selector
    partial_round: Selector


class PoseidonChip:
    """Permutation gadget for one RoundParams set."""

    def __init__(self, config: PoseidonConfig, params: RoundParams):
        self.config = config
        self.params = params

    @staticmethod
    def configure(cs: ConstraintSystem, params: RoundParams) -> PoseidonConfig:
        width = params.width
        state = tuple(cs.advice_column() for _ in range(width))
        rc = tuple(cs.fixed_column() for _ in range(width))
        mds = tuple(tuple(cs.fixed_column() for _ in range(width)) for _ in range(width))
        full_selector = cs.selector()
        partial_selector = cs.selector()

        for column in state:
            cs.enable_equality(column)

        def mix(ctx: ConstraintContext, lanes: List) -> List:
            exprs = []
            for i in range(width):
                acc = ctx.const(mds[i][0]) * lanes[0]
                for j in range(1, width):
                    acc = acc + ctx.const(mds[i][j]) * lanes[j]
                exprs.append(ctx.next_col(state[i]) - acc)
            return exprs

        def full_round_gate(ctx: ConstraintContext):
            lanes = [params.sbox(ctx.col(state[j]) + ctx.const(rc[j])) for j in range(width)]
            return mix(ctx, lanes)

        def partial_round_gate(ctx: ConstraintContext):
            lanes = [ctx.col(state[j]) + ctx.const(rc[j]) for j in range(width)]
            lanes[0] = params.sbox(lanes[0])
            return mix(ctx, lanes)

        cs.create_gate("poseidon_full_round", full_selector, full_round_gate)
        cs.create_gate("poseidon_partial_round", partial_selector, partial_round_gate)

        return PoseidonConfig(state, rc, mds, full_selector, partial_selector)

    def load_state(self, layouter: Layouter, values: Sequence[Value]) -> List[AssignedCell]:
        """Assign a width-sized input vector as witnesses."""
        if len(values) != self.params.width:
            raise ValueError(f"expected {self.params.width} inputs, got {len(values)}")

        def assign(region: Region) -> List[AssignedCell]:
            return [
                region.assign_advice(f"input_{i}", column, 0, value)
                for i, (column, value) in enumerate(zip(self.config.state, values))
            ]

        return layouter.assign_region("poseidon_load_state", assign)

    def _phase(
        self,
        layouter: Layouter,
        name: str,
        inputs: Sequence[AssignedCell],
        constants: Sequence[Fr],
        rounds: int,
        full: bool,
    ) -> List[AssignedCell]:
        config = self.config
        params = self.params
        width = params.width
        selector = config.full_round if full else config.partial_round
        round_fn = full_round if full else partial_round

        def assign(region: Region) -> List[AssignedCell]:
            cells = [
                region.copy_advice(f"state_{i}", cell, config.state[i], 0)
                for i, cell in enumerate(inputs)
            ]
            values = [cell.value for cell in cells]

            for r in range(rounds):
                region.enable_selector(name, selector, r)
                for i in range(width):
                    region.assign_fixed(f"rc_{i}", config.rc[i], r, constants[r * width + i])
                    for j in range(width):
                        region.assign_fixed(f"mds_{i}_{j}", config.mds[i][j], r, params.mds[i][j])

                if any(v is None for v in values):
                    values = [None] * width
                else:
                    values = round_fn(values, constants, r, params)

                cells = [
                    region.assign_advice(f"state_{i}", config.state[i], r + 1, value)
                    for i, value in enumerate(values)
                ]
            return cells

        return layouter.assign_region(name, assign)

    def permute(self, layouter: Layouter, inputs: Sequence[AssignedCell]) -> List[AssignedCell]:
        """Run the permutation on assigned cells.

        Args:
            layouter: Layouter to allocate the three phase regions from
            inputs: `width` cells, copied into the first phase

        Returns:
            The `width` output cells of the last phase
        """
        params = self.params
        if len(inputs) != params.width:
            raise ValueError(f"expected {params.width} inputs, got {len(inputs)}")

        first, second, third = params.round_constant_slices()
        state = self._phase(layouter, "full_rounds_a", inputs, first, params.half_full_rounds, True)
        state = self._phase(layouter, "partial_rounds", state, second, params.partial_rounds, False)
        state = self._phase(layouter, "full_rounds_b", state, third, params.half_full_rounds, True)
        logger.debug("Permutation assigned (%d rounds)", params.full_rounds + params.partial_rounds)
        return state
