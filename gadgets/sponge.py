"""
Sponge gadget over the Poseidon permutation gadget.

Absorbing works on whole width-sized blocks. The state starts as the first
block; every later block is absorbed by permuting the state and adding the
block lane by lane. One absorb step is one region:

    row 0:  block[i] in the sponge input columns, permutation output in the
            permutation state columns (both copied in)
    row 1:  new state in the sponge input columns

with the gate next(input[i]) - (input[i] + state[i]) = 0. The squeezed value
is lane 0 of the final state. A short last block is padded with a zero cell
pinned by the main gate.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from gadgets.main_gate import MainGate, MainGateConfig, RegionCtx
from gadgets.poseidon import PoseidonChip, PoseidonConfig
from plonk.columns import Column, Selector
from plonk.context import ConstraintContext
from plonk.layouter import AssignedCell, Layouter, Region, map_values
from plonk.system import ConstraintSystem
from primitives.field import ZERO
from primitives.poseidon_params import RoundParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpongeConfig:
    poseidon: PoseidonConfig
    main_gate: MainGateConfig
    inputs: Tuple[Column, ...]
    absorb: Selector


class SpongeChip:
    """Stateful sponge: buffer cells with update(), hash them with squeeze()."""

    def __init__(self, config: SpongeConfig, params: RoundParams):
        self.config = config
        self.params = params
        self.poseidon = PoseidonChip(config.poseidon, params)
        self.main_gate = MainGate(config.main_gate)
        self.inputs: List[AssignedCell] = []

    @staticmethod
    def configure(
        cs: ConstraintSystem,
        params: RoundParams,
        poseidon: PoseidonConfig,
        main_gate: MainGateConfig,
    ) -> SpongeConfig:
        """Add the absorb gate on top of existing permutation and main gate configs."""
        inputs = tuple(cs.advice_column() for _ in range(params.width))
        absorb = cs.selector()
        for column in inputs:
            cs.enable_equality(column)

        def absorb_gate(ctx: ConstraintContext):
            return [
                ctx.next_col(inputs[i]) - (ctx.col(inputs[i]) + ctx.col(poseidon.state[i]))
                for i in range(params.width)
            ]

        cs.create_gate("sponge_absorb", absorb, absorb_gate)
        return SpongeConfig(poseidon, main_gate, inputs, absorb)

    def update(self, inputs: Sequence[AssignedCell]) -> None:
        self.inputs.extend(inputs)

    def _chunks(self, layouter: Layouter) -> List[List[AssignedCell]]:
        width = self.params.width
        cells = list(self.inputs)
        if len(cells) % width:
            def assign_zero(region: Region) -> AssignedCell:
                return self.main_gate.assign_constant(RegionCtx(region), ZERO, "sponge_padding")

            zero = layouter.assign_region("sponge_padding", assign_zero)
            cells += [zero] * (width - len(cells) % width)
        return [cells[i:i + width] for i in range(0, len(cells), width)]

    def _absorb(self, layouter: Layouter, permuted: Sequence[AssignedCell],
                block: Sequence[AssignedCell]) -> List[AssignedCell]:
        config = self.config

        def assign(region: Region) -> List[AssignedCell]:
            region.enable_selector("absorb", config.absorb, 0)
            state = []
            for i in range(self.params.width):
                block_cell = region.copy_advice(f"block_{i}", block[i], config.inputs[i], 0)
                perm_cell = region.copy_advice(f"permuted_{i}", permuted[i], config.poseidon.state[i], 0)
                value = map_values(lambda b, p: b + p, block_cell.value, perm_cell.value)
                state.append(region.assign_advice(f"state_{i}", config.inputs[i], 1, value))
            return state

        return layouter.assign_region("sponge_absorb", assign)

    def squeeze(self, layouter: Layouter) -> AssignedCell:
        """Hash every buffered cell into one cell.

        Raises:
            ValueError: If nothing has been absorbed
        """
        if not self.inputs:
            raise ValueError("sponge has no absorbed input")

        chunks = self._chunks(layouter)
        state = chunks[0]
        for block in chunks[1:]:
            permuted = self.poseidon.permute(layouter, state)
            state = self._absorb(layouter, permuted, block)

        logger.debug("Sponge squeezed %d inputs in %d blocks", len(self.inputs), len(chunks))
        return state[0]
