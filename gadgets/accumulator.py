"""
Weighted accumulation gadget: sum_i lhs_i * rhs_i.

One region, one row per term plus a final row for the total:

    row i:  lhs_i | rhs_i | sum_i
    row N:        |       | sum_N

The init gate pins sum_0 = 0 on row 0 and the step gate enforces
sum_{i+1} = sum_i + lhs_i * rhs_i on rows 0..N-1, so a tampered running
sum breaks the chain at the first row where it diverges.

Selected accumulation first computes a boolean flag per term (the term's key
equals a target key, coordinate by coordinate) with the main gate, then
accumulates flag_i * weight_i.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from gadgets.main_gate import MainGate, RegionCtx
from plonk.columns import Column, Selector
from plonk.context import ConstraintContext
from plonk.layouter import AssignedCell, Layouter, Region, map_values
from plonk.system import ConstraintSystem
from primitives.field import ZERO

logger = logging.getLogger(__name__)

KeyCells = Tuple[AssignedCell, AssignedCell]


@dataclass(frozen=True)
class AccumulatorConfig:
    lhs: Column
    rhs: Column
    sum: Column
    init: Selector
    step: Selector


class AccumulatorChip:

    def __init__(self, config: AccumulatorConfig):
        self.config = config

    @staticmethod
    def configure(cs: ConstraintSystem) -> AccumulatorConfig:
        lhs, rhs, total = cs.advice_column(), cs.advice_column(), cs.advice_column()
        init, step = cs.selector(), cs.selector()
        for column in (lhs, rhs, total):
            cs.enable_equality(column)

        def init_gate(ctx: ConstraintContext):
            return [ctx.col(total)]

        def step_gate(ctx: ConstraintContext):
            return [ctx.next_col(total) - (ctx.col(total) + ctx.col(lhs) * ctx.col(rhs))]

        cs.create_gate("accumulator_init", init, init_gate)
        cs.create_gate("accumulator_step", step, step_gate)
        return AccumulatorConfig(lhs, rhs, total, init, step)

    def accumulate(self, layouter: Layouter, lhs: Sequence[AssignedCell],
                   rhs: Sequence[AssignedCell]) -> AssignedCell:
        """
        Fold two equal-length cell sequences into their dot product.

        Args:
            layouter: Layouter to allocate the accumulation region from
            lhs: Left factors
            rhs: Right factors

        Returns:
            Cell holding sum_i lhs_i * rhs_i (zero for empty inputs)

        Raises:
            ValueError: If the sequences differ in length
        """
        if len(lhs) != len(rhs):
            raise ValueError(f"lhs and rhs lengths differ: {len(lhs)} != {len(rhs)}")
        config = self.config

        def assign(region: Region) -> AssignedCell:
            region.enable_selector("accumulator_init", config.init, 0)
            acc = region.assign_advice("sum_0", config.sum, 0, ZERO)
            for i, (x, y) in enumerate(zip(lhs, rhs)):
                region.enable_selector("accumulator_step", config.step, i)
                x = region.copy_advice(f"lhs_{i}", x, config.lhs, i)
                y = region.copy_advice(f"rhs_{i}", y, config.rhs, i)
                value = map_values(lambda s, p, q: s + p * q, acc.value, x.value, y.value)
                acc = region.assign_advice(f"sum_{i + 1}", config.sum, i + 1, value)
            return acc

        result = layouter.assign_region("accumulate", assign)
        logger.debug("Accumulated %d terms", len(lhs))
        return result

    def accumulate_selected(
        self,
        layouter: Layouter,
        main_gate: MainGate,
        keys: Sequence[KeyCells],
        target: KeyCells,
        weights: Sequence[AssignedCell],
    ) -> AssignedCell:
        """Sum the weights whose key matches `target`.

        Args:
            layouter: Layouter to allocate regions from
            main_gate: Chip computing the equality flags
            keys: (x, y) coordinate cells, one pair per weight
            target: (x, y) coordinate cells of the key to select
            weights: Weight cells

        Returns:
            Cell holding sum_i [keys_i == target] * weights_i
        """
        if len(keys) != len(weights):
            raise ValueError(f"keys and weights lengths differ: {len(keys)} != {len(weights)}")
        target_x, target_y = target

        def select(region: Region) -> List[AssignedCell]:
            ctx = RegionCtx(region)
            flags = []
            for x, y in keys:
                same_x = main_gate.is_equal(ctx, x, target_x)
                same_y = main_gate.is_equal(ctx, y, target_y)
                flags.append(main_gate.and_(ctx, same_x, same_y))
            return flags

        flags = layouter.assign_region("select_keys", select)
        return self.accumulate(layouter, flags, weights)
