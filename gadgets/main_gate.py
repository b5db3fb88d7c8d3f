"""Standard PLONK arithmetic gate.

One row, three advice cells and five fixed coefficients:

    q_a*a + q_b*b + q_c*c + q_m*a*b + q_const = 0

Every operation below fills exactly the rows it needs inside the caller's
region, starting at the RegionCtx offset and advancing it. Inputs that come
from other rows are brought in with copy constraints.
"""

from dataclasses import dataclass
from typing import Optional

from plonk.columns import Column, Selector
from plonk.context import ConstraintContext
from plonk.layouter import AssignedCell, Layouter, Region, Value, map_values
from plonk.system import ConstraintSystem
from primitives.field import Fr, ONE, ZERO, to_field


class RegionCtx:
    """A region plus a moving row offset."""

    def __init__(self, region: Region, offset: int = 0):
        self.region = region
        self.offset = offset

    def next(self) -> None:
        self.offset += 1


@dataclass(frozen=True)
class MainGateConfig:
    a: Column
    b: Column
    c: Column
    q_a: Column
    q_b: Column
    q_c: Column
    q_m: Column
    q_const: Column
    selector: Selector
    instance: Column


class MainGate:
    """Arithmetic chip over one MainGateConfig."""

    def __init__(self, config: MainGateConfig):
        self.config = config

    @staticmethod
    def configure(cs: ConstraintSystem, instance: Optional[Column] = None) -> MainGateConfig:
        """Allocate the gate's columns.

        Args:
            cs: Constraint system being configured
            instance: Public input column to expose values to; a new one is
                allocated when omitted
        """
        a, b, c = cs.advice_column(), cs.advice_column(), cs.advice_column()
        q_a, q_b, q_c = cs.fixed_column(), cs.fixed_column(), cs.fixed_column()
        q_m, q_const = cs.fixed_column(), cs.fixed_column()
        selector = cs.selector()
        if instance is None:
            instance = cs.instance_column()

        for column in (a, b, c, instance):
            cs.enable_equality(column)

        def main_gate(ctx: ConstraintContext):
            va, vb, vc = ctx.col(a), ctx.col(b), ctx.col(c)
            return [
                ctx.const(q_a) * va
                + ctx.const(q_b) * vb
                + ctx.const(q_c) * vc
                + ctx.const(q_m) * va * vb
                + ctx.const(q_const)
            ]

        cs.create_gate("main_gate", selector, main_gate)
        return MainGateConfig(a, b, c, q_a, q_b, q_c, q_m, q_const, selector, instance)

    # --- Row helpers ---

    def _coefficients(self, ctx: RegionCtx, q_a=ZERO, q_b=ZERO, q_c=ZERO, q_m=ZERO, q_const=ZERO) -> None:
        config = self.config
        region, offset = ctx.region, ctx.offset
        region.enable_selector("main_gate", config.selector, offset)
        region.assign_fixed("q_a", config.q_a, offset, q_a)
        region.assign_fixed("q_b", config.q_b, offset, q_b)
        region.assign_fixed("q_c", config.q_c, offset, q_c)
        region.assign_fixed("q_m", config.q_m, offset, q_m)
        region.assign_fixed("q_const", config.q_const, offset, q_const)

    def _pad(self, ctx: RegionCtx, *columns: Column) -> None:
        for column in columns:
            ctx.region.assign_advice("pad", column, ctx.offset, ZERO)

    def _binary(self, ctx: RegionCtx, name: str, x: AssignedCell, y: AssignedCell, out: Value,
                **coefficients) -> AssignedCell:
        config = self.config
        region, offset = ctx.region, ctx.offset
        region.copy_advice(f"{name}.lhs", x, config.a, offset)
        region.copy_advice(f"{name}.rhs", y, config.b, offset)
        result = region.assign_advice(f"{name}.out", config.c, offset, out)
        self._coefficients(ctx, q_c=-ONE, **coefficients)
        ctx.next()
        return result

    # --- Operations ---

    def assign_value(self, ctx: RegionCtx, value: Value, name: str = "value") -> AssignedCell:
        """Unconstrained witness in column a."""
        cell = ctx.region.assign_advice(name, self.config.a, ctx.offset, value)
        ctx.next()
        return cell

    def assign_constant(self, ctx: RegionCtx, constant: Fr, name: str = "constant") -> AssignedCell:
        """Witness pinned to `constant` by a - constant = 0."""
        cell = ctx.region.assign_advice(name, self.config.a, ctx.offset, constant)
        self._pad(ctx, self.config.b, self.config.c)
        self._coefficients(ctx, q_a=ONE, q_const=-to_field(constant))
        ctx.next()
        return cell

    def assert_constant(self, ctx: RegionCtx, x: AssignedCell, constant: Fr) -> None:
        """Constrain an existing cell to equal `constant`."""
        ctx.region.copy_advice("assert_constant", x, self.config.a, ctx.offset)
        self._pad(ctx, self.config.b, self.config.c)
        self._coefficients(ctx, q_a=ONE, q_const=-to_field(constant))
        ctx.next()

    def add(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> AssignedCell:
        out = map_values(lambda p, q: p + q, x.value, y.value)
        return self._binary(ctx, "add", x, y, out, q_a=ONE, q_b=ONE)

    def sub(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> AssignedCell:
        out = map_values(lambda p, q: p - q, x.value, y.value)
        return self._binary(ctx, "sub", x, y, out, q_a=ONE, q_b=-ONE)

    def mul(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> AssignedCell:
        out = map_values(lambda p, q: p * q, x.value, y.value)
        return self._binary(ctx, "mul", x, y, out, q_m=ONE)

    def is_zero(self, ctx: RegionCtx, x: AssignedCell) -> AssignedCell:
        """Boolean cell that is one exactly when x is zero.

        Row 1: x * inv + out - 1 = 0
        Row 2: x * out = 0
        """
        config = self.config
        region = ctx.region

        inv = map_values(lambda v: ZERO if int(v) == 0 else v ** -1, x.value)
        out = map_values(lambda v: ONE if int(v) == 0 else ZERO, x.value)

        region.copy_advice("is_zero.x", x, config.a, ctx.offset)
        region.assign_advice("is_zero.inv", config.b, ctx.offset, inv)
        result = region.assign_advice("is_zero.out", config.c, ctx.offset, out)
        self._coefficients(ctx, q_c=ONE, q_m=ONE, q_const=-ONE)
        ctx.next()

        region.copy_advice("is_zero.x", x, config.a, ctx.offset)
        region.copy_advice("is_zero.out", result, config.b, ctx.offset)
        self._pad(ctx, config.c)
        self._coefficients(ctx, q_m=ONE)
        ctx.next()
        return result

    def is_equal(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> AssignedCell:
        return self.is_zero(ctx, self.sub(ctx, x, y))

    def and_(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> AssignedCell:
        """Logical AND of two boolean cells."""
        return self.mul(ctx, x, y)

    def assert_equal(self, ctx: RegionCtx, x: AssignedCell, y: AssignedCell) -> None:
        ctx.region.constrain_equal(x, y)

    def expose_public(self, layouter: Layouter, cell: AssignedCell, row: int) -> None:
        layouter.constrain_instance(cell, self.config.instance, row)
