"""Tests for the standard arithmetic gate."""

import pytest

from gadgets.main_gate import MainGate, RegionCtx
from plonk.circuit import Circuit
from plonk.errors import SynthesisError
from plonk.mock_prover import ConstraintNotSatisfied, InstanceMismatch, MockProver, keygen
from primitives.field import BN254_PRIME


class MainGateCircuit(Circuit):
    """Runs `body(chip, ctx)` in one region and exposes its result at slot 0."""

    def __init__(self, body):
        self.body = body

    @classmethod
    def configure(cls, cs):
        return MainGate.configure(cs)

    def synthesize(self, config, layouter):
        chip = MainGate(config)
        out = layouter.assign_region("main", lambda region: self.body(chip, RegionCtx(region)))
        chip.expose_public(layouter, out, 0)

    def without_witnesses(self):
        return self


def run(body, public):
    return MockProver.run(5, MainGateCircuit(body), [[public]])


class TestArithmetic:
    """Tests for add, sub and mul."""

    def test_add(self) -> None:
        """2 + 3 = 5."""
        def body(chip, ctx):
            x, y = chip.assign_value(ctx, 2), chip.assign_value(ctx, 3)
            return chip.add(ctx, x, y)

        run(body, 5).assert_satisfied()

    def test_sub_wraps(self) -> None:
        """2 - 3 = -1 in the field."""
        def body(chip, ctx):
            x, y = chip.assign_value(ctx, 2), chip.assign_value(ctx, 3)
            return chip.sub(ctx, x, y)

        run(body, BN254_PRIME - 1).assert_satisfied()

    def test_mul(self) -> None:
        """6 * 7 = 42, and 41 is rejected."""
        def body(chip, ctx):
            x, y = chip.assign_value(ctx, 6), chip.assign_value(ctx, 7)
            return chip.mul(ctx, x, y)

        run(body, 42).assert_satisfied()
        failures = run(body, 41).verify()
        assert failures and all(isinstance(f, InstanceMismatch) for f in failures)

    def test_assign_constant_pins_value(self) -> None:
        """A constant cell satisfies a - c = 0."""
        run(lambda chip, ctx: chip.assign_constant(ctx, 9), 9).assert_satisfied()

    def test_assert_constant_rejects_other_value(self) -> None:
        """assert_constant fails on a different witness."""
        def body(chip, ctx):
            x = chip.assign_value(ctx, 4)
            chip.assert_constant(ctx, x, 5)
            return x

        failures = run(body, 4).verify()
        assert failures == [ConstraintNotSatisfied("main_gate", "main", 1, 0)]


class TestComparisons:
    """Tests for is_zero, is_equal and and_."""

    @pytest.mark.parametrize("value,expected", [(0, 1), (1, 0), (BN254_PRIME - 1, 0)])
    def test_is_zero(self, value, expected) -> None:
        """is_zero is one exactly on zero."""
        def body(chip, ctx):
            return chip.is_zero(ctx, chip.assign_value(ctx, value))

        run(body, expected).assert_satisfied()

    @pytest.mark.parametrize("x,y,expected", [(5, 5, 1), (5, 6, 0)])
    def test_is_equal(self, x, y, expected) -> None:
        """is_equal compares two cells."""
        def body(chip, ctx):
            return chip.is_equal(ctx, chip.assign_value(ctx, x), chip.assign_value(ctx, y))

        run(body, expected).assert_satisfied()

    @pytest.mark.parametrize("x,y,expected", [(1, 1, 1), (1, 0, 0), (0, 0, 0)])
    def test_and(self, x, y, expected) -> None:
        """and_ multiplies two booleans."""
        def body(chip, ctx):
            return chip.and_(ctx, chip.assign_value(ctx, x), chip.assign_value(ctx, y))

        run(body, expected).assert_satisfied()

    def test_is_zero_claim_cannot_be_forged(self) -> None:
        """Claiming a nonzero value is zero breaks the second is_zero row."""
        def body(chip, ctx):
            config = chip.config
            region = ctx.region
            x = chip.assign_value(ctx, 3)

            # x * inv + out - 1 = 0 holds with inv = 0, out = 1
            region.copy_advice("x", x, config.a, ctx.offset)
            region.assign_advice("inv", config.b, ctx.offset, 0)
            out = region.assign_advice("out", config.c, ctx.offset, 1)
            chip._coefficients(ctx, q_c=1, q_m=1, q_const=-1)
            ctx.next()

            # x * out = 0 does not
            region.copy_advice("x", x, config.a, ctx.offset)
            region.copy_advice("out", out, config.b, ctx.offset)
            region.assign_advice("pad", config.c, ctx.offset, 0)
            chip._coefficients(ctx, q_m=1)
            ctx.next()
            return out

        failures = run(body, 1).verify()
        assert failures == [ConstraintNotSatisfied("main_gate", "main", 2, 0)]


class TestAssignment:
    """Tests for witness handling."""

    def test_missing_witness(self) -> None:
        """A None witness raises during a proving pass."""
        with pytest.raises(SynthesisError):
            run(lambda chip, ctx: chip.assign_value(ctx, None), 0)

    def test_keygen_accepts_missing_witness(self) -> None:
        """Key generation tolerates unknown values through every operation."""
        def body(chip, ctx):
            x = chip.assign_value(ctx, None)
            y = chip.assign_value(ctx, None)
            return chip.and_(ctx, chip.is_equal(ctx, x, y), chip.is_zero(ctx, chip.mul(ctx, x, y)))

        layout = keygen(5, MainGateCircuit(body))
        assert len(layout.copies) > 0
