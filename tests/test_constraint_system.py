"""Tests for the constraint-system builder and constraint contexts."""

import numpy as np
import pytest

from plonk.columns import Column, ColumnKind, Selector
from plonk.context import ColumnConstraintContext, QueryCollector, RowConstraintContext
from plonk.errors import ConfigurationError
from plonk.system import ConstraintSystem
from primitives.field import Fr


class TestAllocation:
    """Tests for column and selector allocation."""

    def test_indices_per_kind(self) -> None:
        """Each column kind is numbered independently."""
        cs = ConstraintSystem()
        a0, a1 = cs.advice_column(), cs.advice_column()
        f0 = cs.fixed_column()
        i0 = cs.instance_column()
        assert (a0.index, a1.index, f0.index, i0.index) == (0, 1, 0, 0)
        assert a1.kind == ColumnKind.ADVICE
        assert f0.kind == ColumnKind.FIXED
        assert i0.kind == ColumnKind.INSTANCE

    def test_frozen_rejects_allocation(self) -> None:
        """Allocating after freeze() is a configuration error."""
        cs = ConstraintSystem()
        cs.freeze()
        with pytest.raises(ConfigurationError, match="frozen"):
            cs.advice_column()
        with pytest.raises(ConfigurationError, match="frozen"):
            cs.selector()

    def test_equality_on_fixed_rejected(self) -> None:
        """Copy constraints are not supported on fixed columns."""
        cs = ConstraintSystem()
        with pytest.raises(ConfigurationError):
            cs.enable_equality(cs.fixed_column())

    def test_equality_on_foreign_column_rejected(self) -> None:
        """A column from another builder is rejected."""
        cs = ConstraintSystem()
        with pytest.raises(ConfigurationError, match="unallocated"):
            cs.enable_equality(Column(ColumnKind.ADVICE, 3))


class TestCreateGate:
    """Tests for gate registration."""

    def test_records_queries(self) -> None:
        """Registered gates know which cells they read."""
        cs = ConstraintSystem()
        a, b = cs.advice_column(), cs.advice_column()
        q = cs.fixed_column()
        s = cs.selector()
        gate = cs.create_gate("g", s, lambda ctx: [ctx.const(q) * ctx.col(a) - ctx.next_col(b)])
        assert gate.num_polys == 1
        assert set(gate.queries) == {(q, 0), (a, 0), (b, 1)}

    def test_unallocated_column_rejected(self) -> None:
        """Querying a column this builder never allocated is a configuration error."""
        cs = ConstraintSystem()
        s = cs.selector()
        stray = Column(ColumnKind.ADVICE, 0)
        with pytest.raises(ConfigurationError, match="unallocated"):
            cs.create_gate("g", s, lambda ctx: [ctx.col(stray)])

    def test_unallocated_selector_rejected(self) -> None:
        """The selector must come from this builder."""
        cs = ConstraintSystem()
        a = cs.advice_column()
        with pytest.raises(ConfigurationError):
            cs.create_gate("g", Selector(0), lambda ctx: [ctx.col(a)])

    def test_wrong_accessor_rejected(self) -> None:
        """Fixed columns are read with const(), not col()."""
        cs = ConstraintSystem()
        q = cs.fixed_column()
        s = cs.selector()
        with pytest.raises(ConfigurationError):
            cs.create_gate("g", s, lambda ctx: [ctx.col(q)])

    def test_empty_gate_rejected(self) -> None:
        """A gate must constrain something."""
        cs = ConstraintSystem()
        s = cs.selector()
        with pytest.raises(ConfigurationError, match="no constraints"):
            cs.create_gate("g", s, lambda ctx: [])


class TestContexts:
    """Tests for column-wide and single-row evaluation."""

    def test_column_rotation(self) -> None:
        """next_col and prev_col shift circularly."""
        a = Column(ColumnKind.ADVICE, 0)
        ctx = ColumnConstraintContext({a: Fr([1, 2, 3, 4])})
        assert np.array_equal(ctx.next_col(a), Fr([2, 3, 4, 1]))
        assert np.array_equal(ctx.prev_col(a), Fr([4, 1, 2, 3]))

    def test_fixed_rotation(self) -> None:
        """next_const reads the fixed column one row ahead."""
        q = Column(ColumnKind.FIXED, 0)
        ctx = ColumnConstraintContext({q: Fr([5, 6, 7, 8])})
        assert np.array_equal(ctx.next_const(q), Fr([6, 7, 8, 5]))

    def test_row_matches_column(self) -> None:
        """Single-row evaluation agrees with the column-wide result."""
        a = Column(ColumnKind.ADVICE, 0)
        q = Column(ColumnKind.FIXED, 0)
        values = {a: Fr([1, 2, 3, 4]), q: Fr([5, 6, 7, 8])}

        def gate(ctx):
            return [ctx.const(q) * ctx.next_col(a)]

        column_result = gate(ColumnConstraintContext(values))[0]
        for row in range(4):
            assert int(gate(RowConstraintContext(values, row))[0]) == int(column_result[row])

    def test_collector_deduplicates(self) -> None:
        """Repeated queries are recorded once."""
        a = Column(ColumnKind.ADVICE, 0)
        collector = QueryCollector()
        collector.col(a)
        collector.col(a)
        collector.next_col(a)
        assert collector.queries == [(a, 0), (a, 1)]
