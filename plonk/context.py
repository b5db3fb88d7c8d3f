"""Query interface for gate evaluation.

ConstraintContext provides a uniform interface for gate evaluation that works
on whole columns (returns arrays) and on a single row (returns scalars). The
same gate function serves both thanks to galois broadcasting, and is also
run once at registration against a QueryCollector that records which cells
it reads.

Example:
    def mul_gate(ctx: ConstraintContext):
        a = ctx.col(lhs)
        b = ctx.col(rhs)
        return [a * b - ctx.next_col(out)]

    # Whole columns (checker)
    polys = mul_gate(ColumnConstraintContext(values))

    # One row (diagnostics)
    polys = mul_gate(RowConstraintContext(values, row=3))
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

import numpy as np

from plonk.columns import Column, ColumnKind
from plonk.errors import ConfigurationError
from primitives.field import Fr, ONE


class ConstraintContext(ABC):
    """Uniform interface for gate evaluation - works for columns and rows."""

    @abstractmethod
    def query(self, column: Column, rotation: int):
        """Value of `column` at `rotation` rows from the current one."""

    def col(self, column: Column):
        """Advice or instance column at current row."""
        return self.query(self._witness(column), 0)

    def next_col(self, column: Column):
        """Advice or instance column at next row (offset +1)."""
        return self.query(self._witness(column), 1)

    def prev_col(self, column: Column):
        """Advice or instance column at previous row (offset -1)."""
        return self.query(self._witness(column), -1)

    def const(self, column: Column):
        """Fixed column at current row."""
        return self.query(self._fixed(column), 0)

    def next_const(self, column: Column):
        """Fixed column at next row (offset +1)."""
        return self.query(self._fixed(column), 1)

    @staticmethod
    def _witness(column: Column) -> Column:
        if column.kind == ColumnKind.FIXED:
            raise ConfigurationError(f"fixed column {column} must be read with const()")
        return column

    @staticmethod
    def _fixed(column: Column) -> Column:
        if column.kind != ColumnKind.FIXED:
            raise ConfigurationError(f"{column} is not a fixed column")
        return column


class QueryCollector(ConstraintContext):
    """Records every (column, rotation) a gate reads.

    Queries evaluate to one so the gate body runs through without a witness.
    """

    def __init__(self):
        self.queries: List[Tuple[Column, int]] = []

    def query(self, column: Column, rotation: int):
        key = (column, rotation)
        if key not in self.queries:
            self.queries.append(key)
        return ONE


class ColumnConstraintContext(ConstraintContext):
    """Whole-column evaluation - returns arrays over every row.

    Rotations wrap around (circular shift); the layouter keeps the last row
    free so active gates never read across the wrap.
    """

    def __init__(self, values: Dict[Column, Fr]):
        self._values = values

    def query(self, column: Column, rotation: int) -> Fr:
        return np.roll(self._values[column], -rotation)


class RowConstraintContext(ConstraintContext):
    """Single-row evaluation - returns scalars."""

    def __init__(self, values: Dict[Column, Fr], row: int):
        self._values = values
        self._row = row

    def query(self, column: Column, rotation: int) -> Fr:
        values = self._values[column]
        return values[(self._row + rotation) % len(values)]
