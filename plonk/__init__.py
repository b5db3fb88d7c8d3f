"""Plonk - PLONKish arithmetization: columns, gates, regions and the checker."""

from plonk.errors import (
    ConfigurationError,
    SynthesisError,
    SynthesisErrorKind,
)
from plonk.columns import Column, ColumnKind, Selector
from plonk.context import (
    ColumnConstraintContext,
    ConstraintContext,
    RowConstraintContext,
)
from plonk.system import ConstraintSystem, Gate
from plonk.layouter import (
    AssignedCell,
    Cell,
    Layouter,
    Region,
    map_values,
)
from plonk.circuit import Circuit
from plonk.mock_prover import (
    CellNotAssigned,
    CircuitLayout,
    ConstraintNotSatisfied,
    InstanceMismatch,
    MockProver,
    Permutation,
    VerifyFailure,
    keygen,
)

__all__ = [
    # Errors
    "ConfigurationError",
    "SynthesisError",
    "SynthesisErrorKind",
    # Columns
    "Column",
    "ColumnKind",
    "Selector",
    # Gates
    "ConstraintContext",
    "ColumnConstraintContext",
    "RowConstraintContext",
    "ConstraintSystem",
    "Gate",
    # Layout
    "AssignedCell",
    "Cell",
    "Layouter",
    "Region",
    "map_values",
    "Circuit",
    # Checker
    "MockProver",
    "VerifyFailure",
    "ConstraintNotSatisfied",
    "CellNotAssigned",
    "Permutation",
    "InstanceMismatch",
    "CircuitLayout",
    "keygen",
]
