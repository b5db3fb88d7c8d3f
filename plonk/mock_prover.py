"""Constraint checker and key-generation pass.

MockProver plays the role of the proving/verification backend: it runs the
circuit's configuration and synthesis, then checks every gate on every row
where its selector is on, every copy constraint and every instance binding.
A dishonest witness shows up as a non-empty list of VerifyFailure values,
never as an exception.

Gates are evaluated column-wide: each query returns the whole column as an
Fr array, rotated by a circular shift, so one call per gate covers all rows.

Example:
    prover = MockProver.run(k=6, circuit=MulCircuit(a, b), instance=[[a * b]])
    assert prover.verify() == []
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from plonk.circuit import Circuit
from plonk.columns import Column, ColumnKind, Selector
from plonk.context import ColumnConstraintContext
from plonk.errors import ConfigurationError
from plonk.layouter import Assembly, Cell, Layouter
from plonk.system import ConstraintSystem
from primitives.field import Fr, to_field

logger = logging.getLogger(__name__)


# --- Failures ---

@dataclass(frozen=True)
class VerifyFailure:
    """Base class for everything verify() can report."""


@dataclass(frozen=True)
class ConstraintNotSatisfied(VerifyFailure):
    gate: str
    region: str
    row: int
    index: int

    def __str__(self) -> str:
        return f"constraint {self.index} of gate '{self.gate}' not satisfied in region '{self.region}' at row {self.row}"


@dataclass(frozen=True)
class CellNotAssigned(VerifyFailure):
    gate: str
    region: str
    column: Column
    row: int

    def __str__(self) -> str:
        return f"gate '{self.gate}' in region '{self.region}' reads unassigned cell {self.column}@{self.row}"


@dataclass(frozen=True)
class Permutation(VerifyFailure):
    column: Column
    row: int

    def __str__(self) -> str:
        return f"copy constraint on {self.column}@{self.row} not satisfied"


@dataclass(frozen=True)
class InstanceMismatch(VerifyFailure):
    column: Column
    row: int

    def __str__(self) -> str:
        return f"public input {self.column}@{self.row} does not match its bound cell"


# --- Synthesis helpers ---

def _configure(circuit: Circuit) -> Tuple[ConstraintSystem, object]:
    cs = ConstraintSystem()
    config = type(circuit).configure(cs)
    cs.freeze()
    return cs, config


def _synthesize(k: int, circuit: Circuit, require_witness: bool) -> Tuple[ConstraintSystem, Assembly]:
    cs, config = _configure(circuit)
    assembly = Assembly(cs, 1 << k, require_witness)
    circuit.synthesize(config, Layouter(assembly))
    return cs, assembly


@dataclass
class CircuitLayout:
    """Witness-independent shape of a synthesized circuit.

    Attributes:
        fixed: Fixed column values as integers (None where never assigned)
        selectors: Rows on which each selector is enabled
        copies: Copy constraints as ((column, row), (column, row)) pairs
    """
    fixed: Dict[Column, List[Optional[int]]]
    selectors: Dict[Selector, List[int]]
    copies: List[Tuple[Tuple[Column, int], Tuple[Column, int]]]


def keygen(k: int, circuit: Circuit) -> CircuitLayout:
    """Synthesize `circuit.without_witnesses()` and return its layout."""
    _, assembly = _synthesize(k, circuit.without_witnesses(), require_witness=False)
    layout = CircuitLayout(
        fixed={
            column: [None if v is None else int(v) for v in values]
            for column, values in assembly.fixed.items()
        },
        selectors={
            selector: [row for row, on in enumerate(enabled) if on]
            for selector, enabled in assembly.selectors.items()
        },
        copies=[((a.column, a.row), (b.column, b.row)) for a, b in assembly.copies],
    )
    logger.info("Key generation: %d rows used of %d", assembly.next_row, assembly.n)
    return layout


# --- Checker ---

class MockProver:
    """Synthesized circuit plus public inputs, ready to be checked."""

    def __init__(self, cs: ConstraintSystem, assembly: Assembly, instance: List[List[Fr]]):
        self.cs = cs
        self.assembly = assembly
        self.instance = instance

    @classmethod
    def run(cls, k: int, circuit: Circuit, instance: Sequence[Sequence[int]]) -> 'MockProver':
        """Configure and synthesize `circuit` over 2^k rows.

        Args:
            k: log2 of the number of rows
            circuit: Circuit with a complete witness
            instance: One list of public values per instance column

        Raises:
            ConfigurationError: If the instance shape does not match the
                circuit's instance columns
            SynthesisError: If synthesis fails (missing witness, too few
                rows, range overflow)
        """
        cs, assembly = _synthesize(k, circuit, require_witness=True)
        if len(instance) != cs.num_instance:
            raise ConfigurationError(
                f"circuit has {cs.num_instance} instance columns, got {len(instance)} public input lists"
            )
        padded = []
        for values in instance:
            if len(values) > assembly.usable_rows:
                raise ConfigurationError(
                    f"{len(values)} public inputs do not fit in {assembly.usable_rows} rows"
                )
            column = [to_field(int(v)) for v in values]
            padded.append(column + [Fr(0)] * (assembly.n - len(column)))
        logger.info("Synthesized circuit: %d rows used of %d", assembly.next_row, assembly.n)
        return cls(cs, assembly, padded)

    def _column_values(self) -> Dict[Column, Fr]:
        values = {}
        for column, cells in self.assembly.advice.items():
            values[column] = Fr([0 if v is None else int(v) for v in cells])
        for column, cells in self.assembly.fixed.items():
            values[column] = Fr([0 if v is None else int(v) for v in cells])
        for index, cells in enumerate(self.instance):
            values[Column(ColumnKind.INSTANCE, index)] = Fr([int(v) for v in cells])
        return values

    def _cell_value(self, cell: Cell) -> Optional[int]:
        column = cell.column
        if column.kind == ColumnKind.INSTANCE:
            return int(self.instance[column.index][cell.row])
        value = self.assembly.advice[column][cell.row]
        return None if value is None else int(value)

    def _check_gates(self, values: Dict[Column, Fr]) -> List[VerifyFailure]:
        failures: List[VerifyFailure] = []
        n = self.assembly.n
        ctx = ColumnConstraintContext(values)

        for gate in self.cs.gates:
            enabled = self.assembly.selectors[gate.selector]
            active = [row for row, on in enumerate(enabled) if on]
            if not active:
                continue

            for row in active:
                for column, rotation in gate.queries:
                    if column.kind != ColumnKind.ADVICE:
                        continue
                    target = (row + rotation) % n
                    if (column, target) not in self.assembly.assigned:
                        failures.append(CellNotAssigned(gate.name, self.assembly.region_at(row), column, target))

            polys = gate.constraint(ctx)
            for index, poly in enumerate(polys):
                for row in active:
                    value = poly[row] if poly.ndim else poly
                    if int(value) != 0:
                        failures.append(ConstraintNotSatisfied(gate.name, self.assembly.region_at(row), row, index))
            logger.debug("Checked gate '%s' on %d rows", gate.name, len(active))
        return failures

    def _check_copies(self) -> List[VerifyFailure]:
        failures: List[VerifyFailure] = []
        for left, right in self.assembly.copies:
            if self._cell_value(left) == self._cell_value(right):
                continue
            bound = right if right.column.kind == ColumnKind.INSTANCE else left
            if bound.column.kind == ColumnKind.INSTANCE:
                failures.append(InstanceMismatch(bound.column, bound.row))
            else:
                failures.append(Permutation(right.column, right.row))
        return failures

    def verify(self) -> List[VerifyFailure]:
        """Check every gate, copy constraint and instance binding."""
        failures = self._check_gates(self._column_values())
        failures += self._check_copies()
        logger.info("Verification finished with %d failures", len(failures))
        return failures

    def assert_satisfied(self) -> None:
        """Raise AssertionError listing every failure, if any."""
        failures = self.verify()
        if failures:
            raise AssertionError("circuit was not satisfied:\n" + "\n".join(f"  {f}" for f in failures))
