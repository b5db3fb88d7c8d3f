"""Region-based witness and fixed-value assignment.

The Layouter stacks regions in the order they are assigned: each region owns
a contiguous window of rows starting where the previous one ended. Inside a
region, cells are addressed by (column, offset); every assignment is
recorded in an Assembly together with enabled selectors and copy
constraints. A value that crosses a region boundary must be re-assigned
with copy_advice (or tied with constrain_equal); regions never share rows.

Two kinds of passes write to an Assembly:
    - key generation (require_witness=False): witness values may be None,
      only the shape of the circuit (fixed values, selectors, copies) matters
    - proving/checking (require_witness=True): a None witness is a
      SynthesisError(UNASSIGNED)
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple, TypeVar

from plonk.columns import Column, ColumnKind, Selector
from plonk.errors import ConfigurationError, SynthesisError, SynthesisErrorKind
from plonk.system import ConstraintSystem
from primitives.field import Fr, to_field

logger = logging.getLogger(__name__)

T = TypeVar("T")

Value = Optional[Fr]


def map_values(fn: Callable[..., Fr], *values: Value) -> Value:
    """Apply fn to known values; None (unknown witness) propagates."""
    if any(v is None for v in values):
        return None
    return fn(*values)


@dataclass(frozen=True)
class Cell:
    """Absolute location of an assigned cell."""
    column: Column
    row: int
    region: str = ""


class AssignedCell:
    """A value bound to a (column, row) location.

    Two assigned cells carry the same value in the circuit only if a copy
    constraint links them; equal numbers in different cells mean nothing.
    """

    def __init__(self, cell: Cell, value: Value):
        self.cell = cell
        self.value = value

    @property
    def column(self) -> Column:
        return self.cell.column

    @property
    def row(self) -> int:
        return self.cell.row

    def __repr__(self) -> str:
        shown = "?" if self.value is None else hex(int(self.value))
        return f"AssignedCell({self.cell.region}:{self.cell.column}@{self.cell.row}={shown})"


@dataclass
class RegionInfo:
    name: str
    start: int
    height: int


class Assembly:
    """Everything synthesis writes, for n = 2^k rows.

    The last row is kept free so rotations never wrap into used rows.
    """

    def __init__(self, cs: ConstraintSystem, n: int, require_witness: bool):
        self.cs = cs
        self.n = n
        self.require_witness = require_witness
        self.advice: Dict[Column, List[Value]] = {
            Column(ColumnKind.ADVICE, i): [None] * n for i in range(cs.num_advice)
        }
        self.fixed: Dict[Column, List[Fr]] = {
            Column(ColumnKind.FIXED, i): [None] * n for i in range(cs.num_fixed)
        }
        self.selectors: Dict[Selector, List[bool]] = {
            Selector(i): [False] * n for i in range(cs.num_selectors)
        }
        self.assigned: Set[Tuple[Column, int]] = set()
        self.copies: List[Tuple[Cell, Cell]] = []
        self.regions: List[RegionInfo] = []
        self.next_row = 0

    @property
    def usable_rows(self) -> int:
        return self.n - 1

    def check_row(self, row: int, region: str, annotation: str) -> None:
        if row >= self.usable_rows:
            raise SynthesisError(
                SynthesisErrorKind.NOT_ENOUGH_ROWS,
                f"row {row} does not fit in {self.usable_rows} usable rows",
                region=region,
                annotation=annotation,
            )

    def check_column(self, column: Column, store: Dict) -> None:
        if column not in store:
            raise ConfigurationError(f"column {column} was not allocated by this constraint system")

    def copy(self, left: Cell, right: Cell) -> None:
        for cell in (left, right):
            if cell.column not in self.cs.equality:
                raise SynthesisError(
                    SynthesisErrorKind.COLUMN_NOT_IN_PERMUTATION,
                    f"column {cell.column} does not have equality enabled",
                    region=cell.region,
                )
        self.copies.append((left, right))

    def region_at(self, row: int) -> str:
        for info in self.regions:
            if info.start <= row < info.start + info.height:
                return info.name
        return ""


class Region:
    """A contiguous window of rows with its own local offsets."""

    def __init__(self, assembly: Assembly, name: str, start: int):
        self._assembly = assembly
        self.name = name
        self.start = start
        self.height = 0

    def _absolute(self, offset: int, annotation: str) -> int:
        if offset < 0:
            raise ValueError(f"negative offset {offset} for '{annotation}' in region '{self.name}'")
        row = self.start + offset
        self._assembly.check_row(row, self.name, annotation)
        self.height = max(self.height, offset + 1)
        return row

    def assign_advice(self, annotation: str, column: Column, offset: int, value: Value) -> AssignedCell:
        """Place a witness value.

        Raises:
            SynthesisError: UNASSIGNED if the value is missing during a
                witness pass; NOT_ENOUGH_ROWS if the row is out of range
            ConfigurationError: If the column is not allocated, or the cell
                was already assigned
        """
        self._assembly.check_column(column, self._assembly.advice)
        row = self._absolute(offset, annotation)
        if (column, row) in self._assembly.assigned:
            raise ConfigurationError(
                f"'{annotation}' in region '{self.name}' reassigns {column}@{row}"
            )
        if value is None and self._assembly.require_witness:
            raise SynthesisError(
                SynthesisErrorKind.UNASSIGNED,
                "witness value is missing",
                region=self.name,
                annotation=annotation,
            )
        if value is not None:
            value = to_field(int(value))
        self._assembly.advice[column][row] = value
        self._assembly.assigned.add((column, row))
        return AssignedCell(Cell(column, row, self.name), value)

    def assign_fixed(self, annotation: str, column: Column, offset: int, value: Fr) -> AssignedCell:
        """Place a circuit constant."""
        self._assembly.check_column(column, self._assembly.fixed)
        row = self._absolute(offset, annotation)
        value = to_field(int(value))
        self._assembly.fixed[column][row] = value
        return AssignedCell(Cell(column, row, self.name), value)

    def enable_selector(self, annotation: str, selector: Selector, offset: int) -> None:
        self._assembly.check_column(selector, self._assembly.selectors)
        row = self._absolute(offset, annotation)
        self._assembly.selectors[selector][row] = True

    def copy_advice(self, annotation: str, cell: AssignedCell, column: Column, offset: int) -> AssignedCell:
        """Assign `cell`'s value at (column, offset) and constrain them equal."""
        copied = self.assign_advice(annotation, column, offset, cell.value)
        self._assembly.copy(cell.cell, copied.cell)
        return copied

    def constrain_equal(self, left: AssignedCell, right: AssignedCell) -> None:
        self._assembly.copy(left.cell, right.cell)


class Layouter:
    """Hands out regions and binds cells to public inputs."""

    def __init__(self, assembly: Assembly, prefix: str = ""):
        self._assembly = assembly
        self._prefix = prefix

    def namespace(self, name: str) -> 'Layouter':
        """Child layouter whose region names are prefixed with `name`."""
        return Layouter(self._assembly, f"{self._prefix}{name}/")

    def assign_region(self, name: str, assignment: Callable[[Region], T]) -> T:
        """Run `assignment` in a fresh region below all previous ones."""
        assembly = self._assembly
        region = Region(assembly, self._prefix + name, assembly.next_row)
        result = assignment(region)
        assembly.regions.append(RegionInfo(region.name, region.start, region.height))
        assembly.next_row += region.height
        logger.debug("Region '%s': rows %d..%d", region.name, region.start, region.start + region.height)
        return result

    def constrain_instance(self, cell: AssignedCell, column: Column, row: int) -> None:
        """Bind `cell` to public input slot `row` of instance `column`."""
        if column.kind != ColumnKind.INSTANCE:
            raise SynthesisError(
                SynthesisErrorKind.COLUMN_NOT_IN_PERMUTATION,
                f"{column} is not an instance column",
            )
        self._assembly.copy(cell.cell, Cell(column, row, "instance"))
