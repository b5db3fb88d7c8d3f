"""Constraint-system builder: columns, selectors and gates.

A ConstraintSystem is owned by exactly one configuration pass. Gadgets
allocate their columns and register their gates on it, then the pass calls
freeze() and only the resulting (immutable) gadget configs are used for
synthesis.

Example:
    cs = ConstraintSystem()
    a = cs.advice_column()
    b = cs.advice_column()
    s = cs.selector()

    def double(ctx: ConstraintContext):
        return [ctx.col(a) + ctx.col(a) - ctx.col(b)]

    cs.create_gate("double", s, double)
    cs.freeze()
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Set, Tuple

from plonk.columns import Column, ColumnKind, Selector
from plonk.context import ConstraintContext, QueryCollector
from plonk.errors import ConfigurationError

logger = logging.getLogger(__name__)


GateFn = Callable[[ConstraintContext], List]


@dataclass
class Gate:
    """A named polynomial identity guarded by a selector.

    Attributes:
        name: Gate name used in failure reports
        selector: Selector that activates the gate on a row
        constraint: Function from a ConstraintContext to the list of
            expressions that must vanish on active rows
        queries: (column, rotation) pairs read by the constraint
        num_polys: Number of expressions the constraint returns
    """
    name: str
    selector: Selector
    constraint: GateFn
    queries: Tuple[Tuple[Column, int], ...] = ()
    num_polys: int = 0


@dataclass
class ConstraintSystem:
    """Builder for columns, selectors, equality and gates."""
    num_advice: int = 0
    num_fixed: int = 0
    num_instance: int = 0
    num_selectors: int = 0
    gates: List[Gate] = field(default_factory=list)
    equality: Set[Column] = field(default_factory=set)
    frozen: bool = False

    def _check_open(self) -> None:
        if self.frozen:
            raise ConfigurationError("constraint system is frozen; configuration already finished")

    def advice_column(self) -> Column:
        self._check_open()
        column = Column(ColumnKind.ADVICE, self.num_advice)
        self.num_advice += 1
        return column

    def fixed_column(self) -> Column:
        self._check_open()
        column = Column(ColumnKind.FIXED, self.num_fixed)
        self.num_fixed += 1
        return column

    def instance_column(self) -> Column:
        self._check_open()
        column = Column(ColumnKind.INSTANCE, self.num_instance)
        self.num_instance += 1
        return column

    def selector(self) -> Selector:
        self._check_open()
        selector = Selector(self.num_selectors)
        self.num_selectors += 1
        return selector

    def has_column(self, column: Column) -> bool:
        counts = {
            ColumnKind.ADVICE: self.num_advice,
            ColumnKind.FIXED: self.num_fixed,
            ColumnKind.INSTANCE: self.num_instance,
        }
        return 0 <= column.index < counts[column.kind]

    def enable_equality(self, column: Column) -> None:
        """Allow copy constraints on `column`."""
        self._check_open()
        if not self.has_column(column):
            raise ConfigurationError(f"cannot enable equality on unallocated column {column}")
        if column.kind == ColumnKind.FIXED:
            raise ConfigurationError(f"equality is only supported on advice and instance columns, got {column}")
        self.equality.add(column)

    def create_gate(self, name: str, selector: Selector, constraint: GateFn) -> Gate:
        """Register a gate.

        The constraint is run once against a query collector to record the
        cells it reads and to check that every column belongs to this
        constraint system.

        Raises:
            ConfigurationError: If the constraint reads an unallocated
                column, reads a column with the wrong accessor, or the
                selector is unknown
        """
        self._check_open()
        if not 0 <= selector.index < self.num_selectors:
            raise ConfigurationError(f"gate '{name}' uses unallocated {selector}")

        collector = QueryCollector()
        polys = constraint(collector)
        if not polys:
            raise ConfigurationError(f"gate '{name}' has no constraints")

        for column, _ in collector.queries:
            if not self.has_column(column):
                raise ConfigurationError(f"gate '{name}' queries unallocated column {column}")

        gate = Gate(
            name=name,
            selector=selector,
            constraint=constraint,
            queries=tuple(collector.queries),
            num_polys=len(polys),
        )
        self.gates.append(gate)
        logger.debug("Registered gate '%s' (%d polys, %d queries)", name, gate.num_polys, len(gate.queries))
        return gate

    def freeze(self) -> None:
        """Finish configuration. Later allocations raise ConfigurationError."""
        self.frozen = True
