"""Column and selector handles."""

from dataclasses import dataclass
from enum import Enum


class ColumnKind(Enum):
    """Role of a column: private witness, public constant, or public input."""
    ADVICE = "advice"
    FIXED = "fixed"
    INSTANCE = "instance"


@dataclass(frozen=True)
class Column:
    """A column handle: its role and its index among columns of that role."""
    kind: ColumnKind
    index: int

    def __str__(self) -> str:
        return f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True)
class Selector:
    """Per-row boolean flag that switches one gate on."""
    index: int

    def __str__(self) -> str:
        return f"selector[{self.index}]"
