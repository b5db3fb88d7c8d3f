"""Circuit contract.

A circuit is configured once per constraint system (class level, no witness
needed) and then synthesized any number of times against a Layouter.
"""

from abc import ABC, abstractmethod
from typing import Any

from plonk.layouter import Layouter
from plonk.system import ConstraintSystem


class Circuit(ABC):
    """Base class for every top-level circuit.

    Subclasses hold their witness as attributes; None stands for an unknown
    value during key generation.
    """

    @classmethod
    @abstractmethod
    def configure(cls, cs: ConstraintSystem) -> Any:
        """Allocate columns and gates, returning an immutable config."""

    @abstractmethod
    def synthesize(self, config: Any, layouter: Layouter) -> None:
        """Assign every region of the circuit.

        Raises:
            SynthesisError: If a required witness is missing or a value
                does not fit its declared range
        """

    @abstractmethod
    def without_witnesses(self) -> 'Circuit':
        """Same circuit shape with every witness value unknown."""
