"""Error taxonomy for circuit configuration and synthesis.

Configuration errors abort before any witness is seen. Synthesis errors are
returned to the caller with the region and annotation that raised them, so a
broken circuit can be told apart from a dishonest or incomplete witness.
Unsatisfied constraints are never raised here: the checker reports them as
VerifyFailure values (see plonk.mock_prover).
"""

from enum import Enum
from typing import Optional


class ConfigurationError(ValueError):
    """Malformed parameters or misuse of the constraint-system builder."""


class SynthesisErrorKind(Enum):
    UNASSIGNED = "unassigned"
    RANGE_OVERFLOW = "range_overflow"
    NOT_ENOUGH_ROWS = "not_enough_rows"
    COLUMN_NOT_IN_PERMUTATION = "column_not_in_permutation"
    MISSING_AUX = "missing_aux"


class SynthesisError(Exception):
    """Witness synthesis failed.

    Attributes:
        kind: What went wrong
        region: Name of the region being assigned, if any
        annotation: Name of the cell or operation, if any
    """

    def __init__(
        self,
        kind: SynthesisErrorKind,
        message: str = "",
        region: Optional[str] = None,
        annotation: Optional[str] = None,
    ):
        self.kind = kind
        self.region = region
        self.annotation = annotation
        where = []
        if region is not None:
            where.append(f"region '{region}'")
        if annotation is not None:
            where.append(f"'{annotation}'")
        text = f"{kind.value}"
        if where:
            text += " in " + ", ".join(where)
        if message:
            text += f": {message}"
        super().__init__(text)
