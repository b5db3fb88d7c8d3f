"""EigenTrust - Composition circuit proving a score from signed opinions."""

from eigentrust.data import (
    Opinion,
    message_hash,
    message_inputs,
    neighbor_message_hash,
    peer_message_hash,
    selected_weight,
    trust_total,
)
from eigentrust.circuit import (
    SCORE_SLOT,
    EigenTrustCircuit,
    EigenTrustConfig,
)

__all__ = [
    # Data
    "Opinion",
    "message_inputs",
    "message_hash",
    "peer_message_hash",
    "neighbor_message_hash",
    "trust_total",
    "selected_weight",
    # Circuit
    "EigenTrustCircuit",
    "EigenTrustConfig",
    "SCORE_SLOT",
]
