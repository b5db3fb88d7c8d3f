"""Witness shapes and native helpers for the composition circuit.

Message layout:
    A signed message hash is the sponge output over [0, epoch, x, y],
    zero-padded to two full blocks. The peer signs (epoch, score, 0);
    neighbor j signs (epoch, local_score_j, global_score_j). With an all-zero
    second block the hash is lane 0 of one permutation of the first block.

Scores:
    t_i = sum_j local_score_j * global_score_j
    c_v = sum_j [key_j == target] * weight_j
    score = t_i * c_v
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from primitives.ecdsa import Point
from primitives.field import BN254_PRIME, Fr, ZERO, to_field
from primitives.poseidon import sponge_hash
from primitives.poseidon_params import RoundParams, params_5x5_bn254

MESSAGE_BLOCKS = 2


@dataclass(frozen=True)
class Opinion:
    """A neighbor's declared (local_score, global_score) pair.

    Attributes:
        local_score: Trust the neighbor places in the peer, as a field integer
        global_score: The neighbor's own global trust, as a field integer
    """
    local_score: int
    global_score: int

    def __post_init__(self):
        for name in ("local_score", "global_score"):
            value = getattr(self, name)
            if not 0 <= value < BN254_PRIME:
                raise ValueError(f"{name} must be a field integer, got {value}")

    @property
    def contribution(self) -> Fr:
        """local_score * global_score."""
        return to_field(self.local_score) * to_field(self.global_score)


def message_inputs(epoch: int, x: int, y: int, width: int = 5) -> List[Fr]:
    """Sponge input for a signed message: [0, epoch, x, y] padded to two blocks."""
    inputs = [ZERO, to_field(epoch), to_field(x), to_field(y)]
    return inputs + [ZERO] * (MESSAGE_BLOCKS * width - len(inputs))


def message_hash(epoch: int, x: int, y: int, params: Optional[RoundParams] = None) -> Fr:
    if params is None:
        params = params_5x5_bn254()
    return sponge_hash(message_inputs(epoch, x, y, params.width), params)


def peer_message_hash(epoch: int, score: int, params: Optional[RoundParams] = None) -> Fr:
    """Hash a peer signs over its own score."""
    return message_hash(epoch, score, 0, params)


def neighbor_message_hash(epoch: int, opinion: Opinion, params: Optional[RoundParams] = None) -> Fr:
    """Hash a neighbor signs over its opinion."""
    return message_hash(epoch, opinion.local_score, opinion.global_score, params)


def trust_total(opinions: Sequence[Opinion]) -> Fr:
    total = ZERO
    for opinion in opinions:
        total = total + opinion.contribution
    return total


def selected_weight(keys: Sequence[Point], target: Point, weights: Sequence[int]) -> Fr:
    """Sum of the weights whose key equals `target`."""
    total = ZERO
    for key, weight in zip(keys, weights):
        if tuple(key) == tuple(target):
            total = total + to_field(weight)
    return total
