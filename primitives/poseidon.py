"""
Poseidon permutation and sponge over the BN254 scalar field.

This is the out-of-circuit reference: the permutation gadget and the sponge
gadget must reproduce these outputs element for element for the same
RoundParams.

Round schedule: half the full rounds, then the partial rounds, then the
remaining full rounds. Each round adds the round constants, applies the
S-box (every lane in a full round, lane 0 only in a partial round) and
mixes with the MDS matrix: new[i] = sum_j MDS[i][j] * state[j].
"""

from typing import List, Sequence

from primitives.field import Fr, ZERO
from primitives.poseidon_params import RoundParams


def _add_round_constants(state: List[Fr], constants: Sequence[Fr], round_idx: int, width: int) -> List[Fr]:
    return [state[i] + constants[round_idx * width + i] for i in range(width)]


def _apply_mds(state: List[Fr], mds: Sequence[Sequence[Fr]]) -> List[Fr]:
    width = len(state)
    result = []
    for i in range(width):
        acc = ZERO
        for j in range(width):
            acc = acc + mds[i][j] * state[j]
        result.append(acc)
    return result


def full_round(state: List[Fr], constants: Sequence[Fr], round_idx: int, params: RoundParams) -> List[Fr]:
    """One full round: constants, S-box on every lane, MDS."""
    state = _add_round_constants(state, constants, round_idx, params.width)
    state = [params.sbox(x) for x in state]
    return _apply_mds(state, params.mds)


def partial_round(state: List[Fr], constants: Sequence[Fr], round_idx: int, params: RoundParams) -> List[Fr]:
    """One partial round: constants, S-box on lane 0, MDS."""
    state = _add_round_constants(state, constants, round_idx, params.width)
    state[0] = params.sbox(state[0])
    return _apply_mds(state, params.mds)


def permute(inputs: Sequence[Fr], params: RoundParams) -> List[Fr]:
    """
    Compute the full Poseidon permutation.

    Args:
        inputs: `width` field elements
        params: Round parameters for this width

    Returns:
        List of `width` field elements after the permutation
    """
    if len(inputs) != params.width:
        raise ValueError(f"expected {params.width} inputs, got {len(inputs)}")

    first, second, third = params.round_constant_slices()
    state = [Fr(int(x)) for x in inputs]

    for r in range(params.half_full_rounds):
        state = full_round(state, first, r, params)
    for r in range(params.partial_rounds):
        state = partial_round(state, second, r, params)
    for r in range(params.half_full_rounds):
        state = full_round(state, third, r, params)

    return state


def load_chunks(inputs: Sequence[Fr], width: int) -> List[List[Fr]]:
    """Split inputs into width-sized blocks, zero-padding the last one."""
    chunks = []
    for start in range(0, len(inputs), width):
        chunk = list(inputs[start:start + width])
        chunk += [ZERO] * (width - len(chunk))
        chunks.append(chunk)
    return chunks


class PoseidonSponge:
    """
    Variable-length hash built on the Poseidon permutation.

    The state starts as the first block. Every further block is absorbed by
    permuting the state and adding the block lane by lane. The squeezed
    output is lane 0.
    """

    def __init__(self, params: RoundParams):
        self.params = params
        self.inputs: List[Fr] = []

    def update(self, inputs: Sequence[Fr]) -> None:
        """Buffer more input elements."""
        self.inputs.extend(Fr(int(x)) for x in inputs)

    def squeeze(self) -> Fr:
        """Hash everything absorbed so far.

        Raises:
            ValueError: If nothing has been absorbed
        """
        if not self.inputs:
            raise ValueError("sponge has no absorbed input")

        chunks = load_chunks(self.inputs, self.params.width)
        state = chunks[0]
        for chunk in chunks[1:]:
            perm_state = permute(state, self.params)
            state = [c + p for c, p in zip(chunk, perm_state)]

        return state[0]


def sponge_hash(inputs: Sequence[Fr], params: RoundParams) -> Fr:
    """One-shot sponge over `inputs`."""
    sponge = PoseidonSponge(params)
    sponge.update(inputs)
    return sponge.squeeze()
