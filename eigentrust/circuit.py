"""
EigenTrust composition circuit.

Proves that a public score was computed from opinions that were validly
signed by their authors. Synthesis runs these steps, each in its own
region(s), always in this order:

1. Verify the peer's own signature over its declared message hash.
2. Accumulate the neighbor opinions into the raw trust total t_i.
3. Select the weight c_v by matching neighbor keys against the target key.
4. Constrain the declared score to equal t_i * c_v.
5. Recompute the peer's message hash with the sponge and bind it to the
   hash verified in step 1.
6. Recompute each neighbor's message hash and verify its signature over it.
7. Expose the score at public slot 0.

Values move between steps only through copy constraints. The signature
capability is the class attribute `ecdsa_chip_class`; subclass and replace
it to plug in another implementation of EcdsaInstructions. Signature
soundness is only as strong as that capability; the shipped EcdsaChip
checks signatures out of circuit (see gadgets.ecdsa).

Example:
    circuit = EigenTrustCircuit(size=3, epoch=1, score=score, ...)
    prover = MockProver.run(10, circuit, [[score]])
    prover.assert_satisfied()
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from eigentrust.data import MESSAGE_BLOCKS, Opinion, selected_weight, trust_total
from gadgets.accumulator import AccumulatorChip, AccumulatorConfig
from gadgets.ecdsa import AssignedSignature, EcdsaChip
from gadgets.main_gate import MainGate, MainGateConfig, RegionCtx
from gadgets.poseidon import PoseidonChip, PoseidonConfig
from gadgets.sponge import SpongeChip, SpongeConfig
from plonk.circuit import Circuit
from plonk.errors import ConfigurationError
from plonk.layouter import AssignedCell, Layouter, Region
from plonk.system import ConstraintSystem
from primitives.ecdsa import Point, SigData
from primitives.field import Fr, ZERO
from primitives.poseidon_params import params_5x5_bn254

logger = logging.getLogger(__name__)

SCORE_SLOT = 0
DEFAULT_WINDOW_SIZE = 2


@dataclass(frozen=True)
class EigenTrustConfig:
    main_gate: MainGateConfig
    accumulator: AccumulatorConfig
    poseidon: PoseidonConfig
    sponge: SpongeConfig
    ecdsa: Any


class EigenTrustCircuit(Circuit):
    """Composition circuit for one peer and a fixed number of neighbors.

    Every witness may be None (unknown) for key generation; list witnesses
    must still have exactly `size` entries.

    Args:
        size: Number of neighbors
        epoch: Epoch the messages are signed for
        score: Declared output score (public slot 0)
        sig: Peer's signature over `msg_hash`
        public_key: Peer's public key
        msg_hash: Peer's signed message hash
        opinions: One Opinion per neighbor
        weights: Weight each neighbor declares for the target key
        neighbor_keys: Neighbor public keys
        neighbor_sigs: Neighbor signatures over their opinion hashes
        target_key: Key whose weights are selected
        aux_generator: Auxiliary point for the signature capability
        window_size: Window size of the signature capability's table

    Raises:
        ConfigurationError: If a neighbor list does not have `size` entries
    """

    ecdsa_chip_class = EcdsaChip
    round_params = staticmethod(params_5x5_bn254)

    def __init__(
        self,
        size: int,
        epoch: Optional[int],
        score: Optional[int],
        sig: Optional[SigData],
        public_key: Optional[Point],
        msg_hash: Optional[int],
        opinions: Sequence[Optional[Opinion]],
        weights: Sequence[Optional[int]],
        neighbor_keys: Sequence[Optional[Point]],
        neighbor_sigs: Sequence[Optional[SigData]],
        target_key: Optional[Point],
        aux_generator: Optional[Point],
        window_size: int = DEFAULT_WINDOW_SIZE,
    ):
        if size < 1:
            raise ConfigurationError(f"size must be positive, got {size}")
        lists = {
            "opinions": opinions,
            "weights": weights,
            "neighbor_keys": neighbor_keys,
            "neighbor_sigs": neighbor_sigs,
        }
        for name, values in lists.items():
            if len(values) != size:
                raise ConfigurationError(f"{name} must have {size} entries, got {len(values)}")

        self.size = size
        self.epoch = epoch
        self.score = score
        self.sig = sig
        self.public_key = public_key
        self.msg_hash = msg_hash
        self.opinions = list(opinions)
        self.weights = list(weights)
        self.neighbor_keys = list(neighbor_keys)
        self.neighbor_sigs = list(neighbor_sigs)
        self.target_key = target_key
        self.aux_generator = aux_generator
        self.window_size = window_size

    def without_witnesses(self) -> 'EigenTrustCircuit':
        unknown = [None] * self.size
        return type(self)(
            self.size, None, None, None, None, None,
            unknown, unknown, unknown, unknown, None, None, self.window_size,
        )

    @staticmethod
    def native_score(opinions: Sequence[Opinion], weights: Sequence[int],
                     neighbor_keys: Sequence[Point], target_key: Point) -> Fr:
        """Score the circuit accepts for these witnesses: t_i * c_v."""
        return trust_total(opinions) * selected_weight(neighbor_keys, target_key, weights)

    @classmethod
    def configure(cls, cs: ConstraintSystem) -> EigenTrustConfig:
        params = cls.round_params()
        main_gate = MainGate.configure(cs)
        accumulator = AccumulatorChip.configure(cs)
        poseidon = PoseidonChip.configure(cs, params)
        sponge = SpongeChip.configure(cs, params, poseidon, main_gate)
        ecdsa = cls.ecdsa_chip_class.configure(cs)
        return EigenTrustConfig(main_gate, accumulator, poseidon, sponge, ecdsa)

    # --- Synthesis helpers ---

    @staticmethod
    def _signature(ecdsa, ctx: RegionCtx, sig: Optional[SigData], name: str) -> AssignedSignature:
        r, s = (None, None) if sig is None else (sig.r, sig.s)
        return AssignedSignature(
            ecdsa.assign_scalar(ctx, r, f"{name}.r"),
            ecdsa.assign_scalar(ctx, s, f"{name}.s"),
        )

    def _message_hash(self, config: EigenTrustConfig, layouter: Layouter, zero: AssignedCell,
                      fields: List[AssignedCell]) -> AssignedCell:
        params = self.round_params()
        sponge = SpongeChip(config.sponge, params)
        # [0, epoch, x, y] padded with the same zero cell
        cells = [zero] + fields
        sponge.update(cells + [zero] * (MESSAGE_BLOCKS * params.width - len(cells)))
        return sponge.squeeze(layouter)

    def synthesize(self, config: EigenTrustConfig, layouter: Layouter) -> None:
        main_gate = MainGate(config.main_gate)
        accumulator = AccumulatorChip(config.accumulator)
        ecdsa = self.ecdsa_chip_class(config.ecdsa)

        ecdsa.assign_aux(layouter, self.aux_generator, self.window_size)

        # 1. peer signature
        def assign_peer(region: Region):
            ctx = RegionCtx(region)
            sig = self._signature(ecdsa, ctx, self.sig, "sig_i")
            public_key = ecdsa.assign_point(ctx, self.public_key, "pk_i")
            msg_hash = ecdsa.assign_scalar(ctx, self.msg_hash, "m_hash_i")
            return sig, public_key, msg_hash

        sig_i, pk_i, m_hash_i = layouter.assign_region("assign_peer", assign_peer)
        ecdsa.verify(layouter.namespace("peer"), sig_i, pk_i, m_hash_i)

        # 2. raw trust total
        def assign_opinions(region: Region):
            ctx = RegionCtx(region)
            local_cells, global_cells = [], []
            for j, opinion in enumerate(self.opinions):
                local_value = None if opinion is None else opinion.local_score
                global_value = None if opinion is None else opinion.global_score
                local_cells.append(main_gate.assign_value(ctx, local_value, f"local_{j}"))
                global_cells.append(main_gate.assign_value(ctx, global_value, f"global_{j}"))
            return local_cells, global_cells

        local_cells, global_cells = layouter.assign_region("assign_opinions", assign_opinions)
        t_i = accumulator.accumulate(layouter.namespace("t_i"), local_cells, global_cells)

        # 3. selected weight
        def assign_keys(region: Region):
            ctx = RegionCtx(region)
            keys = [ecdsa.assign_point(ctx, key, f"pk_{j}") for j, key in enumerate(self.neighbor_keys)]
            weights = [main_gate.assign_value(ctx, w, f"c_v_{j}") for j, w in enumerate(self.weights)]
            target = ecdsa.assign_point(ctx, self.target_key, "pk_v")
            return keys, weights, target

        pk_j, weights, pk_v = layouter.assign_region("assign_neighbor_keys", assign_keys)
        c_v = accumulator.accumulate_selected(
            layouter.namespace("c_v"), main_gate, [key.natives for key in pk_j], pk_v.natives, weights,
        )

        # 4. declared score
        def assign_score(region: Region):
            ctx = RegionCtx(region)
            product = main_gate.mul(ctx, t_i, c_v)
            score = main_gate.assign_value(ctx, self.score, "score")
            main_gate.assert_equal(ctx, score, product)
            zero = main_gate.assign_constant(ctx, ZERO, "zero")
            epoch = main_gate.assign_value(ctx, self.epoch, "epoch")
            return score, zero, epoch

        score, zero, epoch = layouter.assign_region("assign_score", assign_score)

        # 5. peer message hash
        peer_hash = self._message_hash(config, layouter.namespace("peer_hash"), zero, [epoch, score, zero])
        layouter.assign_region(
            "bind_peer_hash",
            lambda region: region.constrain_equal(peer_hash, m_hash_i.native),
        )

        # 6. neighbor signatures
        for j in range(self.size):
            namespace = layouter.namespace(f"neighbor_{j}")
            hash_j = self._message_hash(config, namespace, zero, [epoch, local_cells[j], global_cells[j]])

            def assign_neighbor(region: Region, j=j, hash_j=hash_j):
                ctx = RegionCtx(region)
                value = None if hash_j.value is None else int(hash_j.value)
                m_hash = ecdsa.assign_scalar(ctx, value, f"m_hash_{j}")
                region.constrain_equal(hash_j, m_hash.native)
                sig = self._signature(ecdsa, ctx, self.neighbor_sigs[j], f"sig_{j}")
                return sig, m_hash

            sig_j, m_hash_j = namespace.assign_region("assign_signature", assign_neighbor)
            ecdsa.verify(namespace, sig_j, pk_j[j], m_hash_j)

        # 7. public score
        main_gate.expose_public(layouter, score, SCORE_SLOT)
        logger.debug("EigenTrust circuit synthesized for %d neighbors", self.size)
