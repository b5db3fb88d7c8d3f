"""Tests for the Poseidon permutation gadget."""

from dataclasses import dataclass

import pytest

from gadgets.main_gate import MainGate, MainGateConfig
from gadgets.poseidon import PoseidonChip, PoseidonConfig
from plonk.circuit import Circuit
from plonk.errors import SynthesisError, SynthesisErrorKind
from plonk.mock_prover import ConstraintNotSatisfied, MockProver, keygen
from plonk.system import ConstraintSystem
from primitives.field import ONE, to_fields
from primitives.poseidon import partial_round, permute
from primitives.poseidon_params import params_5x5_bn254

K = 7


@dataclass(frozen=True)
class PermuteConfig:
    poseidon: PoseidonConfig
    main_gate: MainGateConfig


class PermuteCircuit(Circuit):
    """Permutes a witness vector and exposes every output lane."""

    def __init__(self, inputs):
        self.inputs = inputs

    @classmethod
    def configure(cls, cs):
        return PermuteConfig(PoseidonChip.configure(cs, params_5x5_bn254()), MainGate.configure(cs))

    def synthesize(self, config, layouter):
        chip = PoseidonChip(config.poseidon, params_5x5_bn254())
        state = chip.load_state(layouter, self.inputs)
        outputs = chip.permute(layouter, state)
        main_gate = MainGate(config.main_gate)
        for i, cell in enumerate(outputs):
            main_gate.expose_public(layouter, cell, i)

    def without_witnesses(self):
        return type(self)([None] * len(self.inputs))


class TamperedPermuteCircuit(PermuteCircuit):
    """Runs the first partial round with lane 2 of its result off by one."""

    def synthesize(self, config, layouter):
        chip = PoseidonChip(config.poseidon, params_5x5_bn254())
        state = chip.load_state(layouter, self.inputs)
        params = chip.params
        first, second, third = params.round_constant_slices()
        state = chip._phase(layouter, "full_rounds_a", state, first, params.half_full_rounds, True)

        def tampered(region):
            cells = [region.copy_advice(f"state_{i}", c, config.poseidon.state[i], 0) for i, c in enumerate(state)]
            region.enable_selector("partial", config.poseidon.partial_round, 0)
            for i in range(params.width):
                region.assign_fixed(f"rc_{i}", config.poseidon.rc[i], 0, second[i])
                for j in range(params.width):
                    region.assign_fixed(f"mds_{i}_{j}", config.poseidon.mds[i][j], 0, params.mds[i][j])
            values = partial_round([c.value for c in cells], second, 0, params)
            values[2] = values[2] + ONE
            return [region.assign_advice(f"state_{i}", config.poseidon.state[i], 1, v) for i, v in enumerate(values)]

        layouter.assign_region("tampered_round", tampered)


class TestPoseidonChip:
    """Tests for in-circuit permutation."""

    def test_matches_golden_vector(self, params) -> None:
        """In-circuit output equals the native permutation on [0..4]."""
        inputs = to_fields(range(5))
        expected = permute(inputs, params)
        prover = MockProver.run(K, PermuteCircuit(inputs), [expected])
        prover.assert_satisfied()

    def test_matches_native_on_other_input(self, params) -> None:
        """In-circuit output equals the native permutation on arbitrary input."""
        inputs = to_fields([11, 22, 33, 44, 55])
        MockProver.run(K, PermuteCircuit(inputs), [permute(inputs, params)]).assert_satisfied()

    def test_wrong_output_rejected(self, params) -> None:
        """Claiming another output fails the instance binding."""
        inputs = to_fields(range(5))
        claimed = permute(inputs, params)
        claimed[4] = claimed[4] + ONE
        assert MockProver.run(K, PermuteCircuit(inputs), [claimed]).verify() != []

    def test_tampered_round_rejected(self) -> None:
        """A state that does not follow the round function breaks the gate."""
        prover = MockProver.run(K, TamperedPermuteCircuit(to_fields(range(5))), [[0] * 5])
        assert prover.verify() == [ConstraintNotSatisfied("poseidon_partial_round", "tampered_round", 6, 2)]

    def test_missing_input(self) -> None:
        """An unknown input lane is a synthesis error when proving."""
        with pytest.raises(SynthesisError) as excinfo:
            MockProver.run(K, PermuteCircuit([None] * 5), [[0] * 5])
        assert excinfo.value.kind == SynthesisErrorKind.UNASSIGNED

    def test_three_phase_regions(self) -> None:
        """Full, partial and full phases use one row per round plus an output row."""
        layout = keygen(K, PermuteCircuit(to_fields(range(5))))
        config = PermuteCircuit.configure(ConstraintSystem())
        full_rows = layout.selectors[config.poseidon.full_round]
        partial_rows = layout.selectors[config.poseidon.partial_round]
        assert full_rows == [1, 2, 3, 4, 67, 68, 69, 70]
        assert partial_rows == list(range(6, 66))
