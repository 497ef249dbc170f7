"""Tests for quantum fields."""

import logging
import math

import pytest

from quantum_flow.quantum import (
    QuantumConfig, QuantumState, QuantumField, ScalarQuantumField,
    PatternType, FieldType, EvolutionPattern, new_quantum_field,
    InvalidArgumentError, UninitializedStateError
)
from quantum_flow.quantum import field as field_module
from quantum_flow.quantum.state import binary_entropy, TWO_PI


class TickClock:
    """Deterministic clock advancing by ``step`` on every read."""

    def __init__(self, step: float = 0.0):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        now = self.now
        self.now += self.step
        return now


@pytest.fixture
def field():
    f = ScalarQuantumField(clock=TickClock())
    f.initialize()
    return f


class TestLifecycle:
    """Initialization requirements."""

    @pytest.mark.parametrize("op", [
        lambda f: f.evolve(PatternType.STABLE),
        lambda f: f.transform(QuantumState()),
        lambda f: f.entangle(QuantumState()),
        lambda f: f.update(QuantumState()),
        lambda f: f.decohere(),
        lambda f: f.measure(),
    ])
    def test_operations_require_initialize(self, op):
        f = ScalarQuantumField()
        with pytest.raises(UninitializedStateError):
            op(f)
        with pytest.raises(RuntimeError):
            op(f)

    def test_reads_allowed_before_initialize(self):
        f = ScalarQuantumField()
        assert not f.is_initialized
        assert f.coherence == pytest.approx(1.0)
        assert f.entropy == 0.0
        assert f.phase == 0.0

    def test_initialize(self, field):
        assert field.is_initialized
        assert field.state.probability == 1.0
        assert field.coherence == pytest.approx(1.0)
        assert field.entropy == 0.0
        assert field.pattern is PatternType.NONE
        assert field.field_type is FieldType.SCALAR

    def test_reset_returns_to_ground(self, field):
        field.evolve(PatternType.CHAOS)
        field.decohere()
        field.reset()
        assert field.state.probability == 1.0
        assert field.state.phase == 0.0
        assert field.coherence == pytest.approx(1.0)
        assert field.entropy == 0.0
        assert field.pattern is PatternType.NONE

    def test_uninitialized_call_logged(self, caplog):
        f = ScalarQuantumField()
        with caplog.at_level(logging.DEBUG, logger="quantum_flow.quantum.field"):
            with pytest.raises(UninitializedStateError):
                f.decohere()
        assert any("decohere() called on uninitialized" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("op", [
        lambda f: f.initialize(),
        lambda f: f.update(QuantumState(probability=0.5)),
        lambda f: f.evolve(PatternType.SPIRAL),
        lambda f: f.transform(QuantumState(probability=0.5)),
        lambda f: f.entangle(QuantumState(probability=0.5)),
        lambda f: f.decohere(),
        lambda f: f.measure(),
    ])
    def test_mutations_bump_version(self, field, op):
        before = field.version
        op(field)
        assert field.version > before

    def test_reads_keep_version(self, field):
        before = field.version
        assert field.coherence == pytest.approx(1.0)
        assert field.phase == 0.0
        assert field.cache is not None
        with pytest.raises(InvalidArgumentError):
            field.entangle(None)
        assert field.version == before

    def test_abstract_field_cannot_be_built(self):
        with pytest.raises(TypeError):
            QuantumField()


class TestUpdate:
    """Replacing the owned state."""

    def test_update_copies_state(self, field):
        source = QuantumState(probability=0.4, phase=1.0)
        field.update(source)
        source.set_probability(0.9)
        assert field.state.probability == pytest.approx(0.4)
        assert field.state is not source

    def test_update_snapshots_previous_generation(self, field):
        field.update(QuantumState(probability=0.4, phase=1.0, energy=2.0))
        field.update(QuantumState(probability=0.6))
        assert field.cache.last_phase == pytest.approx(1.0)
        assert field.cache.last_energy == pytest.approx(2.0)
        assert field.cache.last_state.probability == pytest.approx(0.4)

    def test_update_rejects_none(self, field):
        with pytest.raises(InvalidArgumentError):
            field.update(None)


class TestEvolve:
    """Pattern tags drive the owned state."""

    @pytest.mark.parametrize("tag,expected", [
        (PatternType.STABLE, EvolutionPattern.BALANCE),
        (PatternType.CHAOS, EvolutionPattern.SPLIT),
        (PatternType.OSCILLATE, EvolutionPattern.CYCLE),
        (PatternType.SPIRAL, EvolutionPattern.INTEGRATE),
        (PatternType.NONE, EvolutionPattern.INTEGRATE),
        ("chaos", EvolutionPattern.SPLIT),
        ("vortex", EvolutionPattern.INTEGRATE),
    ])
    def test_pattern_mapping(self, field, tag, expected):
        field.update(QuantumState(probability=0.8, phase=0.3))
        field.evolve(tag)

        reference = QuantumState(probability=0.8, phase=0.3)
        reference.evolve(expected)
        assert field.state.probability == pytest.approx(reference.probability)
        assert field.state.phase == pytest.approx(reference.phase)
        assert field.state.energy == pytest.approx(reference.energy)

    def test_pattern_is_recorded(self, field):
        field.evolve(PatternType.OSCILLATE)
        assert field.pattern is PatternType.OSCILLATE
        field.evolve("unknown")
        assert field.pattern is PatternType.NONE

    def test_cache_holds_pre_evolve_values(self, field):
        field.update(QuantumState(probability=0.5, phase=1.0))
        field.evolve(PatternType.SPIRAL)
        assert field.cache.last_phase == pytest.approx(1.0)
        assert field.cache.last_state.probability == pytest.approx(0.5)


class TestTransform:
    """Half-step transformation toward a target."""

    def test_moves_halfway(self, field):
        field.update(QuantumState(probability=0.2, phase=1.0, energy=1.0))
        target = QuantumState(probability=0.8, phase=2.0, energy=3.0)
        field.transform(target)
        assert field.state.probability == pytest.approx(0.5)
        assert field.state.phase == pytest.approx(1.5)
        assert field.state.energy == pytest.approx(2.0)
        # target untouched
        assert target.probability == pytest.approx(0.8)

    def test_rejects_none(self, field):
        with pytest.raises(InvalidArgumentError):
            field.transform(None)
        assert field.state.probability == 1.0


class TestEntangle:
    """Entanglement with a partner state."""

    def test_probability_bounded_by_weaker_coherence(self, field):
        field.update(QuantumState(probability=0.9, phase=0.0))
        other = QuantumState(probability=0.3, phase=0.0, energy=3.0)
        field.entangle(other)

        assert field.state.probability == pytest.approx(0.3)
        assert field.state.phase == pytest.approx(0.0)
        assert field.state.energy == pytest.approx(2.0)
        assert field.coherence == pytest.approx(0.3)
        assert other.probability == pytest.approx(0.3)
        assert other.energy == 3.0

    def test_entropy_grows_by_entanglement_rate(self, field):
        field.update(QuantumState(probability=0.9))
        before = field.entropy
        field.entangle(QuantumState(probability=0.3))
        assert field.entropy == pytest.approx(binary_entropy(0.3) + 0.1)
        assert field.entropy > before

    def test_custom_entanglement_rate(self):
        f = ScalarQuantumField(QuantumConfig(entanglement_rate=0.25), clock=TickClock())
        f.initialize()
        f.entangle(QuantumState())
        assert f.entropy == pytest.approx(0.25)

    def test_self_entangle(self, field):
        field.entangle(field.state)
        assert field.state.probability == pytest.approx(1.0)

    def test_rejects_none(self, field):
        with pytest.raises(InvalidArgumentError):
            field.entangle(None)
        assert field.entropy == 0.0


class TestDecohereAndMeasure:
    """Decoherence and measurement."""

    def test_decohere(self, field):
        field.decohere()
        assert field.coherence == pytest.approx(0.8)
        assert field.entropy == pytest.approx(0.2)
        field.decohere()
        assert field.coherence == pytest.approx(0.64)
        assert field.entropy == pytest.approx(0.4)
        # state untouched
        assert field.state.probability == 1.0
        assert field.state.energy == 1.0

    def test_measure_returns_pre_measurement_phase(self, field):
        field.update(QuantumState(probability=0.7, phase=1.2))
        coherence_before = field.coherence
        entropy_before = field.entropy

        value = field.measure()

        assert value == pytest.approx(1.2)
        assert field.state.probability == 1.0
        assert field.state.phase == 0.0
        assert field.coherence == pytest.approx(coherence_before * 0.8)
        assert field.entropy == pytest.approx(entropy_before + 0.2)

    def test_measure_down_drops_coherence(self, field):
        field.update(QuantumState(probability=0.3))
        field.measure()
        assert field.state.probability == 0.0
        assert field.coherence == 0.0

    def test_configured_decoherence(self):
        config = QuantumConfig(decoherence_entropy_step=0.5, decoherence_coherence_factor=0.5)
        f = ScalarQuantumField(config, clock=TickClock())
        f.initialize()
        f.decohere()
        assert f.coherence == pytest.approx(0.5)
        assert f.entropy == pytest.approx(0.5)


class TestDecay:
    """Time and change driven decay against the snapshot."""

    def test_decay_scales_with_change_and_time(self):
        f = ScalarQuantumField(clock=TickClock(step=1.0))
        f.initialize()
        f.evolve(PatternType.STABLE)

        # ground -> balance: p 1 -> 0.75, phase 0 -> π/12, energy 1 -> 0.75
        change = math.pi / 12 + 0.25
        coherence = (math.cos(math.pi / 12) + 1.0) * 0.75 / 2.0
        assert f.coherence == pytest.approx(coherence * math.exp(-change))
        assert f.entropy == pytest.approx(binary_entropy(0.75) + 0.1 * change)

    def test_coherence_time_slows_decay(self):
        fast = ScalarQuantumField(QuantumConfig(coherence_time=1.0), clock=TickClock(step=1.0))
        slow = ScalarQuantumField(QuantumConfig(coherence_time=10.0), clock=TickClock(step=1.0))
        for f in (fast, slow):
            f.initialize()
            f.evolve(PatternType.SPIRAL)
        assert slow.coherence > fast.coherence

    def test_phase_wrap_counts_as_small_change(self):
        f = ScalarQuantumField(clock=TickClock(step=1.0))
        f.initialize()
        f.update(QuantumState(phase=TWO_PI - 0.05))

        coherence = (math.cos(TWO_PI - 0.05) + 1.0) / 2.0
        assert f.coherence == pytest.approx(coherence * math.exp(-0.05))
        assert f.entropy == pytest.approx(0.1 * 0.05)

    def test_no_decay_without_change(self):
        f = ScalarQuantumField(clock=TickClock(step=5.0))
        f.initialize()
        f.decohere()
        assert f.coherence == pytest.approx(0.8)
        assert f.entropy == pytest.approx(0.2)

    def test_entropy_never_decreases(self):
        f = ScalarQuantumField(clock=TickClock(step=0.5))
        f.initialize()
        partner = QuantumState(probability=0.4, phase=2.0, energy=2.0)
        ops = [
            lambda: f.evolve(PatternType.OSCILLATE),
            lambda: f.evolve(PatternType.CHAOS),
            lambda: f.transform(partner),
            lambda: f.entangle(partner),
            lambda: f.decohere(),
            lambda: f.measure(),
            lambda: f.evolve(PatternType.STABLE),
        ]
        entropy = f.entropy
        for _ in range(5):
            for op in ops:
                op()
                assert f.entropy >= entropy
                assert 0.0 <= f.coherence <= 1.0
                entropy = f.entropy


class TestFactory:
    """Field construction by type tag."""

    def test_scalar(self):
        f = new_quantum_field("scalar")
        assert isinstance(f, ScalarQuantumField)
        assert f.field_type is FieldType.SCALAR
        assert not f.is_initialized

    def test_unknown_type(self):
        with pytest.raises(InvalidArgumentError):
            new_quantum_field("plasma")

    @pytest.mark.parametrize("tag", [FieldType.VECTOR, FieldType.TENSOR, "vector", "tensor"])
    def test_reserved_types_need_registration(self, tag):
        with pytest.raises(InvalidArgumentError, match="no quantum field variant registered"):
            new_quantum_field(tag)

    def test_rejection_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="quantum_flow.quantum.field"):
            with pytest.raises(InvalidArgumentError):
                new_quantum_field("plasma")
        assert any("plasma" in r.getMessage() for r in caplog.records)

    def test_register_variant(self):
        class VectorField(ScalarQuantumField):
            pass

        field_module.register_field_variant(FieldType.VECTOR, VectorField)
        try:
            f = new_quantum_field("vector")
            assert isinstance(f, VectorField)
            assert f.field_type is FieldType.VECTOR
        finally:
            field_module._FIELD_VARIANTS.pop(FieldType.VECTOR, None)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
