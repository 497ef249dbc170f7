"""
Quantum field capability and its default scalar implementation.

The field owns one QuantumState and drives it through evolution patterns,
transformation toward a target, entanglement with a partner state,
decoherence and measurement. Coherence and entropy are kept as first-class
field values and decay against a single-slot snapshot of the previous
generation, taken at the start of every mutating call.
"""
import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type, Union

import numpy as np

from .config import QuantumConfig
from .errors import InvalidArgumentError, UninitializedStateError
from .locking import Lockable, ordered_locks
from .patterns import FieldType, PatternType, evolution_pattern_for, resolve_pattern_type
from .state import QuantumState, phase_distance

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class QuantumField(ABC):
    """Capability set shared by all field variants."""

    @abstractmethod
    def initialize(self): ...

    @abstractmethod
    def reset(self): ...

    @abstractmethod
    def update(self, new_state: QuantumState): ...

    @abstractmethod
    def evolve(self, pattern_type: Union[PatternType, str]): ...

    @abstractmethod
    def transform(self, target: QuantumState): ...

    @abstractmethod
    def entangle(self, other: QuantumState): ...

    @abstractmethod
    def decohere(self): ...

    @abstractmethod
    def measure(self) -> float: ...

    @property
    @abstractmethod
    def state(self) -> QuantumState: ...

    @property
    @abstractmethod
    def phase(self) -> float: ...

    @property
    @abstractmethod
    def coherence(self) -> float: ...

    @property
    @abstractmethod
    def entropy(self) -> float: ...

    @property
    @abstractmethod
    def version(self) -> int: ...


@dataclass(frozen=True)
class FieldCache:
    """Previous-generation observation used by the decay step."""
    last_state: QuantumState
    last_phase: float
    last_energy: float
    last_update: float


class ScalarQuantumField(Lockable, QuantumField):
    """Default field variant wrapping a single QuantumState."""

    def __init__(self, config: Optional[QuantumConfig] = None,
                 field_type: FieldType = FieldType.SCALAR,
                 clock: Clock = time.monotonic):
        super().__init__()
        self.config = config or QuantumConfig()
        self._field_type = field_type
        self._clock = clock
        self._state = QuantumState()
        self._pattern = PatternType.NONE
        self._cache = self._observe()
        self._coherence = self._state.coherence()
        self._entropy = self._state.entropy
        self._initialized = False
        self._version = 0

    # ------------------------------------------------------------------
    # lifecycle

    def initialize(self):
        with self._lock:
            self._state.initialize()
            self._cache = FieldCache(
                last_state=QuantumState(),
                last_phase=self._state.phase,
                last_energy=self._state.energy,
                last_update=self._clock(),
            )
            self._pattern = PatternType.NONE
            self._seed_from_state()
            self._initialized = True
            self._version += 1
        logger.debug(f"{self._field_type.value} quantum field initialized")

    def reset(self):
        self.initialize()

    def update(self, new_state: QuantumState):
        """Replace the owned state with a copy of ``new_state``."""
        if new_state is None:
            logger.debug("field update rejected: missing state")
            raise InvalidArgumentError("new quantum state cannot be None")
        with self._lock:
            self._require_initialized("update")
            self._snapshot()
            self._state = new_state.copy()
            self._seed_from_state()
            self._decay()

    # ------------------------------------------------------------------
    # accessors

    @property
    def state(self) -> QuantumState:
        with self._lock:
            return self._state

    @property
    def phase(self) -> float:
        with self._lock:
            return self._state.phase

    @property
    def coherence(self) -> float:
        with self._lock:
            return self._coherence

    @property
    def entropy(self) -> float:
        with self._lock:
            return self._entropy

    @property
    def field_type(self) -> FieldType:
        return self._field_type

    @property
    def pattern(self) -> PatternType:
        with self._lock:
            return self._pattern

    @property
    def is_initialized(self) -> bool:
        with self._lock:
            return self._initialized

    @property
    def cache(self) -> FieldCache:
        with self._lock:
            return self._cache

    @property
    def version(self) -> int:
        """Counter bumped by every mutating field operation."""
        with self._lock:
            return self._version

    # ------------------------------------------------------------------
    # field operations

    def evolve(self, pattern_type: Union[PatternType, str]):
        tag = resolve_pattern_type(pattern_type)
        pattern = evolution_pattern_for(tag)
        with self._lock:
            self._require_initialized("evolve")
            self._snapshot()
            self._pattern = tag
            self._state.evolve(pattern)
            self._refresh_from_state()
            self._decay()
        logger.debug(f"field evolved: {tag.name} -> {pattern.value}")

    def transform(self, target: QuantumState):
        """Move phase, energy and probability halfway toward ``target``."""
        if target is None:
            logger.debug("field transform rejected: missing target")
            raise InvalidArgumentError("target state cannot be None")
        with self._lock:
            self._require_initialized("transform")
            with ordered_locks(self._state, target):
                self._snapshot()
                state = self._state
                phase, energy, prob = state.phase, state.energy, state.probability
                state.set_phase(phase + (target.phase - phase) / 2)
                state.set_energy(energy + (target.energy - energy) / 2)
                state.set_probability(prob + (target.probability - prob) / 2)
            self._refresh_from_state()
            self._decay()

    def entangle(self, other: QuantumState):
        """Average phase and energy with ``other``; bound probability by the weaker coherence."""
        if other is None:
            logger.debug("field entangle rejected: missing partner state")
            raise InvalidArgumentError("other quantum state cannot be None")
        with self._lock:
            self._require_initialized("entangle")
            with ordered_locks(self._state, other):
                self._snapshot()
                state = self._state
                new_phase = (state.phase + other.phase) / 2
                new_energy = (state.energy + other.energy) / 2
                new_prob = min(state.coherence(), other.coherence())

                state.set_phase(new_phase)
                state.set_energy(new_energy)
                state.set_probability(new_prob)

                self._coherence = state.coherence()
                # entanglement never lowers entropy
                self._entropy = max(self._entropy, state.entropy) + self.config.entanglement_rate
            self._decay()
        logger.debug(f"field entangled: p={new_prob:.4f}, entropy={self._entropy:.4f}")

    def decohere(self):
        with self._lock:
            self._require_initialized("decohere")
            self._snapshot()
            self._decohere()
            self._decay()

    def measure(self) -> float:
        """Decohere and collapse the owned state; return the pre-measurement phase."""
        with self._lock:
            self._require_initialized("measure")
            self._snapshot()
            value = self._state.phase
            self._decohere()
            self._state.collapse()
            self._coherence = min(self._coherence, self._state.coherence())
            self._decay()
        logger.debug(f"field measured: phase={value:.4f}, p={self._state.probability:.0f}")
        return value

    # ------------------------------------------------------------------
    # internals (caller holds self._lock)

    def _require_initialized(self, op: str):
        if not self._initialized:
            logger.debug(f"{op}() called on uninitialized {self._field_type.value} field")
            raise UninitializedStateError(f"quantum field must be initialized before {op}()")

    def _observe(self) -> FieldCache:
        return FieldCache(
            last_state=self._state.copy(),
            last_phase=self._state.phase,
            last_energy=self._state.energy,
            last_update=self._clock(),
        )

    def _snapshot(self):
        self._cache = self._observe()

    def _seed_from_state(self):
        self._coherence = self._state.coherence()
        self._entropy = self._state.entropy

    def _refresh_from_state(self):
        self._coherence = self._state.coherence()
        self._entropy = max(self._entropy, self._state.entropy)

    def _decohere(self):
        self._entropy += self.config.decoherence_entropy_step
        self._coherence *= self.config.decoherence_coherence_factor

    def _decay(self):
        """Time- and change-driven coherence decay and entropy growth since the snapshot."""
        elapsed = max(0.0, self._clock() - self._cache.last_update)
        change = (phase_distance(self._state.phase, self._cache.last_phase)
                  + abs(self._state.energy - self._cache.last_energy))

        decay_factor = math.exp(-change * elapsed / self.config.coherence_time)
        entropy_increase = self.config.decoherence_rate * change * elapsed

        self._coherence = float(np.clip(self._coherence * decay_factor, 0.0, 1.0))
        self._entropy += entropy_increase
        # the decay step closes every mutating operation
        self._version += 1

    def __repr__(self) -> str:
        return (f"ScalarQuantumField(type={self._field_type.value}, initialized={self._initialized}, "
                f"coherence={self._coherence:.4f}, entropy={self._entropy:.4f})")


_FIELD_VARIANTS: Dict[FieldType, Type[QuantumField]] = {
    FieldType.SCALAR: ScalarQuantumField,
}


def register_field_variant(field_type: FieldType, cls: Type[QuantumField]):
    """Register an implementation for a field type tag."""
    _FIELD_VARIANTS[FieldType(field_type)] = cls


def new_quantum_field(field_type: Union[FieldType, str] = FieldType.SCALAR,
                      config: Optional[QuantumConfig] = None,
                      clock: Clock = time.monotonic) -> QuantumField:
    """Build an (uninitialized) quantum field for the given type tag."""
    try:
        field_type = FieldType(field_type)
    except ValueError:
        logger.debug(f"rejected field type {field_type!r}")
        raise InvalidArgumentError(f"unknown field type: {field_type!r}") from None
    cls = _FIELD_VARIANTS.get(field_type)
    if cls is None:
        logger.debug(f"no variant registered for {field_type.value}")
        raise InvalidArgumentError(f"no quantum field variant registered for {field_type.value}")
    return cls(config=config, field_type=field_type, clock=clock)
