"""
Quantum state entity.

Contains QuantumState: probability, phase, energy, derived entropy and a
complex amplitude vector, with every mutation clamping its inputs back into
the valid ranges.
"""
import cmath
import logging
import math
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import torch

from .errors import DimensionMismatchError, InvalidArgumentError, InvalidStateError
from .locking import Lockable, ordered_locks
from .patterns import EVOLUTION_RULES, EvolutionPattern

logger = logging.getLogger(__name__)

MAX_PROBABILITY = 1.0
MIN_PROBABILITY = 0.0
DEFAULT_PHASE = 0.0
DEFAULT_ENERGY = 1.0
DEFAULT_ENTROPY = 0.0
TWO_PI = 2 * math.pi

AMPLITUDE_DTYPE = torch.complex128

AmplitudeLike = Union[torch.Tensor, np.ndarray, Sequence[complex]]


def _finite(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        logger.debug(f"rejected non-finite {name}: {value}")
        raise InvalidArgumentError(f"{name} must be finite: {value}")
    return value


def normalize_phase(phase: float) -> float:
    """Reduce a phase into [0, 2π)."""
    phase = math.fmod(phase, TWO_PI)
    if phase < 0:
        phase += TWO_PI
    # -tiny + 2π can round up to exactly 2π
    if phase >= TWO_PI:
        phase = 0.0
    return phase


def phase_distance(a: float, b: float) -> float:
    """Shortest angular distance between two phases, in [0, π]."""
    d = math.fmod(abs(a - b), TWO_PI)
    return min(d, TWO_PI - d)


def clamp_probability(p: float) -> float:
    return float(np.clip(p, MIN_PROBABILITY, MAX_PROBABILITY))


def binary_entropy(p: float) -> float:
    """Shannon entropy in bits of a two-outcome distribution (p, 1-p)."""
    if p <= 0.0 or p >= 1.0:
        return 0.0
    q = 1.0 - p
    return -p * math.log2(p) - q * math.log2(q)


def amplitude_entropy(amplitude: torch.Tensor) -> float:
    """Normalized Shannon entropy of |a_i|², scaled into [0, 1] by ln(n)."""
    n = amplitude.numel()
    if n <= 1:
        return 0.0
    probs = amplitude.abs() ** 2
    total = probs.sum()
    if total <= 0:
        return 0.0
    probs = probs / total
    nz = probs[probs > 0]
    # a single non-zero weight sums to -0.0
    entropy = max(0.0, -(nz * torch.log(nz)).sum().item())
    return float(np.clip(entropy / math.log(n), 0.0, 1.0))


def _as_amplitude(values: AmplitudeLike) -> torch.Tensor:
    if values is None:
        logger.debug("rejected missing amplitude")
        raise InvalidArgumentError("amplitude cannot be None")
    amp = torch.as_tensor(values, dtype=AMPLITUDE_DTYPE).clone()
    if amp.dim() != 1 or amp.numel() == 0:
        logger.debug(f"rejected amplitude of shape {tuple(amp.shape)}")
        raise InvalidArgumentError(f"amplitude must be a non-empty vector, got shape {tuple(amp.shape)}")
    return amp


def _ground_amplitude() -> torch.Tensor:
    return torch.ones(1, dtype=AMPLITUDE_DTYPE)


def resolve_evolution_pattern(pattern) -> EvolutionPattern:
    if isinstance(pattern, EvolutionPattern):
        return pattern
    try:
        return EvolutionPattern(pattern)
    except ValueError:
        logger.debug(f"rejected evolution pattern {pattern!r}")
        raise InvalidArgumentError(f"unknown evolution pattern: {pattern!r}") from None


class QuantumState(Lockable):
    """Probability / phase / energy state with a complex amplitude vector.

    Entropy is derived: binary Shannon entropy of the probability for a single
    component amplitude, normalized Shannon entropy of the amplitude weights
    otherwise.
    """

    def __init__(self, probability: float = MAX_PROBABILITY, phase: float = DEFAULT_PHASE,
                 energy: float = DEFAULT_ENERGY, amplitude: Optional[AmplitudeLike] = None):
        super().__init__()
        self._probability = clamp_probability(_finite(probability, "probability"))
        self._phase = normalize_phase(_finite(phase, "phase"))
        self._energy = max(0.0, _finite(energy, "energy"))
        self._amplitude = _ground_amplitude() if amplitude is None else _as_amplitude(amplitude)
        self._entropy = DEFAULT_ENTROPY
        self._version = 0
        self._recompute_entropy()

    # ------------------------------------------------------------------
    # lifecycle

    def initialize(self):
        """Return to the ground configuration."""
        with self._lock:
            self._probability = MAX_PROBABILITY
            self._phase = DEFAULT_PHASE
            self._energy = DEFAULT_ENERGY
            self._entropy = DEFAULT_ENTROPY
            self._amplitude = _ground_amplitude()
            self._touch()
            self.validate()

    def reset(self):
        self.initialize()

    def validate(self):
        """Raise InvalidStateError if any invariant is broken."""
        with self._lock:
            problem = None
            if not MIN_PROBABILITY <= self._probability <= MAX_PROBABILITY:
                problem = f"invalid probability: {self._probability}"
            elif not 0.0 <= self._phase < TWO_PI:
                problem = f"invalid phase: {self._phase}"
            elif self._energy < 0:
                problem = f"invalid energy: {self._energy}"
            elif self._entropy < 0:
                problem = f"invalid entropy: {self._entropy}"
            elif self._amplitude.numel() == 0:
                problem = "invalid amplitude: empty"
        if problem is not None:
            logger.debug(f"validation failed: {problem}")
            raise InvalidStateError(problem)

    def copy(self) -> "QuantumState":
        with self._lock:
            clone = QuantumState(self._probability, self._phase, self._energy, self._amplitude)
            clone._entropy = self._entropy
            return clone

    # ------------------------------------------------------------------
    # accessors

    @property
    def probability(self) -> float:
        with self._lock:
            return self._probability

    @property
    def phase(self) -> float:
        with self._lock:
            return self._phase

    @property
    def energy(self) -> float:
        with self._lock:
            return self._energy

    @property
    def entropy(self) -> float:
        with self._lock:
            return self._entropy

    @property
    def amplitude(self) -> torch.Tensor:
        """Copy of the amplitude vector."""
        with self._lock:
            return self._amplitude.clone()

    @property
    def dimension(self) -> int:
        with self._lock:
            return self._amplitude.numel()

    @property
    def version(self) -> int:
        """Counter bumped by every mutation."""
        with self._lock:
            return self._version

    # ------------------------------------------------------------------
    # setters (self-clamping)

    def set_probability(self, p: float):
        p = _finite(p, "probability")
        with self._lock:
            self._probability = clamp_probability(p)
            self._recompute_entropy()
            self._touch()

    def set_phase(self, phase: float):
        phase = _finite(phase, "phase")
        with self._lock:
            self._phase = normalize_phase(phase)
            self._touch()

    def set_energy(self, energy: float):
        energy = _finite(energy, "energy")
        with self._lock:
            self._energy = max(0.0, energy)
            self._touch()

    def set_amplitude(self, amplitude: AmplitudeLike):
        amp = _as_amplitude(amplitude)
        with self._lock:
            self._amplitude = amp
            self._recompute_entropy()
            self._touch()

    # ------------------------------------------------------------------
    # transitions

    def evolve(self, pattern: Union[EvolutionPattern, str]):
        """Advance one step under the given evolution pattern."""
        pattern = resolve_evolution_pattern(pattern)
        rule = EVOLUTION_RULES[pattern]
        with self._lock:
            initial_prob = self._probability
            phase = normalize_phase(self._phase + rule.phase_step)
            prob = clamp_probability(rule.probability(self._probability, phase))

            self._phase = phase
            self._probability = prob
            # energy follows the occupancy change; 1 + Δp >= 0 for Δp in [-1, 1]
            self._energy = max(0.0, self._energy * (1.0 + prob - initial_prob))
            self._amplitude[0] = cmath.rect(math.sqrt(prob), phase)
            self._recompute_entropy()
            self._touch()
        logger.debug(f"evolve {pattern.value}: p={prob:.4f}, phase={phase:.4f}")

    def collapse(self):
        """Deterministic measurement collapse onto |1> (p >= 0.5) or |0>."""
        with self._lock:
            self._probability = MAX_PROBABILITY if self._probability >= 0.5 else MIN_PROBABILITY
            self._phase = DEFAULT_PHASE
            self._amplitude = torch.full((1,), self._probability, dtype=AMPLITUDE_DTYPE)
            self._recompute_entropy()
            self._touch()

    def add_energy(self, delta: float):
        """Add energy and nudge probability toward 1 by exponential saturation."""
        delta = _finite(delta, "energy increment")
        if delta < 0:
            logger.debug(f"rejected negative energy increment {delta}")
            raise InvalidArgumentError(f"energy increment cannot be negative: {delta}")
        with self._lock:
            old_energy = self._energy
            nudge = 0.0
            # the saturation term is undefined at zero energy
            if old_energy > 0:
                nudge = (1.0 - self._probability) * (1.0 - math.exp(-delta / old_energy))
            self._energy = old_energy + delta
            self._probability = clamp_probability(self._probability + nudge)
            self._recompute_entropy()
            self._touch()

    def update(self):
        """Relax probability and phase under the current energy and coherence."""
        with self._lock:
            coherence = self.coherence()
            energy_factor = math.exp(-self._energy / DEFAULT_ENERGY)
            self._probability = clamp_probability(self._probability * coherence * (1.0 - energy_factor))
            self._phase = normalize_phase(self._phase + math.pi / 4 * coherence)
            self._recompute_entropy()
            self._touch()

    # ------------------------------------------------------------------
    # derived quantities

    def coherence(self) -> float:
        with self._lock:
            c = (math.cos(self._phase) + 1.0) * self._probability / 2.0
        return float(np.clip(c, 0.0, 1.0))

    def entanglement_measure(self) -> float:
        with self._lock:
            e = (math.cos(self._phase) + 1.0) * self._probability ** 2 / 2.0
        return float(np.clip(e, 0.0, 1.0))

    def stability(self) -> float:
        with self._lock:
            phase_stability = 1.0 - abs(math.sin(self._phase))
            # closer to 0 or 1 means more certain
            prob_stability = 1.0 - 2.0 * abs(self._probability - 0.5)
            energy_stability = math.exp(-self._energy / DEFAULT_ENERGY)
            entropy_factor = 1.0 - self._entropy
        stability = (0.3 * phase_stability + 0.3 * prob_stability
                     + 0.2 * energy_stability + 0.2 * entropy_factor)
        return float(np.clip(stability, 0.0, 1.0))

    def purity(self) -> float:
        with self._lock:
            return self._probability * self._probability

    def amplitude_value(self) -> float:
        with self._lock:
            return math.sqrt(self._probability)

    def dot_product(self, other: "QuantumState") -> complex:
        """Inner product <self|other> of the amplitude vectors."""
        if other is None:
            logger.debug("dot product rejected: missing partner state")
            raise InvalidArgumentError("other quantum state cannot be None")
        with ordered_locks(self, other):
            if self._amplitude.numel() != other._amplitude.numel():
                logger.debug(f"dot product rejected: dimensions {self._amplitude.numel()} "
                             f"and {other._amplitude.numel()}")
                raise DimensionMismatchError(
                    f"quantum states must have the same dimension: "
                    f"{self._amplitude.numel()} != {other._amplitude.numel()}")
            return complex(torch.vdot(self._amplitude, other._amplitude).item())

    def metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "probability": self._probability,
                "phase": self._phase,
                "energy": self._energy,
                "entropy": self._entropy,
                "coherence": self.coherence(),
                "entanglement": self.entanglement_measure(),
                "stability": self.stability(),
            }

    # ------------------------------------------------------------------

    def _touch(self):
        self._version += 1

    def _recompute_entropy(self):
        if self._amplitude.numel() > 1:
            self._entropy = amplitude_entropy(self._amplitude)
        else:
            self._entropy = binary_entropy(self._probability)

    def __repr__(self) -> str:
        with self._lock:
            return (f"QuantumState(probability={self._probability:.4f}, phase={self._phase:.4f}, "
                    f"energy={self._energy:.4f}, entropy={self._entropy:.4f})")
