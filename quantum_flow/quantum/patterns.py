"""
Evolution patterns and the tables that drive them.

Contains the internal ``EvolutionPattern`` rules applied by QuantumState, the
external ``PatternType`` tags accepted by fields, and the mapping between the
two. Both tables are plain read-only data so new field variants can reuse them
without touching QuantumState.
"""
import math
from enum import Enum
from types import MappingProxyType
from typing import Callable, NamedTuple


class EvolutionPattern(Enum):
    """Internal evolution rule applied to a QuantumState."""
    INTEGRATE = "integrate"
    SPLIT = "split"
    CYCLE = "cycle"
    BALANCE = "balance"


class PatternType(Enum):
    """External pattern tag accepted by QuantumField.evolve."""
    NONE = ""
    STABLE = "stable"
    CHAOS = "chaos"
    OSCILLATE = "oscillate"
    SPIRAL = "spiral"


class FieldType(Enum):
    """Field variant tag."""
    SCALAR = "scalar"
    VECTOR = "vector"
    TENSOR = "tensor"


class EvolutionRule(NamedTuple):
    phase_step: float
    # (probability, new normalized phase) -> new probability
    probability: Callable[[float, float], float]


EVOLUTION_RULES = MappingProxyType({
    # stabilizing: pushes probability toward 1
    EvolutionPattern.INTEGRATE: EvolutionRule(math.pi / 4, lambda p, phase: p ** 0.9),
    # gradual decay
    EvolutionPattern.SPLIT: EvolutionRule(math.pi / 8, lambda p, phase: p * 0.95),
    # oscillation driven by the phase itself
    EvolutionPattern.CYCLE: EvolutionRule(math.pi / 6, lambda p, phase: 0.5 + 0.5 * math.sin(phase)),
    # relaxation toward 0.5
    EvolutionPattern.BALANCE: EvolutionRule(math.pi / 12, lambda p, phase: (p + 0.5) / 2),
})

FIELD_PATTERN_MAP = MappingProxyType({
    PatternType.STABLE: EvolutionPattern.BALANCE,
    PatternType.CHAOS: EvolutionPattern.SPLIT,
    PatternType.OSCILLATE: EvolutionPattern.CYCLE,
    PatternType.SPIRAL: EvolutionPattern.INTEGRATE,
})

DEFAULT_EVOLUTION_PATTERN = EvolutionPattern.INTEGRATE


def resolve_pattern_type(tag) -> PatternType:
    """Coerce a tag (enum or string) to a PatternType; unknown tags become NONE."""
    if isinstance(tag, PatternType):
        return tag
    try:
        return PatternType(tag)
    except ValueError:
        return PatternType.NONE


def evolution_pattern_for(tag) -> EvolutionPattern:
    """Map an external field pattern tag onto the internal evolution pattern."""
    return FIELD_PATTERN_MAP.get(resolve_pattern_type(tag), DEFAULT_EVOLUTION_PATTERN)
