"""
Quantum core: state entity, evolution patterns, field capability and system aggregate.
"""

# Errors
from .errors import (
    QuantumError, InvalidArgumentError, DimensionMismatchError,
    UninitializedStateError, InvalidStateError
)

# Configuration
from .config import QuantumConfig, default_quantum_config, load_config

# Patterns
from .patterns import (
    EvolutionPattern, PatternType, FieldType,
    EVOLUTION_RULES, FIELD_PATTERN_MAP, evolution_pattern_for
)

# State
from .state import QuantumState, normalize_phase

# Field
from .field import QuantumField, ScalarQuantumField, FieldCache, new_quantum_field, register_field_variant

# System
from .system import QuantumSystem, StateView

# Pairwise operations
from .interaction import Interaction, InteractionType, resonate

from .locking import ordered_locks

__all__ = [
    # Errors
    'QuantumError', 'InvalidArgumentError', 'DimensionMismatchError',
    'UninitializedStateError', 'InvalidStateError',
    # Config
    'QuantumConfig', 'default_quantum_config', 'load_config',
    # Patterns
    'EvolutionPattern', 'PatternType', 'FieldType',
    'EVOLUTION_RULES', 'FIELD_PATTERN_MAP', 'evolution_pattern_for',
    # State
    'QuantumState', 'normalize_phase',
    # Field
    'QuantumField', 'ScalarQuantumField', 'FieldCache', 'new_quantum_field', 'register_field_variant',
    # System
    'QuantumSystem', 'StateView',
    # Pairwise
    'Interaction', 'InteractionType', 'resonate',
    'ordered_locks',
]
