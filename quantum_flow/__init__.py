"""Quantum Flow - quantum state, field and system core."""

__version__ = "0.1.0"

from .quantum import (
    QuantumError, InvalidArgumentError, DimensionMismatchError,
    UninitializedStateError, InvalidStateError,
    QuantumConfig, load_config,
    EvolutionPattern, PatternType, FieldType,
    QuantumState,
    QuantumField, ScalarQuantumField, new_quantum_field,
    QuantumSystem,
    Interaction, InteractionType, resonate,
)

from .observability import setup_logging, MetricsCollector

from .schemas import StateMetrics, SystemSnapshot

__all__ = [
    # Errors
    'QuantumError', 'InvalidArgumentError', 'DimensionMismatchError',
    'UninitializedStateError', 'InvalidStateError',

    # Quantum core
    'QuantumConfig', 'load_config',
    'EvolutionPattern', 'PatternType', 'FieldType',
    'QuantumState',
    'QuantumField', 'ScalarQuantumField', 'new_quantum_field',
    'QuantumSystem',
    'Interaction', 'InteractionType', 'resonate',

    # Observability
    'setup_logging', 'MetricsCollector',

    # Schemas
    'StateMetrics', 'SystemSnapshot',
]
