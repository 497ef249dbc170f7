"""Pydantic schemas for status reporting."""

from pydantic import BaseModel
from typing import Dict


class StateMetrics(BaseModel):
    """Derived metrics of a single quantum state."""
    probability: float
    phase: float
    energy: float
    entropy: float
    coherence: float
    entanglement: float
    stability: float


class SystemSnapshot(BaseModel):
    """Aggregate view of a quantum system handed to the orchestrator."""
    coherence: float
    entanglement: float
    energy: float
    state_count: int
    field_phase: float
    field_coherence: float
    field_entropy: float
    timestamp: float
    states: Dict[str, StateMetrics] = {}

    def as_metrics(self) -> Dict[str, float]:
        """Flat mapping of named scalar metrics."""
        return {
            "quantum_coherence": self.coherence,
            "quantum_entanglement": self.entanglement,
            "quantum_energy": self.energy,
            "quantum_states": float(self.state_count),
            "field_phase": self.field_phase,
            "field_coherence": self.field_coherence,
            "field_entropy": self.field_entropy,
        }
