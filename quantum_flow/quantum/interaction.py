"""
Pairwise interaction between quantum states.

Contains the Interaction measurement (coupling strength, interaction energy,
coherence and entropy between two states) and the ``resonate`` energy
transfer that feeds phase-aligned energy into both states of a pair.
"""
import logging
import math
from enum import Enum
from typing import Optional

import numpy as np

from .errors import InvalidArgumentError
from .locking import Lockable, ordered_locks
from .state import QuantumState

logger = logging.getLogger(__name__)

MIN_COUPLING = 0.0
MAX_COUPLING = 1.0
DEFAULT_COUPLING = 0.5


class InteractionType(Enum):
    NONE = "none"
    WEAK = "weak"
    STRONG = "strong"
    FIELD = "field"
    QUANTUM = "quantum"


class Interaction(Lockable):
    """Coupling between two quantum states, refreshed by ``update``."""

    def __init__(self, coupling: float = DEFAULT_COUPLING):
        super().__init__()
        self.coupling = float(np.clip(coupling, MIN_COUPLING, MAX_COUPLING))
        self.initialize()

    def initialize(self):
        with self._lock:
            self.interaction_type = InteractionType.NONE
            self.phase = 0.0
            self.strength = 0.0
            self.energy = 0.0
            self.entropy = 0.0
            self.coherence = 1.0

    def update(self, state1: QuantumState, state2: QuantumState) -> InteractionType:
        """Measure the interaction between two states."""
        if state1 is None or state2 is None:
            logger.debug("interaction update rejected: missing state")
            raise InvalidArgumentError("interaction requires two quantum states")
        with ordered_locks(state1, state2):
            energy1, energy2 = state1.energy, state2.energy
            phase1, phase2 = state1.phase, state2.phase

        with self._lock:
            self.phase = abs(phase1 - phase2)
            self.strength = self.coupling * math.sqrt(energy1 * energy2)
            self.energy = self.strength * math.cos(self.phase)
            self.coherence = math.exp(-self.phase * self.phase)
            if self.strength > 0:
                self.entropy = -self.strength * math.log(self.strength)
            else:
                self.entropy = 0.0
            self.interaction_type = self._classify()
            return self.interaction_type

    def _classify(self) -> InteractionType:
        if self.strength < 0.2:
            return InteractionType.WEAK
        if self.strength > 0.8:
            return InteractionType.STRONG
        if self.phase < math.pi / 4:
            return InteractionType.QUANTUM
        return InteractionType.FIELD


def resonate(state1: QuantumState, state2: QuantumState, energy: float,
             coherence: float = 1.0) -> float:
    """Transfer phase-aligned energy into both states.

    The transferred amount is ``energy * cos(|Δphase|) * coherence`` per state;
    nothing is transferred when that is not positive. Returns the amount.
    """
    if state1 is None or state2 is None:
        logger.debug("resonance rejected: missing state")
        raise InvalidArgumentError("resonance requires two quantum states")
    if energy < 0:
        logger.debug(f"resonance rejected: negative energy {energy}")
        raise InvalidArgumentError(f"resonance energy cannot be negative: {energy}")

    with ordered_locks(state1, state2):
        phase_diff = abs(state1.phase - state2.phase)
        strength = math.cos(phase_diff) * coherence
        transfer = energy * strength
        if transfer <= 0:
            return 0.0
        state1.add_energy(transfer)
        if state2 is not state1:
            state2.add_energy(transfer)
    logger.debug(f"resonance transferred {transfer:.4f} per state")
    return transfer
