"""
Quantum system aggregate.

Contains QuantumSystem: a named collection of QuantumState instances plus one
QuantumField, with system-level coherence, entanglement and energy derived
from the member states on every call.
"""
import logging
import time
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..observability.metrics import MetricsCollector
from ..schemas import StateMetrics, SystemSnapshot
from .config import QuantumConfig
from .errors import InvalidArgumentError
from .field import Clock, QuantumField, new_quantum_field
from .locking import Lockable
from .patterns import FieldType
from .state import QuantumState

logger = logging.getLogger(__name__)


class StateView:
    """Restartable view over the member states of a system.

    Each iteration walks a snapshot of the members taken when it starts.
    """

    def __init__(self, system: "QuantumSystem"):
        self._system = system

    def __iter__(self) -> Iterator[QuantumState]:
        yield from self._system._members()

    def __len__(self) -> int:
        return len(self._system)


class QuantumSystem(Lockable):
    """Named collection of quantum states driven by a single quantum field."""

    def __init__(self, config: Optional[QuantumConfig] = None,
                 field: Optional[QuantumField] = None,
                 clock: Clock = time.monotonic):
        super().__init__()
        self.config = config or QuantumConfig()
        self._clock = clock
        self._states: Dict[str, QuantumState] = {}
        if field is None:
            field = new_quantum_field(FieldType.SCALAR, self.config, clock)
            field.initialize()
        self._field = field

        # last computed aggregates
        self._coherence = 0.0
        self._entanglement = 0.0
        self._energy = 0.0
        self._snapshot: Optional[SystemSnapshot] = None
        self._snapshot_time = 0.0
        self._snapshot_key: Optional[Tuple] = None

        self.metrics = MetricsCollector()

    # ------------------------------------------------------------------
    # membership

    def add_state(self, state_id: str, state: QuantumState) -> Optional[QuantumState]:
        """Insert or replace a state; returns the previous state under that id."""
        if state is None:
            logger.debug(f"add_state rejected: missing state for {state_id!r}")
            raise InvalidArgumentError("quantum state cannot be None")
        with self._lock:
            previous = self._states.get(state_id)
            self._states[state_id] = state
            self._invalidate()
        self.metrics.increment_counter("states_added")
        if previous is not None:
            logger.debug(f"replaced quantum state {state_id!r}")
        return previous

    def create_state(self, state_id: str) -> QuantumState:
        """Add a ground state shaped by the configured initial amplitude."""
        state = QuantumState(amplitude=self.config.initial_amplitude())
        self.add_state(state_id, state)
        return state

    def remove_state(self, state_id: str) -> Optional[QuantumState]:
        with self._lock:
            removed = self._states.pop(state_id, None)
            if removed is not None:
                self._invalidate()
        if removed is not None:
            self.metrics.increment_counter("states_removed")
        return removed

    def get_state(self, state_id: str) -> Optional[QuantumState]:
        with self._lock:
            return self._states.get(state_id)

    def states(self) -> StateView:
        return StateView(self)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def __contains__(self, state_id: str) -> bool:
        with self._lock:
            return state_id in self._states

    @property
    def field(self) -> QuantumField:
        return self._field

    # ------------------------------------------------------------------
    # aggregates

    def coherence(self) -> float:
        """Average coherence of the member states."""
        members = self._members()
        value = float(np.mean([s.coherence() for s in members])) if members else 0.0
        with self._lock:
            self._coherence = value
        return value

    def entanglement(self) -> float:
        """Average entanglement measure, bounded by the configured maximum."""
        members = self._members()
        value = float(np.mean([s.entanglement_measure() for s in members])) if members else 0.0
        value = min(value, self.config.max_entanglement)
        with self._lock:
            self._entanglement = value
        return value

    def energy(self) -> float:
        """Total energy of the member states."""
        members = self._members()
        value = float(sum(s.energy for s in members))
        with self._lock:
            self._energy = value
        return value

    def snapshot(self) -> SystemSnapshot:
        """Aggregate status.

        The previous snapshot is reused while it is younger than
        ``config.update_interval`` and no member state or field has been
        written since it was built.
        """
        now = self._clock()
        items = self._items()
        key = self._version_key(items)
        with self._lock:
            if (self._snapshot is not None and key == self._snapshot_key
                    and now - self._snapshot_time < self.config.update_interval):
                return self._snapshot

        with self.metrics.timer("snapshot"):
            snapshot = SystemSnapshot(
                coherence=self.coherence(),
                entanglement=self.entanglement(),
                energy=self.energy(),
                state_count=len(items),
                field_phase=self._field.phase,
                field_coherence=self._field.coherence,
                field_entropy=self._field.entropy,
                timestamp=now,
                states={sid: StateMetrics(**s.metrics()) for sid, s in items.items()},
            )
        self.metrics.record(snapshot.as_metrics())
        self.metrics.increment_counter("snapshots")

        with self._lock:
            self._snapshot = snapshot
            self._snapshot_time = now
            self._snapshot_key = key
        return snapshot

    # ------------------------------------------------------------------

    def _members(self) -> List[QuantumState]:
        with self._lock:
            return list(self._states.values())

    def _items(self) -> Dict[str, QuantumState]:
        with self._lock:
            return dict(self._states)

    def _version_key(self, items: Dict[str, QuantumState]) -> Tuple:
        members = tuple(sorted((sid, id(s), s.version) for sid, s in items.items()))
        return members, self._field.version, self._field.state.version

    def _invalidate(self):
        self._snapshot = None

    def __repr__(self) -> str:
        return f"QuantumSystem(states={len(self)}, field={self._field!r})"
