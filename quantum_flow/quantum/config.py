"""Construction-time configuration for quantum systems and fields."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import torch
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class QuantumConfig(BaseModel):
    """Immutable quantum configuration.

    Times are in seconds. ``initial_state`` is a list of ``[re, im]`` pairs so
    it can be written in YAML.
    """
    model_config = ConfigDict(frozen=True)

    initial_state: Optional[List[Tuple[float, float]]] = None
    dimension: int = Field(3, ge=1)
    max_entanglement: float = Field(1.0, ge=0.0, le=1.0)

    coherence_time: float = Field(1.0, gt=0.0)
    decoherence_rate: float = Field(0.1, ge=0.0)
    entanglement_rate: float = Field(0.1, ge=0.0)
    update_interval: float = Field(0.01, ge=0.0)

    # decohere(): fixed entropy step and coherence retention
    decoherence_entropy_step: float = Field(0.2, ge=0.0)
    decoherence_coherence_factor: float = Field(0.8, ge=0.0, le=1.0)

    @model_validator(mode="before")
    @classmethod
    def _dimension_from_initial_state(cls, data):
        """``dimension`` follows ``initial_state`` when only the latter is given."""
        if not isinstance(data, dict):
            return data
        initial = data.get("initial_state")
        if not isinstance(initial, (list, tuple)) or len(initial) == 0:
            return data
        if "dimension" not in data:
            return {**data, "dimension": len(initial)}
        if data["dimension"] != len(initial):
            raise ValueError(f"dimension {data['dimension']} does not match "
                             f"initial_state of length {len(initial)}")
        return data

    @field_validator("initial_state")
    @classmethod
    def _non_empty(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError("initial_state must contain at least one component")
        return v

    def initial_amplitude(self) -> torch.Tensor:
        """Amplitude vector for newly created states."""
        if self.initial_state is not None:
            return torch.tensor([complex(re, im) for re, im in self.initial_state],
                                dtype=torch.complex128)
        amp = torch.zeros(self.dimension, dtype=torch.complex128)
        amp[0] = 1.0
        return amp


def default_quantum_config() -> QuantumConfig:
    return QuantumConfig()


def load_config(path: Union[str, Path]) -> QuantumConfig:
    """Load a QuantumConfig from YAML; values may sit under a top-level ``quantum`` key.

    A missing file falls back to the defaults.
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {path}, using defaults")
        return default_quantum_config()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config file {path}: {e}")
        raise
    if "quantum" in data:
        data = data["quantum"] or {}
    config = QuantumConfig(**data)
    logger.info(f"Loaded quantum configuration from {path}")
    return config
