"""
Error taxonomy for the quantum core.

All errors are local and recoverable: they are raised synchronously to the
immediate caller and the target instance is left unchanged.
"""


class QuantumError(Exception):
    """Base class for quantum core errors."""
    code = "QUANTUM"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidArgumentError(QuantumError, ValueError):
    """Out-of-contract input: missing partner state, unknown pattern, negative delta."""
    code = "INVALID"


class DimensionMismatchError(InvalidArgumentError):
    """Amplitude vectors of different lengths."""
    code = "DIMENSION"


class UninitializedStateError(QuantumError, RuntimeError):
    """Operation invoked before initialize()."""
    code = "UNINITIALIZED"


class InvalidStateError(QuantumError):
    """State failed validation."""
    code = "STATE"
