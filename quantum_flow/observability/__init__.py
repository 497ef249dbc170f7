"""Observability infrastructure for logging and metrics."""

from .logging import setup_logging
from .metrics import MetricsCollector

__all__ = [
    'setup_logging',
    'MetricsCollector',
]
