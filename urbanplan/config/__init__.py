"""
Configuration Management

Centralized configuration for:
- Optimizer search budget and step sizes
- Comparison thresholds
- Simulation progress staging
- Logging
"""

from .settings import (
    Settings,
    OptimizerConfig,
    ComparisonConfig,
    SimulationConfig,
    get_settings
)
from .logging_config import configure_logging

__all__ = [
    "Settings",
    "OptimizerConfig",
    "ComparisonConfig",
    "SimulationConfig",
    "get_settings",
    "configure_logging"
]
