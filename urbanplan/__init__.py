"""
Urban Scenario Core

Scoring, optimization and comparison of hypothetical urban-development
scenarios. Four planning parameters (roads, population, housing,
public transport) are mapped to four outcome metrics (congestion,
satisfaction, emissions, transit usage).
"""

__version__ = "0.1.0"

from .api import score, optimize, optimize_all, compare, compare_all

__all__ = ["score", "optimize", "optimize_all", "compare", "compare_all"]
