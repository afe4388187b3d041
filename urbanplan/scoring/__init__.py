"""Deterministic scoring model: parameters -> outcome metrics."""

from .model import ScoringModel, score, clamp

__all__ = ["ScoringModel", "score", "clamp"]
