"""Run repository contract and an in-memory implementation."""

from .base import RunFilter, RunRepository, InMemoryRunRepository

__all__ = ["RunFilter", "RunRepository", "InMemoryRunRepository"]
