"""
Error kinds raised by the scenario core.

All of them are local, synchronous and recoverable: the caller fixes the
input (or waits for the running simulation) and tries again. Nothing in
the core retries on its own.
"""

from typing import Optional

from pydantic import ValidationError


class UrbanPlanError(Exception):
    """Base class for every error raised by the core."""


class InvalidParameters(UrbanPlanError, ValueError):
    """
    Planning parameters are missing, non-numeric or outside [0, 100].

    Inputs are never silently corrected; the offending fields are kept in
    ``errors`` so a UI can highlight the right slider.
    """

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "InvalidParameters":
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "parameters",
                "message": err["msg"],
                "input": err.get("input"),
            }
            for err in exc.errors()
        ]
        fields = ", ".join(e["field"] for e in errors)
        return cls(f"Invalid planning parameters: {fields}", errors)


class InsufficientRuns(UrbanPlanError, ValueError):
    """A comparison needs a baseline plus at least one other run."""


class AlreadyRunning(UrbanPlanError, RuntimeError):
    """The controller already has a simulation in flight."""


class InvalidStateTransition(UrbanPlanError, RuntimeError):
    """A state-machine operation was requested from the wrong state."""
