"""Error types raised by the quality engine."""

from __future__ import annotations


class CallCoachError(Exception):
    """Base class for all engine errors."""


class RubricConfigurationError(CallCoachError):
    """The rubric catalog violates one of its structural invariants.

    Raised while building a catalog; the engine refuses to score against
    an inconsistent rubric.
    """


class InvalidSessionStateError(CallCoachError):
    """A session operation was called in a state that does not allow it."""

    def __init__(self, operation: str, status: str) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} a call session that is {status}")


__all__ = [
    "CallCoachError",
    "InvalidSessionStateError",
    "RubricConfigurationError",
]
