"""
Exception hierarchy for polygon and mesh clipping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clippoly.tracing import TraceState


class ClipError(Exception):
    """Base class for every error raised by a clip operation."""

    pass


class InvalidInputError(ClipError, ValueError):
    """Raised when a polygon, mesh or configuration fails validation."""

    pass


class TraceError(ClipError):
    """Raised when the boundary loop of the overlap region cannot be traced.

    Attributes:
        state: Terminal state the tracer stopped in
    """

    def __init__(self, message: str, state: TraceState | None = None) -> None:
        super().__init__(message)
        self.state = state


class TraceFailureError(TraceError):
    """Raised when no valid next node exists mid-walk, or the walk is incomplete."""

    pass


class IterationLimitExceededError(TraceError):
    """Raised when the boundary walk does not close within the iteration ceiling."""

    pass


class TriangulationInputTooSmallError(ClipError):
    """Raised when a loop handed to the triangulator has fewer than 3 vertices."""

    pass
