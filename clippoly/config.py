"""
Clip configuration and numeric tolerances.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral, Real
from typing import Literal

from clippoly.errors import InvalidInputError

# Tolerance for on-edge, coincidence and half-plane tests
EPSILON = 1e-9
# Denominators at or below this magnitude mean parallel/collinear segments
DENOMINATOR_EPSILON = 1e-12
DEFAULT_MAX_ITERATIONS = 1000

TraceMethod = Literal["traced", "refined"]
_TRACE_METHODS = ("traced", "refined")


@dataclass(frozen=True)
class ClipConfig:
    """Immutable settings for a clip or mesh-clip call.

    Attributes:
        epsilon: Tolerance used by the on-edge, inside and half-plane tests.
        max_iterations: Ceiling on boundary-walk steps before the trace is
            abandoned with IterationLimitExceededError.
        method: Boundary tracing strategy. "refined" (default) merges shared
            vertices, splits on-edge touches and precomputes every crossing,
            then walks the cycle of edges whose endpoints are all inside.
            "traced" resolves crossings lazily while walking and fails on
            vertices lying exactly on the other boundary.
        workers: Number of threads used by clip_mesh to clip faces
            concurrently. 1 keeps clipping on the calling thread.

    Raises:
        InvalidInputError: If any field is out of range
    """

    epsilon: float = EPSILON
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    method: TraceMethod = "refined"
    workers: int = 1

    def __post_init__(self) -> None:
        """Validate field ranges."""
        _validate_clip_config(self)


def _validate_clip_config(config: ClipConfig) -> None:
    """Validate a ClipConfig instance.

    Args:
        config: The ClipConfig to validate

    Raises:
        InvalidInputError: If any field is invalid
    """
    if isinstance(config.epsilon, bool) or not isinstance(config.epsilon, Real):
        raise InvalidInputError(
            f"epsilon must be a real number, got {type(config.epsilon).__name__}"
        )
    if not config.epsilon >= 0:
        raise InvalidInputError(f"epsilon must be non-negative, got {config.epsilon}")

    if isinstance(config.max_iterations, bool) or not isinstance(config.max_iterations, Integral):
        raise InvalidInputError(
            f"max_iterations must be an integer, got {type(config.max_iterations).__name__}"
        )
    if config.max_iterations < 1:
        raise InvalidInputError(
            f"max_iterations must be at least 1, got {config.max_iterations}"
        )

    if config.method not in _TRACE_METHODS:
        raise InvalidInputError(
            f"method must be one of {_TRACE_METHODS}, got {config.method!r}"
        )

    if isinstance(config.workers, bool) or not isinstance(config.workers, Integral):
        raise InvalidInputError(
            f"workers must be an integer, got {type(config.workers).__name__}"
        )
    if config.workers < 1:
        raise InvalidInputError(f"workers must be at least 1, got {config.workers}")


DEFAULT_CONFIG = ClipConfig()
