"""
Debug logging utilities for the clipping pipeline.

All clippoly modules log under the ``clippoly`` logger hierarchy. The library
never touches the root logger; call :func:`setup_debug_logging` to get a
stream handler while investigating a degenerate clip.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

LOGGER_NAME = "clippoly"
DEBUG_FORMAT = "[%(levelname)s] %(name)s - %(message)s"

logger = logging.getLogger(LOGGER_NAME)

_debug_handler: logging.Handler | None = None


def setup_debug_logging(level: int = logging.DEBUG) -> logging.Logger:
    """Attach a stream handler to the clippoly logger.

    Calling it again only updates the level.

    Args:
        level: Logging level for the clippoly logger

    Returns:
        The configured clippoly logger
    """
    global _debug_handler

    if _debug_handler is None:
        _debug_handler = logging.StreamHandler()
        _debug_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        logger.addHandler(_debug_handler)
    logger.setLevel(level)
    return logger


def disable_debug_logging() -> None:
    """Remove the handler installed by setup_debug_logging and reset the level."""
    global _debug_handler

    if _debug_handler is not None:
        logger.removeHandler(_debug_handler)
        _debug_handler = None
    logger.setLevel(logging.NOTSET)


def format_point(point: Sequence[float] | NDArray[np.floating[Any]], precision: int = 3) -> str:
    """Format a 2-D or 3-D point as ``(x, y, z)``."""
    return "(" + ", ".join(f"{float(v):.{precision}f}" for v in point) + ")"


def format_polygon(
    polygon: Iterable[Sequence[float]] | NDArray[np.floating[Any]],
    precision: int = 3,
    max_vertices: int = 8,
) -> str:
    """Format a polygon as a bracketed vertex list, eliding long ones."""
    vertices = [format_point(v, precision) for v in polygon]
    if len(vertices) > max_vertices:
        hidden = len(vertices) - max_vertices
        vertices = vertices[:max_vertices] + [f"... +{hidden} more"]
    return "[" + ", ".join(vertices) + "]"


def log_clipping_stage(stage: Any, **details: Any) -> None:
    """Log a tracer state transition with optional key=value details."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    name = getattr(stage, "value", stage)
    if details:
        extra = " ".join(f"{key}={value}" for key, value in details.items())
        logger.debug("stage=%s %s", name, extra)
    else:
        logger.debug("stage=%s", name)


def log_loop(loop: Sequence[Sequence[float]] | NDArray[np.floating[Any]], label: str = "loop") -> None:
    """Log a traced boundary loop."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s (%d vertices): %s", label, len(loop), format_polygon(loop))


def log_mesh_summary(
    input_faces: int,
    output_vertices: int,
    output_faces: int,
    skipped_faces: Sequence[int],
) -> None:
    """Log the outcome of a mesh clip."""
    logger.info(
        "clipped mesh: %d input faces -> %d vertices, %d faces (%d skipped)",
        input_faces,
        output_vertices,
        output_faces,
        len(skipped_faces),
    )
