"""
Fan triangulation of boundary loops.
"""

from typing import List
import numpy as np
from numpy.typing import ArrayLike, NDArray

from clippoly.errors import TriangulationInputTooSmallError


def fan_triangulate(loop: ArrayLike) -> List[NDArray[np.float64]]:
    """
    Split an n-gon into n-2 triangles sharing its first vertex.

    The fan is only valid for convex loops. Convexity is assumed, not
    checked: a concave loop yields overlapping or inverted triangles.

    Parameters:
        loop: Ordered loop vertices (N, 3)

    Returns:
        List of triangles, each an array of shape (3, 3)

    Raises:
        TriangulationInputTooSmallError: If the loop has fewer than 3 vertices
    """
    pts = np.asarray(loop, dtype=np.float64)
    n = pts.shape[0] if pts.ndim == 2 else 0
    if n < 3:
        raise TriangulationInputTooSmallError(
            f"triangulate: not enough vertices (need at least 3, got {n})"
        )

    return [
        np.array([pts[0], pts[i], pts[i + 1]], dtype=np.float64)
        for i in range(1, n - 1)
    ]

