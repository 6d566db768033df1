"""
Half-plane (Sutherland-Hodgman) clipping against a convex polygon.

This is the cheap path used when the two boundaries do not cross. It only
produces correct results for convex clip polygons.
"""

from typing import List
import numpy as np
from numpy.typing import NDArray

from clippoly.config import EPSILON
from clippoly.geometry import signed_area


def clip_polygon_halfplane(
    polygon: NDArray[np.float64],
    line_start: NDArray[np.float64],
    line_end: NDArray[np.float64],
    eps: float = EPSILON
) -> NDArray[np.float64]:
    """
    Clip polygon against the half-plane left of the directed line start->end.

    Implements Sutherland-Hodgman for a single half-plane. Points whose
    signed distance is at least -eps are kept. Exit and entry points are
    interpolated along the polygon edge, z included.

    Parameters:
        polygon: Polygon vertices (N, 3)
        line_start: Start of the boundary line, (2,) or (3,)
        line_end: End of the boundary line, (2,) or (3,)
        eps: Tolerance on the kept side

    Returns:
        Clipped polygon vertices (M, 3), may be empty array
    """
    if polygon.shape[0] == 0:
        return polygon.copy()

    origin = np.asarray(line_start, dtype=np.float64)[:2]
    direction = np.asarray(line_end, dtype=np.float64)[:2] - origin

    def signed_distance(point: NDArray[np.float64]) -> float:
        """Cross product of the line direction with origin->point; positive on the left."""
        return float(direction[0] * (point[1] - origin[1]) - direction[1] * (point[0] - origin[0]))

    def compute_intersection(p1: NDArray[np.float64], p2: NDArray[np.float64]) -> NDArray[np.float64]:
        """Compute intersection of edge p1->p2 with the boundary line."""
        d1 = signed_distance(p1)
        d2 = signed_distance(p2)
        den = d1 - d2
        t = d1 / den if den != 0 else 0.0

        # Clamp to [0, 1] to absorb floating point drift
        t = min(max(t, 0.0), 1.0)
        return p1 + t * (p2 - p1)

    output_vertices = []
    n = polygon.shape[0]

    for i in range(n):
        current = polygon[i]
        next_vertex = polygon[(i + 1) % n]

        current_inside = signed_distance(current) >= -eps
        next_inside = signed_distance(next_vertex) >= -eps

        if current_inside:
            output_vertices.append(current.copy())
            if not next_inside:
                # Edge exits the half-plane
                output_vertices.append(compute_intersection(current, next_vertex))
        elif next_inside:
            # Edge enters the half-plane
            output_vertices.append(compute_intersection(current, next_vertex))

    if len(output_vertices) == 0:
        return np.empty((0, 3), dtype=np.float64)

    return np.array(output_vertices, dtype=np.float64)


def clip_polygon_convex(
    polygon: NDArray[np.float64],
    clip_polygon: NDArray[np.float64],
    eps: float = EPSILON
) -> NDArray[np.float64]:
    """
    Clip polygon against every edge of a convex clip polygon.

    The clip polygon is oriented counter-clockwise first so that its
    interior is always on the left of each edge.

    Parameters:
        polygon: Polygon to clip (N, 3)
        clip_polygon: Convex clip polygon (K, 3)
        eps: Tolerance for the half-plane tests and duplicate removal

    Returns:
        Clipped polygon vertices (M, 3). Empty when fewer than 3 distinct
        vertices survive.
    """
    frame = clip_polygon if signed_area(clip_polygon) >= 0 else clip_polygon[::-1]

    result = polygon
    k = frame.shape[0]
    for i in range(k):
        result = clip_polygon_halfplane(result, frame[i], frame[(i + 1) % k], eps)
        if result.shape[0] == 0:
            return result

    result = remove_duplicate_vertices(result, eps)
    if result.shape[0] < 3:
        return np.empty((0, 3), dtype=np.float64)
    return result


def remove_duplicate_vertices(
    polygon: NDArray[np.float64],
    eps: float = EPSILON
) -> NDArray[np.float64]:
    """
    Drop vertices that repeat their predecessor in xy, including the wrap-around.

    Parameters:
        polygon: Polygon vertices (N, 3)
        eps: Coincidence tolerance

    Returns:
        Polygon vertices (M, 3), M <= N
    """
    kept: List[NDArray[np.float64]] = []
    for vertex in polygon:
        if kept and np.all(np.abs(vertex[:2] - kept[-1][:2]) < eps):
            continue
        kept.append(vertex)

    while len(kept) > 1 and np.all(np.abs(kept[-1][:2] - kept[0][:2]) < eps):
        kept.pop()

    if not kept:
        return np.empty((0, 3), dtype=np.float64)
    return np.array(kept, dtype=np.float64)
