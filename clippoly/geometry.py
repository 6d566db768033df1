"""
Planar geometry primitives: polygon validation, point classification,
segment intersection and polygon measures.

Only x and y take part in any test. The third coordinate is attribute data
that is carried through linear interpolation.
"""

from typing import Any, List, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import ArrayLike, NDArray

from clippoly.config import DENOMINATOR_EPSILON, EPSILON
from clippoly.errors import InvalidInputError

Coord = Tuple[float, float, float]


def as_polygon(points: ArrayLike, name: str = "polygon") -> NDArray[np.float64]:
    """
    Convert polygon input into a float64 array of shape (N, 3).

    Parameters:
        points: Vertex sequence of shape (N, 3), or (N, 2) which gets z = 0
        name: Label used in error messages ("target", "clip", ...)

    Returns:
        Polygon vertices (N, 3), N >= 3

    Raises:
        InvalidInputError: If the input is not a 2-D vertex array, has
            non-finite coordinates, or has fewer than 3 vertices
    """
    try:
        polygon = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} polygon is not numeric: {e}") from e

    if polygon.ndim != 2 or polygon.shape[1] not in (2, 3):
        raise InvalidInputError(
            f"{name} polygon must have shape (N, 2) or (N, 3), got {polygon.shape}"
        )
    if not is_valid_polygon(polygon):
        raise InvalidInputError(
            f"{name} polygon must have at least 3 vertices, got {polygon.shape[0]}"
        )
    if not np.all(np.isfinite(polygon)):
        raise InvalidInputError(f"{name} polygon contains non-finite coordinates")

    if polygon.shape[1] == 2:
        polygon = np.column_stack([polygon, np.zeros(polygon.shape[0])])
    return polygon


def to_coords(polygon: NDArray[np.float64]) -> List[Coord]:
    """Convert an (N, 3) array into a list of plain float tuples."""
    return [(float(x), float(y), float(z)) for x, y, z in polygon.tolist()]


def is_valid_polygon(polygon: NDArray[np.float64]) -> bool:
    """
    Check if polygon has sufficient vertices to be valid.

    Parameters:
        polygon: Polygon vertices (N, 2) or (N, 3)

    Returns:
        True if polygon has at least 3 vertices
    """
    return polygon.shape[0] >= 3


def compute_bounding_box(
    polygon: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Compute the axis-aligned bounding box of a polygon in the xy plane.

    Parameters:
        polygon: Polygon vertices (N, 2) or (N, 3)

    Returns:
        Tuple of (min_point, max_point), each shape (2,)
    """
    if polygon.shape[0] == 0:
        raise ValueError("polygon must contain at least one vertex")
    min_point = np.min(polygon[:, :2], axis=0).astype(np.float64)
    max_point = np.max(polygon[:, :2], axis=0).astype(np.float64)
    return min_point, max_point


def bounding_boxes_overlap(
    poly1: NDArray[np.float64],
    poly2: NDArray[np.float64]
) -> bool:
    """
    Check whether the bounding boxes of two polygons overlap with positive area.

    Boxes that only touch along a side or at a corner do not overlap.
    """
    if poly1.shape[0] == 0 or poly2.shape[0] == 0:
        return False
    min1, max1 = compute_bounding_box(poly1)
    min2, max2 = compute_bounding_box(poly2)
    return bool(
        min1[0] < max2[0] and max1[0] > min2[0]
        and min1[1] < max2[1] and max1[1] > min2[1]
    )


def point_on_edge(
    px: float, py: float,
    x1: float, y1: float,
    x2: float, y2: float,
    eps: float = EPSILON
) -> bool:
    """
    Test whether point p lies on segment (x1, y1)-(x2, y2).

    The point must be inside the segment's bounding box (inclusive, grown by
    eps) and its cross-product deviation from the line must be below eps.
    Endpoints count as on the edge.
    """
    if (px < min(x1, x2) - eps or px > max(x1, x2) + eps
            or py < min(y1, y2) - eps or py > max(y1, y2) + eps):
        return False
    cross = (x2 - x1) * (py - y1) - (y2 - y1) * (px - x1)
    return abs(cross) < eps


def is_inside_polygon(
    point: Sequence[float],
    polygon: Sequence[Sequence[float]],
    eps: float = EPSILON
) -> bool:
    """
    Even/odd point-in-polygon test where the boundary counts as inside.

    Coincidence with a vertex, lying on an edge, or lying on the ray crossing
    of an edge short-circuits to True, which sidesteps ray-tangency
    ambiguity at vertices. Horizontal edges never toggle parity.

    Parameters:
        point: (x, y[, z]) coordinate
        polygon: Sequence of (x, y[, z]) vertices, implicitly closed
        eps: Coincidence tolerance

    Returns:
        True if the point is inside or on the boundary
    """
    n = len(polygon)
    if n < 3:
        return False

    px = float(point[0])
    py = float(point[1])
    inside = False

    prev = polygon[n - 1]
    for curr in polygon:
        x1, y1 = float(prev[0]), float(prev[1])
        x2, y2 = float(curr[0]), float(curr[1])
        prev = curr

        if point_on_edge(px, py, x1, y1, x2, y2, eps):
            return True
        if (abs(px - x1) < eps and abs(py - y1) < eps) or (abs(px - x2) < eps and abs(py - y2) < eps):
            return True

        if abs(y1 - y2) < eps:
            continue
        if (y1 > py) != (y2 > py):
            x_int = (x2 - x1) * (py - y1) / (y2 - y1) + x1
            if abs(px - x_int) < eps:
                return True
            if px < x_int:
                inside = not inside

    return inside


def segment_parameters(
    a1: Sequence[float], a2: Sequence[float],
    b1: Sequence[float], b2: Sequence[float],
    den_eps: float = DENOMINATOR_EPSILON
) -> Optional[Tuple[float, float]]:
    """
    Solve for the interior crossing of segments a1-a2 and b1-b2.

    Parameters:
        a1, a2: Endpoints of segment a
        b1, b2: Endpoints of segment b
        den_eps: Denominators with magnitude at or below this are treated as
            parallel or collinear

    Returns:
        (t, u) with the crossing at a1 + t*(a2 - a1) = b1 + u*(b2 - b1), or
        None if the segments do not cross strictly inside both. Endpoint
        touches and collinear overlaps are not crossings.
    """
    a1x, a1y = a1[0], a1[1]
    a2x, a2y = a2[0], a2[1]
    b1x, b1y = b1[0], b1[1]
    b2x, b2y = b2[0], b2[1]

    # Quick reject using bounding boxes
    if (max(a1x, a2x) < min(b1x, b2x) or min(a1x, a2x) > max(b1x, b2x)
            or max(a1y, a2y) < min(b1y, b2y) or min(a1y, a2y) > max(b1y, b2y)):
        return None

    ax = a2x - a1x
    ay = a2y - a1y
    bx = b2x - b1x
    by = b2y - b1y
    den = ax * by - ay * bx
    if abs(den) <= den_eps:
        return None

    cx = b1x - a1x
    cy = b1y - a1y
    t = (cx * by - cy * bx) / den
    u = (cx * ay - cy * ax) / den

    if t <= 0 or t >= 1 or u <= 0 or u >= 1:
        return None
    return t, u


def segments_cross(
    a1: Sequence[float], a2: Sequence[float],
    b1: Sequence[float], b2: Sequence[float]
) -> bool:
    """Check if two segments cross strictly inside both (endpoints excluded)."""
    return segment_parameters(a1, a2, b1, b2) is not None


def interpolate(a1: Sequence[float], a2: Sequence[float], t: float) -> Coord:
    """Point at parameter t along a1-a2; z is interpolated with the same t."""
    return (
        a1[0] + t * (a2[0] - a1[0]),
        a1[1] + t * (a2[1] - a1[1]),
        a1[2] + t * (a2[2] - a1[2]),
    )


def polygons_cross(poly1: NDArray[np.float64], poly2: NDArray[np.float64]) -> bool:
    """
    Check if any edge of poly1 crosses any edge of poly2.

    Bounding boxes are compared first; touching boxes never cross.
    """
    if not bounding_boxes_overlap(poly1, poly2):
        return False

    coords1 = poly1[:, :2].tolist()
    coords2 = poly2[:, :2].tolist()
    n1, n2 = len(coords1), len(coords2)
    for i in range(n1):
        a1, a2 = coords1[i], coords1[(i + 1) % n1]
        for j in range(n2):
            if segments_cross(a1, a2, coords2[j], coords2[(j + 1) % n2]):
                return True
    return False


def signed_area(polygon: ArrayLike) -> float:
    """Shoelace area in the xy plane; positive for counter-clockwise loops."""
    pts = np.asarray(polygon, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[0] < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)))


def polygon_area(polygon: ArrayLike) -> float:
    """Absolute shoelace area in the xy plane."""
    return abs(signed_area(polygon))


def total_area(polygons: Sequence[ArrayLike]) -> float:
    """Summed absolute area of a collection of polygons (e.g. clip triangles)."""
    return float(sum(polygon_area(p) for p in polygons))


def is_convex(polygon: NDArray[Any], eps: float = EPSILON) -> bool:
    """
    Check if a polygon is convex in the xy plane.

    Collinear vertices are tolerated. A polygon whose vertices are all
    collinear is not convex.
    """
    pts = polygon[:, :2].tolist()
    n = len(pts)
    if n < 3:
        return False

    sign = 0
    for i in range(n):
        x0, y0 = pts[i]
        x1, y1 = pts[(i + 1) % n]
        x2, y2 = pts[(i + 2) % n]
        cross = (x1 - x0) * (y2 - y1) - (y1 - y0) * (x2 - x1)
        if abs(cross) <= eps:
            continue
        current = 1 if cross > 0 else -1
        if sign == 0:
            sign = current
        elif current != sign:
            return False
    return sign != 0
