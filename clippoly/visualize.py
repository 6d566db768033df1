"""
Raster debug rendering for clip inputs, results and node graphs.

Every function returns a new BGR image sized to fit its geometry; nothing
here affects clip results. Coordinates are projected with the y axis
pointing up.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from clippoly.graph import NodeGraph, Origin

# Try to import cv2, set flag if not available
try:
    import cv2

    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

MAX_DIM = 256.0
MARGIN = 12.0

BACKGROUND_COLOR = (245, 245, 245)
TARGET_COLOR = (220, 80, 30)
CLIP_COLOR = (20, 150, 20)
HIGHLIGHT_COLOR = (40, 40, 220)
RESULT_FILL_COLOR = (60, 180, 240)


def _ensure_cv2() -> None:
    """Raise an error if cv2 is not available."""
    if not HAS_CV2:
        raise ImportError(
            "OpenCV (cv2) is required for visualization functions. "
            "Install with: pip install clippoly[visualization]"
        )


class _Canvas:
    """Blank image plus the projection that fits a set of points into it."""

    def __init__(self, points: NDArray[np.float64], max_dim: float = MAX_DIM, margin: float = MARGIN) -> None:
        xy = points[:, :2]
        self.min_x, self.min_y = (float(v) for v in xy.min(axis=0))
        self.max_x, self.max_y = (float(v) for v in xy.max(axis=0))

        span_x = (self.max_x - self.min_x) or 1.0
        span_y = (self.max_y - self.min_y) or 1.0
        self.scale = max(max_dim / max(span_x, span_y), 1.0)
        self.margin = margin

        width = max(int(math.ceil(span_x * self.scale + margin * 2)), 1)
        height = max(int(math.ceil(span_y * self.scale + margin * 2)), 1)
        self.image = np.full((height, width, 3), BACKGROUND_COLOR, dtype=np.uint8)

    def project(self, point: Sequence[float]) -> Tuple[int, int]:
        x = (float(point[0]) - self.min_x) * self.scale + self.margin
        y = (self.max_y - float(point[1])) * self.scale + self.margin
        return int(round(x)), int(round(y))

    def pixels(self, polygon: ArrayLike) -> NDArray[np.int32]:
        """Projected polygon in the (N, 1, 2) int32 layout OpenCV expects."""
        pts = [self.project(p) for p in np.asarray(polygon, dtype=np.float64)]
        return np.array(pts, dtype=np.int32).reshape((-1, 1, 2))


def _stack(groups: Iterable[ArrayLike]) -> NDArray[np.float64]:
    arrays = []
    for group in groups:
        arr = np.asarray(group, dtype=np.float64)
        if arr.size == 0:
            continue
        arrays.append(arr.reshape(-1, arr.shape[-1])[:, :2])
    if not arrays:
        return np.zeros((1, 2), dtype=np.float64)
    return np.vstack(arrays)


def draw_clip_result(
    target: ArrayLike,
    clip: ArrayLike,
    triangles: Sequence[ArrayLike],
    thickness: int = 1
) -> NDArray[np.uint8]:
    """
    Draw the two input outlines over the filled result triangles.

    Parameters:
        target: Target polygon (N, 2|3)
        clip: Clip polygon (K, 2|3)
        triangles: Clip result, each (3, 2|3)
        thickness: Outline thickness

    Returns:
        BGR image
    """
    _ensure_cv2()
    canvas = _Canvas(_stack([target, clip, *triangles]))

    for tri in triangles:
        cv2.fillPoly(canvas.image, [canvas.pixels(tri)], RESULT_FILL_COLOR)
    for tri in triangles:
        cv2.polylines(canvas.image, [canvas.pixels(tri)], isClosed=True, color=HIGHLIGHT_COLOR, thickness=1)

    cv2.polylines(canvas.image, [canvas.pixels(target)], isClosed=True, color=TARGET_COLOR, thickness=thickness)
    cv2.polylines(canvas.image, [canvas.pixels(clip)], isClosed=True, color=CLIP_COLOR, thickness=thickness)
    return canvas.image


def draw_segments(
    a1: Sequence[float],
    a2: Sequence[float],
    b1: Sequence[float],
    b2: Sequence[float],
    extras: Optional[Sequence[Sequence[float]]] = None
) -> NDArray[np.uint8]:
    """Draw two segments, plus optional marker points such as their crossing."""
    _ensure_cv2()
    extras = list(extras) if extras else []
    canvas = _Canvas(_stack([[a1, a2], [b1, b2], extras]))

    cv2.line(canvas.image, canvas.project(a1), canvas.project(a2), TARGET_COLOR, 1)
    cv2.line(canvas.image, canvas.project(b1), canvas.project(b2), HIGHLIGHT_COLOR, 1)
    for point in extras:
        cv2.circle(canvas.image, canvas.project(point), 2, HIGHLIGHT_COLOR, -1)
    return canvas.image


def _hue_color(index: int, count: int) -> Tuple[int, int, int]:
    """Evenly spaced BGR hue for item index of count."""
    hue = int(180 * index / max(count, 1)) % 180
    hsv = np.array([[[hue, 200, 220]]], dtype=np.uint8)
    b, g, r = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)[0, 0]
    return int(b), int(g), int(r)


def draw_node_graph(
    graph: NodeGraph,
    highlight: Optional[Sequence[Tuple[int, int]]] = None
) -> NDArray[np.uint8]:
    """
    Draw every linked edge of a node graph in its own hue, then the nodes.

    Inside nodes are filled, outside nodes hollow; crossing nodes use the
    highlight colour. Highlighted edges (pairs of node ids) are drawn thick.

    Parameters:
        graph: Node graph, typically ClipReport.graph
        highlight: Edges to emphasise, e.g. consecutive pairs of the loop

    Returns:
        BGR image
    """
    _ensure_cv2()
    nodes = [node for node in graph if node.neighbors]
    canvas = _Canvas(_stack([[node.coord for node in nodes]]))

    edges = graph.edges()
    for i, (a, b) in enumerate(edges):
        color = _hue_color(i, len(edges))
        cv2.line(canvas.image, canvas.project(graph[a].coord), canvas.project(graph[b].coord), color, 1)

    for a, b in highlight or []:
        cv2.line(canvas.image, canvas.project(graph[a].coord), canvas.project(graph[b].coord), HIGHLIGHT_COLOR, 3)

    for node in nodes:
        if node.origin is Origin.CROSSING:
            color = HIGHLIGHT_COLOR
        elif node.origin is Origin.TARGET:
            color = TARGET_COLOR
        else:
            color = CLIP_COLOR
        cv2.circle(canvas.image, canvas.project(node.coord), 3, color, -1 if node.inside else 1)
    return canvas.image


def draw_mesh_clip(
    vertices: ArrayLike,
    faces: ArrayLike,
    clip: ArrayLike,
    result: Tuple[ArrayLike, ArrayLike]
) -> NDArray[np.uint8]:
    """
    Draw an input mesh wireframe, the clip outline and the clipped faces.

    Parameters:
        vertices: Input vertices (M, 2|3)
        faces: Input faces (K, 3)
        clip: Clip polygon (N, 2|3)
        result: Output (vertices, faces), e.g. a MeshClipResult

    Returns:
        BGR image
    """
    _ensure_cv2()
    verts = np.asarray(vertices, dtype=np.float64)
    face_arr = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    out_verts, out_faces = result
    out_verts = np.asarray(out_verts, dtype=np.float64)
    out_faces = np.asarray(out_faces, dtype=np.int64).reshape(-1, 3)

    canvas = _Canvas(_stack([verts, clip, out_verts]))

    for face in out_faces:
        cv2.fillPoly(canvas.image, [canvas.pixels(out_verts[face])], RESULT_FILL_COLOR)
    for face in face_arr:
        cv2.polylines(canvas.image, [canvas.pixels(verts[face])], isClosed=True, color=TARGET_COLOR, thickness=1)
    for face in out_faces:
        cv2.polylines(canvas.image, [canvas.pixels(out_verts[face])], isClosed=True, color=HIGHLIGHT_COLOR, thickness=1)
    cv2.polylines(canvas.image, [canvas.pixels(clip)], isClosed=True, color=CLIP_COLOR, thickness=2)
    return canvas.image


def save_image(path: str | Path, image: NDArray[np.uint8]) -> Path:
    """Write image to path, creating parent directories. Returns the path."""
    _ensure_cv2()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"failed to write image to {path}")
    return path
