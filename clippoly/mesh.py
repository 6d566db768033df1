"""
Mesh clipping: clip every triangle of a mesh against one polygon and weld
the pieces back into an indexed mesh.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from clippoly import api
from clippoly.config import DEFAULT_CONFIG, ClipConfig
from clippoly.debug import log_mesh_summary
from clippoly.errors import ClipError, InvalidInputError
from clippoly.geometry import Coord, as_polygon, total_area

logger = logging.getLogger(__name__)


@dataclass
class MeshClipResult:
    """Welded output of clip_mesh.

    Unpacks as ``vertices, faces = clip_mesh(...)``.

    Attributes:
        vertices: Unique output vertices (M, 3) float64
        faces: Triangle vertex indices (K, 3) int64
        skipped_faces: Indices of input faces whose clip raised an error
    """

    vertices: NDArray[np.float64] = field(
        default_factory=lambda: np.empty((0, 3), dtype=np.float64)
    )
    faces: NDArray[np.int64] = field(
        default_factory=lambda: np.empty((0, 3), dtype=np.int64)
    )
    skipped_faces: List[int] = field(default_factory=list)

    @property
    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def num_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def total_area(self) -> float:
        """Summed xy area of the output faces."""
        if self.num_faces == 0:
            return 0.0
        return total_area(self.vertices[self.faces])

    def __iter__(self) -> Iterator[NDArray]:
        yield self.vertices
        yield self.faces


def clip_mesh(
    vertices: ArrayLike,
    faces: ArrayLike,
    clip: ArrayLike,
    config: Optional[ClipConfig] = None,
) -> MeshClipResult:
    """Clip every face of a triangle mesh against a polygon.

    Faces are clipped independently. A face whose clip raises a ClipError is
    logged and listed in ``skipped_faces``; the rest of the mesh is still
    produced. Output vertices are welded by exact coordinate in face order,
    so the same input always yields the same indices.

    Args:
        vertices: Mesh vertices (M, 3), or (M, 2) which gets z = 0
        faces: Integer vertex indices (K, 3)
        clip: Clip polygon (N, 3) or (N, 2)
        config: Tolerances, tracing method and worker count

    Returns:
        MeshClipResult with welded vertices and faces, possibly empty

    Raises:
        InvalidInputError: If the arrays are malformed or indices out of range
    """
    cfg = config if config is not None else DEFAULT_CONFIG
    clip_poly = as_polygon(clip, "clip")
    verts, face_arr = _validate_mesh(vertices, faces)

    if face_arr.shape[0] == 0:
        log_mesh_summary(0, 0, 0, [])
        return MeshClipResult()

    welder = _VertexWelder()
    out_faces: List[Tuple[int, int, int]] = []
    skipped: List[int] = []

    for index, triangles in _clip_faces(verts, face_arr, clip_poly, cfg):
        if triangles is None:
            skipped.append(index)
            continue
        for tri in triangles:
            out_faces.append((welder.add(tri[0]), welder.add(tri[1]), welder.add(tri[2])))

    result = MeshClipResult(
        vertices=welder.to_array(),
        faces=np.array(out_faces, dtype=np.int64).reshape(-1, 3),
        skipped_faces=skipped,
    )
    log_mesh_summary(int(face_arr.shape[0]), result.num_vertices, result.num_faces, skipped)
    return result


def _validate_mesh(
    vertices: ArrayLike,
    faces: ArrayLike,
) -> Tuple[NDArray[np.float64], NDArray[np.int64]]:
    try:
        verts = np.asarray(vertices, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"vertices are not numeric: {e}") from e
    face_arr = np.asarray(faces)

    if verts.size == 0 or face_arr.size == 0:
        return np.empty((0, 3), dtype=np.float64), np.empty((0, 3), dtype=np.int64)

    if verts.ndim != 2 or verts.shape[1] not in (2, 3):
        raise InvalidInputError(f"vertices must have shape (M, 2) or (M, 3), got {verts.shape}")
    if not np.all(np.isfinite(verts)):
        raise InvalidInputError("vertices contain non-finite coordinates")
    if verts.shape[1] == 2:
        verts = np.column_stack([verts, np.zeros(verts.shape[0])])

    if face_arr.ndim != 2 or face_arr.shape[1] != 3:
        raise InvalidInputError(f"faces must have shape (K, 3), got {face_arr.shape}")
    if not np.issubdtype(face_arr.dtype, np.integer):
        raise InvalidInputError(f"faces must be integer indices, got dtype {face_arr.dtype}")

    face_arr = face_arr.astype(np.int64)
    if face_arr.min() < 0 or face_arr.max() >= verts.shape[0]:
        raise InvalidInputError(
            f"face indices must be in [0, {verts.shape[0] - 1}], "
            f"got range [{face_arr.min()}, {face_arr.max()}]"
        )
    return verts, face_arr


def _clip_face(
    polygon: NDArray[np.float64],
    clip_poly: NDArray[np.float64],
    config: ClipConfig,
) -> List[NDArray[np.float64]]:
    return api.clip(polygon, clip_poly, config)


def _clip_faces(
    verts: NDArray[np.float64],
    faces: NDArray[np.int64],
    clip_poly: NDArray[np.float64],
    config: ClipConfig,
) -> Iterator[Tuple[int, Optional[List[NDArray[np.float64]]]]]:
    """Yield (face index, triangles or None on error) in face order."""
    polygons = [verts[face] for face in faces]

    if config.workers == 1:
        for index, polygon in enumerate(polygons):
            try:
                yield index, _clip_face(polygon, clip_poly, config)
            except ClipError as e:
                logger.warning("skipping face %d: %s", index, e)
                yield index, None
        return

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = [
            executor.submit(_clip_face, polygon, clip_poly, config)
            for polygon in polygons
        ]
        for index, future in enumerate(futures):
            try:
                yield index, future.result()
            except ClipError as e:
                logger.warning("skipping face %d: %s", index, e)
                yield index, None


class _VertexWelder:
    """Exact coordinate to index map, preserving first-seen order."""

    def __init__(self) -> None:
        self._index: Dict[Coord, int] = {}
        self._coords: List[Coord] = []

    def add(self, vertex: NDArray[np.float64]) -> int:
        key = (float(vertex[0]), float(vertex[1]), float(vertex[2]))
        index = self._index.get(key)
        if index is None:
            index = len(self._coords)
            self._index[key] = index
            self._coords.append(key)
        return index

    def to_array(self) -> NDArray[np.float64]:
        return np.array(self._coords, dtype=np.float64).reshape(-1, 3)
