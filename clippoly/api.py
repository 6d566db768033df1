"""
Public API for clipping one polygon against another.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional
import numpy as np
from numpy.typing import ArrayLike, NDArray

from clippoly.clipping import clip_polygon_convex
from clippoly.config import DEFAULT_CONFIG, ClipConfig
from clippoly.debug import log_clipping_stage, log_loop
from clippoly.geometry import as_polygon, is_convex, is_inside_polygon, polygons_cross, to_coords, total_area
from clippoly.graph import NodeGraph
from clippoly.tracing import TraceState, trace_loop, trace_loop_refined
from clippoly.triangulate import fan_triangulate

Strategy = Literal[
    "disjoint",
    "target-contained",
    "clip-contained",
    "halfplane",
    "traced",
    "refined",
]


@dataclass
class ClipReport:
    """
    Outcome of clipping a target polygon against a clip polygon.

    Attributes:
        triangles: Fan triangles of the overlap region, each shape (3, 3)
        strategy: Which path produced the triangles
        state: Terminal tracer state, None when no tracing was needed
        loop: Boundary loop of the overlap region (K, 3), empty when disjoint
        graph: Node graph built for tracing, None on the cheap paths
        loop_ids: Graph node ids of loop, empty on the cheap paths
    """
    triangles: List[NDArray[np.float64]]
    strategy: Strategy
    state: Optional[TraceState] = None
    loop: NDArray[np.float64] = field(default_factory=lambda: np.empty((0, 3), dtype=np.float64))
    graph: Optional[NodeGraph] = None
    loop_ids: List[int] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Returns True if the polygons overlap."""
        return len(self.triangles) > 0

    @property
    def area(self) -> float:
        """Summed xy area of the triangles."""
        return total_area(self.triangles)


def clip(
    target: ArrayLike,
    clip: ArrayLike,
    config: Optional[ClipConfig] = None
) -> List[NDArray[np.float64]]:
    """
    Clip target against clip and return the overlap as triangles.

    Parameters:
        target: Target polygon (N, 3) or (N, 2), implicitly closed
        clip: Clip polygon (K, 3) or (K, 2), implicitly closed
        config: Tolerances and tracing method; defaults to ClipConfig()

    Returns:
        List of triangles (3, 3); empty if the polygons do not overlap

    Raises:
        InvalidInputError: If either polygon is malformed
        TraceFailureError: If the overlap boundary cannot be traced
        IterationLimitExceededError: If tracing does not terminate in time

    Example:
        >>> square = [(0, 0, 0), (4, 0, 0), (4, 4, 0), (0, 4, 0)]
        >>> window = [(2, -1, 0), (5, -1, 0), (5, 3, 0), (2, 3, 0)]
        >>> triangles = clip(square, window)
    """
    return clip_detailed(target, clip, config).triangles


def clip_detailed(
    target: ArrayLike,
    clip: ArrayLike,
    config: Optional[ClipConfig] = None
) -> ClipReport:
    """
    Clip target against clip, keeping the intermediate artefacts.

    Parameters:
        target: Target polygon (N, 3) or (N, 2)
        clip: Clip polygon (K, 3) or (K, 2)
        config: Tolerances and tracing method

    Returns:
        ClipReport with triangles, strategy, loop and (when traced) the graph
    """
    # -------------------------------------------------------------------------
    # Step 1: Input validation
    # -------------------------------------------------------------------------
    cfg = config if config is not None else DEFAULT_CONFIG
    target_poly = as_polygon(target, "target")
    clip_poly = as_polygon(clip, "clip")
    eps = cfg.epsilon

    # -------------------------------------------------------------------------
    # Step 2: Cheap path when no edges cross
    # -------------------------------------------------------------------------
    if not polygons_cross(target_poly, clip_poly):
        return _clip_without_crossings(target_poly, clip_poly, eps)

    # -------------------------------------------------------------------------
    # Step 3: Build and classify the combined graph
    # -------------------------------------------------------------------------
    log_clipping_stage(TraceState.BUILDING_GRAPH, target=len(target_poly), clip=len(clip_poly))
    graph = NodeGraph.from_polygons(to_coords(target_poly), to_coords(clip_poly))

    log_clipping_stage(TraceState.CLASSIFYING)
    target_inside = graph.classify(graph.target_ring, graph.clip_ring, eps)
    clip_inside = graph.classify(graph.clip_ring, graph.target_ring, eps)

    if target_inside:
        return _fan_report(target_poly, "target-contained", graph)
    if clip_inside:
        return _fan_report(clip_poly, "clip-contained", graph)

    # -------------------------------------------------------------------------
    # Step 4: Trace the overlap boundary and triangulate
    # -------------------------------------------------------------------------
    if cfg.method == "refined":
        loop_ids = trace_loop_refined(graph, eps, cfg.max_iterations)
    else:
        loop_ids = trace_loop(graph, cfg.max_iterations)

    loop = np.array(graph.coords(loop_ids), dtype=np.float64)
    log_loop(loop, label=f"{cfg.method} loop")

    return ClipReport(
        triangles=fan_triangulate(loop),
        strategy=cfg.method,
        state=TraceState.CLOSED_LOOP,
        loop=loop,
        graph=graph,
        loop_ids=list(loop_ids),
    )


def _clip_without_crossings(
    target: NDArray[np.float64],
    clip: NDArray[np.float64],
    eps: float
) -> ClipReport:
    """Resolve containment, convex half-plane clipping or disjointness."""
    if all(is_inside_polygon(p, clip, eps) for p in target):
        return _fan_report(target, "target-contained")
    if all(is_inside_polygon(p, target, eps) for p in clip):
        return _fan_report(clip, "clip-contained")

    if is_convex(clip, eps):
        clipped = clip_polygon_convex(target, clip, eps)
        if clipped.shape[0] >= 3 and total_area([clipped]) > eps:
            log_loop(clipped, label="halfplane loop")
            return ClipReport(
                triangles=fan_triangulate(clipped),
                strategy="halfplane",
                loop=clipped,
            )

    log_clipping_stage("disjoint")
    return ClipReport(triangles=[], strategy="disjoint")


def _fan_report(
    polygon: NDArray[np.float64],
    strategy: Strategy,
    graph: Optional[NodeGraph] = None
) -> ClipReport:
    log_clipping_stage(strategy)
    return ClipReport(
        triangles=fan_triangulate(polygon),
        strategy=strategy,
        loop=polygon.copy(),
        graph=graph,
    )
