"""
Boundary tracing over the combined node graph.

Two strategies produce the single ordered loop of node ids bounding the
overlap region:

- trace_loop: walks from the first target node that is inside the clip
  polygon or has an edge crossing it, and resolves crossings lazily,
  splitting an edge the moment the walk reaches it. Vertices lying exactly
  on the other boundary are not handled; use the refined walk for those.
- trace_loop_refined: merges coincident vertices, splits on-edge touches and
  every crossing up front, then walks the cycle formed by the edges whose
  endpoints are all inside.

Both raise instead of returning a partial loop.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from clippoly.config import DEFAULT_MAX_ITERATIONS, EPSILON
from clippoly.debug import log_clipping_stage
from clippoly.errors import IterationLimitExceededError, TraceFailureError
from clippoly.geometry import Coord
from clippoly.graph import Edge, NodeGraph, Origin


class TraceState(Enum):
    """States of a clip call, in order; the last three are terminal."""

    BUILDING_GRAPH = "building-graph"
    CLASSIFYING = "classifying"
    TRACING = "tracing"
    CLOSED_LOOP = "closed-loop"
    TRACE_FAILED = "trace-failed"
    ITERATION_LIMIT_EXCEEDED = "iteration-limit-exceeded"


# =============================================================================
# Lazy walk
# =============================================================================

def trace_loop(graph: NodeGraph, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> List[int]:
    """
    Walk the graph from a target node until the loop closes.

    The walk starts at the first target node that is inside the clip
    polygon or has an edge crossing it. At each node the neighbors are
    inspected in adjacency order. An edge that crosses the opposite boundary
    is split on the spot and the walk steps onto the crossing; otherwise the
    walk steps onto the first neighbor flagged inside. The walk never turns
    straight back onto the node it came from. The loop is closed when a
    neighbor is the loop's first node.

    Parameters:
        graph: Classified graph built by NodeGraph.from_polygons; mutated
        max_iterations: Ceiling on walk steps

    Returns:
        Ordered node ids of the boundary loop

    Raises:
        TraceFailureError: If a node has no valid successor
        IterationLimitExceededError: If the loop does not close in time
    """
    log_clipping_stage(TraceState.TRACING, method="traced")

    current = _start_node(graph)
    if current is None:
        log_clipping_stage(TraceState.TRACE_FAILED, nodes=0)
        raise TraceFailureError(
            "no target node touches the clip polygon", TraceState.TRACE_FAILED
        )

    loop: List[int] = []
    previous: Optional[int] = None

    for _ in range(max_iterations):
        next_id, closed = _find_next_node(graph, current, previous, loop)
        if closed:
            log_clipping_stage(TraceState.CLOSED_LOOP, nodes=len(loop))
            return loop

        if next_id is None:
            log_clipping_stage(TraceState.TRACE_FAILED, at=current, nodes=len(loop))
            raise TraceFailureError(
                f"failed to find next node in intersection loop after node {current}",
                TraceState.TRACE_FAILED,
            )

        loop.append(next_id)
        previous, current = current, next_id

    log_clipping_stage(TraceState.ITERATION_LIMIT_EXCEEDED, nodes=len(loop))
    raise IterationLimitExceededError(
        f"exceeded max iterations ({max_iterations}) while tracing loop",
        TraceState.ITERATION_LIMIT_EXCEEDED,
    )


def _start_node(graph: NodeGraph) -> Optional[int]:
    """First target node that is inside, or that has an edge crossing the clip ring."""
    for node_id in graph.target_ring:
        node = graph[node_id]
        if node.inside:
            return node_id
        for neighbor_id in node.neighbors:
            if _first_crossing(graph, [node_id, neighbor_id], graph.clip_ring) is not None:
                return node_id
    return None


def _find_next_node(
    graph: NodeGraph,
    current: int,
    previous: Optional[int],
    loop: Sequence[int]
) -> Tuple[Optional[int], bool]:
    """Return (next node id, loop closed) for one walk step."""
    node = graph[current]

    for neighbor_id in list(node.neighbors):
        if neighbor_id == previous:
            continue
        if loop and neighbor_id == loop[0]:
            return None, True

        neighbor = graph[neighbor_id]
        edge = [current, neighbor_id]
        crossing = _first_crossing(graph, edge, _opposite_ring(graph, current, neighbor_id))
        if crossing is not None:
            coord, other = crossing
            if coord == node.coord:
                continue
            return graph.insert_crossing(coord, edge, other), False

        if neighbor.inside:
            return neighbor_id, False

    return None, False


def _opposite_ring(graph: NodeGraph, current: int, neighbor: int) -> List[int]:
    """Original ring of the boundary that edge current->neighbor does not belong to."""
    owner = graph[neighbor].origin
    if owner is Origin.CROSSING:
        owner = graph[current].origin
    return graph.clip_ring if owner is Origin.TARGET else graph.target_ring


def _first_crossing(
    graph: NodeGraph,
    edge: Sequence[int],
    ring: Sequence[int]
) -> Optional[Tuple[Coord, Edge]]:
    """First edge reachable from ring's nodes that edge crosses, with the crossing point."""
    for ring_id in ring:
        for link in graph[ring_id].neighbors:
            other = [ring_id, link]
            coord = graph.crossing_point(edge, other)
            if coord is not None:
                return coord, other
    return None


# =============================================================================
# Precomputed walk
# =============================================================================

def trace_loop_refined(
    graph: NodeGraph,
    eps: float = EPSILON,
    max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> List[int]:
    """
    Split the graph at every touch and crossing, then walk the inside cycle.

    Parameters:
        graph: Classified graph built by NodeGraph.from_polygons; mutated
        eps: Coincidence and on-edge tolerance
        max_iterations: Ceiling on crossing splits

    Returns:
        Ordered node ids of the boundary loop

    Raises:
        TraceFailureError: If the inside edges do not form exactly one cycle
        IterationLimitExceededError: If splitting does not settle in time
    """
    log_clipping_stage(TraceState.TRACING, method="refined")

    graph.merge_coincident_nodes(eps)

    clip_edges = graph.ring_edges(graph.clip_ring)
    graph.split_on_edges(graph.target_ring, clip_edges, eps)
    target_edges = graph.ring_edges(graph.target_ring)
    graph.split_on_edges(graph.clip_ring, target_edges, eps)

    split_all_crossings(graph, target_edges, clip_edges, max_iterations)

    relevant = relevant_edges(graph, target_edges + clip_edges)
    loop = walk_cycle(relevant)

    log_clipping_stage(TraceState.CLOSED_LOOP, nodes=len(loop))
    return loop


def split_all_crossings(
    graph: NodeGraph,
    target_edges: List[Edge],
    clip_edges: List[Edge],
    max_splits: int = DEFAULT_MAX_ITERATIONS
) -> int:
    """
    Split every crossing between the two edge lists.

    Clip edges are scanned in the outer loop and target edges in the inner
    one. After each split both edges keep their first endpoint and end at
    the crossing, the remainders are appended, and the scan restarts. The
    crossing is interpolated along the target edge.

    Returns:
        Number of crossings inserted

    Raises:
        IterationLimitExceededError: If more than max_splits crossings appear
    """
    splits = 0
    i = 0
    while i < len(clip_edges):
        clip_edge = clip_edges[i]
        i += 1
        for j, target_edge in enumerate(target_edges):
            coord = graph.crossing_point(target_edge, clip_edge)
            if coord is None:
                continue

            if splits >= max_splits:
                log_clipping_stage(TraceState.ITERATION_LIMIT_EXCEEDED, splits=splits)
                raise IterationLimitExceededError(
                    f"exceeded max iterations ({max_splits}) while splitting crossings",
                    TraceState.ITERATION_LIMIT_EXCEEDED,
                )

            new = graph.insert_crossing(coord, target_edge, clip_edge)
            splits += 1

            clip_edges[i - 1] = [clip_edge[0], new]
            clip_edges.append([new, clip_edge[1]])
            target_edges[j] = [target_edge[0], new]
            target_edges.append([new, target_edge[1]])

            i = 0
            break
    return splits


def relevant_edges(graph: NodeGraph, edges: Sequence[Edge]) -> List[Tuple[int, int]]:
    """Edges whose endpoints are both inside, each node pair once, in first-seen order."""
    seen = set()
    relevant = []
    for a, b in edges:
        if a == b or not (graph[a].inside and graph[b].inside):
            continue
        key = (min(a, b), max(a, b))
        if key in seen:
            continue
        seen.add(key)
        relevant.append((a, b))
    return relevant


def walk_cycle(edges: Sequence[Tuple[int, int]]) -> List[int]:
    """
    Walk edges as one cycle, always moving to the first neighbor that is not prev.

    Raises:
        TraceFailureError: If the edges do not form a single cycle using all of them
    """
    if not edges:
        log_clipping_stage(TraceState.TRACE_FAILED, edges=0)
        raise TraceFailureError("no edge has both endpoints inside", TraceState.TRACE_FAILED)

    adjacency: Dict[int, List[int]] = {}
    for a, b in edges:
        adjacency.setdefault(a, []).append(b)
        adjacency.setdefault(b, []).append(a)

    start, current = edges[0]
    loop = [start]
    prev = start

    while current != start:
        if len(loop) >= len(edges):
            log_clipping_stage(TraceState.TRACE_FAILED, visited=len(loop), edges=len(edges))
            raise TraceFailureError(
                f"loop did not close after visiting {len(loop)} nodes of {len(edges)} edges",
                TraceState.TRACE_FAILED,
            )
        loop.append(current)

        next_id = None
        for neighbor in adjacency[current]:
            if neighbor != prev:
                next_id = neighbor
                break
        if next_id is None:
            log_clipping_stage(TraceState.TRACE_FAILED, at=current)
            raise TraceFailureError(
                f"dead end at node {current} while walking inside edges",
                TraceState.TRACE_FAILED,
            )
        prev, current = current, next_id

    if len(loop) != len(edges):
        log_clipping_stage(TraceState.TRACE_FAILED, visited=len(loop), edges=len(edges))
        raise TraceFailureError(
            f"loop incomplete: visited {len(loop)} nodes but have {len(edges)} edges",
            TraceState.TRACE_FAILED,
        )
    return loop
