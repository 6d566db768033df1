"""
Node graph for polygon clipping.

Both polygon boundaries live in one arena of nodes keyed by id. Adjacency is
stored as ordered lists of neighbor ids, so traversal order is reproducible
and identity is plain id comparison. Nodes are never removed from the arena,
only unlinked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from clippoly.config import EPSILON
from clippoly.geometry import Coord, interpolate, is_inside_polygon, point_on_edge, segment_parameters

Edge = List[int]


class Origin(Enum):
    """Which boundary a node came from."""

    TARGET = "target"
    CLIP = "clip"
    CROSSING = "crossing"


class IdGenerator:
    """Monotonic id counter scoped to a single clip call."""

    def __init__(self, start: int = 1) -> None:
        self._current = start - 1

    def next(self) -> int:
        self._current += 1
        return self._current

    @property
    def current(self) -> int:
        """Most recently issued id."""
        return self._current


@dataclass(eq=False)
class Node:
    """
    A graph vertex: an original polygon vertex or a crossing/on-edge point.

    Attributes:
        id: Unique id issued by the graph's IdGenerator
        coord: (x, y, z) coordinate
        origin: Boundary the node was created from
        inside: True when the node lies inside (or on) the opposite polygon
        neighbors: Ordered ids of adjacent nodes
    """

    id: int
    coord: Coord
    origin: Origin
    inside: bool = False
    neighbors: List[int] = field(default_factory=list)

    def link(self, other: int) -> None:
        self.neighbors.append(other)

    def unlink(self, other: int) -> None:
        self.neighbors = [n for n in self.neighbors if n != other]

    def __repr__(self) -> str:
        flag = "in" if self.inside else "out"
        return f"Node(id={self.id}, coord={self.coord}, {self.origin.value}, {flag}, neighbors={self.neighbors})"


class NodeGraph:
    """
    Arena holding the combined boundary graph of a target and a clip polygon.

    Attributes:
        target_ring: Ids of the original target vertices in input order
        clip_ring: Ids of the original clip vertices in input order. After
            merge_coincident_nodes, entries may point at target nodes.
    """

    def __init__(self, ids: Optional[IdGenerator] = None) -> None:
        self._ids = ids if ids is not None else IdGenerator()
        self._nodes: Dict[int, Node] = {}
        self.target_ring: List[int] = []
        self.clip_ring: List[int] = []

    @classmethod
    def from_polygons(
        cls,
        target: Sequence[Coord],
        clip: Sequence[Coord],
        ids: Optional[IdGenerator] = None
    ) -> "NodeGraph":
        """Build two independent rings, target first, sharing one id generator."""
        graph = cls(ids)
        graph.target_ring = graph.add_ring(target, Origin.TARGET)
        graph.clip_ring = graph.add_ring(clip, Origin.CLIP)
        return graph

    def __getitem__(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    @property
    def ids(self) -> IdGenerator:
        return self._ids

    def add_node(self, coord: Coord, origin: Origin, inside: bool = False) -> int:
        node_id = self._ids.next()
        self._nodes[node_id] = Node(id=node_id, coord=coord, origin=origin, inside=inside)
        return node_id

    def add_ring(self, polygon: Sequence[Coord], origin: Origin) -> List[int]:
        """
        Add a closed ring; each node links to its predecessor, then its successor.

        Returns:
            Ids of the new nodes in polygon order
        """
        ring = [self.add_node(tuple(c), origin) for c in polygon]
        n = len(ring)
        for i, node_id in enumerate(ring):
            node = self._nodes[node_id]
            node.neighbors = [ring[(i - 1) % n], ring[(i + 1) % n]]
        return ring

    def coords(self, node_ids: Sequence[int]) -> List[Coord]:
        return [self._nodes[i].coord for i in node_ids]

    def ring_edges(self, ring: Sequence[int]) -> List[Edge]:
        """Consecutive edges of a ring, closing back to the first node."""
        n = len(ring)
        if n < 2:
            return []
        return [[ring[i], ring[(i + 1) % n]] for i in range(n)]

    def edges(self) -> List[Tuple[int, int]]:
        """Every linked node pair once, as (lower id, higher id), in arena order."""
        seen = set()
        result = []
        for node in self._nodes.values():
            for other in node.neighbors:
                key = (min(node.id, other), max(node.id, other))
                if key not in seen:
                    seen.add(key)
                    result.append(key)
        return result

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, ring: Sequence[int], against: Sequence[int], eps: float = EPSILON) -> bool:
        """
        Flag the nodes of ring that lie inside (or on) the polygon formed by against.

        Flags are only ever set, never cleared.

        Returns:
            True if every node of ring is inside
        """
        polygon = self.coords(against)
        count = 0
        for node_id in ring:
            node = self._nodes[node_id]
            if is_inside_polygon(node.coord, polygon, eps):
                node.inside = True
                count += 1
        return count == len(ring)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def relink(self, new: int, from_: int, to: int, cross1: int, cross2: int) -> None:
        """
        Split edges from-to and cross1-cross2 at node new.

        from, cross1 and cross2 each gain a link to new; new links to
        to, cross1 and cross2 in that order.
        """
        nodes = self._nodes
        nodes[from_].unlink(to)
        nodes[to].unlink(from_)
        nodes[cross1].unlink(cross2)
        nodes[cross2].unlink(cross1)

        nodes[from_].link(new)
        nodes[cross1].link(new)
        nodes[cross2].link(new)

        nodes[new].link(to)
        nodes[new].link(cross1)
        nodes[new].link(cross2)

    def find_crossing(self, edge: Sequence[int], other: Sequence[int]) -> Optional[Tuple[float, float]]:
        """
        Parameters (t along edge, u along other) of an interior crossing.

        Edges sharing a node never cross in their interiors.
        """
        if edge[0] in other or edge[1] in other:
            return None
        nodes = self._nodes
        return segment_parameters(
            nodes[edge[0]].coord, nodes[edge[1]].coord,
            nodes[other[0]].coord, nodes[other[1]].coord,
        )

    def crossing_point(self, edge: Sequence[int], other: Sequence[int]) -> Optional[Coord]:
        """Crossing coordinate interpolated along edge, or None."""
        params = self.find_crossing(edge, other)
        if params is None:
            return None
        return interpolate(self._nodes[edge[0]].coord, self._nodes[edge[1]].coord, params[0])

    def insert_crossing(self, coord: Coord, edge: Sequence[int], other: Sequence[int]) -> int:
        """Create an inside CROSSING node at coord and relink both edges through it."""
        new = self.add_node(coord, Origin.CROSSING, inside=True)
        self.relink(new, edge[0], edge[1], other[0], other[1])
        return new

    def split_at_crossing(self, edge: Sequence[int], other: Sequence[int]) -> Optional[int]:
        """
        Split edge and other where they cross, interpolating along edge.

        Returns:
            Id of the new crossing node, or None if the edges do not cross
        """
        coord = self.crossing_point(edge, other)
        if coord is None:
            return None
        return self.insert_crossing(coord, edge, other)

    def merge_coincident_nodes(self, eps: float = EPSILON) -> int:
        """
        Replace clip vertices that coincide in xy with a target vertex by that vertex.

        The clip node's neighbors are re-pointed at the target node without
        duplicating links; inside flags are OR-ed and the clip node is left
        unlinked in the arena. The target node keeps its own coordinate.

        Returns:
            Number of merged nodes
        """
        nodes = self._nodes
        merged = 0
        for i, clip_id in enumerate(self.clip_ring):
            cn = nodes[clip_id]
            match = None
            for target_id in self.target_ring:
                tc = nodes[target_id].coord
                if abs(tc[0] - cn.coord[0]) < eps and abs(tc[1] - cn.coord[1]) < eps:
                    match = target_id
            if match is None or match == clip_id:
                continue

            tn = nodes[match]
            self.clip_ring[i] = match
            for nb_id in cn.neighbors:
                if nb_id == match:
                    continue
                nb = nodes[nb_id]
                nb.unlink(clip_id)
                if match not in nb.neighbors:
                    nb.link(match)
                if nb_id not in tn.neighbors:
                    tn.link(nb_id)
            tn.unlink(clip_id)
            tn.inside = tn.inside or cn.inside
            cn.neighbors = []
            merged += 1
        return merged

    def split_on_edges(
        self,
        vertices: Sequence[int],
        edges: List[Edge],
        eps: float = EPSILON
    ) -> List[Edge]:
        """
        Split edges of one boundary at vertices of the other lying on them.

        A vertex coinciding with an edge endpoint is only flagged
        inside. A vertex on an edge interior splits (a, b) into (a, v), kept
        in place, and (v, b), appended, then is flagged inside.

        Returns:
            The updated edge list (also mutated in place)
        """
        nodes = self._nodes
        for vertex_id in vertices:
            vn = nodes[vertex_id]
            px, py = vn.coord[0], vn.coord[1]
            i = 0
            while i < len(edges):
                a_id, b_id = edges[i]
                a, b = nodes[a_id], nodes[b_id]
                i += 1
                if vertex_id in (a_id, b_id) or _coincide(vn.coord, a.coord, eps) or _coincide(vn.coord, b.coord, eps):
                    vn.inside = True
                    continue
                if not point_on_edge(px, py, a.coord[0], a.coord[1], b.coord[0], b.coord[1], eps):
                    continue

                vn.inside = True
                edges[i - 1] = [a_id, vertex_id]
                edges.append([vertex_id, b_id])

                a.unlink(b_id)
                b.unlink(a_id)
                a.link(vertex_id)
                b.link(vertex_id)
                vn.link(a_id)
                vn.link(b_id)
        return edges


def _coincide(p: Coord, q: Coord, eps: float) -> bool:
    return abs(p[0] - q[0]) < eps and abs(p[1] - q[1]) < eps
