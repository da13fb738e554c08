"""
Face triangulation: orders a face's edges into a ring and fans it into
triangles wound so their normals point away from the solid's center.
"""

import logging
import warnings
from typing import Sequence

import numpy as np

from brepview.errors import TopologyError
from brepview.solid import Edge, Face, Solid

log = logging.getLogger(__name__)


def resolve_edge_ring(edges: Sequence[Edge], face_id: int | None = None) -> list[Edge]:
    """Orders edges into a closed ring where each edge starts at the end of
    the previous one. Edges are reversed as needed, keeping their ids.

    The first edge seeds the ring in its stored direction and candidates are
    taken in list order, so the result is deterministic.

    Raises:
        TopologyError: the edges do not form a single closed cycle.
    """
    if not edges:
        raise TopologyError(face_id, 'Face has no edges')

    ring = [edges[0]]
    used = {edges[0].id}
    visited = set(edges[0].vertices)
    while len(ring) < len(edges):
        pivot = ring[-1].end
        edge = next(
            (e for e in edges if e.id not in used and e.contains(pivot)), None)
        if edge is None:
            raise TopologyError(face_id)
        edge = edge if edge.start == pivot else edge.reversed()
        ring.append(edge)
        used.add(edge.id)
        # Only the last edge may come back to a vertex, the ring's start.
        closing = len(ring) == len(edges) and edge.end == ring[0].start
        if edge.end in visited and not closing:
            raise TopologyError(face_id, 'Edges of face do not form a simple cycle')
        visited.add(edge.end)

    if ring[0].start != ring[-1].end:
        raise TopologyError(face_id)

    log.debug('face %s ring: %s', face_id, [e.vertices for e in ring])
    return ring


def ring_vertices(ring: Sequence[Edge]) -> list[int]:
    """Vertex ids around the ring, one per edge."""
    return [edge.start for edge in ring]


def reference_normal(ring: Sequence[Edge], points: np.ndarray) -> np.ndarray:
    """Normal of the plane through the first two ring edges,
    (v2 - v1) x (v3 - v2). Not normalised."""
    v1 = points[ring[0].start]
    v2 = points[ring[0].end]
    v3 = points[ring[1].end]
    return np.cross(v2 - v1, v3 - v2)


def faces_outward(ring: Sequence[Edge], points: np.ndarray, center: np.ndarray) -> bool:
    """True when the ring's own order already gives a normal pointing away
    from center."""
    normal = reference_normal(ring, points)
    if not np.any(normal):
        warnings.warn(
            f'Degenerate reference normal for ring starting at vertex {ring[0].start}')
    return float(np.dot(normal, center - points[ring[0].start])) < 0


def fan_indices(count: int, ascending: bool = True) -> np.ndarray:
    """Triangle fan over count ring positions anchored at position 0.

    Gives count - 2 triangles, (0, i + 1, i + 2) or (0, i + 2, i + 1).
    """
    i = np.arange(count - 2)
    anchor = np.zeros_like(i)
    if ascending:
        return np.stack([anchor, i + 1, i + 2], axis=1)
    return np.stack([anchor, i + 2, i + 1], axis=1)


def triangulate_ring(
    ring: Sequence[Edge], points: np.ndarray, center: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Fans a resolved ring into triangles.

    Returns (positions, indices): the ring's own copy of its vertex positions
    and the triangle index triples into them.
    """
    positions = points[ring_vertices(ring)].copy()
    indices = fan_indices(len(ring), faces_outward(ring, points, center))
    return positions, indices


def triangulate_face(
    solid: Solid, face: Face, center: np.ndarray | None = None, points: np.ndarray | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Triangulates one face of solid. See triangulate_ring()."""
    if points is None:
        points = solid.points()
    if center is None:
        center = points.mean(axis=0)
    ring = resolve_edge_ring(solid.face_edges(face), face.id)
    return triangulate_ring(ring, points, center)
