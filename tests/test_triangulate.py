import numpy as np
import pytest

from brepview.errors import TopologyError
from brepview.solid import Edge
from brepview.triangulate import (
    fan_indices,
    faces_outward,
    resolve_edge_ring,
    ring_vertices,
    triangulate_face,
)

from brep_models import cube, square, tetrahedron, two_triangles_one_face


def assert_closed_ring(ring):
    assert ring[0].start == ring[-1].end
    for prev, edge in zip(ring, ring[1:]):
        assert prev.end == edge.start


def test_ring_in_order():
    edges = [Edge(0, (0, 1)), Edge(1, (1, 2)), Edge(2, (2, 0))]
    ring = resolve_edge_ring(edges)
    assert [e.id for e in ring] == [0, 1, 2]
    assert_closed_ring(ring)


def test_ring_reverses_edges_keeping_ids():
    edges = [Edge(7, (0, 1)), Edge(8, (2, 1)), Edge(9, (0, 2))]
    ring = resolve_edge_ring(edges)
    assert [e.id for e in ring] == [7, 8, 9]
    assert [e.vertices for e in ring] == [(0, 1), (1, 2), (2, 0)]
    assert_closed_ring(ring)


def test_ring_discovers_order():
    # Square 0-1-2-3 listed out of order with mixed directions.
    edges = [Edge(0, (0, 1)), Edge(2, (3, 2)), Edge(3, (0, 3)), Edge(1, (2, 1))]
    ring = resolve_edge_ring(edges)
    assert ring_vertices(ring) == [0, 1, 2, 3]
    assert [e.id for e in ring] == [0, 1, 2, 3]
    assert_closed_ring(ring)


def test_ring_is_deterministic():
    edges = [Edge(4, (5, 6)), Edge(1, (7, 4)), Edge(0, (4, 5)), Edge(2, (6, 7))]
    first = resolve_edge_ring(edges)
    second = resolve_edge_ring(list(edges))
    assert first == second


def test_disjoint_triangles_fail():
    solid = two_triangles_one_face()
    with pytest.raises(TopologyError) as e:
        resolve_edge_ring(solid.face_edges(solid.faces[0]), face_id=0)
    assert e.value.face_id == 0


def test_branching_edges_fail():
    # Triangle 0-1-2 plus a spur 1-3.
    edges = [Edge(0, (0, 1)), Edge(1, (1, 3)), Edge(2, (1, 2)), Edge(3, (2, 0))]
    with pytest.raises(TopologyError):
        resolve_edge_ring(edges, face_id=3)


def test_figure_eight_fails():
    # Two triangles meeting only at vertex 0.
    edges = [
        Edge(0, (0, 1)), Edge(1, (1, 2)), Edge(2, (2, 0)),
        Edge(3, (0, 3)), Edge(4, (3, 4)), Edge(5, (4, 0)),
    ]
    with pytest.raises(TopologyError) as e:
        resolve_edge_ring(edges, face_id=5)
    assert e.value.face_id == 5


def test_open_chain_fails_closure():
    edges = [Edge(0, (0, 1)), Edge(1, (1, 2)), Edge(2, (2, 3))]
    with pytest.raises(TopologyError):
        resolve_edge_ring(edges)


def test_repeated_edge_fails():
    edges = [Edge(0, (0, 1)), Edge(0, (0, 1)), Edge(1, (1, 2))]
    with pytest.raises(TopologyError):
        resolve_edge_ring(edges)


@pytest.mark.parametrize("count", [3, 4, 5, 8])
def test_fan_triangle_count(count):
    indices = fan_indices(count)
    assert indices.shape == (count - 2, 3)
    assert np.all(indices[:, 0] == 0)
    np.testing.assert_array_equal(indices[0], [0, 1, 2])


def test_fan_reversed():
    np.testing.assert_array_equal(fan_indices(4, ascending=False), [[0, 2, 1], [0, 3, 2]])


def test_square_two_triangles_share_first_vertex():
    solid = square()
    positions, indices = triangulate_face(solid, solid.faces[0])
    assert len(indices) == 2
    assert all(0 in tri for tri in indices)
    np.testing.assert_array_equal(positions[0], [0, 0, 0])
    assert len(positions) == 4


def test_tetrahedron_faces():
    solid = tetrahedron()
    for face in solid.faces:
        positions, indices = triangulate_face(solid, face)
        assert positions.shape == (3, 3)
        assert indices.shape == (1, 3)


def test_pentagon():
    from brep_models import make_solid

    points = [[0, 0, 0], [2, 0, 0], [3, 2, 0], [1.5, 3, 0], [0, 2, 0]]
    edges = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0)]
    solid = make_solid(points, edges, [[2, 0, 4, 1, 3]])
    positions, indices = triangulate_face(solid, solid.faces[0])
    assert len(indices) == 3
    assert len(positions) == 5


def face_centroid(positions):
    return positions.mean(axis=0)


@pytest.mark.parametrize("make", [tetrahedron, cube])
def test_normals_point_outward(make):
    solid = make()
    center = solid.geometric_center()
    for face in solid.faces:
        positions, indices = triangulate_face(solid, face)
        outward = face_centroid(positions) - center
        for a, b, c in indices:
            normal = np.cross(positions[b] - positions[a], positions[c] - positions[a])
            assert np.dot(normal, outward) > 0, f"face {face.id} is wound inwards"


def test_faces_outward_follows_ring_direction():
    solid = tetrahedron()
    points = solid.points()
    center = solid.geometric_center()
    ring = resolve_edge_ring(solid.face_edges(solid.faces[3]))
    reversed_ring = [e.reversed() for e in reversed(ring)]
    assert faces_outward(ring, points, center) != faces_outward(reversed_ring, points, center)


def test_degenerate_reference_normal_warns():
    from brep_models import make_solid

    # First two edges are collinear.
    points = [[0, 0, 0], [1, 0, 0], [2, 0, 0], [1, 1, 0]]
    edges = [(0, 1), (1, 2), (2, 3), (3, 0)]
    solid = make_solid(points, edges, [[0, 1, 2, 3]])
    with pytest.warns(UserWarning):
        positions, indices = triangulate_face(solid, solid.faces[0])
    assert len(indices) == 2
