import numpy as np
import pytest

from brepview.colors import front_material
from brepview.sorting import alpha_sort, representative_position
from brepview.viewer.bbox import BoundingBox
from brepview.viewer.mesh import MeshGroup, RenderableMesh
from brepview.viewer.scene import AmbientLight, DirectionalLight, Scene
from brepview.viewer.transform import Transform

from brep_models import mesh_at, names

ORIGIN = (0.0, 0.0, 0.0)


def test_far_to_near():
    meshes = [mesh_at("d1", (1, 0, 0)), mesh_at("d10", (10, 0, 0)), mesh_at("d5", (0, 5, 0))]
    distances = alpha_sort(ORIGIN, meshes)
    assert names(meshes) == ["d10", "d5", "d1"]
    assert distances == pytest.approx([10, 5, 1])


def test_equal_distances_put_later_first():
    meshes = [mesh_at("A", (5, 0, 0)), mesh_at("B", (0, 5, 0))]
    alpha_sort(ORIGIN, meshes)
    assert names(meshes) == ["B", "A"]


def test_ties_mixed_with_distinct_distances():
    meshes = [
        mesh_at("A", (0, 0, 3)),
        mesh_at("far", (0, 9, 0)),
        mesh_at("B", (3, 0, 0)),
        mesh_at("C", (0, 3, 0)),
    ]
    alpha_sort(ORIGIN, meshes)
    assert names(meshes) == ["far", "C", "B", "A"]


def test_equal_distance_order_is_reproducible():
    def fresh():
        return [mesh_at(n, loc) for n, loc in [("A", (5, 0, 0)), ("B", (0, 5, 0)), ("C", (0, 0, 5))]]

    first = fresh()
    second = fresh()
    alpha_sort(ORIGIN, first)
    alpha_sort(ORIGIN, second)
    assert names(first) == names(second) == ["C", "B", "A"]


def test_resort_is_idempotent():
    group = MeshGroup([mesh_at(str(i), (i, 2 * i % 5, 0)) for i in range(6)])
    group.resort((7, 1, 2))
    once = names(group)
    group.resort((7, 1, 2))
    assert names(group) == once


def test_sorting_only_permutes():
    meshes = [mesh_at(str(i), (i, 0, 0)) for i in range(5)]
    before = set(map(id, meshes))
    alpha_sort((2.5, 3, 0), meshes)
    assert set(map(id, meshes)) == before


def test_mesh_transform_moves_position():
    near = mesh_at("near", (1, 0, 0))
    far = mesh_at("far", (3, 0, 0))
    meshes = [far, near]
    near.transform.translate((5, 0, 0))
    alpha_sort(ORIGIN, meshes)
    assert names(meshes) == ["near", "far"]
    np.testing.assert_allclose(representative_position(near, Transform()), [6, 0, 0])


def test_world_transform_applies_after_mesh_transform():
    meshes = [mesh_at("x1", (1, 0, 0)), mesh_at("x3", (3, 0, 0))]
    alpha_sort(ORIGIN, meshes, Transform())
    assert names(meshes) == ["x3", "x1"]
    alpha_sort(ORIGIN, meshes, Transform().translate((-4, 0, 0)))
    assert names(meshes) == ["x1", "x3"]


def test_rotation_uses_min_corner_of_rotated_bounds():
    mesh = mesh_at("m", (0, 0, 0))
    mesh.transform.rotate((0, 0, 1), np.pi / 2)
    # Unit triangle rotated a quarter turn spans x in [-1, 0], y in [0, 1].
    np.testing.assert_allclose(
        representative_position(mesh, Transform()), [-1, 0, 0], atol=1e-12)


def test_mesh_without_geometry_uses_fallback_bounds():
    empty = RenderableMesh(
        np.zeros((0, 3)),
        np.zeros((0, 3), dtype=int),
        front_material((1, 2, 3, 96)),
        name="empty",
        fallback_bounds=BoundingBox(
            min_point=np.array([8.0, 0.0, 0.0]), max_point=np.array([9.0, 1.0, 1.0])),
    )
    empty.transform.translate((-100, 0, 0))
    meshes = [empty, mesh_at("near", (2, 0, 0))]
    alpha_sort(ORIGIN, meshes)
    assert names(meshes) == ["empty", "near"]
    np.testing.assert_allclose(representative_position(empty, Transform()), [8, 0, 0])


def test_scene_sort_keeps_lights_in_front():
    ambient = AmbientLight()
    directional = DirectionalLight()
    scene = Scene(children=[
        ambient,
        mesh_at("near", (0, 0, 1)),
        directional,
        mesh_at("far", (0, 0, 4)),
    ])
    scene.alpha_sort((0, 0, -1))
    assert scene.children[0] is ambient
    assert scene.children[1] is directional
    assert names(scene.children[2:]) == ["far", "near"]
    assert names(scene.meshes()) == ["far", "near"]
