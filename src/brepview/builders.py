"""
Turns a Solid into a MeshGroup.

Two policies share the ring resolution and fan triangulation:

 * ColorfulMeshBuilder: one mesh per face, each with its own colour and
   transform so faces can be drawn translucent and sorted.
 * SimpleMeshBuilder: all faces merged into one mesh with a single colour.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
from datatrees import datatree, dtfield

from brepview.colors import ColorSource, Material, back_material, front_material
from brepview.errors import EmptyModelError
from brepview.solid import Solid
from brepview.triangulate import triangulate_face
from brepview.viewer.mesh import MeshGroup, RenderableMesh
from brepview.viewer.transform import Transform

log = logging.getLogger(__name__)


class MeshBuilder(ABC):

    @abstractmethod
    def build(self, solid: Solid) -> MeshGroup:
        pass


@datatree
class ColorfulMeshBuilder(MeshBuilder):
    """One mesh per face with a palette colour each."""
    color_source: ColorSource = dtfield(default_factory=ColorSource)

    def build(self, solid: Solid) -> MeshGroup:
        if not solid.faces:
            raise EmptyModelError('No model can be built')

        points = solid.points()
        center = points.mean(axis=0)
        colours = self.color_source.take(len(solid.faces))

        group = MeshGroup()
        for face in solid.faces:
            positions, indices = triangulate_face(solid, face, center, points)
            colour = colours[face.id]
            group.add(RenderableMesh(
                positions,
                indices,
                front_material(colour),
                back_material(colour),
                name=f'face_{face.id}',
            ))

        log.info('built %d face meshes, %d triangles', len(group), group.num_triangles())
        return group


@datatree
class SimpleMeshBuilder(MeshBuilder):
    """All faces in a single mesh sharing one colour."""
    color_source: ColorSource = dtfield(default_factory=ColorSource)

    def build(self, solid: Solid) -> MeshGroup:
        if not solid.faces:
            raise EmptyModelError('No model can be built')

        points = solid.points()
        center = points.mean(axis=0)

        all_positions = []
        all_indices = []
        offset = 0
        for face in solid.faces:
            positions, indices = triangulate_face(solid, face, center, points)
            all_positions.append(positions)
            all_indices.append(indices + offset)
            offset += len(positions)

        colour = self.color_source.take(1)[0]
        mesh = RenderableMesh(
            np.concatenate(all_positions),
            np.concatenate(all_indices),
            front_material(colour),
            back_material(colour),
            name='solid',
        )
        log.info('built merged mesh, %d triangles', mesh.num_triangles())
        return MeshGroup([mesh])


def make_builder(
    colorful: bool, seed: int | None = None, color_source: ColorSource | None = None
) -> MeshBuilder:
    """Per-face builder when colorful, else the merged one. Colours come from
    color_source, or a new source seeded with seed."""
    source = color_source or ColorSource(seed=seed)
    if colorful:
        return ColorfulMeshBuilder(color_source=source)
    return SimpleMeshBuilder(color_source=source)


SQRT2 = np.sqrt(2.0)
SQRT6 = np.sqrt(6.0)

TETRAHEDRON_POINTS = np.array([
    [0.0, 1.0, 0.0],
    [2.0 * SQRT2 / 3.0, -1.0 / 3.0, 0.0],
    [-SQRT2 / 3.0, -1.0 / 3.0, -SQRT6 / 3.0],
    [-SQRT2 / 3.0, -1.0 / 3.0, SQRT6 / 3.0],
])


def create_tetrahedron_positions() -> np.ndarray:
    """12 positions, 3 per face: (0, 1, 2), (1, 0, 3), (2, 3, 0), (3, 2, 1)."""
    order = [i % 4 if (i // 3) % 2 == 0 else (i * 3) % 4 for i in range(12)]
    return TETRAHEDRON_POINTS[order]


def default_model_group() -> MeshGroup:
    """The built-in model: an opaque green tetrahedron at half scale inside a
    translucent yellow one with a brown inside."""
    positions = create_tetrahedron_positions()
    indices = np.arange(12).reshape(4, 3)

    inner = RenderableMesh(
        positions,
        indices,
        Material((0, 128, 0, 255), (255, 255, 255, 255), 30.0),
        transform=Transform().scale(0.5),
        name='inner',
    )
    outer = RenderableMesh(
        positions,
        indices,
        Material((255, 255, 0, 64), (255, 255, 255, 128), 30.0),
        Material((200, 175, 0, 255)),
        name='outer',
    )
    return MeshGroup([inner, outer])
