import logging
from typing import Iterable, Iterator, List

import numpy as np
from datatrees import datatree, dtfield

from brepview.colors import Material
from brepview.sorting import alpha_sort
from brepview.viewer.bbox import BoundingBox
from brepview.viewer.transform import Transform

log = logging.getLogger(__name__)


@datatree
class RenderableMesh:
    """Indexed triangle mesh with front/back materials and a transform.

    Positions and indices are fixed once the mesh is created. Only the
    transform changes afterwards. The transform the mesh was created with is
    kept as a read-only snapshot so reset_transform() can restore it.
    """

    positions: np.ndarray
    indices: np.ndarray
    material: Material
    back_material: Material | None = None
    transform: Transform = dtfield(default_factory=Transform)
    name: str = ""
    fallback_bounds: BoundingBox = dtfield(
        default_factory=BoundingBox,
        doc="Bounds used for sorting when the mesh has no positions.",
    )
    initial_transform: Transform | None = dtfield(default=None, init=False)

    # Interleaved vertex layout for GL display collaborators.
    position_offset: int = 0
    color_offset: int = 3
    normal_offset: int = 7
    stride: int = 10

    def __post_init__(self):
        self.positions = np.array(self.positions, dtype=np.float64).reshape(-1, 3)
        self.indices = np.array(self.indices, dtype=np.int64).reshape(-1, 3)
        self.positions.setflags(write=False)
        self.indices.setflags(write=False)
        self.initial_transform = self.transform.frozen()

    @property
    def has_geometry(self) -> bool:
        return len(self.positions) > 0

    @property
    def has_alpha_lt1(self) -> bool:
        return self.material.is_transparent

    def num_triangles(self) -> int:
        return len(self.indices)

    def bounds(self) -> BoundingBox:
        """Bounds of the untransformed positions."""
        if not self.has_geometry:
            return self.fallback_bounds
        return BoundingBox.from_points(self.positions)

    def world_bounds(self, world_transform: Transform | None = None) -> BoundingBox:
        """Bounds mapped through the mesh transform, then world_transform.

        A mesh without geometry has no local space of its own, its fallback
        bounds only go through world_transform.
        """
        if self.has_geometry:
            bounds = self.bounds().transformed(self.transform.matrix)
        else:
            bounds = self.fallback_bounds
        if world_transform is not None:
            bounds = bounds.transformed(world_transform.matrix)
        return bounds

    def reset_transform(self):
        self.transform = self.initial_transform.copy()

    def triangle_normals(self) -> np.ndarray:
        """Unit normal per triangle following the index winding."""
        tris = self.positions[self.indices]
        normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        lengths[lengths == 0] = 1.0
        return normals / lengths

    def vertex_data(self, back: bool = False) -> np.ndarray:
        """Flat float32 array of position(3) | colour(4) | normal(3) per
        triangle vertex, ready for glDrawArrays(GL_TRIANGLES, ...).

        With back=True the triangles are emitted with reversed winding,
        flipped normals and the back material colour.
        """
        if not self.has_geometry:
            return np.array([], dtype=np.float32)
        indices = self.indices[:, ::-1] if back else self.indices
        material = self.back_material if back and self.back_material else self.material
        normals = self.triangle_normals()
        if back:
            normals = -normals

        num_points = indices.size
        data = np.zeros((num_points, self.stride), dtype=np.float32)
        data[:, self.position_offset : self.position_offset + 3] = self.positions[
            indices.reshape(-1)
        ]
        data[:, self.color_offset : self.color_offset + 4] = material.rgba
        data[:, self.normal_offset : self.normal_offset + 3] = np.repeat(normals, 3, axis=0)
        return data.reshape(-1)


@datatree
class MeshGroup:
    """Ordered meshes making up one loaded model. Sorting only permutes the
    order, meshes are never added or removed by it."""

    meshes: List[RenderableMesh] = dtfield(default_factory=list)

    def add(self, mesh: RenderableMesh):
        self.meshes.append(mesh)

    def __len__(self) -> int:
        return len(self.meshes)

    def __iter__(self) -> Iterator[RenderableMesh]:
        return iter(self.meshes)

    def __getitem__(self, index: int) -> RenderableMesh:
        return self.meshes[index]

    def accept(self, action):
        """Calls action(mesh) for every mesh in order."""
        for mesh in self.meshes:
            action(mesh)

    def num_triangles(self) -> int:
        return sum(m.num_triangles() for m in self.meshes)

    def bounding_box(self) -> BoundingBox:
        bbox = BoundingBox()
        for mesh in self.meshes:
            bbox = bbox.union(mesh.world_bounds())
        return bbox

    def rotate(self, axis, angle: float):
        self.accept(lambda mesh: mesh.transform.rotate(axis, angle))

    def translate(self, offset):
        self.accept(lambda mesh: mesh.transform.translate(offset))

    def reset_transforms(self):
        """Restores every mesh transform to its value at creation time."""
        self.accept(RenderableMesh.reset_transform)
        log.debug("reset transforms of %d meshes", len(self.meshes))

    def resort(self, viewpoint: Iterable[float], world_transform: Transform | None = None):
        """Reorders the meshes back to front as seen from viewpoint."""
        alpha_sort(viewpoint, self.meshes, world_transform or Transform())
