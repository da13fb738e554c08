import logging
from typing import Any, List, Tuple

import numpy as np
from datatrees import datatree, dtfield

from brepview.sorting import alpha_sort
from brepview.viewer.mesh import MeshGroup, RenderableMesh
from brepview.viewer.transform import Transform

log = logging.getLogger(__name__)


@datatree(frozen=True)
class AmbientLight:
    color: Tuple[int, int, int, int] = (169, 169, 169, 255)


@datatree(frozen=True)
class DirectionalLight:
    color: Tuple[int, int, int, int] = (128, 128, 128, 255)
    direction: Tuple[float, float, float] = (-1.0, -1.0, -1.0)


@datatree
class Camera:
    """The viewpoint used for sorting."""

    default_position: Tuple[float, float, float] = (0.0, 0.0, 5.0)
    position: np.ndarray = dtfield(
        self_default=lambda s: np.array(s.default_position, dtype=np.float64), init=False
    )

    def reset(self):
        self.position = np.array(self.default_position, dtype=np.float64)


@datatree
class Scene:
    """Ordered display list of lights and meshes."""

    children: List[Any] = dtfield(default_factory=list)
    ambient_light: AmbientLight = dtfield(default_factory=AmbientLight)
    directional_light: DirectionalLight = dtfield(default_factory=DirectionalLight)

    def clear(self):
        """Removes everything and puts back the two lights."""
        self.children = [self.ambient_light, self.directional_light]

    def show(self, group: MeshGroup):
        """Replaces the displayed model with group."""
        self.clear()
        group.accept(self.children.append)
        log.debug("scene shows %d meshes", len(group))

    def meshes(self) -> list[RenderableMesh]:
        return [c for c in self.children if isinstance(c, RenderableMesh)]

    def alpha_sort(self, viewpoint, world_transform: Transform | None = None) -> list[float]:
        """Sorts the meshes back to front from viewpoint.

        Everything that is not a mesh keeps its relative order and goes
        first, followed by the sorted meshes.
        """
        meshes = []
        others = []
        for child in self.children:
            (meshes if isinstance(child, RenderableMesh) else others).append(child)

        distances = alpha_sort(viewpoint, meshes, world_transform or Transform())
        self.children = others + meshes
        return distances
