"""
Back to front ordering of meshes for alpha blending.

The order is decided from each mesh's transformed bounding box only, which is
an approximation: interpenetrating or concave meshes can still be drawn in
the wrong order. Getting that right would need something like binary space
partitioning.
"""

import logging
from typing import Iterable, MutableSequence

import numpy as np

from brepview.viewer.transform import Transform

log = logging.getLogger(__name__)


def representative_position(mesh, world_transform: Transform) -> np.ndarray:
    """The point used as the mesh's position when measuring its distance:
    the minimum corner of its bounds mapped through the mesh transform and
    world_transform."""
    return mesh.world_bounds(world_transform).location


def sort_key(distance: float, index: int) -> tuple:
    """Farthest first. Equal distances put the later original index first."""
    return (-distance, -index)


def alpha_sort(
    viewpoint: Iterable[float],
    meshes: MutableSequence,
    world_transform: Transform | None = None,
) -> list[float]:
    """Sorts meshes in place from farthest to nearest to viewpoint.

    Returns the distances in the new order.
    """
    viewpoint = np.asarray(list(viewpoint), dtype=np.float64)
    world_transform = world_transform or Transform()

    ranked = []
    for index, mesh in enumerate(meshes):
        location = representative_position(mesh, world_transform)
        distance = float(np.linalg.norm(viewpoint - location))
        ranked.append((sort_key(distance, index), distance, mesh))

    ranked.sort(key=lambda item: item[0])
    meshes[:] = [mesh for _, _, mesh in ranked]

    distances = [distance for _, distance, _ in ranked]
    log.debug('alpha sorted %d meshes from %s: %s', len(distances), viewpoint, distances)
    return distances
