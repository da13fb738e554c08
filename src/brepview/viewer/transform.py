"""Affine transforms for meshes, stored as 4x4 numpy matrices.

Matrices use the column vector convention: a point p maps to M @ p. Each
operation is applied after the transform accumulated so far, so a rotation
followed by a translation moves the rotated mesh.
"""

import numpy as np
from datatrees import datatree, dtfield
from pyglm import glm


def _from_glm(m: glm.dmat4) -> np.ndarray:
    # np.array gives the rows of the matrix as written mathematically.
    return np.array(m, dtype=np.float64)


@datatree
class Transform:
    """A mutable 4x4 affine transform."""

    matrix: np.ndarray = dtfield(default_factory=lambda: np.eye(4, dtype=np.float64))

    def __post_init__(self):
        self.matrix = np.array(self.matrix, dtype=np.float64).reshape(4, 4)

    def append(self, matrix: np.ndarray) -> "Transform":
        """Applies matrix after the current transform."""
        self.matrix = np.asarray(matrix, dtype=np.float64) @ self.matrix
        return self

    def rotate(self, axis, angle: float) -> "Transform":
        """Rotates by angle (radians) about axis through the origin."""
        axis = np.asarray(axis, dtype=np.float64)
        if not np.any(axis):
            return self
        rotation = glm.rotate(glm.dmat4(1.0), float(angle), glm.dvec3(*axis))
        return self.append(_from_glm(rotation))

    def translate(self, offset) -> "Transform":
        translation = glm.translate(glm.dmat4(1.0), glm.dvec3(*np.asarray(offset, dtype=np.float64)))
        return self.append(_from_glm(translation))

    def scale(self, factors) -> "Transform":
        factors = np.broadcast_to(np.asarray(factors, dtype=np.float64), (3,))
        return self.append(_from_glm(glm.scale(glm.dmat4(1.0), glm.dvec3(*factors))))

    def copy(self) -> "Transform":
        return Transform(self.matrix.copy())

    def frozen(self) -> "Transform":
        """A copy whose matrix cannot be written to."""
        result = self.copy()
        result.matrix.setflags(write=False)
        return result

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Maps an (n, 3) array of points."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        homogeneous = np.hstack([points, np.ones((len(points), 1))])
        return (homogeneous @ self.matrix.T)[:, :3]

    def is_identity(self) -> bool:
        return bool(np.array_equal(self.matrix, np.eye(4)))

    def same_as(self, other: "Transform") -> bool:
        """Exact (bitwise value) equality of the two matrices."""
        return bool(np.array_equal(self.matrix, other.matrix))
