import itertools

import numpy as np
from datatrees import datatree, dtfield


@datatree
class BoundingBox:
    """Axis aligned 3D bounding box with min and max points."""

    min_point: np.ndarray = dtfield(
        default_factory=lambda: np.array([float("inf"), float("inf"), float("inf")])
    )
    max_point: np.ndarray = dtfield(
        default_factory=lambda: np.array([float("-inf"), float("-inf"), float("-inf")])
    )

    @staticmethod
    def from_points(points: np.ndarray) -> "BoundingBox":
        """Bounds of an (n, 3) array of points. No points gives an empty box."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) == 0:
            return BoundingBox()
        return BoundingBox(min_point=points.min(axis=0), max_point=points.max(axis=0))

    @property
    def is_empty(self) -> bool:
        return bool(np.any(np.isinf(self.min_point)) or np.any(np.isinf(self.max_point)))

    @property
    def size(self) -> np.ndarray:
        """Get the size of the bounding box as a 3D vector."""
        return self.max_point - self.min_point

    @property
    def center(self) -> np.ndarray:
        """Get the center of the bounding box."""
        # Ensure we always return a 3D vector even for an empty bounding box
        if self.is_empty:
            return np.array([0.0, 0.0, 0.0])
        return (self.max_point + self.min_point) / 2.0

    @property
    def location(self) -> np.ndarray:
        """The minimum corner, or the origin for an empty box."""
        if self.is_empty:
            return np.array([0.0, 0.0, 0.0])
        return self.min_point.copy()

    @property
    def diagonal(self) -> float:
        """Get the diagonal length of the bounding box."""
        if self.is_empty:
            return 1.0  # Return a default value for empty/invalid bounding boxes
        return float(np.linalg.norm(self.size))

    def corners(self) -> np.ndarray:
        """The 8 corners as an (8, 3) array."""
        return np.array(
            list(itertools.product(*zip(self.min_point, self.max_point))), dtype=np.float64
        )

    def transformed(self, matrix: np.ndarray) -> "BoundingBox":
        """Bounds of this box after mapping its corners through a 4x4 affine matrix.

        The result is again axis aligned so it may be larger than the box it
        came from when the matrix rotates.
        """
        if self.is_empty:
            return BoundingBox()
        corners = self.corners()
        homogeneous = np.hstack([corners, np.ones((len(corners), 1))])
        mapped = (homogeneous @ np.asarray(matrix, dtype=np.float64).T)[:, :3]
        return BoundingBox.from_points(mapped)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Compute the union of this bounding box with another."""
        # Handle the case where one of the bounding boxes is empty
        if self.is_empty:
            return other
        if other.is_empty:
            return self

        return BoundingBox(
            min_point=np.minimum(self.min_point, other.min_point),
            max_point=np.maximum(self.max_point, other.max_point),
        )

    def contains_point(self, point: np.ndarray) -> bool:
        """Check if a point is inside the bounding box."""
        if self.is_empty:
            return False
        return bool(np.all(point >= self.min_point) and np.all(point <= self.max_point))
