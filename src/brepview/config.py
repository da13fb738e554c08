from typing import Tuple

from datatrees import datatree


@datatree
class ViewerConfig:
    """Settings for a display session."""

    colorful: bool = False  # One translucent mesh per face instead of a merged mesh.
    rotation_threshold: float = 0.1  # Radians of rotation between re-sorts.
    camera_position: Tuple[float, float, float] = (0.0, 0.0, 5.0)
    seed: int | None = None  # Palette shuffling seed, None for a random one.
    ambient_color: Tuple[int, int, int, int] = (169, 169, 169, 255)
    directional_color: Tuple[int, int, int, int] = (128, 128, 128, 255)
    light_direction: Tuple[float, float, float] = (-1.0, -1.0, -1.0)
