"""
Face colours and materials.

Colours are (r, g, b, a) tuples of 0-255 integer channels.
"""

from typing import Iterator

import numpy as np
from datatrees import datatree, dtfield

MAX_CHANNEL = 255

# Semi transparent material palette. The repeated blue is intentional, it
# gives that colour a higher chance of being picked.
PALETTE = (
    (244, 67, 54, 96),
    (233, 30, 99, 96),
    (156, 39, 176, 96),
    (103, 58, 183, 96),
    (63, 81, 181, 96),
    (33, 150, 243, 96),
    (33, 150, 243, 96),
    (3, 169, 244, 96),
    (0, 188, 212, 96),
    (0, 150, 136, 96),
    (76, 175, 80, 96),
    (139, 195, 74, 96),
    (205, 220, 57, 96),
    (255, 235, 59, 96),
    (255, 193, 7, 96),
    (255, 152, 0, 96),
    (255, 87, 34, 96),
)

SPECULAR_COLOUR = (255, 255, 255, 128)
SPECULAR_POWER = 30.0


@datatree(frozen=True)
class Material:
    """Diffuse colour with an optional specular highlight."""
    diffuse: tuple
    specular: tuple | None = None
    specular_power: float = 0.0

    @property
    def rgba(self) -> np.ndarray:
        """Diffuse colour scaled to 0..1 floats."""
        return np.array(self.diffuse, dtype=np.float32) / MAX_CHANNEL

    @property
    def is_transparent(self) -> bool:
        return self.diffuse[3] < MAX_CHANNEL


def front_material(colour: tuple) -> Material:
    return Material(tuple(colour), SPECULAR_COLOUR, SPECULAR_POWER)


def back_material(colour: tuple) -> Material:
    """A darker, slightly more opaque variant of colour for the inner side.

    The alpha is multiplied first and capped afterwards.
    """
    r, g, b, a = colour
    return Material((
        int(r * 0.9),
        int(g * 0.9),
        int(b * 0.9),
        int(min(a * 1.1, MAX_CHANNEL)),
    ))


@datatree
class ColorSource:
    """Draws colours from a palette without replacement, reshuffling the
    palette for each further block of len(palette) colours."""

    palette: tuple = PALETTE
    seed: int | None = None
    rng: np.random.Generator = dtfield(
        self_default=lambda s: np.random.default_rng(s.seed), init=False)

    def colours(self) -> Iterator[tuple]:
        """Endless iterator of colours, one shuffled palette block at a time."""
        while True:
            for i in self.rng.permutation(len(self.palette)):
                yield self.palette[i]

    def take(self, n: int) -> list[tuple]:
        """Returns n colours. Each consecutive block of len(palette) colours
        uses every palette entry at most once."""
        if n <= 0:
            return []
        result = []
        for colour in self.colours():
            result.append(colour)
            if len(result) == n:
                return result
