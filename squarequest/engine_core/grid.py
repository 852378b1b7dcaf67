"""
Grid Generator - Creates the shuffled tile set for a round.

Every grid has an odd number of cells, so exactly one color value
ends up unpaired. That tile can never be matched.
"""

from __future__ import annotations
import random
import uuid
from typing import Sequence, TypeVar

from .state import Difficulty, Tile, TileColor

T = TypeVar("T")

DEFAULT_PALETTE: tuple[TileColor, ...] = tuple(TileColor)


class GridGenerator:
    """
    Builds paired-color grids and performs fair shuffles.

    Pass a seeded random.Random for deterministic grids.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        palette: Sequence[TileColor] = DEFAULT_PALETTE,
    ):
        if not palette:
            raise ValueError("Palette must contain at least one color")
        self.rng = rng or random.Random()
        self.palette = tuple(palette)

    def build_colors(self, difficulty: Difficulty) -> list[TileColor]:
        """
        Unshuffled color sequence for a difficulty.

        Colors repeat cyclically when the palette is shorter than
        the color count.
        """
        total_cells = difficulty.total_cells
        colors: list[TileColor] = []
        for i in range(difficulty.color_count):
            color = self.palette[i % len(self.palette)]
            colors.append(color)
            # Pair it, except for the final single on odd grids
            if len(colors) < total_cells:
                colors.append(color)
        return colors

    def generate(self, difficulty: Difficulty) -> tuple[Tile, ...]:
        """Fresh face-down tiles in random order."""
        colors = self.shuffle(self.build_colors(difficulty))
        return tuple(
            Tile(tile_id=str(uuid.uuid4()), color=color)
            for color in colors
        )

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy (Fisher-Yates via random.shuffle)."""
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled


def generate_grid(difficulty: Difficulty, seed: int | None = None) -> tuple[Tile, ...]:
    """Convenience function for one-off grids."""
    return GridGenerator(rng=random.Random(seed)).generate(difficulty)
