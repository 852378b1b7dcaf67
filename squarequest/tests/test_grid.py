"""
Tests for grid generation.

Tests:
- Pair structure for every difficulty
- Palette cycling
- Shuffle fairness basics
"""

import random
from collections import Counter

import pytest

from ..engine_core.grid import DEFAULT_PALETTE, GridGenerator, generate_grid
from ..engine_core.state import Difficulty, TileColor


class TestDifficulty:
    """Tests for difficulty lookups."""

    @pytest.mark.parametrize("difficulty, size, cells, colors", [
        (Difficulty.EASY, 3, 9, 5),
        (Difficulty.MEDIUM, 5, 25, 13),
        (Difficulty.HARD, 7, 49, 25),
    ])
    def test_dimensions(self, difficulty, size, cells, colors):
        """Each level maps to a fixed grid."""
        assert difficulty.grid_size == size
        assert difficulty.total_cells == cells
        assert difficulty.color_count == colors

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_one_tile_always_unpaired(self, difficulty):
        """Odd grids leave an even, smaller matchable count."""
        assert difficulty.total_cells % 2 == 1
        assert difficulty.max_matchable % 2 == 0
        assert difficulty.max_matchable == difficulty.total_cells - 1

    def test_default_palette_covers_hard(self):
        """Hard needs 25 distinct colors."""
        assert len(DEFAULT_PALETTE) >= Difficulty.HARD.color_count


class TestGenerate:
    """Tests for GridGenerator.generate."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_pair_structure(self, grid_generator, difficulty):
        """One color appears once, every other color exactly twice."""
        tiles = grid_generator.generate(difficulty)
        counts = Counter(tile.color for tile in tiles)

        assert len(tiles) == difficulty.total_cells
        assert sorted(counts.values()).count(1) == 1
        assert all(count in (1, 2) for count in counts.values())

    def test_easy_scenario(self, grid_generator):
        """Easy grid: four pairs and one single."""
        tiles = grid_generator.generate(Difficulty.EASY)
        counts = Counter(tile.color for tile in tiles)

        assert len(tiles) == 9
        assert list(counts.values()).count(2) == 4
        assert list(counts.values()).count(1) == 1

    def test_tiles_start_hidden(self, grid_generator):
        """New tiles are face-down, unselected, unmatched."""
        for tile in grid_generator.generate(Difficulty.MEDIUM):
            assert not tile.is_face_up
            assert not tile.is_selected
            assert not tile.is_matched

    def test_tile_ids_unique(self, grid_generator):
        """Every tile gets a fresh id, also across grids."""
        first = grid_generator.generate(Difficulty.HARD)
        second = grid_generator.generate(Difficulty.HARD)
        ids = [tile.tile_id for tile in first + second]
        assert len(set(ids)) == len(ids)

    def test_seed_is_deterministic(self):
        """Same seed, same color order."""
        a = [t.color for t in generate_grid(Difficulty.MEDIUM, seed=7)]
        b = [t.color for t in generate_grid(Difficulty.MEDIUM, seed=7)]
        assert a == b


class TestPalette:
    """Tests for palette handling."""

    def test_build_colors_in_palette_order(self):
        """Unshuffled sequence pairs colors in palette order."""
        generator = GridGenerator(rng=random.Random(0))
        colors = generator.build_colors(Difficulty.EASY)
        assert colors == [
            TileColor.RED, TileColor.RED,
            TileColor.BLUE, TileColor.BLUE,
            TileColor.GREEN, TileColor.GREEN,
            TileColor.YELLOW, TileColor.YELLOW,
            TileColor.ORANGE,
        ]

    def test_short_palette_cycles(self):
        """Colors repeat when the palette runs out."""
        palette = [TileColor.RED, TileColor.BLUE]
        generator = GridGenerator(rng=random.Random(0), palette=palette)
        counts = Counter(generator.build_colors(Difficulty.EASY))

        # RED at i=0, 2, 4 (last single); BLUE at i=1, 3
        assert counts[TileColor.RED] == 5
        assert counts[TileColor.BLUE] == 4

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            GridGenerator(palette=[])


class TestShuffle:
    """Tests for the shuffle helper."""

    def test_shuffle_keeps_multiset(self, grid_generator):
        items = list(range(20))
        shuffled = grid_generator.shuffle(items)
        assert sorted(shuffled) == items

    def test_shuffle_returns_copy(self, grid_generator):
        items = [1, 2, 3, 4]
        grid_generator.shuffle(items)
        assert items == [1, 2, 3, 4]

    def test_every_position_reachable(self):
        """Over many shuffles each color lands in each slot."""
        generator = GridGenerator(rng=random.Random(123))
        seen = [set() for _ in range(3)]
        for _ in range(200):
            for i, item in enumerate(generator.shuffle(["a", "b", "c"])):
                seen[i].add(item)
        assert all(slot == {"a", "b", "c"} for slot in seen)
