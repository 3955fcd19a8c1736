"""Tests for extracting tiles and adjacency rules from sample images."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from tests.helpers import BLACK, WHITE, gray_tile, make_checkerboard_sample
from tilecollapse.enums import AdjacencyMethod, Direction
from tilecollapse.model.pattern_data import (
    PatternDataEdges,
    PatternDataSimpleTiled,
    create_pattern_data,
    load_sample_array,
)


def make_stripes_sample() -> np.ndarray:
    """Creates a 1x3 tile sample (tile size 1) with three different gray values."""
    return gray_tile([[10, 20, 30]])


class TestPatternExtraction:
    """Tests for cutting a sample into unique tiles."""

    def test_checkerboard_has_two_tiles(self) -> None:
        """A checkerboard of 4x4 squares cut into 4x4 tiles yields one black and one white tile."""
        pattern_data = PatternDataSimpleTiled(make_checkerboard_sample(), 4)

        assert pattern_data.tile_count == 2
        assert pattern_data.tile_frequencies == [8, 8]
        assert pattern_data.patterns[0][0, 0].tolist() == list(BLACK)
        assert pattern_data.patterns[1][0, 0].tolist() == list(WHITE)
        assert all(pattern.shape == (4, 4, 4) for pattern in pattern_data.patterns)

    def test_tile_ids_follow_first_occurrence(self) -> None:
        """Tile IDs are assigned in row-major order of first occurrence."""
        pattern_data = PatternDataSimpleTiled(make_checkerboard_sample(), 4)

        expected = np.array([[0, 1, 0, 1], [1, 0, 1, 0], [0, 1, 0, 1], [1, 0, 1, 0]])
        assert np.array_equal(pattern_data.get_tile_grid(), expected)

    def test_larger_tiles_merge_repeating_blocks(self) -> None:
        """Tiles spanning 2x2 checkerboard squares are all identical."""
        pattern_data = PatternDataSimpleTiled(make_checkerboard_sample(), 8)

        assert pattern_data.tile_count == 1
        assert pattern_data.tile_frequencies == [4]

    def test_trailing_pixels_are_ignored(self) -> None:
        """Pixels that don't fill a whole tile are not part of any tile."""
        sample = np.zeros((18, 17, 4), dtype=np.uint8)
        sample[:16, :16] = make_checkerboard_sample()

        pattern_data = PatternDataSimpleTiled(sample, 4)

        assert pattern_data.get_tile_grid().shape == (4, 4)
        assert pattern_data.tile_frequencies == [8, 8]

    def test_patterns_are_copies(self) -> None:
        """Changing the sample afterwards doesn't change the extracted patterns."""
        sample = make_checkerboard_sample()
        pattern_data = PatternDataSimpleTiled(sample, 4)

        sample[:] = 99

        assert pattern_data.patterns[0][0, 0].tolist() == list(BLACK)

    @pytest.mark.parametrize("tile_size", [0, -2])
    def test_tile_size_must_be_positive(self, tile_size: int) -> None:
        """A tile must be at least one pixel large."""
        with pytest.raises(ValueError):
            PatternDataSimpleTiled(make_checkerboard_sample(), tile_size)

    def test_sample_smaller_than_a_tile(self) -> None:
        """A sample must contain at least one whole tile."""
        with pytest.raises(ValueError):
            PatternDataSimpleTiled(make_checkerboard_sample(blocks=1, block_size=3), 4)

    def test_sample_must_be_rgba(self) -> None:
        """Samples without an alpha channel are rejected."""
        with pytest.raises(ValueError):
            PatternDataSimpleTiled(np.zeros((8, 8, 3), dtype=np.uint8), 4)


class TestSimpleTiledRules:
    """Tests for the adjacency rules read from neighboring tiles."""

    def test_checkerboard_rules(self) -> None:
        """Black and white tiles are only ever next to each other."""
        rules = PatternDataSimpleTiled(make_checkerboard_sample(), 4).adjacency_rules

        for direction in Direction:
            assert rules.is_allowed(0, 1, direction)
            assert rules.is_allowed(1, 0, direction)
            assert not rules.is_allowed(0, 0, direction)
            assert not rules.is_allowed(1, 1, direction)

    def test_rules_follow_the_sample_order(self) -> None:
        """Only neighbor pairs that occur in the sample are allowed."""
        rules = PatternDataSimpleTiled(make_stripes_sample(), 1).adjacency_rules

        assert rules.is_allowed(0, 1, Direction.RIGHT)
        assert rules.is_allowed(1, 2, Direction.RIGHT)
        assert rules.is_allowed(2, 1, Direction.LEFT)
        assert not rules.is_allowed(0, 2, Direction.LEFT)
        assert not rules.is_allowed(0, 0, Direction.UP)

    def test_wrap_connects_opposite_borders(self) -> None:
        """With wrapping, the last column is left of the first one and each row is above itself."""
        rules = PatternDataSimpleTiled(make_stripes_sample(), 1, wrap=True).adjacency_rules

        assert rules.is_allowed(0, 2, Direction.LEFT)
        assert rules.is_allowed(2, 0, Direction.RIGHT)
        for tile in range(3):
            assert rules.is_allowed(tile, tile, Direction.UP)
            assert rules.is_allowed(tile, tile, Direction.DOWN)

    def test_single_tile_sample(self) -> None:
        """A sample consisting of one tile yields one tile without any neighbors."""
        pattern_data = PatternDataSimpleTiled(gray_tile([[1, 2], [3, 4]]), 2)

        assert pattern_data.tile_count == 1
        assert pattern_data.adjacency_rules.enabled_by_count(0) == [0, 0, 0, 0]


class TestEdgeRules:
    """Tests for the adjacency rules derived from matching pixel edges."""

    @staticmethod
    def make_sample(top_tile: list[list[int]], bottom_tile: list[list[int]]) -> np.ndarray:
        """Places two 2x2 tiles next to each other."""
        return np.concatenate([gray_tile(top_tile), gray_tile(bottom_tile)], axis=1)

    def test_matching_edges(self) -> None:
        """A tile may be placed above another if its bottom row equals the other tile's top row."""
        sample = self.make_sample([[1, 2], [3, 4]], [[3, 4], [5, 6]])

        rules = PatternDataEdges(sample, 2).adjacency_rules

        assert rules.is_allowed(1, 0, Direction.UP)
        assert rules.is_allowed(0, 1, Direction.DOWN)
        assert not rules.is_allowed(0, 1, Direction.UP)
        assert not rules.is_allowed(0, 1, Direction.RIGHT)
        assert not rules.is_allowed(0, 0, Direction.UP)

    def test_side_by_side_occurrence_is_irrelevant(self) -> None:
        """Edge matching ignores where the tiles occur in the sample."""
        sample = self.make_sample([[1, 2], [3, 4]], [[3, 4], [5, 6]])

        rules = PatternDataEdges(sample, 2).adjacency_rules

        assert not rules.is_allowed(0, 1, Direction.RIGHT)
        assert not rules.is_allowed(1, 0, Direction.LEFT)

    def test_flip_reverses_the_bottom_edge(self) -> None:
        """In flip mode the bottom edge is compared in reversed pixel order."""
        sample = self.make_sample([[1, 2], [3, 4]], [[4, 3], [5, 6]])

        perfect_rules = PatternDataEdges(sample, 2).adjacency_rules
        flip_rules = PatternDataEdges(sample, 2, flip=True).adjacency_rules

        assert not perfect_rules.is_allowed(1, 0, Direction.UP)
        assert flip_rules.is_allowed(1, 0, Direction.UP)

    def test_matching_side_edges(self) -> None:
        """A tile may be placed left of another if its right column equals the other tile's left column."""
        sample = self.make_sample([[1, 2], [3, 4]], [[2, 7], [4, 8]])

        rules = PatternDataEdges(sample, 2).adjacency_rules

        assert rules.is_allowed(1, 0, Direction.LEFT)
        assert rules.is_allowed(0, 1, Direction.RIGHT)


class TestLoadingAndFactory:
    """Tests for loading sample files and choosing the pattern data implementation."""

    def test_load_sample_array_converts_to_rgba(self, tmp_path: Path) -> None:
        """RGB images are loaded as opaque RGBA arrays."""
        file_path = tmp_path / "sample.png"
        Image.new("RGB", (6, 4), (10, 20, 30)).save(file_path)

        sample = load_sample_array(file_path)

        assert sample.shape == (4, 6, 4)
        assert sample.dtype == np.uint8
        assert sample[0, 0].tolist() == [10, 20, 30, 255]

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        """Missing files raise an OSError."""
        with pytest.raises(OSError):
            load_sample_array(tmp_path / "missing.png")

    def test_png_round_trip(self, tmp_path: Path) -> None:
        """A checkerboard saved as PNG yields the same tiles as the array it was saved from."""
        file_path = tmp_path / "checkerboard.png"
        Image.fromarray(make_checkerboard_sample()).save(file_path)

        pattern_data = PatternDataSimpleTiled(load_sample_array(file_path), 4)

        assert pattern_data.tile_frequencies == [8, 8]

    @pytest.mark.parametrize(
        ("adjacency_method", "expected_type"),
        [
            (AdjacencyMethod.ADJACENCY, PatternDataSimpleTiled),
            (AdjacencyMethod.EDGE_PERFECT, PatternDataEdges),
            (AdjacencyMethod.EDGE_FLIP, PatternDataEdges),
        ],
    )
    def test_create_pattern_data(self, adjacency_method: AdjacencyMethod, expected_type: type) -> None:
        """Each adjacency method is handled by its own implementation."""
        pattern_data = create_pattern_data(make_checkerboard_sample(), 4, adjacency_method)

        assert isinstance(pattern_data, expected_type)

    def test_get_wfc_data(self) -> None:
        """The solver data bundles frequencies, rules and patterns."""
        pattern_data = PatternDataSimpleTiled(make_checkerboard_sample(), 4)

        wfc_data = pattern_data.get_wfc_data()

        assert wfc_data.tile_count == 2
        assert wfc_data.tile_size == 4
        assert wfc_data.tile_frequencies == [8, 8]
        assert wfc_data.adjacency_rules is pattern_data.adjacency_rules
