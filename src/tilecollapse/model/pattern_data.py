"""Extracts tile patterns, their frequencies and adjacency rules from a sample image."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from tilecollapse.enums import AdjacencyMethod, Direction
from tilecollapse.model.adjacency_rules import AdjacencyRules

if TYPE_CHECKING:
    from numpy.typing import NDArray


logger = logging.getLogger(__name__)


@dataclass
class WFCData:
    """Everything the solver and the renderer need to know about a tile set.

    Attributes:
        tile_frequencies: The weight of each tile, indexed by tile ID.
        adjacency_rules: The rules that define which tiles may be placed next to each other.
        patterns: The RGBA pixel data of each tile, indexed by tile ID, each of shape (tile_size, tile_size, 4).
        tile_size: The width and height of a tile (in pixels).
    """

    tile_frequencies: list[int]
    adjacency_rules: AdjacencyRules
    patterns: list[NDArray[np.uint8]]
    tile_size: int

    @property
    def tile_count(self) -> int:
        """The number of distinct tiles."""
        return len(self.patterns)


def load_sample_array(file_path: str | Path) -> NDArray[np.uint8]:
    """Loads a sample image as an RGBA array of shape (height, width, 4).

    Args:
        file_path: The path of the sample image (any format Pillow can read).

    Returns:
        The pixel data of the image.
    """
    with Image.open(file_path) as img:
        sample_array = np.array(img.convert("RGBA"), dtype=np.uint8)
    logger.info("Loaded sample image %s (%dx%d pixels)", file_path, sample_array.shape[1], sample_array.shape[0])
    return sample_array


def create_pattern_data(
    sample_array: NDArray[np.uint8], tile_size: int, adjacency_method: AdjacencyMethod, wrap: bool = False
) -> PatternData:
    """Creates the pattern data implementation matching the given adjacency method.

    Args:
        sample_array: The RGBA sample image of shape (height, width, 4).
        tile_size: The width and height of a tile (in pixels).
        adjacency_method: How the adjacency rules are derived from the sample.
        wrap: If True, the sample is treated as if its opposite borders touched (only used by the adjacency method).

    Returns:
        The pattern data extracted from the sample.
    """
    match adjacency_method:
        case AdjacencyMethod.ADJACENCY:
            return PatternDataSimpleTiled(sample_array, tile_size, wrap=wrap)
        case AdjacencyMethod.EDGE_PERFECT:
            return PatternDataEdges(sample_array, tile_size)
        case AdjacencyMethod.EDGE_FLIP:
            return PatternDataEdges(sample_array, tile_size, flip=True)


class PatternData(ABC):
    """Abstract base class for extracting tile patterns and adjacency rules from a sample image.

    The sample image is cut into a grid of square tiles of 'tile_size' pixels (trailing pixels that don't fill a whole
    tile are ignored). Every distinct tile becomes a pattern; pattern IDs are assigned in row-major order of first
    occurrence, and the frequency of a pattern is the number of its occurrences. Subclasses define how the adjacency
    rules between the patterns are determined.

    Attributes:
        tile_size: The width and height of a tile (in pixels).
        tile_count: The total number of unique patterns discovered.
    """

    tile_size: int
    tile_count: int

    # The RGBA sample image of shape (height, width, 4) used for pattern extraction.
    _sample_array: NDArray[np.uint8]
    # The (rows, cols) of the tile grid the sample is cut into.
    _grid_size: tuple[int, int]
    # A list of unique pattern objects, where the index corresponds to the tile ID.
    _patterns: list[_Pattern]
    # The tile ID at each position of the tile grid.
    _tile_grid: NDArray[np.int_]
    # The rules that define which tiles may be placed next to each other.
    _adjacency_rules: AdjacencyRules

    def __init__(self, sample_array: NDArray[np.uint8], tile_size: int) -> None:
        """Extracts the patterns and determines the adjacency rules.

        Args:
            sample_array: The RGBA sample image of shape (height, width, 4).
            tile_size: The width and height of a tile (in pixels).

        Raises:
            ValueError: If the tile size is smaller than 1, the sample isn't an RGBA image, or the sample is smaller
                than a single tile.
        """
        if tile_size < 1:
            raise ValueError(f"The tile size must be at least 1, got {tile_size}")
        if sample_array.ndim != 3 or sample_array.shape[2] != 4:
            raise ValueError(f"Expected an RGBA sample of shape (height, width, 4), got {sample_array.shape}")

        self.tile_size = tile_size
        self._sample_array = sample_array
        self._grid_size = (sample_array.shape[0] // tile_size, sample_array.shape[1] // tile_size)
        if self._grid_size[0] == 0 or self._grid_size[1] == 0:
            raise ValueError(
                f"A sample of {sample_array.shape[1]}x{sample_array.shape[0]} pixels is smaller than one tile of "
                f"{tile_size}x{tile_size} pixels"
            )

        self._extract_and_count_patterns()
        self._adjacency_rules = AdjacencyRules()
        for pattern in self._patterns:
            self._adjacency_rules.register(pattern._index)
        self._determine_adjacency_rules()

        logger.info(
            "Extracted %d unique tiles from a %dx%d tile grid", self.tile_count, self._grid_size[1], self._grid_size[0]
        )

    @property
    def adjacency_rules(self) -> AdjacencyRules:
        """The rules that define which tiles may be placed next to each other."""
        return self._adjacency_rules

    @property
    def tile_frequencies(self) -> list[int]:
        """The number of occurrences of each tile, indexed by tile ID."""
        return [pattern._frequency for pattern in self._patterns]

    @property
    def patterns(self) -> list[NDArray[np.uint8]]:
        """The RGBA pixel data of each tile, indexed by tile ID."""
        return [pattern._pixels for pattern in self._patterns]

    def get_tile_grid(self) -> NDArray[np.int_]:
        """Returns the (rows, cols) array of tile IDs the sample consists of."""
        return self._tile_grid.copy()

    def get_wfc_data(self) -> WFCData:
        """Bundles the tile frequencies, adjacency rules and patterns for the solver and renderer."""
        return WFCData(self.tile_frequencies, self._adjacency_rules, self.patterns, self.tile_size)

    @abstractmethod
    def _determine_adjacency_rules(self) -> None:
        """Defines the logic for determining tile compatibility."""
        pass

    def _extract_and_count_patterns(self) -> None:
        """Cuts the sample into tiles, assigns IDs to unique tiles and counts their frequency."""
        self._patterns = []
        patterns_by_key: dict[bytes, _Pattern] = {}
        self._tile_grid = np.full(self._grid_size, -1, dtype=np.int_)

        for row in range(self._grid_size[0]):
            for col in range(self._grid_size[1]):
                pixels = self._sample_array[
                    row * self.tile_size : (row + 1) * self.tile_size,
                    col * self.tile_size : (col + 1) * self.tile_size,
                ]
                key = pixels.tobytes()

                if key not in patterns_by_key:
                    new_pattern = _Pattern(len(self._patterns), pixels)
                    self._patterns.append(new_pattern)
                    patterns_by_key[key] = new_pattern
                else:
                    patterns_by_key[key]._frequency += 1

                self._tile_grid[row, col] = patterns_by_key[key]._index

        self.tile_count = len(self._patterns)


class PatternDataSimpleTiled(PatternData):
    """Pattern data implementation that reads the adjacency rules directly from the sample.

    Two tiles may be placed next to each other in a direction exactly if they occur next to each other in that
    direction at least once in the sample.
    """

    # If True, the tiles on opposite borders of the sample are considered neighbors as well.
    _wrap: bool

    def __init__(self, sample_array: NDArray[np.uint8], tile_size: int, wrap: bool = False) -> None:
        """Initializes the simple tiled pattern data structure."""
        self._wrap = wrap
        super().__init__(sample_array, tile_size)

    def _determine_adjacency_rules(self) -> None:
        """Extracts allowed tile adjacencies from the sample's tile grid."""
        rows, cols = self._grid_size
        # The tiles above and to the left are already known, the rules for the other two directions follow from
        # symmetry.
        for row in range(rows):
            for col in range(cols):
                tile = int(self._tile_grid[row, col])
                if row > 0:
                    self._adjacency_rules.allow(tile, int(self._tile_grid[row - 1, col]), Direction.UP)
                if col > 0:
                    self._adjacency_rules.allow(tile, int(self._tile_grid[row, col - 1]), Direction.LEFT)

        if self._wrap:
            for col in range(cols):
                self._adjacency_rules.allow(
                    int(self._tile_grid[0, col]), int(self._tile_grid[rows - 1, col]), Direction.UP
                )
            for row in range(rows):
                self._adjacency_rules.allow(
                    int(self._tile_grid[row, 0]), int(self._tile_grid[row, cols - 1]), Direction.LEFT
                )


class PatternDataEdges(PatternData):
    """Pattern data implementation that matches the pixel edges of the tiles.

    A tile may be placed above another tile if its bottom row of pixels equals the other tile's top row, and to the
    left of another tile if its right column of pixels equals the other tile's left column. In flip mode the bottom
    and right edges are compared in reversed pixel order.
    """

    # If True, the bottom and right edges are reversed before comparing them.
    _flip: bool

    def __init__(self, sample_array: NDArray[np.uint8], tile_size: int, flip: bool = False) -> None:
        """Initializes the edge matching pattern data structure."""
        self._flip = flip
        super().__init__(sample_array, tile_size)

    def _determine_adjacency_rules(self) -> None:
        """Allows every pair of tiles whose touching edges are equal."""
        edges = [self._get_edges(pattern._pixels) for pattern in self._patterns]

        for tile, tile_edges in enumerate(edges):
            for other_tile, other_edges in enumerate(edges):
                if other_edges[Direction.DOWN.value] == tile_edges[Direction.UP.value]:
                    self._adjacency_rules.allow(tile, other_tile, Direction.UP)
                if other_edges[Direction.RIGHT.value] == tile_edges[Direction.LEFT.value]:
                    self._adjacency_rules.allow(tile, other_tile, Direction.LEFT)

    def _get_edges(self, pixels: NDArray[np.uint8]) -> list[bytes]:
        """Returns the raw bytes of the four pixel edges of a tile, indexed by Direction.value."""
        edges = [b""] * len(Direction)
        edges[Direction.LEFT.value] = pixels[:, 0].tobytes()
        edges[Direction.UP.value] = pixels[0, :].tobytes()
        if self._flip:
            edges[Direction.RIGHT.value] = pixels[::-1, -1].tobytes()
            edges[Direction.DOWN.value] = pixels[-1, ::-1].tobytes()
        else:
            edges[Direction.RIGHT.value] = pixels[:, -1].tobytes()
            edges[Direction.DOWN.value] = pixels[-1, :].tobytes()
        return edges


class _Pattern:
    """Internal class to represent a single unique tile."""

    # The unique integer ID for this tile.
    _index: int
    # The RGBA pixel data of the tile, of shape (tile_size, tile_size, 4).
    _pixels: NDArray[np.uint8]
    # The number of times this tile was found in the sample.
    _frequency: int

    def __init__(self, index: int, pixels: NDArray[np.uint8]) -> None:
        """Initializes a pattern object. Frequency starts at 1 upon creation."""
        self._index = index
        self._pixels = pixels.copy()
        self._frequency = 1
