"""Shared tile sets, samples and random number generators for the tests."""

from __future__ import annotations

from collections.abc import Sequence
import random
from typing import TypeVar

import numpy as np
from numpy.typing import NDArray

from tilecollapse.enums import Direction
from tilecollapse.model.adjacency_rules import AdjacencyRules
from tilecollapse.model.pattern_data import WFCData

T = TypeVar("T")

BLACK: tuple[int, int, int, int] = (0, 0, 0, 255)
WHITE: tuple[int, int, int, int] = (255, 255, 255, 255)

# Gradient tile set: A <-> B <-> C, where A and C can never be adjacent.
TILE_A: int = 0
TILE_B: int = 1
TILE_C: int = 2
GRADIENT_FREQUENCIES: list[int] = [3, 2, 1]


def make_gradient_rules() -> AdjacencyRules:
    """Creates rules in which B may be next to anything and A and C may only be next to themselves and B.

    Since B is compatible with every tile, a model using these rules can never run into a contradiction.
    """
    rules = AdjacencyRules()
    for direction in Direction:
        for from_tile, to_tile in ((TILE_A, TILE_A), (TILE_A, TILE_B), (TILE_B, TILE_B), (TILE_B, TILE_C)):
            rules.allow(from_tile, to_tile, direction)
        rules.allow(TILE_C, TILE_C, direction)
    return rules


def make_alternating_rules(directions: Sequence[Direction] = tuple(Direction)) -> AdjacencyRules:
    """Creates rules for two tiles that must differ from their neighbors in the given directions."""
    rules = AdjacencyRules()
    rules.register(0)
    rules.register(1)
    for direction in directions:
        rules.allow(0, 1, direction)
        rules.allow(1, 0, direction)
    return rules


def make_checkerboard_sample(blocks: int = 4, block_size: int = 4) -> NDArray[np.uint8]:
    """Creates an RGBA checkerboard of 'blocks' x 'blocks' squares, with a black square in the top left corner."""
    size = blocks * block_size
    sample = np.empty((size, size, 4), dtype=np.uint8)
    for row in range(blocks):
        for col in range(blocks):
            color = BLACK if (row + col) % 2 == 0 else WHITE
            sample[row * block_size : (row + 1) * block_size, col * block_size : (col + 1) * block_size] = color
    return sample


def make_checkerboard_wfc_data(tile_size: int = 1) -> WFCData:
    """Creates a two tile set (black and white) whose tiles must differ from all four neighbors."""
    patterns = [
        np.full((tile_size, tile_size, 4), BLACK, dtype=np.uint8),
        np.full((tile_size, tile_size, 4), WHITE, dtype=np.uint8),
    ]
    return WFCData([1, 1], make_alternating_rules(), patterns, tile_size)


def gray_tile(values: list[list[int]]) -> NDArray[np.uint8]:
    """Creates an opaque RGBA tile whose pixels have the given gray values."""
    gray = np.array(values, dtype=np.uint8)
    tile = np.empty((*gray.shape, 4), dtype=np.uint8)
    tile[:, :, 0] = gray
    tile[:, :, 1] = gray
    tile[:, :, 2] = gray
    tile[:, :, 3] = 255
    return tile


class ScriptedRandom(random.Random):
    """Random number generator with predictable entropy noise and tile choices.

    'uniform' returns 0.0 for the calls whose (zero-based) index is in 'zero_noise_calls' and the upper bound
    otherwise, so the first cell to collapse can be chosen via its row-major index. 'choice' returns 'preferred' if it
    is part of the sequence and the first element otherwise.
    """

    def __init__(self, *, zero_noise_calls: Sequence[int] = (), preferred: int | None = None) -> None:
        super().__init__(0)
        self._zero_noise_calls = set(zero_noise_calls)
        self._preferred = preferred
        self._uniform_calls = 0

    def uniform(self, a: float, b: float) -> float:
        call_index = self._uniform_calls
        self._uniform_calls += 1
        return a if call_index in self._zero_noise_calls else b

    def choice(self, seq: Sequence[T]) -> T:
        if self._preferred is not None and self._preferred in seq:
            return self._preferred  # type: ignore[return-value]
        return seq[0]
