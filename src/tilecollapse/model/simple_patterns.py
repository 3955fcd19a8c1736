"""Contains a hand-authored tile set of a blank tile and four corner pipes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tilecollapse.enums import Direction
from tilecollapse.model.adjacency_rules import AdjacencyRules
from tilecollapse.model.pattern_data import WFCData

if TYPE_CHECKING:
    from collections.abc import Iterable

    from numpy.typing import NDArray


BLANK: int = 0
DOWN_LEFT: int = 1
LEFT_UP: int = 2
RIGHT_DOWN: int = 3
UP_RIGHT: int = 4

# Text representation of each tile, indexed by tile ID.
CHARS: list[str] = [" ", "┓", "┛", "┏", "┗"]

SIMPLE_TILE_SIZE: int = 4
SIMPLE_TILE_FREQUENCIES: list[int] = [1, 2, 2, 2, 2]

# Pipe tiles grouped by the side that has no pipe arm.
BLANK_RIGHT: list[int] = [DOWN_LEFT, LEFT_UP]
BLANK_LEFT: list[int] = [RIGHT_DOWN, UP_RIGHT]
BLANK_UP: list[int] = [RIGHT_DOWN, DOWN_LEFT]
BLANK_DOWN: list[int] = [UP_RIGHT, LEFT_UP]

# The sides each tile has a pipe arm on.
_ARMS: dict[int, tuple[Direction, ...]] = {
    BLANK: (),
    DOWN_LEFT: (Direction.DOWN, Direction.LEFT),
    LEFT_UP: (Direction.LEFT, Direction.UP),
    RIGHT_DOWN: (Direction.RIGHT, Direction.DOWN),
    UP_RIGHT: (Direction.UP, Direction.RIGHT),
}

_BACKGROUND_COLOR: tuple[int, int, int, int] = (255, 255, 255, 255)
_PIPE_COLOR: tuple[int, int, int, int] = (0, 0, 0, 255)


def construct_simple_patterns() -> WFCData:
    """Builds the corner pipe tile set.

    Pipe arms always connect to pipe arms, and blank sides always face blank sides. The blank tile may be placed next
    to itself in every direction.

    Returns:
        The tile frequencies, adjacency rules and 4x4 patterns of the tile set.
    """
    adjacency_rules = AdjacencyRules()

    # Matching blank sides above / below.
    _allow_all(adjacency_rules, BLANK_UP, BLANK_DOWN, Direction.UP)
    # Connecting arms above / below.
    _allow_all(adjacency_rules, BLANK_DOWN, BLANK_UP, Direction.UP)
    # Matching blank sides left / right.
    _allow_all(adjacency_rules, BLANK_RIGHT, BLANK_LEFT, Direction.RIGHT)
    # Connecting arms left / right.
    _allow_all(adjacency_rules, BLANK_LEFT, BLANK_RIGHT, Direction.RIGHT)

    _allow_all(adjacency_rules, [BLANK], BLANK_LEFT, Direction.RIGHT)
    _allow_all(adjacency_rules, [BLANK], BLANK_RIGHT, Direction.LEFT)
    _allow_all(adjacency_rules, [BLANK], BLANK_UP, Direction.DOWN)
    _allow_all(adjacency_rules, [BLANK], BLANK_DOWN, Direction.UP)
    for direction in Direction:
        adjacency_rules.allow(BLANK, BLANK, direction)

    patterns = [_draw_pattern(_ARMS[tile]) for tile in range(len(CHARS))]
    return WFCData(list(SIMPLE_TILE_FREQUENCIES), adjacency_rules, patterns, SIMPLE_TILE_SIZE)


def tile_grid_to_text(tile_grid: NDArray[np.int_]) -> str:
    """Renders a grid of corner pipe tile IDs as text (uncollapsed cells are shown as '?')."""
    lines = []
    for row in tile_grid:
        lines.append("".join(CHARS[tile] if tile >= 0 else "?" for tile in row))
    return "\n".join(lines)


def _allow_all(
    adjacency_rules: AdjacencyRules, from_tiles: Iterable[int], to_tiles: Iterable[int], direction: Direction
) -> None:
    """Allows every tile of 'to_tiles' next to every tile of 'from_tiles' in the given direction."""
    for from_tile in from_tiles:
        for to_tile in to_tiles:
            adjacency_rules.allow(from_tile, to_tile, direction)


def _draw_pattern(arms: tuple[Direction, ...]) -> NDArray[np.uint8]:
    """Draws a 4x4 tile with a 2 pixel wide pipe running from the center to each given side."""
    pattern = np.full((SIMPLE_TILE_SIZE, SIMPLE_TILE_SIZE, 4), _BACKGROUND_COLOR, dtype=np.uint8)
    if not arms:
        return pattern

    pattern[1:3, 1:3] = _PIPE_COLOR
    for arm in arms:
        match arm:
            case Direction.LEFT:
                pattern[1:3, 0] = _PIPE_COLOR
            case Direction.RIGHT:
                pattern[1:3, 3] = _PIPE_COLOR
            case Direction.UP:
                pattern[0, 1:3] = _PIPE_COLOR
            case Direction.DOWN:
                pattern[3, 1:3] = _PIPE_COLOR
    return pattern
