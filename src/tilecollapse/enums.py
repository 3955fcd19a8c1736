"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the cardinal directions used for tile adjacency and neighbor lookup.

    The value of each member is its index into every per-direction array (e.g. enabler counts).
    """

    LEFT = 0
    """Left direction."""
    RIGHT = 1
    """Right direction."""
    UP = 2
    """Upward direction."""
    DOWN = 3
    """Downward direction."""

    def opposite(self) -> Direction:
        """Returns the opposite direction of the current direction."""
        match self:
            case Direction.LEFT:
                return Direction.RIGHT
            case Direction.RIGHT:
                return Direction.LEFT
            case Direction.UP:
                return Direction.DOWN
            case Direction.DOWN:
                return Direction.UP

    def to_vector(self) -> tuple[int, int]:
        """Returns the (row, col) vector representation for the direction."""
        match self:
            case Direction.LEFT:
                return (0, -1)
            case Direction.RIGHT:
                return (0, 1)
            case Direction.UP:
                return (-1, 0)
            case Direction.DOWN:
                return (1, 0)


class AdjacencyMethod(Enum):
    """Defines how the preprocessor derives adjacency rules from a sample image."""

    ADJACENCY = "Adjacency"
    """Two tiles are compatible in a direction if they occur next to each other in that direction in the sample."""
    EDGE_PERFECT = "Edge (Perfect)"
    """Two tiles are compatible if the pixel edges they share are identical."""
    EDGE_FLIP = "Edge (Flip)"
    """Like EDGE_PERFECT, but the bottom and right edges are compared in reversed pixel order."""


class CompletionBehavior(Enum):
    """Defines what the viewer does once the output has been fully generated."""

    KEEP_OPEN = "Keep Open"
    """The window stays open and keeps showing the finished output."""
    STOP_WHEN_COMPLETED = "Stop When Completed"
    """The application quits as soon as generation has finished."""
