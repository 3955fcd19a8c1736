"""Contains the state of a single grid cell and the removal events it produces."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from tilecollapse.exceptions import WFCContradiction

if TYPE_CHECKING:
    import random

    from numpy.typing import NDArray

    from tilecollapse.enums import Direction
    from tilecollapse.model.adjacency_rules import AdjacencyRules, EnablerDict
    from tilecollapse.model.probability_dict import ProbabilityDict


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileRemovalEvent:
    """A unit of propagation work: a tile has just become impossible at a cell."""

    # The ID of the tile that became impossible.
    tile_id: int
    # The (row, col) coords of the cell the tile was removed from.
    coords: tuple[int, int]

    @classmethod
    def from_removed_tiles(cls, removed_tiles: Iterable[int], coords: tuple[int, int]) -> list[TileRemovalEvent]:
        """Wraps every removed tile ID into an event for the cell at the given coords."""
        return [cls(tile_id, coords) for tile_id in removed_tiles]


class Cell:
    """One position of the output grid.

    A cell combines its domain (the enabler dict of still possible tiles) with the weight statistics of those tiles.
    It is collapsed once a single tile has been chosen for it.

    Attributes:
        coords: The (row, col) coords of the cell.
        collapsed_to: The ID of the chosen tile, or None while the cell is not collapsed.
        domain: Enabler counts of all tiles still possible in the cell.
        probability: Weight statistics of all tiles still possible in the cell.
        entropy_noise: Small random value added to the entropy to break ties, sampled once per cell.
    """

    coords: tuple[int, int]
    collapsed_to: int | None
    domain: EnablerDict
    probability: ProbabilityDict
    entropy_noise: float

    def __init__(
        self, coords: tuple[int, int], domain: EnablerDict, probability: ProbabilityDict, entropy_noise: float = 0.0
    ) -> None:
        """Initializes an uncollapsed cell. The domain and probability dict are used as is, not copied."""
        self.coords = coords
        self.collapsed_to = None
        self.domain = domain
        self.probability = probability
        self.entropy_noise = entropy_noise

    def __repr__(self) -> str:
        return f"Cell(coords={self.coords}, collapsed_to={self.collapsed_to}, allowed={self.allowed_tile_ids()})"

    @property
    def is_collapsed(self) -> bool:
        """True if a final tile has been chosen for this cell."""
        return self.collapsed_to is not None

    def allowed_tile_ids(self) -> list[int]:
        """Returns the IDs of all tiles still possible in the cell."""
        return self.domain.allowed_tile_ids()

    def entropy(self) -> float:
        """Returns the entropy of the cell including its tie-breaking noise."""
        return self.probability.entropy() + self.entropy_noise

    def collapse(self, rng: random.Random) -> list[TileRemovalEvent]:
        """Chooses the final tile of the cell and removes all other tiles.

        The tile is chosen uniformly at random among the allowed tiles, the tile weights only influence the entropy.

        Args:
            rng: The random number generator used to choose the tile.

        Returns:
            One removal event for every tile that was possible before and is impossible now.

        Raises:
            WFCContradiction: If the cell is already collapsed or has no allowed tile left.
        """
        if self.is_collapsed:
            raise WFCContradiction(f"Cell at {self.coords} has already been collapsed to tile {self.collapsed_to}")

        allowed_tiles = self.domain.allowed_tile_ids()
        if not allowed_tiles:
            raise WFCContradiction(f"Cell at {self.coords} has no allowed tiles left to collapse to")

        chosen_tile = rng.choice(allowed_tiles)
        self.collapsed_to = chosen_tile

        removed_tiles = self.domain.remove_all_but(chosen_tile)
        for tile in removed_tiles:
            self.probability.remove(tile)

        logger.debug(
            "Collapsed cell at %s to tile %d (removed %d options)", self.coords, chosen_tile, len(removed_tiles)
        )
        return TileRemovalEvent.from_removed_tiles(removed_tiles, self.coords)

    def remove_enabler(
        self, enabler: int, from_direction: Direction, adjacency_rules: AdjacencyRules
    ) -> list[TileRemovalEvent] | None:
        """Handles the removal of a tile from a neighboring cell.

        Args:
            enabler: The ID of the tile that became impossible in the neighboring cell.
            from_direction: The direction pointing from the neighboring cell to this cell.
            adjacency_rules: The rules that define which tiles enable each other.

        Returns:
            One removal event for every tile of this cell that became impossible, or None if the cell is collapsed or
                no tile became impossible.

        Raises:
            WFCContradiction: If the last possible tile of the cell was removed.
        """
        if self.is_collapsed:
            return None

        removed_tiles = self.domain.remove_single(enabler, from_direction, adjacency_rules)
        if removed_tiles is None:
            return None

        for tile in removed_tiles:
            self.probability.remove(tile)

        if len(self.domain) == 0:
            raise WFCContradiction(f"Cell at {self.coords} has no allowed tiles left after removing tile {enabler}")

        return TileRemovalEvent.from_removed_tiles(removed_tiles, self.coords)

    def render(self, patterns: list[NDArray[np.uint8]], tile_size: int) -> NDArray[np.uint8]:
        """Renders the current state of the cell as an RGBA pattern.

        Args:
            patterns: The RGBA pixel data of each tile, indexed by tile ID, each of shape (tile_size, tile_size, 4).
            tile_size: The width and height of a tile (in pixels).

        Returns:
            The pattern of the only remaining tile, or the frequency-weighted average of all remaining patterns with
                full opacity.
        """
        allowed_patterns = self.domain.filter_allowed_enumerate(patterns)
        if len(allowed_patterns) == 1:
            return allowed_patterns[0][1].copy()

        weighted_sum = np.zeros((tile_size, tile_size, 4), dtype=np.int_)
        for tile, pattern in allowed_patterns:
            weighted_sum += pattern.astype(np.int_) * int(self.probability.counts[tile])

        total_weight = self.probability.total_weight
        if total_weight > 0:
            rendered = (weighted_sum // total_weight).astype(np.uint8)
        else:
            rendered = np.zeros((tile_size, tile_size, 4), dtype=np.uint8)
        rendered[:, :, 3] = 255
        return rendered
