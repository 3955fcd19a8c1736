"""Contains the adjacency rule table and the per-cell enabler counts derived from it."""

from __future__ import annotations

from collections.abc import Sequence, Set
import logging
from typing import TYPE_CHECKING, TypeVar

import numpy as np

from tilecollapse.enums import Direction
from tilecollapse.exceptions import UnregisteredTileError, WFCContradiction

if TYPE_CHECKING:
    from numpy.typing import NDArray


logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdjacencyRules:
    """Directed compatibility table between tiles in the four cardinal directions.

    For every registered tile and direction, the table stores the set of tiles that may be placed next to it in that
    direction. The table is symmetric by construction: allowing tile b in direction d of tile a also allows tile a in
    the opposite direction of tile b. After preprocessing, the table is only read and is shared by all cells of a
    model.
    """

    # Maps each tile ID to four sets of tile IDs (indexed by Direction.value) allowed next to it in that direction.
    _allowed: dict[int, list[set[int]]]

    def __init__(self) -> None:
        """Creates an empty rule table without any registered tiles."""
        self._allowed = {}

    def __len__(self) -> int:
        return len(self._allowed)

    def __repr__(self) -> str:
        return f"AdjacencyRules(tile_count={len(self._allowed)})"

    def register(self, tile: int) -> None:
        """Registers a tile without allowing it next to anything.

        Tiles that are part of at least one 'allow' call are registered implicitly. Explicit registration is only needed
        for tiles that have no neighbors at all (e.g. the only tile of a sample image that is a single tile large).

        Args:
            tile: The ID of the tile to register.
        """
        if tile not in self._allowed:
            self._allowed[tile] = [set() for _ in Direction]

    def allow(self, from_tile: int, to_tile: int, direction: Direction) -> None:
        """Allows 'to_tile' to be placed next to 'from_tile' in the given direction.

        The opposite relation (from_tile next to to_tile in the opposite direction) is added as well. Calling this
        method more than once with the same arguments has no further effect.

        Args:
            from_tile: The ID of the tile the direction is relative to.
            to_tile: The ID of the tile that may be placed next to 'from_tile'.
            direction: The direction pointing from 'from_tile' to 'to_tile'.
        """
        self.register(from_tile)
        self.register(to_tile)
        self._allowed[from_tile][direction.value].add(to_tile)
        self._allowed[to_tile][direction.opposite().value].add(from_tile)

    def is_allowed(self, from_tile: int, to_tile: int, direction: Direction) -> bool:
        """Returns True if 'to_tile' may be placed next to 'from_tile' in the given direction."""
        allowed_sets = self._allowed.get(from_tile)
        if allowed_sets is None:
            return False
        return to_tile in allowed_sets[direction.value]

    def enabled_by(self, tile: int, direction: Direction) -> Set[int]:
        """Returns the tiles allowed next to a tile in the given direction.

        The returned set is owned by the rule table and must not be modified.

        Args:
            tile: The ID of the tile to look up.
            direction: The direction pointing away from 'tile'.

        Returns:
            The set of tile IDs that may be placed next to 'tile' in 'direction'.

        Raises:
            UnregisteredTileError: If 'tile' was never registered.
        """
        allowed_sets = self._allowed.get(tile)
        if allowed_sets is None:
            raise UnregisteredTileError(f"Tile {tile} is not part of the adjacency rules")
        return allowed_sets[direction.value]

    def enabled_by_count(self, tile: int) -> list[int]:
        """Returns the number of tiles allowed next to a tile, for each direction (indexed by Direction.value)."""
        return [len(self.enabled_by(tile, direction)) for direction in Direction]

    def tile_ids(self) -> list[int]:
        """Returns the sorted IDs of all registered tiles."""
        return sorted(self._allowed)


class EnablerDict:
    """Per-cell arc consistency state (the domain of a cell).

    For every tile that is still possible in the cell, the dict tracks how many tiles of the neighboring cell in each
    direction still allow this tile to be placed here. As soon as one of these counts would drop to zero, the tile
    becomes impossible for the cell. A single instance is built from the adjacency rules and then copied into every
    cell, after which the copies diverge independently.
    """

    # For each tile ID and direction, the number of still possible tiles of the neighbor in that direction which enable
    # the tile. Rows of impossible tiles are no longer updated.
    _enabler_counts: NDArray[np.int_]
    # Boolean array which contains True for each tile ID that is still possible in the cell.
    _allowed: NDArray[np.bool_]
    # Number of True entries in '_allowed'.
    _allowed_count: int

    def __init__(self, enabler_counts: NDArray[np.int_], allowed: NDArray[np.bool_] | None = None) -> None:
        """Initializes the enabler dict from raw enabler counts.

        Args:
            enabler_counts: Array of shape (tile_count, 4) containing the initial enabler counts.
            allowed: Optional boolean array of still possible tiles. All tiles are possible if it is omitted.
        """
        self._enabler_counts = enabler_counts
        if allowed is None:
            allowed = np.full(enabler_counts.shape[0], True, dtype=bool)
        self._allowed = allowed
        self._allowed_count = int(np.count_nonzero(allowed))

    @classmethod
    def from_adjacency_rules(cls, adjacency_rules: AdjacencyRules) -> EnablerDict:
        """Builds the initial enabler dict in which every tile is possible.

        Tile IDs are expected to be dense, i.e. 0 to len(adjacency_rules) - 1.

        Args:
            adjacency_rules: The rules that define which tiles enable each other.

        Returns:
            A new enabler dict whose counts equal the number of compatible tiles for each tile and direction.

        Raises:
            UnregisteredTileError: If the registered tile IDs are not dense.
        """
        tile_count = len(adjacency_rules)
        enabler_counts = np.zeros((tile_count, len(Direction)), dtype=np.int_)
        for tile in range(tile_count):
            enabler_counts[tile] = adjacency_rules.enabled_by_count(tile)
        logger.debug("Built initial enabler counts for %d tiles", tile_count)
        return cls(enabler_counts)

    def __len__(self) -> int:
        return self._allowed_count

    def __repr__(self) -> str:
        return f"EnablerDict(allowed={self.allowed_tile_ids()})"

    @property
    def tile_count(self) -> int:
        """The total number of tiles tracked by the dict, possible or not."""
        return self._enabler_counts.shape[0]

    def copy(self) -> EnablerDict:
        """Returns an independent copy of the enabler dict."""
        return EnablerDict(self._enabler_counts.copy(), self._allowed.copy())

    def is_allowed(self, tile: int) -> bool:
        """Returns True if the tile is still possible in the cell."""
        return bool(self._allowed[tile])

    def allowed_tile_ids(self) -> list[int]:
        """Returns the IDs of all tiles that are still possible in the cell, in ascending order."""
        return [int(tile) for tile in np.flatnonzero(self._allowed)]

    def enabler_counts(self, tile: int) -> list[int] | None:
        """Returns the four enabler counts of a tile, or None if the tile is no longer possible."""
        if not self._allowed[tile]:
            return None
        return [int(count) for count in self._enabler_counts[tile]]

    def remove_single(
        self, removed_enabler: int, direction: Direction, adjacency_rules: AdjacencyRules
    ) -> list[int] | None:
        """Updates the counts after a tile of a neighboring cell became impossible.

        'removed_enabler' has just become impossible in the neighbor that lies in the opposite of 'direction' as seen
        from this cell, i.e. 'direction' points from the neighbor to this cell. Every tile the removed enabler allowed
        in 'direction' loses one enabler on the side facing the neighbor. Tiles that lose their last enabler on that
        side become impossible.

        Args:
            removed_enabler: The ID of the tile removed from the neighboring cell.
            direction: The direction pointing from the neighboring cell to this cell.
            adjacency_rules: The rules that define which tiles enable each other.

        Returns:
            The IDs of all tiles that became impossible, or None if no tile became impossible.

        Raises:
            WFCContradiction: If the count of a still possible tile is already zero.
        """
        count_index = direction.opposite().value
        removed_tiles = []
        for tile in adjacency_rules.enabled_by(removed_enabler, direction):
            if not self._allowed[tile]:
                continue

            count = self._enabler_counts[tile, count_index]
            if count == 0:
                raise WFCContradiction(
                    f"Enabler count of tile {tile} towards {direction.opposite().name} is already zero"
                )
            elif count == 1:
                # The removed enabler was the last one on this side, so the tile can't be placed here anymore.
                self._allowed[tile] = False
                self._allowed_count -= 1
                removed_tiles.append(tile)
            else:
                self._enabler_counts[tile, count_index] = count - 1

        if not removed_tiles:
            return None
        return removed_tiles

    def remove_all_but(self, survivor: int) -> list[int]:
        """Makes every tile except 'survivor' impossible.

        Args:
            survivor: The ID of the only tile that remains possible.

        Returns:
            The IDs of all tiles that were possible before and are impossible now.

        Raises:
            WFCContradiction: If 'survivor' is not possible anymore.
        """
        if not self._allowed[survivor]:
            raise WFCContradiction(f"Cannot keep tile {survivor} because it is no longer possible")

        removed_tiles = [tile for tile in self.allowed_tile_ids() if tile != survivor]
        self._allowed[:] = False
        self._allowed[survivor] = True
        self._allowed_count = 1
        return removed_tiles

    def filter_allowed_enumerate(self, values: Sequence[T]) -> list[tuple[int, T]]:
        """Returns the entries of a per-tile sequence whose tiles are still possible, paired with their tile IDs."""
        return [(tile, values[tile]) for tile in self.allowed_tile_ids()]
