"""Implements the core WFC algorithm as a step-wise state machine."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import heapq
import logging
import random
from typing import TYPE_CHECKING

import numpy as np

from tilecollapse.constants import ENTROPY_NOISE_MAX
from tilecollapse.model.adjacency_rules import EnablerDict
from tilecollapse.model.board import Board
from tilecollapse.model.cell import Cell
from tilecollapse.model.probability_dict import ProbabilityDict

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilecollapse.enums import Direction
    from tilecollapse.model.adjacency_rules import AdjacencyRules
    from tilecollapse.model.cell import TileRemovalEvent


logger = logging.getLogger(__name__)


class Model:
    """Fills a grid with tiles so that every pair of neighboring tiles satisfies the adjacency rules.

    The model alternates between two kinds of work. While the propagation stack ("the wave") is empty, it collapses
    the uncollapsed cell with the lowest entropy. Otherwise it pops one tile removal from the stack and updates the
    enabler counts of the four neighbors of the affected cell, which may in turn remove further tiles. Each call to
    'step()' performs exactly one of these units of work, so callers can render intermediate states between steps.
    The model does not backtrack: a contradiction raises 'WFCContradiction' and ends the run.
    """

    # The adjacency rules shared (read-only) by all cells.
    _adjacency_rules: AdjacencyRules
    # The (width, height) of the grid (in cells).
    _output_size: tuple[int, int]
    # The grid of cells.
    _board: Board
    # Random number generator used for the entropy noise and for choosing the tile of a collapsed cell.
    _rng: random.Random
    # Heap of (entropy, coords) entries, may contain stale entries for cells that collapsed since they were pushed.
    _entropy_heap: MinEntropyHeap
    # Stack of pending tile removals that still need to be propagated to the neighboring cells.
    _wave: list[TileRemovalEvent]
    # Number of cells that have not been collapsed yet.
    _remaining_uncollapsed: int
    # Coords of all cells whose state changed since the last call to 'step()'.
    _updated_coords: list[tuple[int, int]]

    def __init__(
        self,
        adjacency_rules: AdjacencyRules,
        tile_frequencies: Sequence[int],
        output_size: tuple[int, int],
        rng: random.Random | None = None,
    ) -> None:
        """Builds the grid and the initial entropy heap.

        Every cell receives its own copy of the initial enabler dict and probability dict, plus a small random entropy
        noise.

        Args:
            adjacency_rules: The rules that define which tiles may be placed next to each other. Tile IDs must be dense.
            tile_frequencies: The weight of each tile, indexed by tile ID.
            output_size: The (width, height) of the grid (in cells).
            rng: The random number generator to use. A new unseeded generator is created if omitted.

        Raises:
            ValueError: If the grid is empty, there are no tiles, or the frequencies don't match the rules.
        """
        width, height = output_size
        if width < 1 or height < 1:
            raise ValueError(f"The grid needs at least one cell, got a size of {width}x{height}")
        if len(adjacency_rules) == 0:
            raise ValueError("The adjacency rules don't contain any tiles")
        if len(tile_frequencies) != len(adjacency_rules):
            raise ValueError(
                f"Got {len(tile_frequencies)} tile frequencies for {len(adjacency_rules)} tiles in the adjacency rules"
            )

        self._adjacency_rules = adjacency_rules
        self._output_size = (width, height)
        self._rng = rng if rng is not None else random.Random()

        initial_domain = EnablerDict.from_adjacency_rules(adjacency_rules)
        initial_probability = ProbabilityDict(tile_frequencies)

        self._entropy_heap = MinEntropyHeap()
        cells = []
        # output_size is (width, height) while cell coords are (row, col), so the order is swapped here.
        for row in range(height):
            for col in range(width):
                cell = Cell(
                    (row, col),
                    initial_domain.copy(),
                    initial_probability.copy(),
                    self._rng.uniform(0.0, ENTROPY_NOISE_MAX),
                )
                self._entropy_heap.push(cell.entropy(), cell.coords)
                cells.append(cell)
        self._board = Board(width, height, cells)

        self._wave = []
        self._remaining_uncollapsed = width * height
        self._updated_coords = []

        logger.info("Created model with %d tiles on a %dx%d grid", len(adjacency_rules), width, height)

    @property
    def adjacency_rules(self) -> AdjacencyRules:
        """The adjacency rules shared by all cells."""
        return self._adjacency_rules

    @property
    def output_size(self) -> tuple[int, int]:
        """The (width, height) of the grid (in cells)."""
        return self._output_size

    @property
    def tile_count(self) -> int:
        """The number of distinct tiles."""
        return len(self._adjacency_rules)

    @property
    def remaining_uncollapsed(self) -> int:
        """The number of cells that have not been collapsed yet."""
        return self._remaining_uncollapsed

    @property
    def is_done(self) -> bool:
        """True once every cell has been collapsed."""
        return self._remaining_uncollapsed == 0

    @property
    def is_propagating(self) -> bool:
        """True while tile removals are waiting to be propagated."""
        return bool(self._wave)

    def get_cell(self, coords: tuple[int, int]) -> Cell | None:
        """Returns the cell at the given (row, col) coords, or None if they are out of bounds."""
        return self._board.get_cell(coords)

    def iter_cells(self) -> Iterator[Cell]:
        """Iterates over all cells in row-major order."""
        return self._board.iter_cells()

    def iter_coords(self) -> Iterator[tuple[int, int]]:
        """Iterates over all (row, col) coords in row-major order."""
        return self._board.iter_coords()

    def cardinal_neighbors(self, coords: tuple[int, int]) -> list[tuple[Direction, tuple[int, int]]]:
        """Returns the four neighbor coords of a cell together with the direction pointing to each of them."""
        return self._board.cardinal_neighbors(coords)

    def step(self) -> list[tuple[int, int]]:
        """Performs one unit of work: either one collapse or one propagated tile removal.

        Calling this method after every cell has been collapsed has no effect.

        Returns:
            The (row, col) coords of all cells whose state changed since the previous call.

        Raises:
            WFCContradiction: If a cell runs out of possible tiles.
        """
        if self.is_done:
            return []

        if not self._wave:
            self._collapse_next_cell()
        else:
            self._propagate_next_removal()

        updated_coords = self._updated_coords
        self._updated_coords = []
        return updated_coords

    def run_to_completion(self) -> None:
        """Calls 'step()' until every cell has been collapsed.

        Raises:
            WFCContradiction: If a cell runs out of possible tiles.
        """
        while not self.is_done:
            self.step()
        logger.info("Collapsed all %d cells", len(self._board))

    def get_tile_grid(self) -> NDArray[np.int_]:
        """Returns a (height, width) array of the collapsed tile IDs, with -1 for cells that are not collapsed yet."""
        tile_grid = np.full((self._board.height, self._board.width), -1, dtype=np.int_)
        for cell in self._board.iter_cells():
            if cell.collapsed_to is not None:
                tile_grid[cell.coords] = cell.collapsed_to
        return tile_grid

    def _choose_next_cell(self) -> Cell:
        """Pops heap entries until it finds a cell that is not collapsed yet."""
        while True:
            item = self._entropy_heap.pop()
            # Every uncollapsed cell has at least one entry in the heap.
            assert item is not None
            cell = self._board.get_cell(item.coords)
            assert cell is not None
            if not cell.is_collapsed:
                return cell

    def _collapse_next_cell(self) -> None:
        """Collapses the lowest entropy cell and seeds the wave with its removed tiles."""
        cell = self._choose_next_cell()
        self._wave = cell.collapse(self._rng)
        self._remaining_uncollapsed -= 1
        self._updated_coords.append(cell.coords)

        if self._remaining_uncollapsed == 0:
            # Removals left on the wave could only reach collapsed cells, which ignore them.
            self._wave.clear()

    def _propagate_next_removal(self) -> None:
        """Propagates the most recent tile removal to the neighbors of its cell."""
        event = self._wave.pop()
        for direction, neighbor_coords in self._board.cardinal_neighbors(event.coords):
            neighbor_cell = self._board.get_cell(neighbor_coords)
            if neighbor_cell is None:
                continue

            removal_events = neighbor_cell.remove_enabler(event.tile_id, direction, self._adjacency_rules)
            if removal_events is not None:
                self._wave.extend(removal_events)
                self._entropy_heap.push(neighbor_cell.entropy(), neighbor_coords)
                self._updated_coords.append(neighbor_coords)


class MinEntropyHeap:
    """Min-heap of cell coords ordered by entropy, with ties broken by (row, col).

    Entries are never updated in place. A cell whose entropy changes is pushed again, and outdated entries are
    discarded by the caller when they are popped.
    """

    # The heap list maintained by 'heapq'.
    _items: list[_HeapItem]

    def __init__(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, entropy: float, coords: tuple[int, int]) -> None:
        """Adds an entry for the cell at the given coords."""
        heapq.heappush(self._items, _HeapItem(entropy, coords))

    def pop(self) -> _HeapItem | None:
        """Removes and returns the entry with the lowest entropy, or None if the heap is empty."""
        if not self._items:
            return None
        return heapq.heappop(self._items)


@dataclass(order=True, frozen=True)
class _HeapItem:
    """Dataclass storing cell coordinates for the priority queue."""

    # The entropy of the cell at the time the item was pushed.
    priority: float
    # The (row, col) coordinates of the cell, used to break ties.
    coords: tuple[int, int]
