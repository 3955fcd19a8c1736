"""Contains the flat grid of cells the solver works on."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from tilecollapse.enums import Direction

if TYPE_CHECKING:
    from tilecollapse.model.cell import Cell


class Board:
    """A rectangular grid of cells stored in a flat, row-major list.

    Coordinates are (row, col) tuples. The board never wraps around its edges and never changes its size after
    construction.

    Attributes:
        width: The number of columns (in cells).
        height: The number of rows (in cells).
    """

    width: int
    height: int

    # All cells of the grid, the cell at (row, col) is stored at index row * width + col.
    _cells: list[Cell]

    def __init__(self, width: int, height: int, cells: list[Cell]) -> None:
        """Initializes the board.

        Args:
            width: The number of columns (in cells).
            height: The number of rows (in cells).
            cells: The cells of the grid in row-major order.

        Raises:
            ValueError: If the number of cells doesn't match the board size.
        """
        if len(cells) != width * height:
            raise ValueError(f"Expected {width * height} cells for a {width}x{height} board, got {len(cells)}")
        self.width = width
        self.height = height
        self._cells = cells

    def __len__(self) -> int:
        return len(self._cells)

    def index_of(self, coords: tuple[int, int]) -> int:
        """Returns the flat list index of the cell at the given (row, col) coords."""
        return coords[0] * self.width + coords[1]

    def in_bounds(self, coords: tuple[int, int]) -> bool:
        """Returns True if the given (row, col) coords lie within the board."""
        return 0 <= coords[0] < self.height and 0 <= coords[1] < self.width

    def cardinal_neighbors(self, coords: tuple[int, int]) -> list[tuple[Direction, tuple[int, int]]]:
        """Returns the four neighbor coords of a cell together with the direction pointing to each of them.

        The returned coords are not bounds-checked.
        """
        neighbors = []
        for direction in (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT):
            vector = direction.to_vector()
            neighbors.append((direction, (coords[0] + vector[0], coords[1] + vector[1])))
        return neighbors

    def get_cell(self, coords: tuple[int, int]) -> Cell | None:
        """Returns the cell at the given (row, col) coords, or None if they are out of bounds."""
        if not self.in_bounds(coords):
            return None
        return self._cells[self.index_of(coords)]

    def iter_cells(self) -> Iterator[Cell]:
        """Iterates over all cells in row-major order."""
        return iter(self._cells)

    def iter_coords(self) -> Iterator[tuple[int, int]]:
        """Iterates over all (row, col) coords in row-major order."""
        for row in range(self.height):
            for col in range(self.width):
                yield (row, col)
