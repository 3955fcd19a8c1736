"""Contains the exception classes raised by the WFC solver."""


class WFCContradiction(Exception):
    """Raised when the solver reaches an unsolvable state.

    This occurs when constraint propagation eliminates all possible tiles of a cell, when a cell is asked to collapse
    without any allowed tile left, or when an enabler count would drop below zero. The solver does not backtrack, so a
    contradiction ends the current run.
    """

    pass


class UnregisteredTileError(LookupError):
    """Raised when the adjacency rules are queried for a tile that was never registered."""

    pass
