"""Contains the per-cell tile weight statistics used for entropy calculation."""

from __future__ import annotations

from collections.abc import Sequence
import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class ProbabilityDict:
    """Running weight statistics over the still possible tiles of a cell.

    The Shannon entropy of the weighted tile distribution can be written as
    'log2(sum(w)) - sum(w * log2(w)) / sum(w)', so keeping both sums up to date allows entropy reads and tile removals
    in constant time.
    """

    # The weight of each tile (its frequency in the sample), set to 0 once a tile has been removed.
    _counts: NDArray[np.int_]
    # Sum of weights of all tiles still possible.
    _total_weight: int
    # Sum of w * log2(w) over the weights of all tiles still possible.
    _total_weighted_log: float
    # Number of tiles with a weight above 0.
    _nonzero_count: int

    def __init__(self, tile_frequencies: Sequence[int] | NDArray[np.int_]) -> None:
        """Initializes the running sums from the tile frequencies.

        Args:
            tile_frequencies: The weight of each tile, indexed by tile ID.
        """
        self._counts = np.array(tile_frequencies, dtype=np.int_)
        self._total_weight = int(self._counts.sum())
        self._total_weighted_log = sum(self._partial_shannon(int(weight)) for weight in self._counts)
        self._nonzero_count = int(np.count_nonzero(self._counts > 0))

    def __repr__(self) -> str:
        return f"ProbabilityDict(total_weight={self._total_weight}, entropy={self.entropy():.4f})"

    @property
    def counts(self) -> NDArray[np.int_]:
        """The current weight of each tile (0 for removed tiles). Must not be modified."""
        return self._counts

    @property
    def total_weight(self) -> int:
        """The sum of weights of all tiles still possible."""
        return self._total_weight

    @property
    def total_weighted_log(self) -> float:
        """The sum of w * log2(w) over the weights of all tiles still possible."""
        return self._total_weighted_log

    def copy(self) -> ProbabilityDict:
        """Returns an independent copy of the probability dict."""
        clone = ProbabilityDict.__new__(ProbabilityDict)
        clone._counts = self._counts.copy()
        clone._total_weight = self._total_weight
        clone._total_weighted_log = self._total_weighted_log
        clone._nonzero_count = self._nonzero_count
        return clone

    def entropy(self) -> float:
        """Returns the Shannon entropy of the remaining tiles, or NaN if no weight is left."""
        if self._total_weight == 0:
            return math.nan
        # A single remaining tile has an entropy of exactly 0, whatever rounding drift the running sums carry.
        if self._nonzero_count == 1:
            return 0.0
        # Using math.log2() instead of numpy.log2() here because it is faster for single values.
        return math.log2(self._total_weight) - self._total_weighted_log / self._total_weight

    def remove(self, tile: int) -> None:
        """Removes a tile's contribution from both running sums and zeroes its weight."""
        weight = int(self._counts[tile])
        if weight > 0:
            self._nonzero_count -= 1
        self._total_weight -= weight
        self._total_weighted_log -= self._partial_shannon(weight)
        self._counts[tile] = 0

    def relative_probabilities(self) -> NDArray[np.float64]:
        """Returns each tile's weight divided by the total weight (all zeros if no weight is left)."""
        if self._total_weight == 0:
            return np.zeros(self._counts.shape[0], dtype=np.float64)
        return self._counts / self._total_weight

    @staticmethod
    def _partial_shannon(weight: int) -> float:
        """Returns one w * log2(w) term of the entropy equation (0 for a weight of 0)."""
        if weight <= 0:
            return 0.0
        return weight * math.log2(weight)
