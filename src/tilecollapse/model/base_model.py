"""Manages the tile set and the settings of the next generation run."""

from __future__ import annotations

import logging
from pathlib import Path
import random

from PyQt6 import QtCore as qtc

from tilecollapse import constants
from tilecollapse.enums import AdjacencyMethod
from tilecollapse.model.pattern_data import create_pattern_data, load_sample_array, WFCData
from tilecollapse.model.simple_patterns import construct_simple_patterns
from tilecollapse.model.wfc import Model


logger = logging.getLogger(__name__)


class BaseModel(qtc.QObject):
    """
    Manages the tile set and the settings used to create new solver models.

    The tile set is either extracted from a sample image or the built-in corner pipe set. The output size is given in
    pixels, the grid size of the solver is derived from it by dividing by the tile size. It inherits from QObject to
    facilitate communication via signals.

    Signals:
        wfc_data_changed: Emitted with the new WFCData after the tile set has been replaced.
        settings_changed: Emitted after any of the generation settings has changed.

    Attributes:
        output_width: The width of the output image (in pixels, before scaling).
        output_height: The height of the output image (in pixels, before scaling).
        tile_size: The width and height of a tile (in pixels).
        pixel_scale: Factor by which rendered images are upscaled.
        random_seed: The seed of the random number generator used by the solver.
        adjacency_method: How adjacency rules are derived from a sample image.
        wrap: If True, opposite borders of the sample image are treated as neighbors.
        sample_path: The path of the current sample image, or None for the corner pipe set.
        wfc_data: The current tile set, or None if none has been loaded yet.
    """

    wfc_data_changed = qtc.pyqtSignal(object)
    settings_changed = qtc.pyqtSignal()

    output_width: int
    output_height: int
    tile_size: int
    pixel_scale: int

    random_seed: int

    adjacency_method: AdjacencyMethod
    wrap: bool

    sample_path: Path | None
    wfc_data: WFCData | None

    def __init__(self) -> None:
        """Initializes the model with default settings and without a tile set."""
        super().__init__()

        self.output_width = constants.OUTPUT_SIZE_DEFAULT
        self.output_height = constants.OUTPUT_SIZE_DEFAULT
        self.tile_size = constants.TILE_SIZE_DEFAULT
        self.pixel_scale = constants.PIXEL_SCALE_DEFAULT

        self.random_seed = random.randint(0, constants.RANDOM_SEED_MAX)

        self.adjacency_method = constants.ADJACENCY_METHOD_DEFAULT
        self.wrap = False

        self.sample_path = None
        self.wfc_data = None

    def load_sample(self, file_path: str | Path) -> WFCData:
        """Extracts a new tile set from a sample image using the current tile size and adjacency settings.

        Args:
            file_path: The path of the sample image.

        Returns:
            The extracted tile set.
        """
        sample_array = load_sample_array(file_path)
        pattern_data = create_pattern_data(sample_array, self.tile_size, self.adjacency_method, self.wrap)
        self.sample_path = Path(file_path)
        wfc_data = pattern_data.get_wfc_data()
        self.set_wfc_data(wfc_data)
        return wfc_data

    def use_simple_patterns(self) -> WFCData:
        """Replaces the tile set with the built-in corner pipe set (this also sets the tile size)."""
        self.sample_path = None
        wfc_data = construct_simple_patterns()
        self.set_wfc_data(wfc_data)
        return wfc_data

    def set_wfc_data(self, wfc_data: WFCData) -> None:
        """Replaces the tile set and adopts its tile size."""
        self.wfc_data = wfc_data
        self.tile_size = wfc_data.tile_size
        logger.info(
            "Using a tile set of %d tiles (%dx%d pixels each)", wfc_data.tile_count, self.tile_size, self.tile_size
        )
        self.wfc_data_changed.emit(wfc_data)

    def set_output_size(self, output_width: int, output_height: int) -> None:
        """Sets the size of the output image (in pixels, before scaling)."""
        self.output_width = output_width
        self.output_height = output_height
        self.settings_changed.emit()

    def set_tile_size(self, tile_size: int) -> None:
        """Sets the tile size and re-extracts the tile set if it comes from a sample image."""
        self.tile_size = tile_size
        self._reload_sample()
        self.settings_changed.emit()

    def set_adjacency_method(self, adjacency_method: AdjacencyMethod, wrap: bool) -> None:
        """Sets how adjacency rules are derived and re-extracts the tile set if it comes from a sample image."""
        self.adjacency_method = adjacency_method
        self.wrap = wrap
        self._reload_sample()
        self.settings_changed.emit()

    def set_pixel_scale(self, pixel_scale: int) -> None:
        """Sets the factor by which rendered images are upscaled."""
        self.pixel_scale = pixel_scale
        self.settings_changed.emit()

    def set_random_seed(self, random_seed: int) -> None:
        """Sets the seed used by the next solver model."""
        self.random_seed = random_seed
        self.settings_changed.emit()

    def get_grid_size(self) -> tuple[int, int]:
        """Returns the (width, height) of the solver grid (in cells)."""
        tile_size = self.wfc_data.tile_size if self.wfc_data is not None else self.tile_size
        return self.output_width // tile_size, self.output_height // tile_size

    def create_wfc_model(self) -> Model:
        """Creates a new solver model for the current tile set and settings.

        The model uses its own random number generator seeded with 'random_seed', so equal settings produce equal
        results.

        Returns:
            The new solver model.

        Raises:
            ValueError: If no tile set has been loaded or the output is smaller than a single tile.
        """
        if self.wfc_data is None:
            raise ValueError("No tile set has been loaded")

        return Model(
            self.wfc_data.adjacency_rules,
            self.wfc_data.tile_frequencies,
            self.get_grid_size(),
            random.Random(self.random_seed),
        )

    def _reload_sample(self) -> None:
        """Re-extracts the tile set from the current sample image, if there is one."""
        if self.sample_path is not None:
            self.load_sample(self.sample_path)
