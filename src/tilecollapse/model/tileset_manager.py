"""Manages the visual representation of tile sets and solver states."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilecollapse.model.pattern_data import WFCData
    from tilecollapse.model.wfc import Model


logger = logging.getLogger(__name__)


class TilesetManager:
    """Renders tile patterns and the cells of a model into PIL images.

    A collapsed cell is drawn as the pattern of its tile. A cell that is not collapsed yet is drawn as the
    frequency-weighted average of all patterns still possible in it, so the output gradually sharpens while the model
    is being solved. All images are upscaled by an integer pixel scale using nearest neighbor resampling.
    """

    # Tile patterns, their frequencies and their adjacency rules.
    _wfc_data: WFCData
    # Factor by which every rendered image is upscaled.
    _pixel_scale: int

    def __init__(self, wfc_data: WFCData, pixel_scale: int = 1) -> None:
        """Initializes the manager.

        Args:
            wfc_data: Tile patterns, their frequencies and their adjacency rules.
            pixel_scale: Factor by which every rendered image is upscaled.
        """
        self.set_wfc_data(wfc_data)
        self.pixel_scale = pixel_scale

    @property
    def pixel_scale(self) -> int:
        """Factor by which every rendered image is upscaled."""
        return self._pixel_scale

    @pixel_scale.setter
    def pixel_scale(self, pixel_scale: int) -> None:
        if pixel_scale < 1:
            raise ValueError(f"The pixel scale must be at least 1, got {pixel_scale}")
        self._pixel_scale = pixel_scale

    @property
    def tile_size(self) -> int:
        """The width and height of a tile (in pixels, before scaling)."""
        return self._wfc_data.tile_size

    def set_wfc_data(self, wfc_data: WFCData) -> None:
        """Replaces the tile set to render."""
        self._wfc_data = wfc_data

    def get_tileset_img(self) -> Image.Image:
        """Renders all tile patterns next to each other, ordered by tile ID.

        Returns:
            A PIL image containing one row of tiles.
        """
        tile_size = self._wfc_data.tile_size
        tileset_array = np.zeros((tile_size, tile_size * self._wfc_data.tile_count, 4), dtype=np.uint8)
        for tile, pattern in enumerate(self._wfc_data.patterns):
            tileset_array[:, tile * tile_size : (tile + 1) * tile_size] = pattern
        return self._to_scaled_img(tileset_array)

    def get_initial_tilemap_img(self, model: Model) -> Image.Image:
        """Renders a freshly created model (every cell shows the average of all patterns).

        Args:
            model: The model to render.

        Returns:
            A PIL image with the correct pixel dimensions for the model's grid.
        """
        return self.get_tilemap_img(model)

    def get_tilemap_img(self, model: Model) -> Image.Image:
        """Renders the current state of every cell of a model.

        Args:
            model: The model to render.

        Returns:
            A PIL image of (width * tile_size * pixel_scale, height * tile_size * pixel_scale) pixels.
        """
        tile_size = self._wfc_data.tile_size
        # output_size is (width, height) while the array shape is (rows, cols), so the indices have to be swapped.
        width, height = model.output_size
        tilemap_array = np.zeros((height * tile_size, width * tile_size, 4), dtype=np.uint8)
        for cell in model.iter_cells():
            row, col = cell.coords
            tilemap_array[row * tile_size : (row + 1) * tile_size, col * tile_size : (col + 1) * tile_size] = (
                cell.render(self._wfc_data.patterns, tile_size)
            )
        return self._to_scaled_img(tilemap_array)

    def update_tilemap_img_cells(
        self, tilemap_img: Image.Image, model: Model, cells_coords: Iterable[tuple[int, int]]
    ) -> Image.Image:
        """Redraws the given cells of a model on an existing image.

        Args:
            tilemap_img: The existing image canvas to be modified.
            model: The model whose cells are rendered.
            cells_coords: The (row, col) coords of the cells to redraw.

        Returns:
            The modified image canvas (the input image, as the operation is in-place).
        """
        cell_size = self._wfc_data.tile_size * self._pixel_scale
        for coords in cells_coords:
            cell = model.get_cell(coords)
            if cell is None:
                continue
            cell_img = self._to_scaled_img(cell.render(self._wfc_data.patterns, self._wfc_data.tile_size))
            tilemap_img.paste(cell_img, (coords[1] * cell_size, coords[0] * cell_size))
        return tilemap_img

    def save_tilemap_img(self, tilemap_img: Image.Image, file_path: str | Path) -> None:
        """Saves a rendered image to the specified file path.

        Args:
            tilemap_img: The PIL Image object to be saved.
            file_path: The destination path (including filename and extension).
        """
        tilemap_img.save(file_path)
        logger.info("Saved tilemap image to %s", file_path)

    def _to_scaled_img(self, pixels: NDArray[np.uint8]) -> Image.Image:
        """Converts an RGBA array into a PIL image and upscales it by the pixel scale."""
        img = Image.fromarray(pixels)
        if self._pixel_scale == 1:
            return img
        return img.resize((img.width * self._pixel_scale, img.height * self._pixel_scale), Image.Resampling.NEAREST)
