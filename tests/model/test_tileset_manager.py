"""Tests for rendering tile sets and solver states into images."""

from __future__ import annotations

from pathlib import Path
import random

import numpy as np
import pytest
from PIL import Image

from tests.helpers import make_checkerboard_wfc_data
from tilecollapse.model.tileset_manager import TilesetManager
from tilecollapse.model.wfc import Model


def make_model(width: int, height: int, seed: int = 0) -> Model:
    """Creates a checkerboard model of the given size (in cells)."""
    wfc_data = make_checkerboard_wfc_data()
    return Model(wfc_data.adjacency_rules, wfc_data.tile_frequencies, (width, height), random.Random(seed))


class TestTilesetManager:
    """Tests for TilesetManager."""

    def test_tileset_img_shows_all_tiles_in_one_row(self) -> None:
        """The tile set preview has one tile per tile ID, scaled by the pixel scale."""
        manager = TilesetManager(make_checkerboard_wfc_data(tile_size=4), pixel_scale=3)

        tileset_img = manager.get_tileset_img()

        assert tileset_img.size == (2 * 4 * 3, 4 * 3)
        assert tileset_img.getpixel((0, 0)) == (0, 0, 0, 255)
        assert tileset_img.getpixel((12, 0)) == (255, 255, 255, 255)

    def test_tilemap_img_size(self) -> None:
        """The output image has width * tile_size * pixel_scale by height * tile_size * pixel_scale pixels."""
        manager = TilesetManager(make_checkerboard_wfc_data(tile_size=2), pixel_scale=4)

        tilemap_img = manager.get_initial_tilemap_img(make_model(5, 3))

        assert tilemap_img.size == (5 * 2 * 4, 3 * 2 * 4)
        assert tilemap_img.mode == "RGBA"

    def test_uncollapsed_cells_show_the_average(self) -> None:
        """Before anything is collapsed, every pixel is the average of black and white."""
        manager = TilesetManager(make_checkerboard_wfc_data())

        tilemap_img = manager.get_initial_tilemap_img(make_model(3, 2))

        pixels = np.array(tilemap_img)
        assert np.all(pixels[:, :, :3] == 127)
        assert np.all(pixels[:, :, 3] == 255)

    def test_solved_model_is_black_and_white(self) -> None:
        """After solving, every cell shows the pattern of its tile."""
        manager = TilesetManager(make_checkerboard_wfc_data())
        model = make_model(4, 4)
        model.run_to_completion()

        pixels = np.array(manager.get_tilemap_img(model))

        tile_grid = model.get_tile_grid()
        assert np.array_equal(pixels[:, :, 0], np.where(tile_grid == 0, 0, 255))

    def test_update_tilemap_img_cells(self) -> None:
        """Only the given cells are redrawn on the existing image."""
        manager = TilesetManager(make_checkerboard_wfc_data(), pixel_scale=2)
        model = make_model(3, 3, seed=5)
        tilemap_img = manager.get_initial_tilemap_img(model)

        collapsed_coords = model.step()[0]
        result = manager.update_tilemap_img_cells(tilemap_img, model, [collapsed_coords])

        assert result is tilemap_img
        row, col = collapsed_coords
        cell = model.get_cell(collapsed_coords)
        assert cell is not None
        expected = (0, 0, 0, 255) if cell.collapsed_to == 0 else (255, 255, 255, 255)
        assert tilemap_img.getpixel((col * 2 + 1, row * 2 + 1)) == expected
        other_col = (col + 1) % 3
        assert tilemap_img.getpixel((other_col * 2, row * 2)) == (127, 127, 127, 255)

    def test_pixel_scale_must_be_positive(self) -> None:
        """A pixel scale below one is rejected."""
        manager = TilesetManager(make_checkerboard_wfc_data())

        with pytest.raises(ValueError):
            manager.pixel_scale = 0

    def test_save_tilemap_img(self, tmp_path: Path) -> None:
        """Saved images can be read back with the same size."""
        manager = TilesetManager(make_checkerboard_wfc_data(tile_size=2), pixel_scale=2)
        model = make_model(3, 2)
        model.run_to_completion()
        file_path = tmp_path / "output.png"

        manager.save_tilemap_img(manager.get_tilemap_img(model), file_path)

        with Image.open(file_path) as img:
            assert img.size == (12, 8)
