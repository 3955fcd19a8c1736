"""Contains the widget class for choosing the tile set and the output settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL.ImageQt import ImageQt
from PyQt6 import QtCore as qtc
from PyQt6 import QtGui as qtg
from PyQt6 import QtWidgets as qtw

from tilecollapse import constants
from tilecollapse.enums import AdjacencyMethod
from tilecollapse.view.int_spin_box import IntSpinBox

if TYPE_CHECKING:
    from tilecollapse.model.base_model import BaseModel
    from tilecollapse.model.pattern_data import WFCData
    from tilecollapse.model.tileset_manager import TilesetManager


logger = logging.getLogger(__name__)


class GeneralSettingsWidget(qtw.QWidget):
    """The widget class for choosing the tile set and the output settings.

    The tile set is either extracted from a sample image (with a configurable tile size and adjacency method) or the
    built-in corner pipe set. The output settings cover the output size, the pixel scale used for display and the
    random seed. The right side shows all tiles of the current tile set.
    """

    # The base model holding the tile set and the generation settings.
    _model: BaseModel
    # The tileset manager used to render the tile set preview.
    _tileset_manager: TilesetManager

    # Input for the width and height of a tile in the sample image (in pixels).
    _tile_size_input: IntSpinBox
    # Selection for the way adjacency rules are derived from the sample image.
    _adjacency_method_combobox: qtw.QComboBox
    # Checkbox to treat opposite borders of the sample image as neighbors.
    _wrap_checkbox: qtw.QCheckBox
    # Button to trigger the file dialog for loading a new sample image.
    _load_sample_file_button: qtw.QPushButton
    # Button to switch to the built-in corner pipe tile set.
    _use_simple_patterns_button: qtw.QPushButton

    # Input for the width of the output (in pixels).
    _output_width_input: IntSpinBox
    # Input for the height of the output (in pixels).
    _output_height_input: IntSpinBox
    # Input for the factor by which the output is upscaled for display.
    _pixel_scale_input: IntSpinBox
    # Input for the seed of the solver's random number generator.
    _random_seed_input: IntSpinBox

    # Label used to display the tiles of the current tile set.
    _tileset_img_label: qtw.QLabel

    def __init__(self, model: BaseModel, tileset_manager: TilesetManager) -> None:
        """Initializes the widget and sets up the GUI elements and connections.

        Args:
            model: The base model holding the tile set and the generation settings.
            tileset_manager: The tileset manager used to render the tile set preview.
        """
        super().__init__()

        self._model = model
        self._tileset_manager = tileset_manager

        # === LEFT SIDE - WIDGETS ===

        self._tile_size_input = IntSpinBox(
            self._model.tile_size, constants.TILE_SIZE_MIN_LIMIT, constants.TILE_SIZE_MAX_LIMIT
        )
        self._tile_size_input.value_change_commited.connect(self.on_tile_size_input_changed)

        self._adjacency_method_combobox = qtw.QComboBox()
        self._adjacency_method_combobox.addItems([option.value for option in AdjacencyMethod])
        self._adjacency_method_combobox.setCurrentText(self._model.adjacency_method.value)
        self._adjacency_method_combobox.currentTextChanged.connect(self.on_adjacency_settings_changed)

        self._wrap_checkbox = qtw.QCheckBox()
        self._wrap_checkbox.setChecked(self._model.wrap)
        self._wrap_checkbox.toggled.connect(self.on_adjacency_settings_changed)

        self._load_sample_file_button = qtw.QPushButton("Load Sample (from PNG File)")
        self._load_sample_file_button.clicked.connect(self.load_sample_file)

        self._use_simple_patterns_button = qtw.QPushButton("Use Corner Pipe Tiles")
        self._use_simple_patterns_button.clicked.connect(self._model.use_simple_patterns)

        self._output_width_input = IntSpinBox(
            self._model.output_width, constants.OUTPUT_SIZE_MIN_LIMIT, constants.OUTPUT_SIZE_MAX_LIMIT, 8
        )
        self._output_width_input.value_change_commited.connect(self.on_output_size_input_changed)
        self._output_height_input = IntSpinBox(
            self._model.output_height, constants.OUTPUT_SIZE_MIN_LIMIT, constants.OUTPUT_SIZE_MAX_LIMIT, 8
        )
        self._output_height_input.value_change_commited.connect(self.on_output_size_input_changed)

        self._pixel_scale_input = IntSpinBox(
            self._model.pixel_scale, constants.PIXEL_SCALE_MIN_LIMIT, constants.PIXEL_SCALE_MAX_LIMIT
        )
        self._pixel_scale_input.value_change_commited.connect(self._model.set_pixel_scale)

        self._random_seed_input = IntSpinBox(self._model.random_seed, 0, constants.RANDOM_SEED_MAX)
        self._random_seed_input.value_change_commited.connect(self._model.set_random_seed)

        # === LEFT SIDE - LAYOUT ===

        container_tileset_settings = qtw.QGroupBox("Tile Set Settings")
        container_tileset_settings_layout = qtw.QGridLayout()
        container_tileset_settings.setLayout(container_tileset_settings_layout)
        container_tileset_settings_layout.setColumnStretch(0, 1)
        container_tileset_settings_layout.setColumnMinimumWidth(1, constants.LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH)
        container_tileset_settings_layout.setColumnMinimumWidth(2, constants.LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH)
        container_tileset_settings_layout.addWidget(qtw.QLabel("Tile Size"), 0, 0)
        container_tileset_settings_layout.addWidget(self._tile_size_input, 0, 2)
        container_tileset_settings_layout.addWidget(qtw.QLabel("Adjacency Method"), 1, 0)
        container_tileset_settings_layout.addWidget(self._adjacency_method_combobox, 1, 2)
        container_tileset_settings_layout.addWidget(qtw.QLabel("Wrap Sample Borders?"), 2, 0)
        container_tileset_settings_layout.addWidget(self._wrap_checkbox, 2, 2)
        container_tileset_settings_layout.addWidget(self._load_sample_file_button, 3, 0, 1, -1)
        container_tileset_settings_layout.addWidget(self._use_simple_patterns_button, 4, 0, 1, -1)

        container_output_settings = qtw.QGroupBox("Output Settings")
        container_output_settings_layout = qtw.QGridLayout()
        container_output_settings.setLayout(container_output_settings_layout)
        container_output_settings_layout.setColumnStretch(0, 1)
        container_output_settings_layout.setColumnMinimumWidth(1, constants.LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH)
        container_output_settings_layout.setColumnMinimumWidth(2, constants.LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH)
        container_output_settings_layout.addWidget(qtw.QLabel("Output Width (px)"), 0, 0)
        container_output_settings_layout.addWidget(self._output_width_input, 0, 2)
        container_output_settings_layout.addWidget(qtw.QLabel("Output Height (px)"), 1, 0)
        container_output_settings_layout.addWidget(self._output_height_input, 1, 2)
        container_output_settings_layout.addWidget(qtw.QLabel("Pixel Scale"), 2, 0)
        container_output_settings_layout.addWidget(self._pixel_scale_input, 2, 2)
        container_output_settings_layout.addWidget(qtw.QLabel("Random Seed"), 3, 0)
        container_output_settings_layout.addWidget(self._random_seed_input, 3, 2)

        container_left = qtw.QWidget()
        container_left.setMaximumWidth(constants.LAYOUT_LEFT_SIDE_MAX_WIDTH)
        container_left_layout = qtw.QVBoxLayout()
        container_left.setLayout(container_left_layout)
        container_left_layout.setSpacing(constants.LAYOUT_LEFT_SIDE_VBOX_SPACING)
        container_left_layout.addWidget(container_tileset_settings)
        container_left_layout.addWidget(container_output_settings)
        container_left_layout.addStretch()

        # === RIGHT SIDE ===

        self._tileset_img_label = qtw.QLabel()
        self._tileset_img_label.setAlignment(qtc.Qt.AlignmentFlag.AlignCenter)

        container_right = qtw.QWidget()
        container_right_layout = qtw.QVBoxLayout()
        container_right.setLayout(container_right_layout)
        container_right_layout.addWidget(self._tileset_img_label)

        # === COMBINE SIDES ===

        layout = qtw.QHBoxLayout()
        self.setLayout(layout)
        layout.addWidget(container_left)
        layout.addWidget(container_right)

        self._model.wfc_data_changed.connect(self.on_wfc_data_changed)
        self._draw_tileset_img()

    def load_sample_file(self) -> None:
        """Opens a file dialog and extracts a new tile set from the selected sample image."""
        file_path, _ = qtw.QFileDialog.getOpenFileName(self, "Load Sample from...", "", "PNG Files (*.png)")
        if not file_path:
            return

        try:
            self._model.load_sample(file_path)
        except (OSError, ValueError) as error:
            logger.error("Could not load sample %s: %s", file_path, error)
            qtw.QMessageBox.warning(self, "Could Not Load Sample", str(error))

    def on_tile_size_input_changed(self, tile_size: int) -> None:
        """Updates the model's tile size, which re-extracts the tile set from the current sample image."""
        try:
            self._model.set_tile_size(tile_size)
        except ValueError as error:
            logger.error("Could not change the tile size to %d: %s", tile_size, error)
            qtw.QMessageBox.warning(self, "Could Not Change Tile Size", str(error))

    def on_adjacency_settings_changed(self) -> None:
        """Updates the model's adjacency method and wrap flag when the inputs change."""
        self._model.set_adjacency_method(
            AdjacencyMethod(self._adjacency_method_combobox.currentText()), self._wrap_checkbox.isChecked()
        )

    def on_output_size_input_changed(self) -> None:
        """Updates the model's output size when the input values change."""
        self._model.set_output_size(self._output_width_input.value(), self._output_height_input.value())

    def on_wfc_data_changed(self, wfc_data: WFCData) -> None:
        """Shows the tiles of a new tile set and adopts its tile size.

        Args:
            wfc_data: The new tile set.
        """
        self._tile_size_input.set_committed_value(wfc_data.tile_size)
        self._tileset_manager.set_wfc_data(wfc_data)
        self._draw_tileset_img()

    def _draw_tileset_img(self) -> None:
        """Converts the tile set preview to a QPixmap and displays it in the label."""
        tileset_img = self._tileset_manager.get_tileset_img()
        tileset_img_pixmap = qtg.QPixmap.fromImage(ImageQt(tileset_img).copy())
        self._tileset_img_label.setPixmap(tileset_img_pixmap)
