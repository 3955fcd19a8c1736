"""Contains the widget class for running the solver and displaying its progress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL.ImageQt import ImageQt
from PyQt6 import QtCore as qtc
from PyQt6 import QtGui as qtg
from PyQt6 import QtWidgets as qtw

from tilecollapse import constants
from tilecollapse.enums import CompletionBehavior
from tilecollapse.view.int_spin_box import IntSpinBox

if TYPE_CHECKING:
    from PIL import Image

    from tilecollapse.model.base_model import BaseModel
    from tilecollapse.model.tileset_manager import TilesetManager
    from tilecollapse.model.wfc_manager import WFCManager


logger = logging.getLogger(__name__)


class OutputWidget(qtw.QWidget):
    """The widget class for running the solver and displaying its progress.

    The solver is stepped by the WFC manager in batches, and the image of the current state (collapsed cells show their
    tile, the others the average of their remaining tiles) is redrawn after every batch. The finished image can be
    saved as a PNG file.
    """

    # The base model holding the tile set and the generation settings.
    _model: BaseModel
    # The WFC manager responsible for stepping the solver.
    _wfc_manager: WFCManager
    # The tileset manager responsible for saving rendered images.
    _tileset_manager: TilesetManager

    # Input for the number of solver steps performed per timer tick.
    _steps_per_tick_input: IntSpinBox
    # Selection for what happens once the output is complete.
    _completion_behavior_combobox: qtw.QComboBox
    # Button to start generating the output via WFC.
    _generate_tilemap_button: qtw.QPushButton
    # Button to stop the ongoing generation.
    _abort_tilemap_generation_button: qtw.QPushButton
    # Button to save the tilemap image (.png format).
    _save_tilemap_image_button: qtw.QPushButton

    # Label showing the number of remaining cells or the reason a run failed.
    _status_label: qtw.QLabel
    # Label to display the tilemap image.
    _tilemap_img_label: qtw.QLabel

    def __init__(self, model: BaseModel, wfc_manager: WFCManager, tileset_manager: TilesetManager) -> None:
        """Initializes the widget and sets up the GUI elements and connections.

        Args:
            model: The base model holding the tile set and the generation settings.
            wfc_manager: The WFC manager responsible for stepping the solver.
            tileset_manager: The tileset manager responsible for saving rendered images.
        """
        super().__init__()

        self._model = model
        self._wfc_manager = wfc_manager
        self._tileset_manager = tileset_manager

        # === LEFT SIDE - WIDGETS ===

        self._steps_per_tick_input = IntSpinBox(
            constants.STEPS_PER_TICK_DEFAULT, constants.STEPS_PER_TICK_MIN_LIMIT, constants.STEPS_PER_TICK_MAX_LIMIT, 10
        )

        self._completion_behavior_combobox = qtw.QComboBox()
        self._completion_behavior_combobox.addItems([option.value for option in CompletionBehavior])
        self._completion_behavior_combobox.setCurrentText(constants.COMPLETION_BEHAVIOR_DEFAULT.value)

        self._generate_tilemap_button = qtw.QPushButton("Generate")
        self._generate_tilemap_button.clicked.connect(self.on_generate_tilemap_button_clicked)

        self._abort_tilemap_generation_button = qtw.QPushButton("Abort")
        self._abort_tilemap_generation_button.setEnabled(False)
        self._abort_tilemap_generation_button.clicked.connect(self.on_abort_tilemap_generation_button_clicked)

        self._save_tilemap_image_button = qtw.QPushButton("Save Image")
        self._save_tilemap_image_button.setEnabled(False)
        self._save_tilemap_image_button.clicked.connect(self.save_tilemap_image)

        self._status_label = qtw.QLabel()
        self._status_label.setWordWrap(True)

        # === LEFT SIDE - LAYOUT ===

        container_generation = qtw.QGroupBox("Generation")
        container_generation_layout = qtw.QGridLayout()
        container_generation.setLayout(container_generation_layout)
        container_generation_layout.setColumnStretch(0, 1)
        container_generation_layout.setColumnMinimumWidth(1, constants.LAYOUT_GRID_MIDDLE_COLUMN_MIN_WIDTH)
        container_generation_layout.setColumnMinimumWidth(2, constants.LAYOUT_GRID_RIGHT_COLUMN_MIN_WIDTH)
        container_generation_layout.addWidget(qtw.QLabel("Steps per Tick"), 0, 0)
        container_generation_layout.addWidget(self._steps_per_tick_input, 0, 2)
        container_generation_layout.addWidget(qtw.QLabel("When Completed"), 1, 0)
        container_generation_layout.addWidget(self._completion_behavior_combobox, 1, 2)
        container_generation_layout.addWidget(self._generate_tilemap_button, 2, 0)
        container_generation_layout.addWidget(self._abort_tilemap_generation_button, 2, 2)
        container_generation_layout.addWidget(self._status_label, 3, 0, 1, -1)

        container_storage = qtw.QGroupBox("Storage")
        container_storage_layout = qtw.QGridLayout()
        container_storage.setLayout(container_storage_layout)
        container_storage_layout.addWidget(self._save_tilemap_image_button, 0, 0, 1, -1)

        container_left = qtw.QWidget()
        container_left.setMaximumWidth(constants.LAYOUT_LEFT_SIDE_MAX_WIDTH)
        container_left_layout = qtw.QVBoxLayout()
        container_left.setLayout(container_left_layout)
        container_left_layout.setSpacing(constants.LAYOUT_LEFT_SIDE_VBOX_SPACING)
        container_left_layout.addWidget(container_generation)
        container_left_layout.addWidget(container_storage)
        container_left_layout.addStretch()

        # === RIGHT SIDE ===

        self._tilemap_img_label = qtw.QLabel()
        self._tilemap_img_label.setAlignment(qtc.Qt.AlignmentFlag.AlignCenter)

        container_right = qtw.QWidget()
        container_right_layout = qtw.QVBoxLayout()
        container_right.setLayout(container_right_layout)
        container_right_layout.addWidget(self._tilemap_img_label)

        # === COMBINE SIDES ===

        layout = qtw.QHBoxLayout()
        self.setLayout(layout)
        layout.addWidget(container_left)
        layout.addWidget(container_right)

        self._wfc_manager.tilemap_img_updated.connect(self.on_wfc_manager_tilemap_img_updated)
        self._wfc_manager.finished.connect(self.on_wfc_manager_finished)
        self._wfc_manager.failed.connect(self.on_wfc_manager_failed)

    @property
    def completion_behavior(self) -> CompletionBehavior:
        """What happens once the output is complete."""
        return CompletionBehavior(self._completion_behavior_combobox.currentText())

    def set_completion_behavior(self, completion_behavior: CompletionBehavior) -> None:
        """Selects what happens once the output is complete."""
        self._completion_behavior_combobox.setCurrentText(completion_behavior.value)

    def set_steps_per_tick(self, steps_per_tick: int) -> None:
        """Sets the number of solver steps performed per timer tick."""
        self._steps_per_tick_input.set_committed_value(steps_per_tick)

    def on_generate_tilemap_button_clicked(self) -> None:
        """Orders the WFC manager to start a new generation run.

        Disables the 'Generate' button and enables the 'Abort' button.
        """
        try:
            self._wfc_manager.generate_tilemap(self._steps_per_tick_input.value())
        except ValueError as error:
            logger.error("Could not start generation: %s", error)
            self._status_label.setText(str(error))
            return

        self._generate_tilemap_button.setEnabled(False)
        self._abort_tilemap_generation_button.setEnabled(True)
        self._save_tilemap_image_button.setEnabled(False)

    def on_abort_tilemap_generation_button_clicked(self) -> None:
        """Aborts the currently running generation.

        Enables the 'Generate' button and disables the 'Abort' button.
        """
        self._wfc_manager.abort_tilemap_generation()
        self._status_label.setText("Aborted")

        self._generate_tilemap_button.setEnabled(True)
        self._abort_tilemap_generation_button.setEnabled(False)
        self._save_tilemap_image_button.setEnabled(True)

    def on_wfc_manager_tilemap_img_updated(self, tilemap_img: Image.Image) -> None:
        """Receives an updated tilemap image and draws it together with the remaining cell count.

        Args:
            tilemap_img: The updated rendered tilemap image.
        """
        wfc_model = self._wfc_manager.wfc_model
        if wfc_model is not None:
            self._status_label.setText(f"Remaining cells: {wfc_model.remaining_uncollapsed}")
        self._draw_tilemap_img(tilemap_img)

    def on_wfc_manager_finished(self, tilemap_img: Image.Image) -> None:
        """Receives the final tilemap image and draws it.

        Enables the 'Generate' button and disables the 'Abort' button. Quits the application if the completion behavior
        says so.

        Args:
            tilemap_img: The final rendered tilemap image.
        """
        self._draw_tilemap_img(tilemap_img)
        self._status_label.setText("Done")

        self._generate_tilemap_button.setEnabled(True)
        self._abort_tilemap_generation_button.setEnabled(False)
        self._save_tilemap_image_button.setEnabled(True)

        if self.completion_behavior == CompletionBehavior.STOP_WHEN_COMPLETED:
            qtw.QApplication.quit()

    def on_wfc_manager_failed(self, message: str) -> None:
        """Shows why the generation run failed.

        Args:
            message: The description of the contradiction.
        """
        self._status_label.setText(f"Contradiction: {message}")

        self._generate_tilemap_button.setEnabled(True)
        self._abort_tilemap_generation_button.setEnabled(False)
        self._save_tilemap_image_button.setEnabled(True)

    def save_tilemap_image(self) -> None:
        """Opens a file dialog and saves the tilemap image as a .png file."""
        tilemap_img = self._wfc_manager.tilemap_img
        if tilemap_img is None:
            return

        file_path, _ = qtw.QFileDialog.getSaveFileName(self, "Save Image to...", "output", "PNG Files (*.png)")
        if file_path:
            self._tileset_manager.save_tilemap_img(tilemap_img, file_path)

    def _draw_tilemap_img(self, tilemap_img: Image.Image) -> None:
        """Converts the PIL Image to a QPixmap and displays it in the label."""
        tilemap_img_pixmap = qtg.QPixmap.fromImage(ImageQt(tilemap_img).copy())
        if (
            tilemap_img_pixmap.width() > self._tilemap_img_label.width()
            or tilemap_img_pixmap.height() > self._tilemap_img_label.height()
        ):
            # Subtracting one pixel from the image label height to prevent the image from growing vertically by one
            # pixel per draw step.
            tilemap_img_pixmap = tilemap_img_pixmap.scaled(
                self._tilemap_img_label.width(),
                self._tilemap_img_label.height() - 1,
                qtc.Qt.AspectRatioMode.KeepAspectRatio,
            )
        self._tilemap_img_label.setPixmap(tilemap_img_pixmap)
