"""Contains the class that drives a solver model and renders its progress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PyQt6 import QtCore as qtc

from tilecollapse import constants
from tilecollapse.exceptions import WFCContradiction

if TYPE_CHECKING:
    from PIL import Image

    from tilecollapse.model.base_model import BaseModel
    from tilecollapse.model.tileset_manager import TilesetManager
    from tilecollapse.model.wfc import Model


logger = logging.getLogger(__name__)


class WFCManager(qtc.QObject):
    """Steps a solver model on a Qt timer and keeps a rendered image of its state up to date.

    Each timer tick performs a batch of solver steps, then redraws every cell that changed during the batch. Because
    the solver runs on the GUI thread in small batches, the window stays responsive and generation can be aborted at
    any time by stopping the timer. A contradiction stops generation and is reported via the 'failed' signal.

    Signals:
        tilemap_img_updated: Emitted with the current tilemap image after each batch of steps.
        finished: Emitted with the final tilemap image once every cell has been collapsed.
        failed: Emitted with an error message when the solver runs into a contradiction.
    """

    tilemap_img_updated = qtc.pyqtSignal(object)
    finished = qtc.pyqtSignal(object)
    failed = qtc.pyqtSignal(str)

    # The base model holding the tile set and the generation settings.
    _model: BaseModel
    # The tileset manager responsible for rendering the solver state.
    _tileset_manager: TilesetManager

    # The solver model of the current (or last) run.
    _wfc_model: Model | None
    # The timer that triggers batches of solver steps, created on first use.
    _timer: qtc.QTimer | None
    # Number of solver steps performed per timer tick.
    _steps_per_tick: int

    # The PIL image representation of the current solver state.
    _tilemap_img: Image.Image | None

    def __init__(self, model: BaseModel, tileset_manager: TilesetManager) -> None:
        """Initializes the WFC Manager.

        Args:
            model: The base model holding the tile set and the generation settings.
            tileset_manager: The tileset manager responsible for rendering the solver state.
        """
        super().__init__()

        self._model = model
        self._tileset_manager = tileset_manager

        self._wfc_model = None
        self._timer = None
        self._steps_per_tick = constants.STEPS_PER_TICK_DEFAULT
        self._tilemap_img = None

    @property
    def wfc_model(self) -> Model | None:
        """The solver model of the current (or last) run."""
        return self._wfc_model

    @property
    def tilemap_img(self) -> Image.Image | None:
        """The image of the current (or last) run."""
        return self._tilemap_img

    @property
    def is_running(self) -> bool:
        """True while the generation timer is active."""
        return self._timer is not None and self._timer.isActive()

    def generate_tilemap(self, steps_per_tick: int = constants.STEPS_PER_TICK_DEFAULT) -> None:
        """Starts a new generation run.

        Creates a new solver model from the base model's settings, emits the initial image and starts the timer.

        Args:
            steps_per_tick: Number of solver steps performed per timer tick.
        """
        self.abort_tilemap_generation()
        self._start_run()
        self._steps_per_tick = steps_per_tick

        if self._timer is None:
            self._timer = qtc.QTimer(self)
            self._timer.setInterval(constants.TIMER_INTERVAL_MS)
            self._timer.timeout.connect(self.on_timer_timeout)
        self._timer.start()

    def advance(self, steps: int) -> bool:
        """Performs up to the given number of solver steps and redraws every changed cell.

        Args:
            steps: The maximum number of solver steps.

        Returns:
            True if the run has ended (finished or failed), False if there is work left.
        """
        assert self._wfc_model is not None
        assert self._tilemap_img is not None

        updated_coords = set()
        try:
            for _ in range(steps):
                if self._wfc_model.is_done:
                    break
                updated_coords.update(self._wfc_model.step())
        except WFCContradiction as error:
            self._stop_timer()
            logger.error("Generation failed: %s", error)
            self._tileset_manager.update_tilemap_img_cells(self._tilemap_img, self._wfc_model, updated_coords)
            self.tilemap_img_updated.emit(self._tilemap_img)
            self.failed.emit(str(error))
            return True

        self._tileset_manager.update_tilemap_img_cells(self._tilemap_img, self._wfc_model, updated_coords)
        self.tilemap_img_updated.emit(self._tilemap_img)

        if self._wfc_model.is_done:
            self._stop_timer()
            logger.info("Generation finished")
            self.finished.emit(self._tilemap_img)
            return True
        return False

    def run_to_completion(self) -> Image.Image:
        """Solves a new model without a timer and renders the result.

        Returns:
            The final tilemap image.

        Raises:
            WFCContradiction: If the solver runs into a contradiction.
        """
        self.abort_tilemap_generation()
        wfc_model = self._start_run()
        wfc_model.run_to_completion()
        self._tilemap_img = self._tileset_manager.get_tilemap_img(wfc_model)
        self.finished.emit(self._tilemap_img)
        return self._tilemap_img

    def abort_tilemap_generation(self) -> None:
        """Stops the generation timer. The model of the aborted run stays available."""
        if self.is_running:
            logger.info("Generation aborted")
        self._stop_timer()

    def on_timer_timeout(self) -> None:
        """Handler for the generation timer."""
        self.advance(self._steps_per_tick)

    def on_main_app_about_to_quit(self) -> None:
        """Handler for the application shutdown signal."""
        self.abort_tilemap_generation()

    def _start_run(self) -> Model:
        """Creates the solver model and the initial image of a new run."""
        self._wfc_model = self._model.create_wfc_model()

        # create_wfc_model() already failed if there was no tile set.
        assert self._model.wfc_data is not None
        self._tileset_manager.set_wfc_data(self._model.wfc_data)
        self._tileset_manager.pixel_scale = self._model.pixel_scale

        self._tilemap_img = self._tileset_manager.get_initial_tilemap_img(self._wfc_model)
        self.tilemap_img_updated.emit(self._tilemap_img)
        logger.info("Started generation with seed %d", self._model.random_seed)
        return self._wfc_model

    def _stop_timer(self) -> None:
        """Stops the generation timer if it exists."""
        if self._timer is not None:
            self._timer.stop()
