"""Serves as the entry point and initializer for the tilemap collapse viewer."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from PyQt6 import QtWidgets as qtw

from tilecollapse import constants
from tilecollapse.enums import AdjacencyMethod, CompletionBehavior
from tilecollapse.exceptions import WFCContradiction
from tilecollapse.logging_config import setup_logging
from tilecollapse.model.base_model import BaseModel
from tilecollapse.model.tileset_manager import TilesetManager
from tilecollapse.model.wfc_manager import WFCManager
from tilecollapse.view.general_settings_widget import GeneralSettingsWidget
from tilecollapse.view.main_window import MainWindow
from tilecollapse.view.output_widget import OutputWidget


logger = logging.getLogger(__name__)


class MainApp(qtw.QApplication):
    """The application initializer and integrator for the tilemap collapse viewer.

    Inherits from PyQt's QApplication. It handles the initial setup of the application's model and view components (the
    latter being PyQt Widgets), and the signal/slot connections that define the application's reactivity and data flow.
    """

    # The top-level window of the application, which holds all widgets.
    _main_window: MainWindow

    def __init__(self, argv: list[str], args: argparse.Namespace) -> None:
        """Initializes the PyQt application and all application components.

        Ensures that the model and view components are created in the correct order and are linked via signals/slots
        before the application starts. If a sample image was given on the command line, generation starts right away.

        Args:
            argv: Command line arguments passed to the application (sys.argv).
            args: The parsed command line arguments.
        """
        super().__init__(argv)

        model = create_base_model(args)
        assert model.wfc_data is not None
        tileset_manager = TilesetManager(model.wfc_data, model.pixel_scale)
        wfc_manager = WFCManager(model, tileset_manager)

        general_settings_widget = GeneralSettingsWidget(model, tileset_manager)
        output_widget = OutputWidget(model, wfc_manager, tileset_manager)
        output_widget.set_steps_per_tick(args.steps_per_tick)
        if args.stop_when_completed:
            output_widget.set_completion_behavior(CompletionBehavior.STOP_WHEN_COMPLETED)

        self.aboutToQuit.connect(wfc_manager.on_main_app_about_to_quit)

        self._main_window = MainWindow(general_settings_widget, output_widget)
        self._main_window.show()

        if args.sample is not None or args.pipes:
            self._main_window.show_output_tab()
            output_widget.on_generate_tilemap_button_clicked()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parses the command line arguments of the viewer.

    Args:
        argv: The arguments to parse (without the program name). Defaults to sys.argv[1:].

    Returns:
        The parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="tilecollapse", description="Generates tilemaps from a sample image via Wave Function Collapse."
    )

    tileset_group = parser.add_mutually_exclusive_group()
    tileset_group.add_argument("--sample", type=Path, help="PNG sample image to extract the tiles from")
    tileset_group.add_argument("--pipes", action="store_true", help="use the built-in corner pipe tiles")

    parser.add_argument(
        "--tile-size",
        type=int,
        default=constants.TILE_SIZE_DEFAULT,
        help="width and height of a tile in the sample image (in pixels)",
    )
    parser.add_argument(
        "--output-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=(constants.OUTPUT_SIZE_DEFAULT, constants.OUTPUT_SIZE_DEFAULT),
        help="size of the output (in pixels, before scaling)",
    )
    parser.add_argument(
        "--pixel-scale",
        type=int,
        default=constants.PIXEL_SCALE_DEFAULT,
        help="factor by which the output is upscaled",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed of the random number generator")
    parser.add_argument(
        "--adjacency-method",
        choices=[method.name.lower() for method in AdjacencyMethod],
        default=constants.ADJACENCY_METHOD_DEFAULT.name.lower(),
        help="how adjacency rules are derived from the sample image",
    )
    parser.add_argument(
        "--wrap", action="store_true", help="treat opposite borders of the sample image as neighbors"
    )
    parser.add_argument(
        "--steps-per-tick",
        type=int,
        default=constants.STEPS_PER_TICK_DEFAULT,
        help="number of solver steps between two redraws",
    )
    parser.add_argument(
        "--stop-when-completed", action="store_true", help="quit the viewer once the output is complete"
    )
    parser.add_argument(
        "--headless", type=Path, metavar="OUT_PNG", help="solve without a window and save the output to this file"
    )
    parser.add_argument("--log-file", type=Path, help="additionally write a debug log to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="show debug messages on the console")

    args = parser.parse_args(argv)

    if args.tile_size < constants.TILE_SIZE_MIN_LIMIT:
        parser.error(f"--tile-size must be at least {constants.TILE_SIZE_MIN_LIMIT}")
    if min(args.output_size) < constants.OUTPUT_SIZE_MIN_LIMIT:
        parser.error(f"--output-size must be at least {constants.OUTPUT_SIZE_MIN_LIMIT}")
    if args.pixel_scale < constants.PIXEL_SCALE_MIN_LIMIT:
        parser.error(f"--pixel-scale must be at least {constants.PIXEL_SCALE_MIN_LIMIT}")
    if args.steps_per_tick < constants.STEPS_PER_TICK_MIN_LIMIT:
        parser.error(f"--steps-per-tick must be at least {constants.STEPS_PER_TICK_MIN_LIMIT}")
    return args


def create_base_model(args: argparse.Namespace) -> BaseModel:
    """Creates the base model and applies the settings and the tile set given on the command line.

    The corner pipe tiles are used unless a sample image is given.

    Args:
        args: The parsed command line arguments.

    Returns:
        The configured base model (with a tile set).

    Raises:
        OSError: If the sample image cannot be read.
        ValueError: If no tiles can be extracted from the sample image.
    """
    model = BaseModel()
    model.set_output_size(*args.output_size)
    model.set_pixel_scale(args.pixel_scale)
    if args.seed is not None:
        model.set_random_seed(args.seed)
    model.set_adjacency_method(AdjacencyMethod[args.adjacency_method.upper()], args.wrap)
    model.set_tile_size(args.tile_size)

    if args.sample is not None:
        model.load_sample(args.sample)
    else:
        model.use_simple_patterns()
    return model


def run_headless(args: argparse.Namespace) -> int:
    """Solves a single output without a window and saves it.

    Args:
        args: The parsed command line arguments.

    Returns:
        The process exit code (0 on success, 1 if the tile set could not be loaded, the settings are invalid or the
            solver hit a contradiction).
    """
    try:
        model = create_base_model(args)
    except (OSError, ValueError) as error:
        logger.error("Could not load the tile set: %s", error)
        return 1

    assert model.wfc_data is not None
    tileset_manager = TilesetManager(model.wfc_data, model.pixel_scale)
    wfc_manager = WFCManager(model, tileset_manager)

    try:
        tilemap_img = wfc_manager.run_to_completion()
    except ValueError as error:
        logger.error("Invalid generation settings: %s", error)
        return 1
    except WFCContradiction as error:
        logger.error("Generation failed with seed %d: %s", model.random_seed, error)
        return 1

    tileset_manager.save_tilemap_img(tilemap_img, args.headless)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Runs the viewer, or the headless solver if an output file was given."""
    args = parse_args(argv)
    setup_logging(log_file=args.log_file, verbose=args.verbose)

    if args.headless is not None:
        return run_headless(args)

    try:
        app = MainApp(sys.argv[:1], args)
    except (OSError, ValueError) as error:
        logger.error("Could not load the tile set: %s", error)
        return 1
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
