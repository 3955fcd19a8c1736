"""Contains the main window widget class for the tilemap collapse viewer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6 import QtWidgets as qtw

if TYPE_CHECKING:
    from tilecollapse.view.general_settings_widget import GeneralSettingsWidget
    from tilecollapse.view.output_widget import OutputWidget


class MainWindow(qtw.QMainWindow):
    """The main window of the application.

    Holds the tile set settings and the output view in a central QTabWidget.
    """

    def __init__(self, general_settings_widget: GeneralSettingsWidget, output_widget: OutputWidget) -> None:
        """Initializes the main window and sets up the tabbed interface.

        Args:
            general_settings_widget: The widget for choosing the tile set and the output settings.
            output_widget: The widget for running the solver and displaying its progress.
        """
        super().__init__()

        self.resize(1200, 800)
        self.setWindowTitle("Tile Collapse")

        self.main_tabs = qtw.QTabWidget()
        self.main_tabs.addTab(general_settings_widget, "Tile Set")
        self.main_tabs.addTab(output_widget, "Output")

        self.setCentralWidget(self.main_tabs)

    def show_output_tab(self) -> None:
        """Switches to the output tab."""
        self.main_tabs.setCurrentIndex(1)
