"""Contains a specialized PyQt widget class for integer settings."""

from PyQt6 import QtCore as qtc
from PyQt6 import QtWidgets as qtw


class IntSpinBox(qtw.QSpinBox):
    """A QSpinBox for integer settings that reports only committed changes.

    The 'value_change_commited' signal is emitted when the user finishes editing and the value differs from the last
    committed one. Values set by the program via 'set_committed_value' (e.g. a tile size dictated by a loaded tile set)
    update the display without emitting the signal, so they aren't reported back to the model they came from.

    Signals:
        value_change_commited: Emitted when the user commits a value that differs from the last committed one.
    """

    value_change_commited = qtc.pyqtSignal(int)

    # The last committed int value, used to determine if an edit actually changed anything.
    _last_value: int

    def __init__(self, default_value: int, min_value: int, max_value: int, step_size: int = 1) -> None:
        """Initializes the spin box.

        Args:
            default_value: The initial value displayed by the spin box.
            min_value: The lowest integer value allowed in the spin box.
            max_value: The highest integer value allowed in the spin box.
            step_size: The amount the arrow buttons change the value by.
        """
        super().__init__()

        self.setRange(min_value, max_value)
        self.setSingleStep(step_size)
        self.setCorrectionMode(qtw.QAbstractSpinBox.CorrectionMode.CorrectToNearestValue)
        self.set_committed_value(default_value)
        self.editingFinished.connect(self.on_editing_finished)

    def set_committed_value(self, value: int) -> None:
        """Shows a value set by the program without emitting 'value_change_commited'."""
        self.setValue(value)
        self._last_value = self.value()

    def on_editing_finished(self) -> None:
        """Emits 'value_change_commited' if the edited value differs from the last committed one."""
        if self._last_value != self.value():
            self._last_value = self.value()
            self.value_change_commited.emit(self.value())
