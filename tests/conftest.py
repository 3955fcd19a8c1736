from __future__ import annotations

from collections.abc import Iterator
import logging

import pytest

from tilecollapse import constants


@pytest.fixture
def qapp() -> Iterator[object]:
    """Provide a Qt core application for tests that create QObjects or timers."""
    qtcore = pytest.importorskip("PyQt6.QtCore")
    app = qtcore.QCoreApplication.instance()
    if app is None:
        app = qtcore.QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Remove handlers installed by 'setup_logging' so tests don't leak them into each other."""
    yield
    package_logger = logging.getLogger(constants.LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
