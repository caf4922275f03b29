from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qt_app() -> QCoreApplication:
    """A Qt core application so timers can be created and started."""
    return QCoreApplication.instance() or QCoreApplication([])
