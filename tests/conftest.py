# Shared fixtures. Forces the offscreen Qt platform and provides a fallback
# 'qtbot' fixture if pytest-qt is not installed; when pytest-qt is present its
# fixture wins.

import contextlib
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    from PyQt6.QtWidgets import QApplication

    @pytest.fixture
    def qtbot():  # type: ignore
        app = QApplication.instance() or QApplication(sys.argv)  # noqa: F841
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            def wait(self, ms):
                from PyQt6.QtTest import QTest

                QTest.qWait(ms)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        yield Bot()
        for w in widgets:
            w.close()


from branchboard.services.layout_persistence import LayoutPersistenceService  # noqa: E402


@pytest.fixture
def layout_store(tmp_path):
    return LayoutPersistenceService(str(tmp_path / "layouts"))


@pytest.fixture(autouse=True)
def _keep_qtbot_widgets_alive(request):
    # pytest-qt's qtbot.addWidget only holds a weak reference; the tests rely on
    # registered (parent) widgets staying alive for the duration of the test,
    # as the fallback fixture above guarantees.
    if "qtbot" not in request.fixturenames:
        yield
        return
    bot = request.getfixturevalue("qtbot")
    kept = []
    original = bot.addWidget

    def addWidget(widget, *args, **kwargs):
        kept.append(widget)
        return original(widget, *args, **kwargs)

    bot.addWidget = addWidget
    yield
    kept.clear()
