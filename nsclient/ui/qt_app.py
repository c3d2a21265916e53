import sys
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QInputDialog, QMainWindow, QPushButton, QTabWidget, QToolButton

from ..browser import Navigator
from ..client import StorageClient
from .state import AppState
from .threads import TaskRunner
from .views.browser_tab import BrowserTab


class MainWindow(QMainWindow):
    def __init__(self, base_url: Optional[str] = None) -> None:
        super().__init__()
        self.setWindowTitle("Network storage")
        self.resize(900, 640)

        self.state = AppState()
        self.runner = TaskRunner()

        self.tabs = QTabWidget(self)
        self.setCentralWidget(self.tabs)

        self.browser_tab = BrowserTab(status_cb=self._set_status)
        self.tabs.addTab(self.browser_tab, "Files")

        self._build_menu()
        self.statusBar().showMessage("Ready")
        self._connect(base_url)
        self._apply_pointer_cursors()

    def _apply_pointer_cursors(self) -> None:
        for btn in self.findChildren(QPushButton):
            btn.setCursor(Qt.PointingHandCursor)
        for btn in self.findChildren(QToolButton):
            btn.setCursor(Qt.PointingHandCursor)

    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("Server")
        act_connect = QAction("Connect to...", self)
        act_connect.setStatusTip("Browse another storage server")
        act_connect.triggered.connect(self._connect_dialog)
        menu.addAction(act_connect)

        act_refresh = QAction("Refresh", self)
        act_refresh.setShortcut("F5")
        act_refresh.triggered.connect(self._refresh)
        menu.addAction(act_refresh)

    def _connect_dialog(self) -> None:
        current = self.state.client.base_url if self.state.client else ""
        url, ok = QInputDialog.getText(self, "Connect", "Server URL:", text=current)
        if not ok or not url.strip():
            return
        self._connect(url.strip())

    def _connect(self, base_url: Optional[str]) -> None:
        if self.state.client:
            self.state.client.close()
        client = StorageClient(base_url=base_url)
        navigator = Navigator(client, runner=self.runner, notify=self.browser_tab.show_notice)
        self.state.client = client
        self.state.navigator = navigator
        self.browser_tab.set_navigator(navigator)
        self._set_status(f"Connected: {client.base_url}")

    def _refresh(self) -> None:
        if self.state.navigator:
            self.state.navigator.refresh()

    def _set_status(self, text: str) -> None:
        self.statusBar().showMessage(text)

    def closeEvent(self, event) -> None:
        if self.state.client:
            self.state.client.close()
        super().closeEvent(event)


def run(base_url: Optional[str] = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    win = MainWindow(base_url=base_url)
    win.show()
    return app.exec()
