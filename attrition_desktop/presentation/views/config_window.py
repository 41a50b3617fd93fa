from urllib.parse import urlsplit
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget

from attrition_desktop.config import WindowSettings
from attrition_desktop.presentation.resources.strings import UIStrings
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController


def is_valid_server_url(url: str) -> bool:
    parts = urlsplit(url.strip())
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class ConfigWindow(QWidget):
    """First-run window asking for the platform address."""

    def __init__(self, initial_url: str, controller: LifecycleController, settings: WindowSettings):
        super().__init__()
        self._controller = controller

        self.setWindowTitle(UIStrings.TITLE_CONFIG)
        self.resize(settings.config_width, settings.config_height)

        hint = QLabel(UIStrings.LBL_CONFIG_HINT)
        hint.setWordWrap(True)
        self._url_edit = QLineEdit(initial_url)
        self._url_edit.setPlaceholderText(initial_url)
        self._error = QLabel("")
        self._error.setStyleSheet("color: #c0392b;")
        save = QPushButton(UIStrings.BTN_SAVE)
        save.clicked.connect(self._save)
        self._url_edit.returnPressed.connect(self._save)

        layout = QVBoxLayout(self)
        layout.addWidget(hint)
        layout.addWidget(QLabel(UIStrings.LBL_SERVER_URL))
        layout.addWidget(self._url_edit)
        layout.addWidget(self._error)
        layout.addStretch(1)
        layout.addWidget(save)

    def show_and_focus(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def close_view(self) -> None:
        self.close()

    def closeEvent(self, event: QCloseEvent) -> None:
        event.accept()
        self.deleteLater()
        self._controller.config_view_closed(self)

    def _save(self) -> None:
        url = self._url_edit.text().strip()
        if not is_valid_server_url(url):
            self._error.setText(UIStrings.ERR_INVALID_URL)
            return
        self._error.clear()
        self._controller.complete_configuration(url)
