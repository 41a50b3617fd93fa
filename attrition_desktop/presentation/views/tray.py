import logging
from pathlib import Path
from typing import Optional
from PySide6.QtGui import QAction, QIcon
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from attrition_desktop.presentation.resources.strings import UIStrings
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController

logger = logging.getLogger(__name__)


def load_app_icon(icon_path: Optional[Path]) -> QIcon:
    if icon_path is not None and icon_path.exists():
        return QIcon(str(icon_path))
    return QApplication.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)


class TrayIcon(QSystemTrayIcon):
    """
    Tray presence. Lives until the process exits, independent of the windows.
    """

    def __init__(self, controller: LifecycleController, icon_path: Optional[Path] = None):
        super().__init__(load_app_icon(icon_path))
        self._controller = controller
        self.setToolTip(UIStrings.TRAY_TOOLTIP)

        self._menu = QMenu()
        show_action = QAction(UIStrings.TRAY_SHOW, self._menu)
        show_action.triggered.connect(controller.activate_from_tray)
        exit_action = QAction(UIStrings.TRAY_EXIT, self._menu)
        exit_action.triggered.connect(controller.quit)
        self._menu.addAction(show_action)
        self._menu.addSeparator()
        self._menu.addAction(exit_action)
        self.setContextMenu(self._menu)

        self.activated.connect(self._on_activated)

        if not QSystemTrayIcon.isSystemTrayAvailable():
            logger.warning("System tray is not available on this desktop")

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason in (QSystemTrayIcon.ActivationReason.Trigger, QSystemTrayIcon.ActivationReason.DoubleClick):
            self._controller.activate_from_tray()
