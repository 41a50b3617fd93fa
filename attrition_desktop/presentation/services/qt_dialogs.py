import logging
import sys
from pathlib import Path
from typing import Callable, Optional
from PySide6.QtCore import QProcess, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication, QFileDialog, QMessageBox, QWidget

from attrition_desktop.livery_core.domain.interfaces import IDirectoryPrompt
from attrition_desktop.presentation.interfaces.protocols import IDialogs, IProcessControl
from attrition_desktop.presentation.resources.strings import UIStrings
from attrition_desktop.presentation.services.gui_dispatcher import GuiDispatcher
from attrition_desktop.presentation.state.app_state import CloseAction

logger = logging.getLogger(__name__)

ParentProvider = Callable[[], Optional[QWidget]]


def _no_parent() -> Optional[QWidget]:
    return None


class QtDirectoryPrompt(IDirectoryPrompt):
    """
    Folder picker and confirmation box, run on the GUI thread for coroutines on the core loop.
    """

    def __init__(self, dispatcher: GuiDispatcher, parent: ParentProvider = _no_parent):
        self._dispatcher = dispatcher
        self._parent = parent

    async def pick_directory(self, title: str, message: str, start_dir: Path) -> Optional[str]:
        return await self._dispatcher.call(self._pick_directory, title, start_dir)

    async def confirm(self, title: str, message: str) -> bool:
        return await self._dispatcher.call(self._confirm, title, message)

    def _pick_directory(self, title: str, start_dir: Path) -> Optional[str]:
        path = QFileDialog.getExistingDirectory(self._parent(), title, str(start_dir))
        return path or None

    def _confirm(self, title: str, message: str) -> bool:
        box = QMessageBox(QMessageBox.Icon.Question, title, message, parent=self._parent())
        continue_button = box.addButton(UIStrings.BTN_CONTINUE, QMessageBox.ButtonRole.AcceptRole)
        box.addButton(UIStrings.BTN_CANCEL, QMessageBox.ButtonRole.RejectRole)
        box.exec()
        return box.clickedButton() is continue_button


class QtDialogs(IDialogs):
    def __init__(self, parent: ParentProvider = _no_parent):
        self._parent = parent

    def ask_close_action(self) -> CloseAction:
        box = QMessageBox(QMessageBox.Icon.Question, UIStrings.TITLE_CLOSE, UIStrings.MSG_CLOSE, parent=self._parent())
        minimize = box.addButton(UIStrings.BTN_MINIMIZE, QMessageBox.ButtonRole.AcceptRole)
        close = box.addButton(UIStrings.BTN_CLOSE, QMessageBox.ButtonRole.DestructiveRole)
        cancel = box.addButton(UIStrings.BTN_CANCEL, QMessageBox.ButtonRole.RejectRole)
        box.setDefaultButton(minimize)
        box.setEscapeButton(cancel)
        box.exec()

        clicked = box.clickedButton()
        if clicked is minimize:
            return CloseAction.MINIMIZE
        if clicked is close:
            return CloseAction.CLOSE
        return CloseAction.CANCEL

    def ask_open_update(self, current_version: str, latest_version: str) -> bool:
        box = QMessageBox(QMessageBox.Icon.Information, UIStrings.TITLE_UPDATE, UIStrings.MSG_UPDATE, parent=self._parent())
        box.setInformativeText(UIStrings.MSG_UPDATE_DETAIL.format(current_version, latest_version))
        download = box.addButton(UIStrings.BTN_DOWNLOAD_NOW, QMessageBox.ButtonRole.AcceptRole)
        later = box.addButton(UIStrings.BTN_LATER, QMessageBox.ButtonRole.RejectRole)
        box.setDefaultButton(download)
        box.setEscapeButton(later)
        box.exec()
        return box.clickedButton() is download

    def show_error(self, title: str, message: str) -> None:
        QMessageBox.critical(self._parent(), title, message)


class QtProcessControl(IProcessControl):
    def quit(self) -> None:
        logger.info("Quitting application")
        QApplication.quit()

    def relaunch(self) -> None:
        # Frozen builds: the executable is the app itself
        args = sys.argv[1:] if getattr(sys, "frozen", False) else sys.argv
        started = QProcess.startDetached(sys.executable, args)
        if not started:
            logger.error("Failed to start a new instance for relaunch")
        QApplication.exit(0)

    def open_external(self, url: str) -> None:
        QDesktopServices.openUrl(QUrl(url))
