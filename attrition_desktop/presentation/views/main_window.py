import html
import logging
from PySide6.QtCore import QUrl
from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineProfile
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QMainWindow

from attrition_desktop.config import WindowSettings
from attrition_desktop.presentation.resources.strings import UIStrings
from attrition_desktop.presentation.services.web_channel import BRIDGE_OBJECT_NAME, WebChannelTransport
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController

logger = logging.getLogger(__name__)

ERROR_PAGE = """<!DOCTYPE html>
<html><head><title>Connection problem</title></head>
<body style="font-family: sans-serif; padding: 2em;">
<h2>Could not load {url}</h2>
<p>Check your connection or the configured server address, then use View &gt; Reload.</p>
</body></html>"""


class MainWindow(QMainWindow):
    """
    Hosts the embedded browser showing the platform.
    Close requests are decided by the lifecycle controller.
    """

    def __init__(
        self,
        url: str,
        controller: LifecycleController,
        transport: WebChannelTransport,
        profile: QWebEngineProfile,
        settings: WindowSettings,
    ):
        super().__init__()
        self._controller = controller
        self._force_close = False
        self._devtools = None
        self._current_url = url

        self.setWindowTitle(UIStrings.TITLE_APP)
        self.resize(settings.main_width, settings.main_height)

        self._view = QWebEngineView(self)
        self._page = QWebEnginePage(profile, self._view)
        self._channel = QWebChannel(self._page)
        self._channel.registerObject(BRIDGE_OBJECT_NAME, transport)
        self._page.setWebChannel(self._channel)
        self._view.setPage(self._page)
        self.setCentralWidget(self._view)

        self._page.loadStarted.connect(lambda: logger.info("Main window started loading"))
        self._page.loadFinished.connect(self._on_load_finished)

        self._build_menu()
        self.load_url(url)

    # IMainView

    def load_url(self, url: str) -> None:
        logger.info("Loading URL in main window: %s", url)
        self._current_url = url
        self._view.load(QUrl(url))

    def show_and_focus(self) -> None:
        if self.isMinimized():
            self.showNormal()
        self.show()
        self.raise_()
        self.activateWindow()

    def close_view(self) -> None:
        self._force_close = True
        self.close()

    def is_visible(self) -> bool:
        return self.isVisible()

    # Qt events

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._force_close or self._controller.request_main_close():
            event.accept()
            if self._devtools is not None:
                self._devtools.close()
            self.deleteLater()
            self._controller.main_view_destroyed(self)
        else:
            event.ignore()

    def _on_load_finished(self, ok: bool) -> None:
        if ok:
            logger.info("Main window finished loading")
            return
        logger.error("Main window failed to load %s", self._current_url)
        self._page.setHtml(ERROR_PAGE.format(url=html.escape(self._current_url)), QUrl("about:blank"))

    def _build_menu(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu(UIStrings.MENU_FILE)
        self._add_action(file_menu, UIStrings.ACTION_RESET, self._reset_config)
        file_menu.addSeparator()
        self._add_action(file_menu, UIStrings.ACTION_EXIT, self._controller.quit, QKeySequence.StandardKey.Quit)

        edit_menu = menu_bar.addMenu(UIStrings.MENU_EDIT)
        self._add_action(edit_menu, UIStrings.ACTION_HOME, self._controller.go_home)
        edit_menu.addSeparator()
        for web_action in (
            QWebEnginePage.WebAction.Undo,
            QWebEnginePage.WebAction.Redo,
            QWebEnginePage.WebAction.Cut,
            QWebEnginePage.WebAction.Copy,
            QWebEnginePage.WebAction.Paste,
            QWebEnginePage.WebAction.SelectAll,
        ):
            edit_menu.addAction(self._page.action(web_action))

        view_menu = menu_bar.addMenu(UIStrings.MENU_VIEW)
        self._add_action(view_menu, UIStrings.ACTION_RELOAD, self._view.reload, QKeySequence.StandardKey.Refresh)
        self._add_action(
            view_menu,
            UIStrings.ACTION_FORCE_RELOAD,
            lambda: self._page.triggerAction(QWebEnginePage.WebAction.ReloadAndBypassCache),
        )
        self._add_action(view_menu, UIStrings.ACTION_DEVTOOLS, self._toggle_devtools, QKeySequence("Ctrl+Shift+I"))
        view_menu.addSeparator()
        self._add_action(view_menu, UIStrings.ACTION_ZOOM_RESET, lambda: self._view.setZoomFactor(1.0))
        self._add_action(
            view_menu, UIStrings.ACTION_ZOOM_IN,
            lambda: self._view.setZoomFactor(min(self._view.zoomFactor() + 0.1, 5.0)),
            QKeySequence.StandardKey.ZoomIn,
        )
        self._add_action(
            view_menu, UIStrings.ACTION_ZOOM_OUT,
            lambda: self._view.setZoomFactor(max(self._view.zoomFactor() - 0.1, 0.25)),
            QKeySequence.StandardKey.ZoomOut,
        )

    def _add_action(self, menu, text, slot, shortcut=None) -> QAction:
        action = QAction(text, self)
        if shortcut is not None:
            action.setShortcut(shortcut)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def _reset_config(self) -> None:
        result = self._controller.reset()
        if not result.get("success"):
            self._controller.error_occurred.emit(result.get("message", ""))

    def _toggle_devtools(self) -> None:
        if self._devtools is None:
            self._devtools = QWebEngineView()
            self._devtools.setWindowTitle(f"{UIStrings.TITLE_APP} - {UIStrings.ACTION_DEVTOOLS}")
            self._page.setDevToolsPage(self._devtools.page())
        self._devtools.setVisible(not self._devtools.isVisible())
