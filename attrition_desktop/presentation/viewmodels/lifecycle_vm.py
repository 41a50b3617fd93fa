import logging
import sys
from PySide6.QtCore import QObject, Signal
from typing import Any, Optional

from attrition_desktop.config import get_settings
from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.domain.models import UpdateInfo
from attrition_desktop.presentation.interfaces.protocols import IDialogs, IProcessControl, IWindowFactory
from attrition_desktop.presentation.state.app_state import ApplicationState, CloseAction, WindowState
from attrition_desktop.presentation.resources.strings import UIStrings

logger = logging.getLogger(__name__)


class LifecycleController(QObject):
    """
    Owns the window/tray state machine.

    Decides between the first-run configuration window and the main view,
    reacts to close requests, tray activation and resets. Windows are reached
    only through the factory and view protocols, so the transitions can be
    driven without a real windowing system.
    """

    state_changed = Signal(WindowState)
    error_occurred = Signal(str)

    def __init__(
        self,
        store: ConfigStore,
        windows: IWindowFactory,
        dialogs: IDialogs,
        process: IProcessControl,
        platform: str = sys.platform,
    ):
        super().__init__()
        self._store = store
        self._windows = windows
        self._dialogs = dialogs
        self._process = process
        self._platform = platform
        self._app_state = ApplicationState()

    @property
    def app_state(self) -> ApplicationState:
        return self._app_state

    @property
    def state(self) -> WindowState:
        return self._app_state.window_state

    @state.setter
    def state(self, new_state: WindowState):
        if self._app_state.window_state != new_state:
            logger.info("Window state %s -> %s", self._app_state.window_state.name, new_state.name)
            self._app_state.window_state = new_state
            self.state_changed.emit(new_state)

    # Startup

    def start(self) -> None:
        """
        Creates the tray, then either the configuration window (first run) or the main view.
        """
        if self._app_state.tray is None:
            self._app_state.tray = self._windows.create_tray()
            self._app_state.tray.show()

        saved_url = self._store.read_server_url()
        if saved_url == self._store.default_url and not self._store.exists():
            logger.info("No configuration on disk, showing configuration window")
            self._open_config_view()
        else:
            logger.info("Configuration found, opening main view at %s", saved_url)
            self._open_main_view(saved_url)

    # Configuration

    def complete_configuration(self, url: str) -> bool:
        """
        Persists the new server url (keeping all other settings) and moves on to the main view.
        """
        if not self._store.write_server_url(url):
            self.error_occurred.emit(UIStrings.ERR_GENERIC.format("could not save configuration"))
            return False

        saved_url = self._store.read_server_url()
        if self._app_state.main_view is not None:
            logger.info("Reloading main view with %s", saved_url)
            self._app_state.main_view.load_url(saved_url)
        else:
            self._open_main_view(saved_url)

        config_view = self._app_state.config_view
        if config_view is not None:
            self._app_state.config_view = None
            config_view.close_view()
        return True

    def reload_main_view(self) -> None:
        if self._app_state.main_view is not None:
            self._app_state.main_view.load_url(self._store.read_server_url())

    # Closing

    def request_main_close(self) -> bool:
        """
        Called when the user closes the main window.
        Returns True when the window may actually close, False when it stays (hidden or canceled).
        """
        if self._app_state.is_quitting:
            return True

        record = self._store.read_record()
        if record.has_tray_preference:
            action = CloseAction.MINIMIZE if record.minimize_to_tray else CloseAction.CLOSE
            logger.info("Applying stored close preference: %s", action.name)
        else:
            action = self._dialogs.ask_close_action()
            if action is CloseAction.CANCEL:
                logger.info("Close action cancelled by user")
                return False
            self._store.write_minimize_to_tray_preference(action is CloseAction.MINIMIZE)

        if action is CloseAction.MINIMIZE:
            self._hide_main_view()
            return False
        logger.info("Closing application completely")
        self._app_state.is_quitting = True
        return True

    def main_view_destroyed(self, view: Optional[Any] = None) -> None:
        if view is not None and view is not self._app_state.main_view:
            return
        self._app_state.main_view = None
        self.state = WindowState.CONFIG_ONLY if self._app_state.config_view is not None else WindowState.NO_WINDOW
        if self._app_state.is_quitting:
            self.quit()
        elif not self._app_state.has_any_window:
            self.all_windows_closed()

    def config_view_closed(self, view: Optional[Any] = None) -> None:
        if view is not None and view is not self._app_state.config_view:
            return
        self._app_state.config_view = None
        if self._app_state.main_view is None:
            self.state = WindowState.NO_WINDOW
            self.all_windows_closed()

    def all_windows_closed(self) -> None:
        if self._platform == "darwin" and not self._app_state.is_quitting:
            logger.info("All windows closed, staying resident (macOS)")
            return
        logger.info("All windows closed, quitting")
        self.quit()

    def quit(self) -> None:
        self._app_state.is_quitting = True
        self._close_all_views()
        self._process.quit()

    # Tray / activation

    def activate_from_tray(self) -> None:
        if self._app_state.main_view is not None:
            self._app_state.main_view.show_and_focus()
            self.state = WindowState.MAIN_VISIBLE
        else:
            self._open_main_view()

    def activate_app(self) -> None:
        main_view = self._app_state.main_view
        if main_view is None and self._app_state.config_view is not None:
            self._app_state.config_view.show_and_focus()
        elif main_view is not None:
            if not main_view.is_visible():
                main_view.show_and_focus()
            self.state = WindowState.MAIN_VISIBLE
        else:
            self._open_main_view()

    # Navigation

    def navigate(self, url: str) -> dict:
        main_view = self._app_state.main_view
        if main_view is None:
            logger.error("Main window not available for link navigation")
            return {"success": False, "message": UIStrings.ERR_NO_MAIN_WINDOW}
        try:
            main_view.load_url(url)
        except Exception as e:
            logger.error("Error loading URL in main window: %s", e)
            return {"success": False, "message": UIStrings.ERR_LINK.format(e)}
        return {"success": True, "message": UIStrings.MSG_LINK_OK}

    def go_home(self) -> None:
        if self._app_state.main_view is not None:
            self._app_state.main_view.load_url(self._store.read_server_url())
        else:
            self._open_main_view()

    # Reset

    def reset(self) -> dict:
        """
        Deletes the configuration file, closes every window and relaunches the app.
        """
        try:
            self._store.delete()
        except OSError as e:
            logger.error("Error resetting configuration: %s", e)
            return {"success": False, "message": UIStrings.ERR_RESET.format(e)}

        # No close prompt while tearing down
        self._app_state.is_quitting = True
        self._close_all_views()

        logger.info("Relaunching application after reset")
        self._process.relaunch()
        return {"success": True, "message": UIStrings.MSG_RESET_OK}

    # Updates

    def notify_update(self, info: UpdateInfo) -> None:
        if info.error or not info.is_update_available:
            return
        if self._app_state.main_view is None:
            return
        if self._dialogs.ask_open_update(info.current_version, info.latest_version or ""):
            self._process.open_external(get_settings().update.download_page)

    # Helpers

    def _open_main_view(self, url: Optional[str] = None):
        url = url or self._store.read_server_url()
        view = self._windows.create_main_view(url)
        self._app_state.main_view = view
        view.show_and_focus()
        self.state = WindowState.MAIN_VISIBLE
        return view

    def _open_config_view(self):
        view = self._windows.create_config_view()
        self._app_state.config_view = view
        view.show_and_focus()
        if self._app_state.main_view is None:
            self.state = WindowState.CONFIG_ONLY
        return view

    def _close_all_views(self) -> None:
        # Detach first so the views' close notifications are ignored as stale
        for attr in ("main_view", "config_view"):
            view = getattr(self._app_state, attr)
            if view is not None:
                setattr(self._app_state, attr, None)
                view.close_view()
        self.state = WindowState.NO_WINDOW

    def _hide_main_view(self) -> None:
        self._app_state.main_view.hide()
        self.state = WindowState.MAIN_HIDDEN
        logger.info("Main window hidden, minimized to tray")
