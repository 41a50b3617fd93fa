from pathlib import Path
from typing import Optional
from PySide6.QtWebEngineCore import QWebEngineProfile

from attrition_desktop.config import Settings
from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.infrastructure.cookie_jar import SessionCookieJar
from attrition_desktop.presentation.interfaces.protocols import IWindowFactory
from attrition_desktop.presentation.services.cookie_source import bind_cookie_store
from attrition_desktop.presentation.services.web_channel import WebChannelTransport, build_bridge_scripts
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController
from attrition_desktop.presentation.views.config_window import ConfigWindow
from attrition_desktop.presentation.views.main_window import MainWindow
from attrition_desktop.presentation.views.tray import TrayIcon

PROFILE_NAME = "attrition"


class QtWindowFactory(IWindowFactory):
    """
    Builds the Qt windows. The controller and transport are bound after construction
    because they depend on the factory themselves.
    """

    def __init__(self, store: ConfigStore, jar: SessionCookieJar, settings: Settings, icon_path: Optional[Path] = None):
        self._store = store
        self._jar = jar
        self._settings = settings
        self._icon_path = icon_path
        self._controller: Optional[LifecycleController] = None
        self._transport: Optional[WebChannelTransport] = None
        self._profile: Optional[QWebEngineProfile] = None

    def bind(self, controller: LifecycleController, transport: WebChannelTransport) -> None:
        self._controller = controller
        self._transport = transport

    def create_main_view(self, url: str) -> MainWindow:
        return MainWindow(url, self._require_controller(), self._transport, self._web_profile(), self._settings.window)

    def create_config_view(self) -> ConfigWindow:
        return ConfigWindow(self._store.read_server_url(), self._require_controller(), self._settings.window)

    def create_tray(self) -> TrayIcon:
        return TrayIcon(self._require_controller(), self._icon_path)

    def _require_controller(self) -> LifecycleController:
        if self._controller is None:
            raise RuntimeError("Window factory used before bind()")
        return self._controller

    def _web_profile(self) -> QWebEngineProfile:
        # One persistent profile so the platform login survives restarts
        if self._profile is None:
            profile = QWebEngineProfile(PROFILE_NAME)
            for script in build_bridge_scripts():
                profile.scripts().insert(script)
            bind_cookie_store(profile.cookieStore(), self._jar)
            self._profile = profile
        return self._profile
