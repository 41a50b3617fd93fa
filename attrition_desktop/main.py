import sys
import signal
import structlog

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from attrition_desktop.config import APP_VERSION, BASE_DIR, get_settings
from attrition_desktop.livery_core.config import InstallerConfig
from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.application.core_facade import CoreFacade
from attrition_desktop.livery_core.application.directory_resolver import DirectoryResolver
from attrition_desktop.livery_core.application.livery_installer import LiveryInstaller
from attrition_desktop.livery_core.application.update_checker import UpdateChecker
from attrition_desktop.livery_core.infrastructure.cookie_jar import SessionCookieJar
from attrition_desktop.livery_core.infrastructure.logging import setup_logging
from attrition_desktop.presentation.resources.strings import UIStrings
from attrition_desktop.presentation.services.cookie_source import MainViewCookieSource
from attrition_desktop.presentation.services.gui_dispatcher import GuiDispatcher
from attrition_desktop.presentation.services.qt_dialogs import QtDialogs, QtDirectoryPrompt, QtProcessControl
from attrition_desktop.presentation.services.web_channel import WebChannelTransport
from attrition_desktop.presentation.viewmodels.ipc_bridge import IpcBridge
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController
from attrition_desktop.presentation.views.window_factory import QtWindowFactory

logger = structlog.get_logger()

ICON_PATH = BASE_DIR / "icon.png"


def handle_sigint(signum, frame):
    """Handles KeyboardInterrupt (Ctrl+C)."""
    logger.info("sigint_received")
    QApplication.quit()


def schedule_update_check(core: CoreFacade, checker: UpdateChecker, controller: LifecycleController,
                          dispatcher: GuiDispatcher, delay_sec: float) -> None:
    """
    Checks for a newer release once the UI has settled and lets the controller decide whether to show it.
    """
    def on_checked(future):
        if future.cancelled() or future.exception() is not None:
            return
        dispatcher.post(controller.notify_update, future.result())

    def start_check():
        if core.is_running():
            core.submit(checker.check()).add_done_callback(on_checked)

    QTimer.singleShot(int(delay_sec * 1000), start_check)


def main():
    """
    Main entry point for the application.
    Bootstraps the QApplication, the core loop and the lifecycle controller.
    """
    settings = get_settings()
    setup_logging(settings.env.value)
    signal.signal(signal.SIGINT, handle_sigint)

    core = CoreFacade()
    try:
        # 1. Initialize Application
        app = QApplication(sys.argv)
        app.setApplicationName(settings.app_name)
        app.setApplicationVersion(APP_VERSION)
        # Windows and tray are managed by the lifecycle controller
        app.setQuitOnLastWindowClosed(False)

        # 2. Core services
        logger.info("initializing_services", env=settings.env.value)
        core.start()
        store = ConfigStore()
        installer_config = InstallerConfig()
        jar = SessionCookieJar()
        dispatcher = GuiDispatcher()

        # 3. Controller and Qt adapters
        factory = QtWindowFactory(store, jar, settings, ICON_PATH)
        main_window = lambda: controller.app_state.main_view
        dialogs = QtDialogs(parent=main_window)
        controller = LifecycleController(store, factory, dialogs, QtProcessControl())
        controller.error_occurred.connect(lambda message: dialogs.show_error(UIStrings.TITLE_ERROR, message))

        resolver = DirectoryResolver(store, QtDirectoryPrompt(dispatcher, parent=main_window), installer_config.CUSTOMS_DIRNAME)
        installer = LiveryInstaller(
            resolver,
            MainViewCookieSource(jar, lambda: controller.app_state.has_main_view),
            installer_config,
        )
        checker = UpdateChecker(settings.update)

        # 4. Bridge exposed to the embedded page
        bridge = IpcBridge(store, controller, resolver, installer, checker)
        transport = WebChannelTransport(bridge, core)
        factory.bind(controller, transport)

        # 5. Start
        logger.info("config_path", path=str(store.path))
        controller.start()
        if settings.update.enabled:
            schedule_update_check(core, checker, controller, dispatcher, settings.update.delay_sec)

        # 6. Setup Signal Handling Helper
        timer = QTimer()
        timer.timeout.connect(lambda: None)
        timer.start(500)

        # 7. Execute
        exit_code = app.exec()

    except Exception as e:
        logger.critical("application_start_failed", error=str(e), exc_info=True)
        exit_code = 1
    finally:
        core.cleanup()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
