import logging
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.application.directory_resolver import DirectoryResolver
from attrition_desktop.livery_core.application.livery_installer import LiveryInstaller
from attrition_desktop.livery_core.application.update_checker import UpdateChecker
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController
from attrition_desktop.presentation.resources.strings import UIStrings

logger = logging.getLogger(__name__)


def failure(message: str) -> dict:
    return {"success": False, "message": message}


class IpcBridge:
    """
    Named request/response operations offered to the embedded page.

    Synchronous channels touch windows and must be invoked on the GUI thread.
    Asynchronous channels do network or dialog round-trips and are awaited on
    the core loop. Either way the caller always gets a JSON-serializable value;
    exceptions are turned into ``{"success": False, "message": ...}``.
    """

    def __init__(
        self,
        store: ConfigStore,
        controller: LifecycleController,
        resolver: DirectoryResolver,
        installer: LiveryInstaller,
        update_checker: UpdateChecker,
    ):
        self._store = store
        self._controller = controller
        self._resolver = resolver
        self._installer = installer
        self._update_checker = update_checker

        self._sync_handlers: Dict[str, Callable[..., Any]] = {
            "get-saved-url": self._get_saved_url,
            "get-saved-config": self._get_saved_config,
            "save-url": self._save_url,
            "save-config": self._save_config,
            "config-saved": self._config_saved,
            "reset-config": self._reset_config,
            "save-minimize-to-tray-preference": self._save_minimize_to_tray_preference,
            "link-clicked": self._link_clicked,
        }
        self._async_handlers: Dict[str, Callable[..., Awaitable[Any]]] = {
            "select-documents-folder": self._select_documents_folder,
            "download-event-liveries": self._download_event_liveries,
            "check-for-updates": self._check_for_updates,
        }

    @property
    def channels(self) -> List[str]:
        return sorted([*self._sync_handlers, *self._async_handlers])

    def is_async(self, channel: str) -> bool:
        return channel in self._async_handlers

    def invoke(self, channel: str, args: Sequence[Any] = ()) -> Any:
        handler = self._sync_handlers.get(channel)
        if handler is None:
            logger.warning("IPC unknown sync channel %s", channel)
            return failure(UIStrings.ERR_UNKNOWN_CHANNEL.format(channel))

        logger.info("IPC %s called", channel)
        try:
            return handler(*args)
        except Exception as e:
            logger.error("IPC %s failed: %s", channel, e, exc_info=True)
            return failure(str(e) or type(e).__name__)

    async def invoke_async(self, channel: str, args: Sequence[Any] = ()) -> Any:
        handler = self._async_handlers.get(channel)
        if handler is None:
            logger.warning("IPC unknown async channel %s", channel)
            return failure(UIStrings.ERR_UNKNOWN_CHANNEL.format(channel))

        logger.info("IPC %s called", channel)
        try:
            return await handler(*args)
        except Exception as e:
            logger.error("IPC %s failed: %s", channel, e, exc_info=True)
            return failure(str(e) or type(e).__name__)

    # Sync handlers (GUI thread)

    def _get_saved_url(self) -> str:
        return self._store.read_server_url()

    def _get_saved_config(self) -> dict:
        return self._store.read_config()

    def _save_url(self, url: str) -> bool:
        success = self._store.write_server_url(url)
        if success:
            self._controller.reload_main_view()
        return success

    def _save_config(self, config: dict) -> bool:
        if not isinstance(config, dict):
            raise TypeError("config must be an object")
        success = self._store.write_config(config)
        if success:
            self._controller.reload_main_view()
        return success

    def _config_saved(self, url: str) -> bool:
        return self._controller.complete_configuration(url)

    def _reset_config(self) -> dict:
        return self._controller.reset()

    def _save_minimize_to_tray_preference(self, should_minimize: bool) -> bool:
        return self._store.write_minimize_to_tray_preference(bool(should_minimize))

    def _link_clicked(self, url: str) -> dict:
        return self._controller.navigate(url)

    # Async handlers (core loop)

    async def _select_documents_folder(self) -> dict:
        selection = await self._resolver.select_and_remember()
        return selection.to_payload()

    async def _download_event_liveries(self, event_id: Any = None, base_url: Any = None) -> dict:
        result = await self._installer.download_and_install(event_id, base_url)
        return result.to_payload()

    async def _check_for_updates(self) -> dict:
        info = await self._update_checker.check()
        return info.to_payload()
