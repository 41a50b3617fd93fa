import pytest
from unittest.mock import AsyncMock, MagicMock
from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.application.directory_resolver import DirectoryResolver
from attrition_desktop.livery_core.application.livery_installer import LiveryInstaller
from attrition_desktop.livery_core.application.update_checker import UpdateChecker
from attrition_desktop.livery_core.domain.models import DirectorySelection, InstallResult, UpdateInfo
from attrition_desktop.presentation.viewmodels.ipc_bridge import IpcBridge
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController

DEFAULT_URL = "https://blancpaw-gt.uk"


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "config.json", default_url=DEFAULT_URL)

@pytest.fixture
def mock_controller():
    return MagicMock(spec=LifecycleController)

@pytest.fixture
def mock_resolver():
    resolver = MagicMock(spec=DirectoryResolver)
    resolver.select_and_remember = AsyncMock(return_value=DirectorySelection.cancel())
    return resolver

@pytest.fixture
def mock_installer():
    installer = MagicMock(spec=LiveryInstaller)
    installer.download_and_install = AsyncMock(
        return_value=InstallResult(success=True, message="Liveries downloaded and extracted to /x", target_directory="/x")
    )
    return installer

@pytest.fixture
def mock_checker():
    checker = MagicMock(spec=UpdateChecker)
    checker.check = AsyncMock(return_value=UpdateInfo(current_version="0.1.3", latest_version="0.1.3"))
    return checker

@pytest.fixture
def bridge(store, mock_controller, mock_resolver, mock_installer, mock_checker):
    return IpcBridge(store, mock_controller, mock_resolver, mock_installer, mock_checker)


def test_channel_table(bridge):
    assert bridge.channels == [
        "check-for-updates",
        "config-saved",
        "download-event-liveries",
        "get-saved-config",
        "get-saved-url",
        "link-clicked",
        "reset-config",
        "save-config",
        "save-minimize-to-tray-preference",
        "save-url",
        "select-documents-folder",
    ]
    assert bridge.is_async("download-event-liveries")
    assert not bridge.is_async("get-saved-url")


def test_get_saved_url_defaults(bridge):
    assert bridge.invoke("get-saved-url") == DEFAULT_URL


def test_save_url_persists_and_reloads(bridge, store, mock_controller):
    store.write_livery_directory("/games/acc/Customs")

    assert bridge.invoke("save-url", ["https://example.test"]) is True

    assert bridge.invoke("get-saved-config") == {
        "liveryDirectory": "/games/acc/Customs",
        "serverUrl": "https://example.test",
    }
    mock_controller.reload_main_view.assert_called_once()


def test_save_config_replaces_document(bridge, store, mock_controller):
    store.write_server_url("https://old.test")

    assert bridge.invoke("save-config", [{"serverUrl": "https://new.test", "minimizeToTray": False}]) is True

    assert store.read_config() == {"serverUrl": "https://new.test", "minimizeToTray": False}
    mock_controller.reload_main_view.assert_called_once()


def test_save_config_rejects_non_objects(bridge, store):
    result = bridge.invoke("save-config", ["not a dict"])

    assert result == {"success": False, "message": "config must be an object"}
    assert not store.exists()


def test_minimize_preference_is_stored(bridge, store):
    assert bridge.invoke("save-minimize-to-tray-preference", [True]) is True
    assert store.read_record().minimize_to_tray is True


def test_config_saved_delegates_to_controller(bridge, mock_controller):
    mock_controller.complete_configuration.return_value = True

    assert bridge.invoke("config-saved", ["https://example.test"]) is True
    mock_controller.complete_configuration.assert_called_once_with("https://example.test")


def test_reset_and_link_results_pass_through(bridge, mock_controller):
    mock_controller.reset.return_value = {"success": True, "message": "Configuration reset successfully"}
    mock_controller.navigate.return_value = {"success": True, "message": "Link loaded in same window"}

    assert bridge.invoke("reset-config")["success"] is True
    assert bridge.invoke("link-clicked", ["https://example.test/x"])["message"] == "Link loaded in same window"
    mock_controller.navigate.assert_called_once_with("https://example.test/x")


def test_handler_exceptions_become_failures(bridge, mock_controller):
    mock_controller.navigate.side_effect = RuntimeError("boom")

    assert bridge.invoke("link-clicked", ["https://example.test"]) == {"success": False, "message": "boom"}


def test_wrong_arity_becomes_failure(bridge):
    result = bridge.invoke("save-url", [])
    assert result["success"] is False


def test_unknown_channel(bridge):
    assert bridge.invoke("open-devtools") == {"success": False, "message": "Unknown channel: open-devtools"}


@pytest.mark.asyncio
async def test_select_documents_folder_returns_selection(bridge, mock_resolver):
    mock_resolver.select_and_remember.return_value = DirectorySelection.selected("/games/acc/Customs")

    assert await bridge.invoke_async("select-documents-folder") == {
        "canceled": False,
        "path": "/games/acc/Customs",
    }


@pytest.mark.asyncio
async def test_download_event_liveries_passes_arguments(bridge, mock_installer):
    result = await bridge.invoke_async("download-event-liveries", ["42", DEFAULT_URL])

    assert result == {
        "success": True,
        "message": "Liveries downloaded and extracted to /x",
        "targetDirectory": "/x",
    }
    mock_installer.download_and_install.assert_awaited_once_with("42", DEFAULT_URL)


@pytest.mark.asyncio
async def test_download_without_arguments_still_answers(bridge, mock_installer):
    await bridge.invoke_async("download-event-liveries")
    mock_installer.download_and_install.assert_awaited_once_with(None, None)


@pytest.mark.asyncio
async def test_check_for_updates(bridge):
    result = await bridge.invoke_async("check-for-updates")
    assert result["isUpdateAvailable"] is False
    assert result["currentVersion"] == "0.1.3"


@pytest.mark.asyncio
async def test_async_exceptions_become_failures(bridge, mock_resolver):
    mock_resolver.select_and_remember.side_effect = OSError("disk gone")

    assert await bridge.invoke_async("select-documents-folder") == {"success": False, "message": "disk gone"}


@pytest.mark.asyncio
async def test_unknown_async_channel(bridge):
    result = await bridge.invoke_async("get-saved-url")
    assert result == {"success": False, "message": "Unknown channel: get-saved-url"}
