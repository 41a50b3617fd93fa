import pytest
from unittest.mock import MagicMock, patch
from attrition_desktop.livery_core.application.config_store import ConfigStore
from attrition_desktop.livery_core.domain.models import UpdateInfo
from attrition_desktop.presentation.viewmodels.lifecycle_vm import LifecycleController
from attrition_desktop.presentation.state.app_state import CloseAction, WindowState
from attrition_desktop.presentation.interfaces.protocols import (
    IConfigView,
    IDialogs,
    IMainView,
    IProcessControl,
    ITray,
    IWindowFactory,
)

DEFAULT_URL = "https://blancpaw-gt.uk"


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "config.json", default_url=DEFAULT_URL)

@pytest.fixture
def mock_windows():
    factory = MagicMock(spec=IWindowFactory)
    factory.create_tray.return_value = MagicMock(spec=ITray)
    factory.create_config_view.side_effect = lambda: MagicMock(spec=IConfigView)
    factory.create_main_view.side_effect = lambda url: MagicMock(spec=IMainView)
    return factory

@pytest.fixture
def mock_dialogs():
    return MagicMock(spec=IDialogs)

@pytest.fixture
def mock_process():
    return MagicMock(spec=IProcessControl)

@pytest.fixture
def controller(store, mock_windows, mock_dialogs, mock_process):
    return LifecycleController(store, mock_windows, mock_dialogs, mock_process, platform="linux")

@pytest.fixture
def running(controller, store):
    """Controller with a saved url and the main view open."""
    store.write_server_url("https://example.test")
    controller.start()
    return controller


def test_first_run_shows_configuration_window(controller, mock_windows):
    controller.start()

    assert controller.state == WindowState.CONFIG_ONLY
    mock_windows.create_tray.assert_called_once()
    controller.app_state.tray.show.assert_called_once()
    mock_windows.create_config_view.assert_called_once()
    mock_windows.create_main_view.assert_not_called()


def test_saved_config_opens_main_view(running, mock_windows):
    assert running.state == WindowState.MAIN_VISIBLE
    mock_windows.create_main_view.assert_called_once_with("https://example.test")
    running.app_state.main_view.show_and_focus.assert_called_once()


def test_config_file_with_default_url_opens_main_view(controller, store, mock_windows):
    store.write_minimize_to_tray_preference(True)
    controller.start()
    mock_windows.create_main_view.assert_called_once_with(DEFAULT_URL)


def test_complete_configuration_switches_to_main_view(controller, store, mock_windows):
    store.write_minimize_to_tray_preference(True)
    store.delete()
    controller.start()
    config_view = controller.app_state.config_view

    assert controller.complete_configuration("https://example.test")

    assert store.read_config() == {"serverUrl": "https://example.test"}
    mock_windows.create_main_view.assert_called_once_with("https://example.test")
    config_view.close_view.assert_called_once()
    assert controller.app_state.config_view is None
    assert controller.state == WindowState.MAIN_VISIBLE


def test_complete_configuration_keeps_other_settings(running, store):
    store.write_livery_directory("/games/acc/Customs")

    running.complete_configuration("https://other.test")

    assert store.read_config()["liveryDirectory"] == "/games/acc/Customs"
    running.app_state.main_view.load_url.assert_called_with("https://other.test")


def test_close_without_preference_asks_and_minimizes(running, store, mock_dialogs):
    mock_dialogs.ask_close_action.return_value = CloseAction.MINIMIZE

    assert running.request_main_close() is False

    running.app_state.main_view.hide.assert_called_once()
    assert running.state == WindowState.MAIN_HIDDEN
    assert store.read_record().minimize_to_tray is True


def test_close_without_preference_asks_and_closes(running, store, mock_dialogs):
    mock_dialogs.ask_close_action.return_value = CloseAction.CLOSE

    assert running.request_main_close() is True
    assert store.read_record().minimize_to_tray is False
    assert running.app_state.is_quitting


def test_cancel_keeps_window_and_stores_nothing(running, store, mock_dialogs):
    mock_dialogs.ask_close_action.return_value = CloseAction.CANCEL

    assert running.request_main_close() is False

    running.app_state.main_view.hide.assert_not_called()
    assert not store.read_record().has_tray_preference
    assert running.state == WindowState.MAIN_VISIBLE


def test_stored_preference_skips_dialog(running, store, mock_dialogs):
    store.write_minimize_to_tray_preference(True)

    assert running.request_main_close() is False

    mock_dialogs.ask_close_action.assert_not_called()
    assert running.state == WindowState.MAIN_HIDDEN


def test_quitting_closes_without_asking(running, mock_dialogs, mock_process):
    running.quit()

    assert running.request_main_close() is True
    mock_dialogs.ask_close_action.assert_not_called()
    mock_process.quit.assert_called_once()


def test_tray_restores_hidden_window(running, store):
    store.write_minimize_to_tray_preference(True)
    running.request_main_close()
    main_view = running.app_state.main_view

    running.activate_from_tray()

    assert main_view.show_and_focus.call_count == 2
    assert running.state == WindowState.MAIN_VISIBLE


def test_tray_recreates_destroyed_window(running, mock_windows, mock_process):
    running.main_view_destroyed(running.app_state.main_view)
    mock_process.quit.assert_called_once()

    running.activate_from_tray()

    assert mock_windows.create_main_view.call_count == 2
    assert running.state == WindowState.MAIN_VISIBLE


def test_all_windows_closed_keeps_running_on_macos(store, mock_windows, mock_dialogs, mock_process):
    store.write_server_url("https://example.test")
    controller = LifecycleController(store, mock_windows, mock_dialogs, mock_process, platform="darwin")
    controller.start()

    controller.main_view_destroyed(controller.app_state.main_view)

    assert controller.state == WindowState.NO_WINDOW
    mock_process.quit.assert_not_called()


def test_stale_view_notifications_are_ignored(running, mock_process):
    running.main_view_destroyed(MagicMock(spec=IMainView))

    assert running.app_state.main_view is not None
    mock_process.quit.assert_not_called()


def test_closing_config_window_on_first_run_quits(controller, mock_process):
    controller.start()

    controller.config_view_closed(controller.app_state.config_view)

    assert controller.state == WindowState.NO_WINDOW
    mock_process.quit.assert_called_once()


def test_activate_app_prefers_config_window(controller):
    controller.start()
    config_view = controller.app_state.config_view

    controller.activate_app()

    assert config_view.show_and_focus.call_count == 2


def test_navigate_loads_in_main_view(running):
    result = running.navigate("https://example.test/events/1")

    assert result == {"success": True, "message": "Link loaded in same window"}
    running.app_state.main_view.load_url.assert_called_with("https://example.test/events/1")


def test_navigate_without_main_view(controller):
    assert controller.navigate("https://example.test") == {"success": False, "message": "Main window not available"}


def test_go_home_loads_saved_url(running):
    running.go_home()
    running.app_state.main_view.load_url.assert_called_with("https://example.test")


def test_reset_deletes_config_and_relaunches(running, store, mock_process):
    main_view = running.app_state.main_view

    result = running.reset()

    assert result == {"success": True, "message": "Configuration reset successfully"}
    assert not store.exists()
    main_view.close_view.assert_called_once()
    assert running.app_state.main_view is None
    assert running.state == WindowState.NO_WINDOW
    mock_process.relaunch.assert_called_once()
    mock_process.quit.assert_not_called()


def test_reset_failure_keeps_windows(running, store, mock_process):
    with patch.object(store, "delete", side_effect=PermissionError("denied")):
        result = running.reset()

    assert result == {"success": False, "message": "Failed to reset configuration: denied"}
    running.app_state.main_view.close_view.assert_not_called()
    mock_process.relaunch.assert_not_called()


def test_state_changes_are_signalled(controller):
    seen = []
    controller.state_changed.connect(seen.append)

    controller.start()

    assert seen == [WindowState.CONFIG_ONLY]


def test_update_prompt_opens_download_page(running, mock_dialogs, mock_process):
    mock_dialogs.ask_open_update.return_value = True
    info = UpdateInfo(current_version="0.1.3", latest_version="0.2.0", is_update_available=True)

    running.notify_update(info)

    mock_dialogs.ask_open_update.assert_called_once_with("0.1.3", "0.2.0")
    mock_process.open_external.assert_called_once()


def test_failed_update_check_is_silent(running, mock_dialogs):
    running.notify_update(UpdateInfo(current_version="0.1.3", error="offline"))
    mock_dialogs.ask_open_update.assert_not_called()


def test_close_completely_quits_even_on_macos(store, mock_windows, mock_dialogs, mock_process):
    store.write_server_url("https://example.test")
    store.write_minimize_to_tray_preference(False)
    controller = LifecycleController(store, mock_windows, mock_dialogs, mock_process, platform="darwin")
    controller.start()
    main_view = controller.app_state.main_view

    assert controller.request_main_close() is True
    controller.main_view_destroyed(main_view)

    mock_dialogs.ask_close_action.assert_not_called()
    mock_process.quit.assert_called_once()
