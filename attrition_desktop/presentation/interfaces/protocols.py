from typing import Protocol
from attrition_desktop.presentation.state.app_state import CloseAction


class IMainView(Protocol):
    """
    Interface for the window hosting the embedded browser.
    """
    def load_url(self, url: str) -> None:
        """Navigates the embedded browser."""
        ...

    def show_and_focus(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def close_view(self) -> None:
        """Closes and destroys the window without asking the controller again."""
        ...

    def is_visible(self) -> bool:
        ...


class IConfigView(Protocol):
    """
    Interface for the first-run configuration window.
    """
    def show_and_focus(self) -> None:
        ...

    def close_view(self) -> None:
        ...


class ITray(Protocol):
    """
    Interface for the system tray icon.
    """
    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...


class IWindowFactory(Protocol):
    """
    Creates the concrete windows. Decouples the controller from Qt widgets.
    """
    def create_main_view(self, url: str) -> IMainView:
        ...

    def create_config_view(self) -> IConfigView:
        ...

    def create_tray(self) -> ITray:
        ...


class IDialogs(Protocol):
    """
    Interface for modal questions asked by the controller.
    """
    def ask_close_action(self) -> CloseAction:
        """Asks whether to minimize to tray, close completely or cancel."""
        ...

    def ask_open_update(self, current_version: str, latest_version: str) -> bool:
        """Returns True when the user wants to open the download page."""
        ...

    def show_error(self, title: str, message: str) -> None:
        ...


class IProcessControl(Protocol):
    """
    Interface for process-level actions.
    """
    def quit(self) -> None:
        ...

    def relaunch(self) -> None:
        """Starts a fresh copy of the application and exits this one."""
        ...

    def open_external(self, url: str) -> None:
        """Opens a url in the system browser."""
        ...
