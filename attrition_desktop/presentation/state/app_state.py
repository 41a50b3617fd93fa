from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class WindowState(Enum):
    """
    Which windows of the application currently exist and are shown.
    """
    NO_WINDOW = auto()      # Only the tray (if any) keeps the process alive
    CONFIG_ONLY = auto()    # First run: configuration window, no main view
    MAIN_VISIBLE = auto()   # Main view shown
    MAIN_HIDDEN = auto()    # Main view hidden, tray-resident


class CloseAction(Enum):
    """
    User's answer to "minimize to tray or close completely?".
    """
    MINIMIZE = auto()
    CLOSE = auto()
    CANCEL = auto()


@dataclass
class ApplicationState:
    """
    Process-wide window/tray state, owned by the lifecycle controller.
    Views are typed loosely so tests can hand in doubles.
    """
    window_state: WindowState = WindowState.NO_WINDOW
    main_view: Optional[Any] = None
    config_view: Optional[Any] = None
    tray: Optional[Any] = None
    is_quitting: bool = False

    @property
    def has_main_view(self) -> bool:
        return self.main_view is not None

    @property
    def has_any_window(self) -> bool:
        return self.main_view is not None or self.config_view is not None
