"""
Centralized storage for all user-facing strings in the Presentation Layer.
Prevents "magic strings" in code and simplifies localization.
"""

class UIStrings:
    # Window Titles
    TITLE_APP = "Attrition Desktop"
    TITLE_CONFIG = "Attrition Desktop - Configuration"
    TITLE_CLOSE = "Close Application"
    TITLE_UPDATE = "Update Available"
    TITLE_ERROR = "Error"

    # Tray
    TRAY_TOOLTIP = "Attrition Desktop App"
    TRAY_SHOW = "Show App"
    TRAY_EXIT = "Exit"

    # Menus
    MENU_FILE = "File"
    MENU_EDIT = "Edit"
    MENU_VIEW = "View"
    ACTION_RESET = "Reset Config"
    ACTION_EXIT = "Exit"
    ACTION_HOME = "Go to Home"
    ACTION_RELOAD = "Reload"
    ACTION_FORCE_RELOAD = "Force Reload"
    ACTION_DEVTOOLS = "Toggle Developer Tools"
    ACTION_ZOOM_RESET = "Reset Zoom"
    ACTION_ZOOM_IN = "Zoom In"
    ACTION_ZOOM_OUT = "Zoom Out"

    # Close dialog
    MSG_CLOSE = "Do you want to close the application completely or minimize to system tray?"
    BTN_MINIMIZE = "Minimize to Tray"
    BTN_CLOSE = "Close Completely"
    BTN_CANCEL = "Cancel"
    BTN_CONTINUE = "Continue"

    # Update dialog
    MSG_UPDATE = "A new version of Attrition Desktop is available!"
    MSG_UPDATE_DETAIL = "Current version: {}\nLatest version: {}\n\nVisit blancpaw-gt.uk to download the latest version."
    BTN_DOWNLOAD_NOW = "Download Now"
    BTN_LATER = "Later"

    # Configuration window
    LBL_SERVER_URL = "Server URL"
    LBL_CONFIG_HINT = "Enter the address of the Attrition platform you want to use."
    BTN_SAVE = "Save and Continue"

    # Result messages
    MSG_RESET_OK = "Configuration reset successfully"
    ERR_RESET = "Failed to reset configuration: {}"
    MSG_LINK_OK = "Link loaded in same window"
    ERR_LINK = "Failed to load URL: {}"
    ERR_NO_MAIN_WINDOW = "Main window not available"
    ERR_UNKNOWN_CHANNEL = "Unknown channel: {}"
    ERR_INVALID_URL = "Please enter a valid http(s) address."
    ERR_GENERIC = "An unexpected error occurred: {}"
