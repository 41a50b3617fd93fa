import sys
import structlog
from pathlib import Path
from typing import Optional, Union
from ..domain.interfaces import IDirectoryPrompt
from ..domain.models import DirectorySelection
from .config_store import ConfigStore

logger = structlog.get_logger()

GAME_FOLDER = "Assetto Corsa Competizione"
# Steam app id of ACC, used for the Proton prefix on Linux
STEAM_APP_ID = "805550"

SELECT_TITLE = "Select Assetto Corsa Competizione Documents Folder"
SELECT_MESSAGE = "Please select the Assetto Corsa Competizione Documents folder."
CONFIRM_TITLE = "Customs Folder Not Found"
CONFIRM_MESSAGE = (
    "The selected folder does not look like an ACC Documents Folder. This is usually "
    "because you selected the wrong folder, are you sure you want to continue?"
)


def platform_default_documents_path(platform: str = sys.platform, home: Optional[Path] = None) -> Path:
    """
    Best guess at the game's documents folder. Only used to seed the picker.
    """
    home = home or Path.home()
    if platform.startswith("linux"):
        return (
            home / ".steam" / "steam" / "steamapps" / "compatdata" / STEAM_APP_ID / "pfx"
            / "drive_c" / "users" / "steamuser" / "Documents" / GAME_FOLDER
        )
    return home / "Documents" / GAME_FOLDER


def is_usable_directory(path: Union[str, Path, None]) -> bool:
    if not path:
        return False
    try:
        return Path(path).is_dir()
    except OSError as e:
        logger.warning("directory_check_failed", path=str(path), error=str(e))
        return False


class DirectoryResolver:
    """
    Finds the folder liveries are extracted into, asking the user when needed.
    """

    def __init__(
        self,
        store: ConfigStore,
        prompt: IDirectoryPrompt,
        customs_dirname: str = "Customs",
        platform: str = sys.platform,
        home: Optional[Path] = None,
    ):
        self._store = store
        self._prompt = prompt
        self._customs_dirname = customs_dirname
        self._platform = platform
        self._home = home or Path.home()

    def start_directory(self) -> Path:
        candidate = platform_default_documents_path(self._platform, self._home)
        return candidate if is_usable_directory(candidate) else self._home

    async def prompt_for_directory(self) -> DirectorySelection:
        """
        Asks for the game's documents folder and returns its Customs subfolder.
        Creates Customs after confirmation when it is missing.
        """
        logger.info("directory_prompt_opened")
        selected = await self._prompt.pick_directory(SELECT_TITLE, SELECT_MESSAGE, self.start_directory())
        if not selected:
            logger.info("directory_prompt_canceled")
            return DirectorySelection.cancel()

        customs = Path(selected) / self._customs_dirname
        if is_usable_directory(customs):
            return DirectorySelection.selected(str(customs))

        if not await self._prompt.confirm(CONFIRM_TITLE, CONFIRM_MESSAGE):
            logger.info("customs_creation_declined", selected=selected)
            return DirectorySelection.cancel()

        customs.mkdir(parents=True, exist_ok=True)
        logger.info("customs_folder_created", path=str(customs))
        return DirectorySelection.selected(str(customs))

    async def select_and_remember(self) -> DirectorySelection:
        """
        Prompts and stores a successful pick as the configured livery directory.
        """
        selection = await self.prompt_for_directory()
        if not selection.canceled and selection.path:
            self._store.write_livery_directory(selection.path)
        return selection

    async def resolve_target_directory(self) -> DirectorySelection:
        """
        Uses the configured directory while it still exists, prompts otherwise.
        """
        configured = self._store.resolved_livery_directory()
        if configured and is_usable_directory(configured):
            logger.info("using_configured_directory", path=configured)
            return DirectorySelection.selected(configured)

        if configured:
            logger.warning("configured_directory_unusable", path=configured)
        else:
            logger.info("no_configured_directory")
        return await self.select_and_remember()
