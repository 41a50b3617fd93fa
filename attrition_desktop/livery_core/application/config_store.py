import json
import os
import sys
import structlog
from pathlib import Path
from typing import Any, Dict, Optional
from attrition_desktop.config import get_settings
from ..domain.models import ConfigRecord

logger = structlog.get_logger()

CONFIG_FILENAME = "config.json"

# Canonical key -> legacy alias dropped whenever the canonical key is written
_LEGACY_ALIASES = {
    "serverUrl": "url",
    "liveryDirectory": "documentsFolder",
}


def default_config_dir(app_name: str, platform: str = sys.platform, home: Optional[Path] = None) -> Path:
    """
    Per-user, per-OS folder holding the config file.
    """
    home = home or Path.home()
    if platform == "win32":
        base = Path(os.environ.get("APPDATA") or home / "AppData" / "Roaming")
    elif platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    return base / app_name


class ConfigStore:
    """
    Persists the single configuration document as JSON.

    Every read re-parses the file so edits made outside the app are observed.
    Nothing here raises to the caller: unreadable files read as ``{}`` and
    failed writes return False.
    """

    def __init__(self, path: Optional[Path] = None, default_url: Optional[str] = None):
        settings = get_settings()
        if path is None:
            config_dir = settings.config_dir or default_config_dir(settings.app_name)
            path = Path(config_dir) / CONFIG_FILENAME
        self._path = Path(path)
        self._default_url = default_url or settings.default_server_url

    @property
    def path(self) -> Path:
        return self._path

    @property
    def default_url(self) -> str:
        return self._default_url

    def exists(self) -> bool:
        return self._path.is_file()

    def read_config(self) -> Dict[str, Any]:
        if not self._path.exists():
            logger.debug("config_missing", path=str(self._path))
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("config_read_error", path=str(self._path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("config_not_an_object", path=str(self._path), kind=type(data).__name__)
            return {}
        return data

    def write_config(self, record: Dict[str, Any]) -> bool:
        try:
            payload = json.dumps(record, indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                f.write(payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error("config_write_error", path=str(self._path), error=str(e))
            return False
        logger.info("config_saved", path=str(self._path), keys=sorted(record))
        return True

    def read_record(self) -> ConfigRecord:
        return ConfigRecord.from_raw(self.read_config())

    def read_server_url(self) -> str:
        return self.read_record().server_url or self._default_url

    def resolved_livery_directory(self) -> Optional[str]:
        return self.read_record().livery_directory

    def write_server_url(self, url: str) -> bool:
        return self._update_field("serverUrl", url)

    def write_livery_directory(self, directory: str) -> bool:
        return self._update_field("liveryDirectory", directory)

    def write_minimize_to_tray_preference(self, should_minimize: bool) -> bool:
        return self._update_field("minimizeToTray", bool(should_minimize))

    def delete(self) -> None:
        """
        Removes the config file. Raises OSError for anything but "already absent".
        """
        try:
            self._path.unlink()
            logger.info("config_deleted", path=str(self._path))
        except FileNotFoundError:
            logger.debug("config_delete_noop", path=str(self._path))

    def _update_field(self, key: str, value: Any) -> bool:
        # Read-modify-write: unrelated fields must survive
        config = self.read_config()
        config[key] = value
        legacy = _LEGACY_ALIASES.get(key)
        if legacy:
            config.pop(legacy, None)
        return self.write_config(config)
