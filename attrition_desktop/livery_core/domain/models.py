from typing import Any, Mapping, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ConfigRecord(BaseModel):
    """
    Read-time normalized view of the persisted configuration document.

    Legacy keys are folded into the canonical fields here so nothing deeper
    has to know about them: ``url`` -> ``server_url`` and
    ``documentsFolder`` -> ``livery_directory``.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    server_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("serverUrl", "url"))
    livery_directory: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("liveryDirectory", "documentsFolder")
    )
    minimize_to_tray: Optional[bool] = Field(default=None, validation_alias="minimizeToTray")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "ConfigRecord":
        """
        Builds a record from a raw JSON document.
        Falsy or mistyped values are treated as absent instead of failing.
        """
        def pick(*keys: str, kind: type) -> Any:
            for key in keys:
                value = raw.get(key)
                if isinstance(value, kind) and (kind is bool or value):
                    return value
            return None

        return cls(
            server_url=pick("serverUrl", "url", kind=str),
            livery_directory=pick("liveryDirectory", "documentsFolder", kind=str),
            minimize_to_tray=pick("minimizeToTray", kind=bool),
        )

    @property
    def has_tray_preference(self) -> bool:
        return self.minimize_to_tray is not None


class DirectorySelection(BaseModel):
    """Outcome of a directory prompt. Cancellation is not an error."""
    model_config = ConfigDict(frozen=True)

    canceled: bool
    path: Optional[str] = None

    @classmethod
    def cancel(cls) -> "DirectorySelection":
        return cls(canceled=True)

    @classmethod
    def selected(cls, path: str) -> "DirectorySelection":
        return cls(canceled=False, path=path)

    def to_payload(self) -> dict:
        if self.canceled:
            return {"canceled": True}
        return {"canceled": False, "path": self.path}


class InstallResult(BaseModel):
    """Result of one download-and-extract job."""
    success: bool
    message: str
    target_directory: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {"success": self.success, "message": self.message}
        if self.target_directory is not None:
            payload["targetDirectory"] = self.target_directory
        return payload


class UpdateInfo(BaseModel):
    """Outcome of an update check."""
    current_version: str
    latest_version: Optional[str] = None
    is_update_available: bool = False
    release_url: Optional[str] = None
    error: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {
            "currentVersion": self.current_version,
            "latestVersion": self.latest_version,
            "isUpdateAvailable": self.is_update_available,
        }
        if self.release_url:
            payload["releaseUrl"] = self.release_url
        if self.error:
            payload["error"] = self.error
        return payload
