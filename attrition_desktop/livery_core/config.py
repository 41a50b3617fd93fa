from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from attrition_desktop.config import get_settings, Settings, DownloadSettings

class InstallerConfig(BaseSettings):
    """
    Configuration for the livery download-and-extract pipeline.
    """
    model_config = SettingsConfigDict(env_prefix="ATTRITION_INSTALLER_", extra="ignore")

    HTML_SNIFF_MIN_BYTES: int = Field(default=1000, description="Declared HTML body length above which a response is inspected")
    CUSTOMS_DIRNAME: str = Field(default="Customs", description="Folder the game reads liveries from")
    TEMP_DIR: Optional[Path] = Field(default=None, description="Where archives are staged, defaults to the OS temp dir")

    @property
    def global_settings(self) -> Settings:
        """
        Access to the global project settings.
        """
        return get_settings()

    @property
    def download(self) -> DownloadSettings:
        return self.global_settings.download
