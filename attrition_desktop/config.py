from enum import Enum
from pathlib import Path
from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

APP_VERSION = "0.1.3"
DEFAULT_SERVER_URL = "https://blancpaw-gt.uk"


#  Working modes
class AppEnvironment(str, Enum):
    """Working modes"""
    DEV = "development"
    PROD = "production"
    TEST = "testing"


#  Livery download config
class DownloadSettings(BaseModel):
    """Livery download config"""
    max_attempts: int = Field(default=3, ge=1, description="Download attempts before giving up")
    timeout_sec: float = Field(default=60.0, gt=0, description="Total timeout per attempt")
    backoff_base_sec: float = Field(default=1.0, ge=0, description="Delay before the second attempt, doubled afterwards")
    chunk_size: int = Field(default=64 * 1024, gt=0, description="Bytes pulled from the network per write")


#  Update check config
class UpdateSettings(BaseModel):
    """Update check config"""
    enabled: bool = Field(default=True, description="Check for a newer release after startup")
    releases_url: str = Field(
        default="https://api.github.com/repos/blumlaut/attrition-desktop/releases",
        description="GitHub releases API endpoint"
    )
    download_page: str = Field(default=DEFAULT_SERVER_URL, description="Page opened when the user accepts an update")
    delay_sec: float = Field(default=3.0, ge=0, description="Delay after startup before checking")
    timeout_sec: float = Field(default=10.0, gt=0)


#  Window config
class WindowSettings(BaseModel):
    """Window geometry config"""
    main_width: int = 1200
    main_height: int = 800
    config_width: int = 600
    config_height: int = 600


#  Main Settings
class Settings(BaseSettings):
    """
    Main Settings class.
    Reads configuration from .env file or environment variables prefixed with ATTRITION_.
    """
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="ATTRITION_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )

    env: AppEnvironment = Field(default=AppEnvironment.DEV)

    app_name: str = Field(default="Attrition Desktop", description="Used for the per-user config folder")
    default_server_url: str = Field(default=DEFAULT_SERVER_URL)
    config_dir: Optional[Path] = Field(default=None, description="Overrides the per-user config folder")

    # Compose configs
    download: DownloadSettings = Field(default_factory=DownloadSettings)
    update: UpdateSettings = Field(default_factory=UpdateSettings)
    window: WindowSettings = Field(default_factory=WindowSettings)

    @property
    def user_agent(self) -> str:
        return f"Attrition Desktop App/{APP_VERSION}"


@lru_cache
def get_settings() -> Settings:
    """
    Creates and returns a (cached) instance of settings.
    Used for Dependency Injection.
    """
    return Settings()
