from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WILDCAM_",
        extra="ignore",
    )

    # App basics
    app_name: str = "Wildcam TV"
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Network
    socket_url: str = Field(default="ws://localhost:8081")
    api_url: str = Field(default="http://localhost:8000")
    stack_endpoint: str = Field(default="/tv/stack")
    request_timeout: float = Field(default=30.0, gt=0)

    # Fallback stack
    fallback_stack_path: Path = Field(default=PACKAGE_DIR / "assets" / "imgstack.json")

    # Selection defaults
    default_interval: float = Field(default=1, gt=0)
    default_frame_rate: float = Field(default=1, gt=0)

    def get_stack_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.stack_endpoint.lstrip('/')}"

    def get_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


# Cached settings instance
_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
