"""Library configuration via Pydantic Settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global settings loaded from environment variables (prefixed MANGASOURCES_)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MANGASOURCES_",
        case_sensitive=True,
        extra="ignore",
    )

    # HTTP
    HTTP_TIMEOUT: float = 30.0
    DEFAULT_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    DEFAULT_RATE_LIMIT_RPM: int = 60

    # Language used for translated labels ("zh" keeps the original Chinese)
    LOCALE: str = ""

    # Directory holding source_<id>.json preference files; empty keeps them in memory
    PREFERENCES_DIR: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"

    def get_preferences_dir(self) -> Optional[str]:
        """Return the preferences directory, or None when persistence is disabled."""
        return self.PREFERENCES_DIR.strip() or None


settings = Settings()
