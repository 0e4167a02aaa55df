from typing import Dict, Optional

from pydantic_settings import BaseSettings

from .models import DEFAULT_CACHE_TIMEOUT


class Settings(BaseSettings):
    """Runtime configuration for the ICS feed service."""

    # Seed values for the property store.
    ics_url: Optional[str] = None
    debug: bool = False
    clear_cache: bool = False
    cache_timeout: int = DEFAULT_CACHE_TIMEOUT
    additional_data_config: Optional[str] = None
    key_renames: Optional[str] = None
    placeholder_values: Optional[str] = None
    email_log: Optional[str] = None

    cache_backend: str = "memory"  # options: memory, sqlite
    cache_path: str = "data/cache.db"
    fetch_timeout_seconds: float = 30.0
    smtp_host: Optional[str] = None
    smtp_port: int = 25
    smtp_sender: str = "ics-feed@localhost"
    log_level: str = "INFO"

    def initial_properties(self) -> Dict[str, str]:
        values = {
            "ICS_URL": self.ics_url,
            "DEBUG": str(self.debug).lower(),
            "CLEAR_CACHE": str(self.clear_cache).lower(),
            "CACHE_TIMEOUT": str(self.cache_timeout),
            "ADDITIONAL_DATA_CONFIG": self.additional_data_config,
            "KEY_RENAMES": self.key_renames,
            "PLACEHOLDER_VALUES": self.placeholder_values,
            "EMAIL_LOG": self.email_log,
        }
        return {key: value for key, value in values.items() if value is not None}


settings = Settings()
