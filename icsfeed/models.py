import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .enrichment import parse_pair_config
from .errors import ConfigurationMissing

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIMEOUT = 21600

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}


class FeedConfig(BaseModel):
    """Immutable snapshot of the runtime properties for one request.

    Malformed ``DEBUG``, ``CLEAR_CACHE`` and ``CACHE_TIMEOUT`` values fall
    back to their defaults with a warning instead of failing the request.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ics_url: Optional[str] = Field(None, alias="ICS_URL")
    debug: bool = Field(False, alias="DEBUG")
    clear_cache: bool = Field(False, alias="CLEAR_CACHE")
    cache_timeout: int = Field(DEFAULT_CACHE_TIMEOUT, alias="CACHE_TIMEOUT")
    additional_data_config: Optional[str] = Field(None, alias="ADDITIONAL_DATA_CONFIG")
    key_renames: Optional[str] = Field(None, alias="KEY_RENAMES")
    placeholder_values: Optional[str] = Field(None, alias="PLACEHOLDER_VALUES")
    email_log: Optional[str] = Field(None, alias="EMAIL_LOG")

    @field_validator("debug", "clear_cache", mode="before")
    @classmethod
    def _lenient_bool(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        logger.warning("Ignoring invalid %s value %r, using false", info.field_name, value)
        return False

    @field_validator("cache_timeout", mode="before")
    @classmethod
    def _lenient_timeout(cls, value: Any) -> Any:
        try:
            timeout = int(str(value).strip())
        except ValueError:
            timeout = -1
        if timeout < 0:
            logger.warning(
                "Ignoring invalid CACHE_TIMEOUT %r, using %s", value, DEFAULT_CACHE_TIMEOUT
            )
            return DEFAULT_CACHE_TIMEOUT
        return timeout

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> "FeedConfig":
        present = {key: value for key, value in properties.items() if value != ""}
        return cls.model_validate(present)

    def require_source_url(self) -> str:
        if not self.ics_url:
            raise ConfigurationMissing("ICS_URL is not configured")
        return self.ics_url

    @property
    def enrichment_fields(self) -> Dict[str, str]:
        return parse_pair_config(self.additional_data_config)

    @property
    def renames(self) -> Dict[str, str]:
        return parse_pair_config(self.key_renames)

    @property
    def aliases(self) -> Dict[str, str]:
        return parse_pair_config(self.placeholder_values)


class FeedRunResult(BaseModel):
    started_at: datetime
    finished_at: datetime
    source: str  # cache, regenerated or error
    records: int = 0
    enriched: int = 0
    enrichment_failures: int = 0
    cache_cleared: bool = False
    error: Optional[str] = None


PROPERTY_KEYS = frozenset(field.alias for field in FeedConfig.model_fields.values())
