from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime knobs, read from LITESCAN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LITESCAN_",
        case_sensitive=False,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    # Reject page sizes that aren't a power of two between 512 and 65536
    strict_page_size: bool = Field(default=False)
    # Upper bound on the pages a single overflow chain may span
    max_overflow_pages: int = Field(default=1_000_000, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
