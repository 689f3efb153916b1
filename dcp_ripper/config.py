#!/usr/bin/env python3
"""
Configuration management for DCP Ripper.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .audio.remixer import SUPPORTED_OUTPUTS
from .core.enums import Downmixer


class Settings(BaseSettings):
    """Settings with environment variable support (DCP_RIPPER_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="DCP_RIPPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_FILE: Optional[str] = Field(default=None)

    # Audio settings
    BLOCK_SIZE: int = Field(default=1 << 18)  # frames per channel per block
    DOWNMIXER: str = Field(default=Downmixer.SURROUND.value)
    OUTPUT_CHANNELS: int = Field(default=6)  # for the cavern-auto strategy

    # Batch settings
    OUTPUT_PATH: Optional[str] = Field(default=None)  # "parent" for above the composition
    MULTILINGUAL: bool = Field(default=False)

    @field_validator("BLOCK_SIZE")
    @classmethod
    def validate_block_size(cls, v):
        if v <= 0:
            raise ValueError(f"Block size must be positive: {v}")
        return v

    @field_validator("DOWNMIXER")
    @classmethod
    def validate_downmixer(cls, v):
        """Normalize to the strategy value."""
        return Downmixer.from_name(v).value

    @field_validator("OUTPUT_CHANNELS")
    @classmethod
    def validate_output_channels(cls, v):
        if v not in SUPPORTED_OUTPUTS:
            raise ValueError(f"Invalid output channel count: {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @property
    def downmixer(self) -> Downmixer:
        return Downmixer(self.DOWNMIXER)


@lru_cache()
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
