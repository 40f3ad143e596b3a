"""Settings and configuration management using Pydantic."""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

CONFIG_FILE = Path("config.yaml")


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source that loads values from a ``config.yaml`` file in the
    current working directory.
    """

    def _load(self) -> Dict[str, Any]:
        if not CONFIG_FILE.exists():
            return {}

        encoding = self.config.get("env_file_encoding")
        try:
            content = yaml.safe_load(CONFIG_FILE.read_text(encoding))
        except (OSError, yaml.YAMLError) as e:
            logging.getLogger("channel_lineup.config").warning(
                f"Failed to load {CONFIG_FILE}: {e}"
            )
            return {}

        return content if isinstance(content, dict) else {}

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        return self._load().get(field_name), field_name, False

    def prepare_field_value(
        self, field_name: str, field: Any, value: Any, value_is_complex: bool
    ) -> Any:
        return value

    def __call__(self) -> Dict[str, Any]:
        fields = set(self.settings_cls.model_fields)
        return {k: v for k, v in self._load().items() if k in fields}


class Settings(BaseSettings):
    """Channel lineup engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="LINEUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # First source wins: explicit args, then env, then .env, then YAML.
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    # Scheduling
    iteration_cap: int = Field(
        default=40_000,
        ge=1,
        description="Maximum loop iterations for a single scheduling call",
    )
    slack_ms: int = Field(
        default=9999,
        ge=0,
        description="Tolerance under which padding remainders and lateness are ignored",
    )
    default_pad_ms: int = Field(
        default=1,
        ge=1,
        description="Pad interval used when a schedule does not set one",
    )
    default_seed: Optional[int] = Field(
        default=None,
        description="Seed for the randomness source when a caller passes none",
    )
    default_time_zone_offset_minutes: int = Field(
        default=0,
        ge=-24 * 60,
        le=24 * 60,
        description="Time zone offset applied when a time slot schedule omits one",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path (console only when unset)",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Optional[str | Path]) -> Optional[Path]:
        """Expand environment variables and user paths."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            v = os.path.expandvars(os.path.expanduser(v))
        return Path(v)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
