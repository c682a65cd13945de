"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (STORYSCOPE__STORYBOOK__URL=https://...)
  2. storyscope.yaml        (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _find_config_file() -> str | None:
    """Return the path of the first storyscope.yaml found, or None."""
    candidates = [
        Path("storyscope.yaml"),
        Path(platformdirs.user_config_dir("storyscope")) / "storyscope.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class StorybookSettings(BaseModel):
    url: str | None = None


class BrowserSettings(BaseModel):
    headless: bool = True
    timeout_ms: int = 30_000
    # Storybook renders client-side; these delays let the UI settle.
    render_settle_ms: int = 3_000
    expand_settle_ms: int = 2_000
    content_settle_ms: int = 2_000
    commit_settle_ms: int = 3_000


class IndexSettings(BaseModel):
    timeout_seconds: float = 10.0


class CacheSettings(BaseModel):
    navigation_ttl_seconds: int = 300


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: STORYSCOPE__BROWSER__TIMEOUT_MS=45000
        env_prefix="STORYSCOPE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    storybook: StorybookSettings = StorybookSettings()
    browser: BrowserSettings = BrowserSettings()
    index: IndexSettings = IndexSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
