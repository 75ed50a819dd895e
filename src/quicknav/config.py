"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (QUICKNAV__SERVER__PORT=9090)
  2. quicknav.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("quicknav")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "index.db")
_DEFAULT_SOURCE_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "content.db")


def _find_config_file() -> str | None:
    """Return the path of the first quicknav.yaml found, or None."""
    candidates = [
        Path("quicknav.yaml"),
        Path(platformdirs.user_config_dir("quicknav")) / "quicknav.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    api_prefix: str = "/quick-navigation-interface/v1"
    # Base URL the client widget prefixes onto API paths
    root_url: str = "http://127.0.0.1:8080"
    auth_enabled: bool = False
    auth_key: str = ""
    allowed_origins: list[str] = Field(default_factory=list)
    principal_header: str = "X-QuickNav-Principal"


class StoreSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH


class SourceSettings(BaseModel):
    db_path: str = _DEFAULT_SOURCE_DB_PATH
    edit_url_template: str = "/admin/content/{id}/edit"


class IndexSettings(BaseModel):
    limit: int = Field(default=500, ge=1)
    # None means "any"
    post_types: list[str] | None = None
    statuses: list[str] | None = None
    placeholder_status: str = "auto-draft"


class Shortcut(BaseModel):
    code: int
    label: str


def _default_shortcuts() -> dict[str, Shortcut]:
    return {
        "open-interface": Shortcut(code=192, label="`"),
        "next-link": Shortcut(code=40, label="Down"),
        "previous-link": Shortcut(code=38, label="Up"),
        "open-link": Shortcut(code=13, label="Enter"),
    }


class NavigationSettings(BaseModel):
    """Options delivered to the client widget."""

    search_results_limit: int = Field(default=4, ge=1)
    shortcuts: dict[str, Shortcut] = Field(default_factory=_default_shortcuts)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: QUICKNAV__SERVER__PORT=9090
        env_prefix="QUICKNAV__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    store: StoreSettings = StoreSettings()
    source: SourceSettings = SourceSettings()
    index: IndexSettings = IndexSettings()
    navigation: NavigationSettings = NavigationSettings()
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
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
