"""
Configuration management for serpkit.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
)


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "serpkit"
    version: str = "0.1.0"
    log_level: str = "INFO"
    json_logs: bool = True


class HTTPConfig(BaseModel):
    """Headers attached to every outbound request descriptor."""

    model_config = ConfigDict(extra="forbid")

    user_agent: str = DEFAULT_USER_AGENT
    default_language: str = ""  # "ll" or "ll-CC"; empty = let the engine decide


class GoogleConfig(BaseModel):
    """Google-specific knobs."""

    model_config = ConfigDict(extra="forbid")

    # searxng rotates the arc_id every hour, so do we
    async_token_refresh_seconds: float = Field(default=3600.0, gt=0)


class EngineSettings(BaseModel):
    """Per-engine settings.

    ``extra`` is an open table handed to the adapter through
    ``SearchQuery.config.engines[<name>]``.
    """

    enabled: bool = True
    extra: dict[str, Any] = Field(default_factory=dict)


def _default_engines() -> dict[str, EngineSettings]:
    return {
        "bing": EngineSettings(),
        "brave": EngineSettings(),
        "google": EngineSettings(),
        "google_scholar": EngineSettings(),
        "marginalia": EngineSettings(
            extra={"args": {"profile": "corpo", "js": "default", "adtech": "default"}}
        ),
        "rightdao": EngineSettings(),
        "stract": EngineSettings(),
    }


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    engines: dict[str, EngineSettings] = Field(default_factory=_default_engines)

    def get_engine_settings(self, name: str) -> EngineSettings:
        """Get settings for an engine, falling back to defaults."""
        return self.engines.get(name.lower(), EngineSettings())


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_yaml_config(config_dir: Path) -> dict[str, Any]:
    """Load settings.yaml with local.yaml overrides (``settings`` section).

    Example local.yaml:
        settings:
          engines:
            brave:
              enabled: false

    Args:
        config_dir: Configuration directory path.

    Returns:
        Merged configuration dictionary.
    """
    config = _load_yaml_file(config_dir / "settings.yaml")

    local_overrides = _load_yaml_file(config_dir / "local.yaml")
    if isinstance(local_overrides.get("settings"), dict):
        config = _deep_merge(config, local_overrides["settings"])

    return config


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables should be prefixed with SERPKIT_ and use
    double underscores for nested keys.

    Example:
        SERPKIT_GENERAL__LOG_LEVEL=DEBUG

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment overrides.
    """
    prefix = "SERPKIT_"

    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == "SERPKIT_CONFIG_DIR":
            continue

        # Remove prefix and split by double underscore
        key_path = key[len(prefix) :].lower().split("__")

        # Navigate to the correct nested location
        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        # Set the value (attempt to parse as appropriate type)
        final_key = key_path[-1]
        try:
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif "." in value:
                current[final_key] = float(value)
            else:
                current[final_key] = int(value)
        except ValueError:
            current[final_key] = value

    return config


def load_settings(config_dir: Path | str | None = None) -> Settings:
    """Load settings without caching.

    Settings are loaded from:
    1. Default values
    2. YAML configuration files
    3. Environment variables (highest priority)

    Engine sections from YAML are merged over the built-in engine defaults,
    so a YAML file only has to mention what it changes.

    Args:
        config_dir: Directory holding settings.yaml. Defaults to
            $SERPKIT_CONFIG_DIR or ``config``.

    Returns:
        Settings instance.
    """
    if config_dir is None:
        config_dir = os.environ.get("SERPKIT_CONFIG_DIR", "config")

    config = _load_yaml_config(Path(config_dir))
    config = _apply_env_overrides(config)

    defaults = {name: s.model_dump() for name, s in _default_engines().items()}
    config["engines"] = _deep_merge(defaults, config.get("engines") or {})

    return Settings(**config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings (cached).

    Returns:
        Settings instance.
    """
    return load_settings()


def reset_settings() -> None:
    """Clear the cached settings (for testing)."""
    get_settings.cache_clear()
