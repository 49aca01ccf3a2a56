"""
Tests for serpkit/utils/config.py and serpkit/utils/logging.py

## Test Perspectives Table
| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|----------------------|---------------------------------------|-----------------|-------|
| TC-DM-01 | Merge nested dicts | Equivalence – nested | Deep merge applied | - |
| TC-LS-01 | settings.yaml only | Equivalence – defaults | Values from YAML | - |
| TC-LS-02 | local.yaml `settings` section | Equivalence – override | local wins | - |
| TC-LS-03 | SERPKIT_* env var | Equivalence – env | env wins over YAML | - |
| TC-LS-04 | Missing config dir | Boundary – missing | Built-in defaults | - |
| TC-LS-05 | Partial engines table | Equivalence – merge | Other engines keep defaults | - |
| TC-LS-06 | Non-positive token interval | Abnormal – validation | ValidationError | - |
| TC-QC-01 | QueryConfig.from_settings | Equivalence | Engine tables copied | - |
| TC-LG-01 | LogContext | Equivalence | Context bound then unbound | - |
| TC-LG-02 | Long values | Boundary – 500 chars | Truncated | - |
"""

from pathlib import Path

import pytest
import structlog
import yaml
from pydantic import ValidationError

from serpkit.search.models import QueryConfig
from serpkit.utils.config import (
    DEFAULT_USER_AGENT,
    Settings,
    _deep_merge,
    get_settings,
    load_settings,
    reset_settings,
)
from serpkit.utils.logging import LogContext, _truncate_long_values, configure_logging, get_logger

pytestmark = pytest.mark.unit


def write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestDeepMerge:
    def test_nested(self):
        """TC-DM-01"""
        base = {"level1": {"a": 1, "b": 2}, "keep": True}
        override = {"level1": {"b": 3, "c": 4}}

        result = _deep_merge(base, override)

        assert result == {"level1": {"a": 1, "b": 3, "c": 4}, "keep": True}
        assert base["level1"] == {"a": 1, "b": 2}


class TestLoadSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.general.log_level == "INFO"
        assert settings.http.user_agent == DEFAULT_USER_AGENT
        assert settings.google.async_token_refresh_seconds == 3600
        assert settings.engines["marginalia"].extra["args"]["profile"] == "corpo"

    def test_repository_config(self):
        """TC-LS-01: The shipped settings.yaml loads and enables every engine."""
        settings = get_settings()

        assert sorted(settings.engines) == [
            "bing",
            "brave",
            "google",
            "google_scholar",
            "marginalia",
            "rightdao",
            "stract",
        ]
        assert all(s.enabled for s in settings.engines.values())

    def test_local_overrides(self, tmp_path: Path):
        """TC-LS-02"""
        # Given
        write_yaml(tmp_path / "settings.yaml", {"http": {"default_language": "de"}})
        write_yaml(
            tmp_path / "local.yaml",
            {"settings": {"http": {"default_language": "fr-CA"}, "engines": {"brave": {"enabled": False}}}},
        )

        # When
        settings = load_settings(tmp_path)

        # Then
        assert settings.http.default_language == "fr-CA"
        assert settings.engines["brave"].enabled is False
        assert settings.engines["bing"].enabled is True

    def test_env_override(self, tmp_path: Path, monkeypatch):
        """TC-LS-03"""
        write_yaml(tmp_path / "settings.yaml", {"general": {"log_level": "INFO"}})
        monkeypatch.setenv("SERPKIT_GENERAL__LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SERPKIT_GOOGLE__ASYNC_TOKEN_REFRESH_SECONDS", "1.5")
        monkeypatch.setenv("SERPKIT_ENGINES__STRACT__ENABLED", "false")

        settings = load_settings(tmp_path)

        assert settings.general.log_level == "DEBUG"
        assert settings.google.async_token_refresh_seconds == 1.5
        assert settings.engines["stract"].enabled is False

    def test_missing_directory(self, tmp_path: Path):
        """TC-LS-04"""
        settings = load_settings(tmp_path / "does-not-exist")

        assert settings == Settings()

    def test_partial_engine_table(self, tmp_path: Path):
        """TC-LS-05: Mentioning one engine does not wipe the others."""
        write_yaml(
            tmp_path / "settings.yaml",
            {"engines": {"marginalia": {"extra": {"args": {"profile": "yolo"}}}}},
        )

        settings = load_settings(tmp_path)

        args = settings.engines["marginalia"].extra["args"]
        assert args == {"profile": "yolo", "js": "default", "adtech": "default"}
        assert "google" in settings.engines

    def test_invalid_token_interval(self, tmp_path: Path):
        """TC-LS-06"""
        write_yaml(tmp_path / "settings.yaml", {"google": {"async_token_refresh_seconds": 0}})

        with pytest.raises(ValidationError):
            load_settings(tmp_path)

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
        first = get_settings()

        reset_settings()

        assert get_settings() is not first

    def test_unknown_engine_settings(self):
        assert Settings().get_engine_settings("Unknown").enabled is True


class TestQueryConfig:
    def test_from_settings(self):
        """TC-QC-01"""
        settings = Settings()

        config = QueryConfig.from_settings(settings, language="de-AT")

        assert config.language == "de-AT"
        assert config.engine_extra("Marginalia")["args"]["js"] == "default"
        assert config.engine_extra("bing") == {}
        assert config.engine_extra("missing") == {}

    def test_default_language_from_settings(self, tmp_path: Path):
        write_yaml(tmp_path / "settings.yaml", {"http": {"default_language": "nl"}})

        config = QueryConfig.from_settings(load_settings(tmp_path))

        assert config.language == "nl"


class TestLogging:
    def test_log_context_binds_and_unbinds(self):
        """TC-LG-01"""
        with LogContext(engine="bing", query_id="q1"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["engine"] == "bing"
            assert bound["query_id"] == "q1"

        assert "engine" not in structlog.contextvars.get_contextvars()

    def test_truncate_long_values(self):
        """TC-LG-02"""
        event = {"event": "x" * 600, "body": "y" * 600, "short": "z", "n": 5}

        result = _truncate_long_values(None, "info", event)

        assert result["event"] == "x" * 600
        assert result["body"] == "y" * 500 + "..."
        assert result["short"] == "z"
        assert result["n"] == 5

    def test_configure_logging(self, tmp_path: Path):
        log_file = tmp_path / "serpkit.log"

        configure_logging(log_level="DEBUG", log_file=log_file, json_format=True)
        get_logger("serpkit.test").info("configured", engine="bing")

        assert '"event": "configured"' in log_file.read_text(encoding="utf-8")
