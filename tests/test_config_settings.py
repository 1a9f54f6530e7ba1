"""Regression tests for typed runtime settings loading."""

from __future__ import annotations

from datetime import date

import pytest

from cleansing_engine.config import EngineSettings, SettingsLoadError, config_load_settings


def test_config_load_settings_reads_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    """Read uppercase environment variables into typed settings fields.

    Args:
        monkeypatch: Pytest environment patch fixture.

    Returns:
        None: Assertions validate parsed settings.

    Raises:
        AssertionError: Raised when settings are parsed incorrectly.
    """

    monkeypatch.setenv("REFERENCE_DATE", "2024-06-30")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("RULES_CONFIG_PATH", "   ")
    monkeypatch.setenv("API_MAX_BATCH_SIZE", "25")

    settings = config_load_settings()

    assert settings.reference_date == date(2024, 6, 30)
    assert settings.log_level == "DEBUG"
    assert settings.rules_config_path is None
    assert settings.api_max_batch_size == 25


def test_config_load_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Raise SettingsLoadError when an environment value is invalid.

    Args:
        monkeypatch: Pytest environment patch fixture.

    Returns:
        None: Assertions validate startup failure behavior.

    Raises:
        AssertionError: Raised when invalid settings are accepted.
    """

    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


def test_engine_settings_defaults() -> None:
    """Use development defaults when no overrides are supplied.

    Returns:
        None: Assertions validate default values.

    Raises:
        AssertionError: Raised when defaults change unexpectedly.
    """

    settings = EngineSettings(_env_file=None)

    assert settings.application_port == 8000
    assert settings.text_strip_characters == ""
    assert settings.api_max_batch_size == 10000
