"""Typed runtime settings with dotenv support and startup validation."""

from datetime import date

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CONFIG_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class EngineSettings(BaseSettings):
    """Engine settings for API runtime and cleansing runs.

    Environment variable names map directly to field names in uppercase.
    Example: `rules_config_path` reads from `RULES_CONFIG_PATH`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        rules_config_path: Optional rule-set JSON path. Blank uses the bundled warehouse rule set.
        text_strip_characters: Extra characters added to the default normalizer strip set.
        reference_date: Optional fixed "today" used as default upper bound for date ranges.
        log_level: Root logging level for CLI and API runtime.
        api_max_batch_size: Maximum records accepted by one HTTP cleansing request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    rules_config_path: str | None = Field(default=None)
    text_strip_characters: str = Field(default="")
    reference_date: date | None = Field(default=None)
    log_level: str = Field(default="INFO")
    api_max_batch_size: int = Field(default=10000, ge=1)

    @field_validator("rules_config_path")
    @classmethod
    def _validate_optional_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in _CONFIG_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_CONFIG_LOG_LEVELS)}")
        return normalized_value


def config_load_settings() -> EngineSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        EngineSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return EngineSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
