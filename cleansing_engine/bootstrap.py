"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from cleansing_engine.api import create_api_application
from cleansing_engine.config import EngineSettings, config_load_rule_set, config_load_settings
from cleansing_engine.domain import domain_text_build_normalizer
from cleansing_engine.jobs import CleansingPipeline, CleansingPipelineConfig


def bootstrap_create_pipeline(settings: EngineSettings | None = None) -> CleansingPipeline:
    """Build the cleansing pipeline from validated settings and rule set.

    Args:
        settings: Optional pre-loaded settings. Loaded from environment when omitted.

    Returns:
        CleansingPipeline: Fully wired pipeline.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        ConfigurationError: Raised when the rule set is invalid.
    """

    resolved_settings = settings or config_load_settings()
    normalizer = domain_text_build_normalizer(resolved_settings.text_strip_characters)
    rule_set = config_load_rule_set(path=resolved_settings.rules_config_path, normalizer=normalizer)
    return CleansingPipeline(
        rule_set=rule_set,
        normalizer=normalizer,
        config=CleansingPipelineConfig(reference_date=resolved_settings.reference_date),
    )


def bootstrap_create_application(settings: EngineSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings. Loaded from environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        ConfigurationError: Raised when the rule set is invalid.
    """

    resolved_settings = settings or config_load_settings()
    pipeline = bootstrap_create_pipeline(settings=resolved_settings)
    return create_api_application(settings=resolved_settings, pipeline=pipeline)
