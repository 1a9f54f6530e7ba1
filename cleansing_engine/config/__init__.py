"""Configuration package for runtime settings and rule-set loading."""

from .rule_config import DEFAULT_RULES_RESOURCE, RuleSetModel, config_build_rule_set, config_load_rule_set
from .settings import EngineSettings, SettingsLoadError, config_load_settings

__all__ = [
	"DEFAULT_RULES_RESOURCE",
	"EngineSettings",
	"RuleSetModel",
	"SettingsLoadError",
	"config_build_rule_set",
	"config_load_rule_set",
	"config_load_settings",
]
