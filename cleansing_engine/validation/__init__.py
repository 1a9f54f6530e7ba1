"""Validation layer package for batch rule families."""

from .interfaces import (
	RULE_ARITHMETIC_CONSISTENCY,
	RULE_DATE_ORDER,
	RULE_DATE_RANGE,
	RULE_KEY_UNIQUENESS,
	RULE_MALFORMED_RECORD,
	RULE_REQUIRED_VALUE,
	RULE_VALUE_RANGE,
	RULE_WHITESPACE_INTEGRITY,
	VALIDATION_RULE_NAMES,
	RecordValidatorPort,
	RuleContext,
	ValidationRuleFunction,
)
from .period_inference import validation_infer_period_end_dates
from .rules import (
	VALIDATION_RULE_FAMILIES,
	RecordValidator,
	validation_check_arithmetic_consistency,
	validation_check_date_order,
	validation_check_date_range,
	validation_check_key_uniqueness,
	validation_check_required_values,
	validation_check_value_range,
	validation_check_whitespace_integrity,
)

__all__ = [
	"RULE_ARITHMETIC_CONSISTENCY",
	"RULE_DATE_ORDER",
	"RULE_DATE_RANGE",
	"RULE_KEY_UNIQUENESS",
	"RULE_MALFORMED_RECORD",
	"RULE_REQUIRED_VALUE",
	"RULE_VALUE_RANGE",
	"RULE_WHITESPACE_INTEGRITY",
	"VALIDATION_RULE_FAMILIES",
	"VALIDATION_RULE_NAMES",
	"RecordValidator",
	"RecordValidatorPort",
	"RuleContext",
	"ValidationRuleFunction",
	"validation_check_arithmetic_consistency",
	"validation_check_date_order",
	"validation_check_date_range",
	"validation_check_key_uniqueness",
	"validation_check_required_values",
	"validation_check_value_range",
	"validation_check_whitespace_integrity",
	"validation_infer_period_end_dates",
]
