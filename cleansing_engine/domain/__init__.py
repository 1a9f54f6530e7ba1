"""Domain models and shared value helpers used across engine layers."""

from .errors import CleansingEngineError, ConfigurationError, MalformedRecordError
from .models import (
	ArithmeticOperator,
	BatchRecord,
	CategoricalMappingEntry,
	CategoricalMappingTable,
	DateOrderSpec,
	DateRange,
	DerivedFieldSpec,
	EntitySpec,
	FieldSpec,
	FieldType,
	NumericRange,
	PeriodEndSpec,
	RuleSet,
	Violation,
)
from .text_normalization import DEFAULT_STRIP_CHARACTERS, NormalizedText, TextNormalizer, domain_text_build_normalizer
from .timeline import domain_build_stage_event
from .value_parsing import (
	domain_coerce_field_value,
	domain_is_null_sentinel,
	domain_parse_compact_date,
	domain_parse_local_date,
)

__all__ = [
	"ArithmeticOperator",
	"BatchRecord",
	"CategoricalMappingEntry",
	"CategoricalMappingTable",
	"CleansingEngineError",
	"ConfigurationError",
	"DEFAULT_STRIP_CHARACTERS",
	"DateOrderSpec",
	"DateRange",
	"DerivedFieldSpec",
	"EntitySpec",
	"FieldSpec",
	"FieldType",
	"MalformedRecordError",
	"NormalizedText",
	"NumericRange",
	"PeriodEndSpec",
	"RuleSet",
	"TextNormalizer",
	"Violation",
	"domain_build_stage_event",
	"domain_coerce_field_value",
	"domain_is_null_sentinel",
	"domain_parse_compact_date",
	"domain_parse_local_date",
	"domain_text_build_normalizer",
]
