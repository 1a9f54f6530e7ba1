"""Rule-set configuration loading and cross-reference validation.

Field specs and categorical mapping tables are supplied as JSON data so new
entity types or fields are configuration changes. Payloads are validated with
pydantic models, then cross-checked (every referenced field, mapping, and rule
must exist) and converted into immutable domain contracts. Any failure raises
`ConfigurationError` before a single record is processed.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from importlib import resources
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from cleansing_engine.domain import (
    ArithmeticOperator,
    CategoricalMappingEntry,
    CategoricalMappingTable,
    ConfigurationError,
    DateOrderSpec,
    DateRange,
    DerivedFieldSpec,
    EntitySpec,
    FieldSpec,
    FieldType,
    NumericRange,
    PeriodEndSpec,
    RuleSet,
    TextNormalizer,
)
from cleansing_engine.validation.interfaces import VALIDATION_RULE_NAMES

DEFAULT_RULES_RESOURCE = "default_rules.json"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class NumericRangeModel(_ConfigModel):
    """Numeric range options (`range`)."""

    minimum: Decimal | None = None
    maximum: Decimal | None = None
    minimum_inclusive: bool = True
    maximum_inclusive: bool = True

    @model_validator(mode="after")
    def _validate_bounds(self) -> "NumericRangeModel":
        if self.minimum is None and self.maximum is None:
            raise ValueError("range requires minimum or maximum")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError("range minimum must be less than or equal to maximum")
        return self


class DateRangeModel(_ConfigModel):
    """Date range options (`date_range` / `dateRange`). A missing maximum means "now"."""

    minimum: date | None = None
    maximum: date | None = None

    @model_validator(mode="after")
    def _validate_bounds(self) -> "DateRangeModel":
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError("date_range minimum must be less than or equal to maximum")
        return self


class DerivedFromModel(_ConfigModel):
    """Arithmetic derivation options (`derived_from` / `derivedFrom`)."""

    factors: list[str] = Field(min_length=1)
    operator: ArithmeticOperator = ArithmeticOperator.MULTIPLY
    require_positive_factors: bool = False


class FieldModel(_ConfigModel):
    """Per-field options.

    `nullable` left unset means required for key and ranged fields, optional otherwise.
    """

    field_type: FieldType = Field(alias="type")
    key: bool = False
    nullable: bool | None = None
    value_range: NumericRangeModel | None = Field(default=None, alias="range")
    date_range: DateRangeModel | None = Field(default=None, alias="dateRange")
    derived_from: DerivedFromModel | None = Field(default=None, alias="derivedFrom")
    mapping: str | None = None
    null_values: list[StrictInt | StrictStr] = Field(default_factory=list, alias="nullValues")
    check_whitespace: bool = True


class MappingEntryModel(_ConfigModel):
    """One ordered match-set row."""

    match: list[str] = Field(min_length=1)
    canonical: str = Field(min_length=1)


class MappingTableModel(_ConfigModel):
    """Categorical mapping table."""

    entries: list[MappingEntryModel] = Field(default_factory=list)
    default: str = Field(min_length=1)
    passthrough_unmatched: bool = False


class DateOrderModel(_ConfigModel):
    """Date pair where `later` must not precede `earlier`."""

    earlier: str
    later: str


class PeriodEndModel(_ConfigModel):
    """Missing period end inference options."""

    start_field: str
    end_field: str
    group_by: list[str] = Field(default_factory=list)
    granularity_days: int = Field(default=1, ge=1)


class EntityModel(_ConfigModel):
    """Entity type configuration."""

    field_specs: dict[str, FieldModel] = Field(min_length=1, alias="fields")
    rules: list[str] | None = None
    date_order: list[DateOrderModel] = Field(default_factory=list)
    period_end: PeriodEndModel | None = None


class RuleSetModel(_ConfigModel):
    """Top-level rule-set document."""

    entities: dict[str, EntityModel] = Field(min_length=1)
    mappings: dict[str, MappingTableModel] = Field(default_factory=dict)


def config_build_rule_set(payload: Mapping[str, object], normalizer: TextNormalizer | None = None) -> RuleSet:
    """Validate one rule-set payload and build immutable domain contracts.

    Args:
        payload: JSON-compatible rule-set document.
        normalizer: Normalizer applied to mapping match values. Defaults to the default strip set.

    Returns:
        RuleSet: Validated rule set.

    Raises:
        ConfigurationError: Raised when the payload is invalid or references undefined names.
    """

    try:
        rule_set_model = RuleSetModel.model_validate(payload)
    except ValidationError as error:
        raise ConfigurationError(f"rule set validation failed: {error}") from error

    resolved_normalizer = normalizer or TextNormalizer()
    mappings = {
        mapping_name: _config_build_mapping_table(mapping_name, mapping_model, resolved_normalizer)
        for mapping_name, mapping_model in rule_set_model.mappings.items()
    }
    entities = {
        entity_type: _config_build_entity_spec(entity_type, entity_model, mappings)
        for entity_type, entity_model in rule_set_model.entities.items()
    }
    return RuleSet(entities=entities, mappings=mappings)


def config_load_rule_set(path: str | Path | None = None, normalizer: TextNormalizer | None = None) -> RuleSet:
    """Load a rule-set JSON document from disk or from the bundled default.

    Args:
        path: Rule-set JSON path. None loads the bundled warehouse rule set.
        normalizer: Normalizer applied to mapping match values.

    Returns:
        RuleSet: Validated rule set.

    Raises:
        ConfigurationError: Raised when the document cannot be read, parsed, or validated.
    """

    try:
        if path is None:
            document_text = resources.files("cleansing_engine.config").joinpath(DEFAULT_RULES_RESOURCE).read_text(
                encoding="utf-8"
            )
        else:
            document_text = Path(path).read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigurationError(f"rule set could not be read from {path or DEFAULT_RULES_RESOURCE}: {error}") from error

    try:
        payload = json.loads(document_text)
    except json.JSONDecodeError as error:
        raise ConfigurationError(f"rule set is not valid JSON: {error}") from error

    if not isinstance(payload, dict):
        raise ConfigurationError("rule set document must be a JSON object")
    return config_build_rule_set(payload, normalizer=normalizer)


def _config_build_mapping_table(
    mapping_name: str,
    mapping_model: MappingTableModel,
    normalizer: TextNormalizer,
) -> CategoricalMappingTable:
    entries = tuple(
        CategoricalMappingEntry(
            match_values=frozenset(normalizer.domain_text_comparison_key(value) for value in entry_model.match),
            canonical_value=entry_model.canonical,
        )
        for entry_model in mapping_model.entries
    )
    return CategoricalMappingTable(
        name=mapping_name,
        entries=entries,
        default_value=mapping_model.default,
        passthrough_unmatched=mapping_model.passthrough_unmatched,
    )


def _config_build_entity_spec(
    entity_type: str,
    entity_model: EntityModel,
    mappings: Mapping[str, CategoricalMappingTable],
) -> EntitySpec:
    field_types = {field_name: field_model.field_type for field_name, field_model in entity_model.field_specs.items()}

    fields = tuple(
        _config_build_field_spec(entity_type, field_name, field_model, field_types, mappings)
        for field_name, field_model in entity_model.field_specs.items()
    )

    rules = tuple(entity_model.rules) if entity_model.rules is not None else VALIDATION_RULE_NAMES
    unknown_rules = [rule_name for rule_name in rules if rule_name not in VALIDATION_RULE_NAMES]
    if unknown_rules:
        raise ConfigurationError(f"entity {entity_type} references undefined rules: {', '.join(unknown_rules)}")

    date_order = []
    for date_order_model in entity_model.date_order:
        for field_name in (date_order_model.earlier, date_order_model.later):
            _config_require_field_type(entity_type, field_name, field_types, (FieldType.DATE,), "date_order")
        date_order.append(DateOrderSpec(earlier_field=date_order_model.earlier, later_field=date_order_model.later))

    period_end = None
    if entity_model.period_end is not None:
        period_model = entity_model.period_end
        _config_require_field_type(entity_type, period_model.start_field, field_types, (FieldType.DATE,), "period_end")
        _config_require_field_type(entity_type, period_model.end_field, field_types, (FieldType.DATE,), "period_end")
        if period_model.start_field == period_model.end_field:
            raise ConfigurationError(f"entity {entity_type} period_end start_field and end_field must differ")
        for group_field in period_model.group_by:
            _config_require_field_type(entity_type, group_field, field_types, tuple(FieldType), "period_end.group_by")
        period_end = PeriodEndSpec(
            start_field=period_model.start_field,
            end_field=period_model.end_field,
            group_by=tuple(period_model.group_by),
            granularity_days=period_model.granularity_days,
        )

    return EntitySpec(
        entity_type=entity_type,
        fields=fields,
        rules=rules,
        date_order=tuple(date_order),
        period_end=period_end,
    )


def _config_build_field_spec(
    entity_type: str,
    field_name: str,
    field_model: FieldModel,
    field_types: Mapping[str, FieldType],
    mappings: Mapping[str, CategoricalMappingTable],
) -> FieldSpec:
    location = f"entity {entity_type} field {field_name}"
    field_type = field_model.field_type

    if field_model.key and field_model.nullable:
        raise ConfigurationError(f"{location}: key fields cannot be nullable")
    # Keys and ranged fields are required unless `nullable: true` is explicit.
    if field_model.nullable is None:
        nullable = not field_model.key and field_model.value_range is None
    else:
        nullable = field_model.nullable

    if field_type is FieldType.CATEGORICAL:
        if field_model.mapping is None:
            raise ConfigurationError(f"{location}: categorical fields require a mapping")
        if field_model.mapping not in mappings:
            raise ConfigurationError(f"{location}: references undefined mapping {field_model.mapping}")
    elif field_model.mapping is not None:
        raise ConfigurationError(f"{location}: mapping is only valid for categorical fields")

    value_range = None
    if field_model.value_range is not None:
        if not field_type.field_type_is_numeric():
            raise ConfigurationError(f"{location}: range is only valid for numeric fields")
        value_range = NumericRange(
            minimum=field_model.value_range.minimum,
            maximum=field_model.value_range.maximum,
            minimum_inclusive=field_model.value_range.minimum_inclusive,
            maximum_inclusive=field_model.value_range.maximum_inclusive,
        )

    date_range = None
    if field_model.date_range is not None:
        if field_type is not FieldType.DATE:
            raise ConfigurationError(f"{location}: date_range is only valid for date fields")
        date_range = DateRange(minimum=field_model.date_range.minimum, maximum=field_model.date_range.maximum)

    derived_from = None
    if field_model.derived_from is not None:
        if not field_type.field_type_is_numeric():
            raise ConfigurationError(f"{location}: derived_from is only valid for numeric fields")
        for factor_name in field_model.derived_from.factors:
            if factor_name == field_name:
                raise ConfigurationError(f"{location}: derived_from cannot reference the field itself")
            _config_require_field_type(
                entity_type,
                factor_name,
                field_types,
                (FieldType.INTEGER, FieldType.DECIMAL),
                f"{field_name}.derived_from",
            )
        derived_from = DerivedFieldSpec(
            factors=tuple(field_model.derived_from.factors),
            operator=field_model.derived_from.operator,
            require_positive_factors=field_model.derived_from.require_positive_factors,
        )

    return FieldSpec(
        name=field_name,
        field_type=field_type,
        key=field_model.key,
        nullable=nullable,
        value_range=value_range,
        date_range=date_range,
        derived_from=derived_from,
        mapping_name=field_model.mapping,
        null_values=tuple(field_model.null_values),
        check_whitespace=field_model.check_whitespace,
    )


def _config_require_field_type(
    entity_type: str,
    field_name: str,
    field_types: Mapping[str, FieldType],
    allowed_types: tuple[FieldType, ...],
    option_name: str,
) -> None:
    field_type = field_types.get(field_name)
    if field_type is None:
        raise ConfigurationError(f"entity {entity_type} {option_name} references undefined field {field_name}")
    if field_type not in allowed_types:
        allowed_labels = ", ".join(allowed_type.value for allowed_type in allowed_types)
        raise ConfigurationError(
            f"entity {entity_type} {option_name} field {field_name} must be one of: {allowed_labels}"
        )


__all__ = [
    "DEFAULT_RULES_RESOURCE",
    "RuleSetModel",
    "config_build_rule_set",
    "config_load_rule_set",
]
