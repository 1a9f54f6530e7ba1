"""Typed domain models shared across engine layers.

Field specs, categorical mapping tables, and entity specs are immutable
configuration contracts built once by the config layer. `BatchRecord` and
`Violation` are the per-run data contracts exchanged between the orchestrator,
the validator, and the reporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FieldType(str, Enum):
    """Semantic field types recognized by field specs."""

    STRING = "string"
    CATEGORICAL = "categorical"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"

    def field_type_is_text(self) -> bool:
        """Return whether values of this type are normalized as text."""

        return self in (FieldType.STRING, FieldType.CATEGORICAL)

    def field_type_is_numeric(self) -> bool:
        """Return whether values of this type are numeric."""

        return self in (FieldType.INTEGER, FieldType.DECIMAL)


class ArithmeticOperator(str, Enum):
    """Operators supported for derived-field consistency checks."""

    MULTIPLY = "multiply"
    ADD = "add"


@dataclass(frozen=True)
class NumericRange:
    """Valid numeric range for one field.

    Attributes:
        minimum: Optional lower bound.
        maximum: Optional upper bound.
        minimum_inclusive: Whether the lower bound itself is valid.
        maximum_inclusive: Whether the upper bound itself is valid.
    """

    minimum: Decimal | None = None
    maximum: Decimal | None = None
    minimum_inclusive: bool = True
    maximum_inclusive: bool = True


@dataclass(frozen=True)
class DateRange:
    """Plausible calendar range for one date field.

    Attributes:
        minimum: Optional earliest plausible date.
        maximum: Optional latest plausible date. None means the run reference date.
    """

    minimum: date | None = None
    maximum: date | None = None


@dataclass(frozen=True)
class DerivedFieldSpec:
    """Arithmetic derivation contract for one stored field.

    Attributes:
        factors: Factor field names combined by the operator.
        operator: Arithmetic operator applied across factors.
        require_positive_factors: Whether every factor must be strictly positive.
    """

    factors: tuple[str, ...]
    operator: ArithmeticOperator = ArithmeticOperator.MULTIPLY
    require_positive_factors: bool = False


@dataclass(frozen=True)
class FieldSpec:
    """Per-field contract for one entity type.

    Attributes:
        name: Field name in source records.
        field_type: Semantic field type.
        key: Whether the field participates in record identity.
        nullable: Whether null values are permitted.
        value_range: Optional numeric range.
        date_range: Optional plausible date range.
        derived_from: Optional arithmetic derivation contract.
        mapping_name: Categorical mapping table name for categorical fields.
        null_values: Raw sentinel values treated as null.
        check_whitespace: Whether whitespace integrity is checked for text fields.
    """

    name: str
    field_type: FieldType
    key: bool = False
    nullable: bool = True
    value_range: NumericRange | None = None
    date_range: DateRange | None = None
    derived_from: DerivedFieldSpec | None = None
    mapping_name: str | None = None
    null_values: tuple[object, ...] = ()
    check_whitespace: bool = True


@dataclass(frozen=True)
class CategoricalMappingEntry:
    """One ordered match-set to canonical value row.

    Attributes:
        match_values: Upper-cased normalized raw values matched by this row.
        canonical_value: Canonical value emitted on match.
    """

    match_values: frozenset[str]
    canonical_value: str


@dataclass(frozen=True)
class CategoricalMappingTable:
    """Ordered categorical mapping table with explicit fallback.

    Attributes:
        name: Table name referenced by field specs.
        entries: Ordered mapping rows; first match wins.
        default_value: Canonical value for unmatched input.
        passthrough_unmatched: Emit normalized input instead of the default for unmatched non-empty values.
    """

    name: str
    entries: tuple[CategoricalMappingEntry, ...]
    default_value: str
    passthrough_unmatched: bool = False

    def mapping_table_canonical_values(self) -> tuple[str, ...]:
        """Return the finite canonical value set in declaration order.

        Returns:
            tuple[str, ...]: Canonical values followed by the default value.
        """

        values: list[str] = []
        for entry in self.entries:
            if entry.canonical_value not in values:
                values.append(entry.canonical_value)
        if self.default_value not in values:
            values.append(self.default_value)
        return tuple(values)


@dataclass(frozen=True)
class DateOrderSpec:
    """Pair of date fields where `later_field` must not precede `earlier_field`."""

    earlier_field: str
    later_field: str


@dataclass(frozen=True)
class PeriodEndSpec:
    """Inference contract for missing period end dates.

    Attributes:
        start_field: Period start date field.
        end_field: Period end date field filled when missing.
        group_by: Fields identifying one period series.
        granularity_days: Gap between inferred end and next period start.
    """

    start_field: str
    end_field: str
    group_by: tuple[str, ...]
    granularity_days: int = 1


@dataclass(frozen=True)
class EntitySpec:
    """Field specs and applicable rules for one entity type.

    Attributes:
        entity_type: Entity type name.
        fields: Field specs in declaration order.
        rules: Rule family names applied to this entity.
        date_order: Date ordering pairs.
        period_end: Optional period end inference contract.
    """

    entity_type: str
    fields: tuple[FieldSpec, ...]
    rules: tuple[str, ...]
    date_order: tuple[DateOrderSpec, ...] = ()
    period_end: PeriodEndSpec | None = None

    def entity_field_names(self) -> tuple[str, ...]:
        """Return declared field names in declaration order."""

        return tuple(field_spec.name for field_spec in self.fields)

    def entity_field(self, field_name: str) -> FieldSpec | None:
        """Return one field spec by name, or None when not declared."""

        for field_spec in self.fields:
            if field_spec.name == field_name:
                return field_spec
        return None

    def entity_key_fields(self) -> tuple[str, ...]:
        """Return key field names in declaration order."""

        return tuple(field_spec.name for field_spec in self.fields if field_spec.key)


@dataclass(frozen=True)
class RuleSet:
    """Complete engine configuration: entity specs and mapping tables."""

    entities: Mapping[str, EntitySpec]
    mappings: Mapping[str, CategoricalMappingTable]

    def rule_set_entity_types(self) -> tuple[str, ...]:
        """Return configured entity types in declaration order."""

        return tuple(self.entities)

    def rule_set_entity(self, entity_type: str) -> EntitySpec:
        """Return one entity spec.

        Args:
            entity_type: Entity type name.

        Returns:
            EntitySpec: Configured entity spec.

        Raises:
            ValueError: Raised when the entity type is not configured.
        """

        entity_spec = self.entities.get(entity_type)
        if entity_spec is None:
            raise ValueError(f"unsupported entity_type={entity_type}")
        return entity_spec


@dataclass(frozen=True)
class BatchRecord:
    """One successfully coerced record within a batch run.

    Attributes:
        record_index: Zero-based position in the raw batch.
        record_identity: Deterministic identity text built from key fields.
        raw_values: Original raw record, never mutated.
        values: Normalized and mapped field values.
    """

    record_index: int
    record_identity: str
    raw_values: Mapping[str, object]
    values: Mapping[str, object]


@dataclass(frozen=True)
class Violation:
    """One rule failure for one record.

    Attributes:
        rule_name: Rule family name.
        entity_type: Entity type of the offending record.
        record_index: Zero-based position of the record in the raw batch.
        record_identity: Deterministic identity text built from key fields.
        fields: Field names involved.
        raw_values: Values of the involved fields as seen by the rule.
        reason: Stable machine-readable reason code.
        details: Optional structured context, such as expected values or counts.
            Stored as a read-only mapping and left out of the hash.
    """

    rule_name: str
    entity_type: str
    record_index: int
    record_identity: str
    fields: tuple[str, ...]
    raw_values: tuple[object, ...]
    reason: str
    details: Mapping[str, object] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def violation_dedup_key(self) -> tuple[object, ...]:
        """Return the tuple identifying one distinct violation within a run."""

        return (self.rule_name, self.entity_type, self.record_index, self.fields, self.reason)
