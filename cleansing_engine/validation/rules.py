"""Generic rule families applied to normalized batch records.

Each rule family is a pure function over one batch: it reads field specs from
the entity spec, never mutates records, and returns one violation per offending
(record, field(s), reason). `RecordValidator` composes the families configured
for one entity type and pools every violation without short-circuiting.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Final, Sequence

from cleansing_engine.domain import (
    ArithmeticOperator,
    BatchRecord,
    ConfigurationError,
    EntitySpec,
    FieldSpec,
    FieldType,
    NumericRange,
    Violation,
    domain_is_null_sentinel,
)

from .interfaces import (
    RULE_ARITHMETIC_CONSISTENCY,
    RULE_DATE_ORDER,
    RULE_DATE_RANGE,
    RULE_KEY_UNIQUENESS,
    RULE_REQUIRED_VALUE,
    RULE_VALUE_RANGE,
    RULE_WHITESPACE_INTEGRITY,
    RuleContext,
    ValidationRuleFunction,
)

REASON_NULL_KEY: Final[str] = "null_key"
REASON_DUPLICATE_KEY: Final[str] = "duplicate_key"
REASON_UNTRIMMED: Final[str] = "untrimmed_or_invisible_characters"
REASON_NULL_VALUE: Final[str] = "null_value"
REASON_NEGATIVE_VALUE: Final[str] = "negative_value"
REASON_ZERO_VALUE: Final[str] = "zero_value"
REASON_BELOW_MINIMUM: Final[str] = "below_minimum"
REASON_ABOVE_MAXIMUM: Final[str] = "above_maximum"
REASON_INVALID_DATE: Final[str] = "invalid_date"
REASON_DATE_BEFORE_MINIMUM: Final[str] = "date_before_minimum"
REASON_DATE_AFTER_MAXIMUM: Final[str] = "date_after_maximum"
REASON_DATE_ORDER_INVERTED: Final[str] = "date_order_inverted"
REASON_DERIVED_MISMATCH: Final[str] = "derived_mismatch"
REASON_DERIVED_NULL: Final[str] = "derived_null"
REASON_FACTOR_NULL: Final[str] = "factor_null"
REASON_FACTOR_ZERO: Final[str] = "factor_zero"
REASON_FACTOR_NEGATIVE: Final[str] = "factor_negative"


def validation_check_key_uniqueness(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag null keys and duplicated keys, one violation per offending record.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `null_key` and `duplicate_key` violations in batch order.
    """

    _ = context
    key_fields = entity_spec.entity_key_fields()
    if not key_fields:
        return []

    key_values_by_index = {
        record.record_index: tuple(record.values.get(key_field) for key_field in key_fields) for record in records
    }
    key_counts = Counter(
        key_values for key_values in key_values_by_index.values() if all(value is not None for value in key_values)
    )

    violations: list[Violation] = []
    for record in records:
        key_values = key_values_by_index[record.record_index]
        if any(value is None for value in key_values):
            violations.append(
                _validation_build_violation(
                    RULE_KEY_UNIQUENESS, entity_spec, record, key_fields, key_values, REASON_NULL_KEY
                )
            )
            continue

        duplicate_count = key_counts[key_values]
        if duplicate_count > 1:
            violations.append(
                _validation_build_violation(
                    RULE_KEY_UNIQUENESS,
                    entity_spec,
                    record,
                    key_fields,
                    key_values,
                    REASON_DUPLICATE_KEY,
                    details={"duplicate_count": duplicate_count},
                )
            )
    return violations


def validation_check_whitespace_integrity(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag raw text values that differ from their normalized form.

    Normalization already fixed these values for downstream use; this rule
    reports them so the upstream source can be corrected.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `untrimmed_or_invisible_characters` violations.
    """

    text_fields = [
        field_spec
        for field_spec in entity_spec.fields
        if field_spec.field_type.field_type_is_text() and field_spec.check_whitespace
    ]

    violations: list[Violation] = []
    for record in records:
        for field_spec in text_fields:
            raw_value = record.raw_values.get(field_spec.name)
            if not isinstance(raw_value, str):
                continue
            normalized_value = context.normalizer.domain_text_normalize(raw_value)
            if normalized_value == raw_value:
                continue
            violations.append(
                _validation_build_violation(
                    RULE_WHITESPACE_INTEGRITY,
                    entity_spec,
                    record,
                    (field_spec.name,),
                    (raw_value,),
                    REASON_UNTRIMMED,
                    details={"normalized": normalized_value},
                )
            )
    return violations


def validation_check_value_range(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag null and out-of-range numeric values with distinct reasons.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `null_value`, `negative_value`, `zero_value`, `below_minimum`,
        and `above_maximum` violations.
    """

    _ = context
    ranged_fields = [field_spec for field_spec in entity_spec.fields if field_spec.value_range is not None]

    violations: list[Violation] = []
    for record in records:
        for field_spec in ranged_fields:
            value = record.values.get(field_spec.name)
            reason = _validation_range_reason(value, field_spec)
            if reason is None:
                continue
            violations.append(
                _validation_build_violation(
                    RULE_VALUE_RANGE,
                    entity_spec,
                    record,
                    (field_spec.name,),
                    (value,),
                    reason,
                    details=_validation_range_details(field_spec.value_range),
                )
            )
    return violations


def validation_check_required_values(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag nulls in non-nullable fields that no other rule family checks for nulls.

    Key fields, ranged fields, and derived fields (with their positive factors)
    report their own nulls, so they are skipped here to keep one violation per
    null value.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `null_value` violations.
    """

    _ = context
    covered_fields = _validation_null_checked_fields(entity_spec)
    required_fields = [
        field_spec.name
        for field_spec in entity_spec.fields
        if not field_spec.nullable and field_spec.name not in covered_fields
    ]

    violations: list[Violation] = []
    for record in records:
        for field_name in required_fields:
            if record.values.get(field_name) is not None:
                continue
            violations.append(
                _validation_build_violation(
                    RULE_REQUIRED_VALUE, entity_spec, record, (field_name,), (None,), REASON_NULL_VALUE
                )
            )
    return violations


def validation_check_date_range(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag implausible integer dates and dates outside their calendar range.

    Integer dates that are not a valid `YYYYMMDD` value were nulled during
    normalization; they are reported here from the raw record. The upper bound
    defaults to the run reference date when not configured.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `invalid_date`, `date_before_minimum`, and `date_after_maximum` violations.
    """

    date_fields = [field_spec for field_spec in entity_spec.fields if field_spec.field_type is FieldType.DATE]

    violations: list[Violation] = []
    for record in records:
        for field_spec in date_fields:
            value = record.values.get(field_spec.name)
            if value is None:
                raw_value = record.raw_values.get(field_spec.name)
                if _validation_is_invalid_compact_date(field_spec, raw_value, context):
                    violations.append(
                        _validation_build_violation(
                            RULE_DATE_RANGE,
                            entity_spec,
                            record,
                            (field_spec.name,),
                            (raw_value,),
                            REASON_INVALID_DATE,
                            details={"expected_format": "YYYYMMDD"},
                        )
                    )
                continue
            if field_spec.date_range is None or not isinstance(value, date):
                continue

            minimum = field_spec.date_range.minimum
            maximum = field_spec.date_range.maximum or context.reference_date
            reason = None
            if minimum is not None and value < minimum:
                reason = REASON_DATE_BEFORE_MINIMUM
            elif value > maximum:
                reason = REASON_DATE_AFTER_MAXIMUM
            if reason is None:
                continue

            violations.append(
                _validation_build_violation(
                    RULE_DATE_RANGE,
                    entity_spec,
                    record,
                    (field_spec.name,),
                    (value,),
                    reason,
                    details={
                        "minimum": minimum.isoformat() if minimum is not None else None,
                        "maximum": maximum.isoformat(),
                    },
                )
            )
    return violations


def validation_check_date_order(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag configured date pairs where the later date precedes the earlier one.

    Equal dates pass. Pairs with a null side are skipped.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `date_order_inverted` violations, one per offending pair.
    """

    _ = context
    violations: list[Violation] = []
    for record in records:
        for date_order in entity_spec.date_order:
            earlier_value = record.values.get(date_order.earlier_field)
            later_value = record.values.get(date_order.later_field)
            if not isinstance(earlier_value, date) or not isinstance(later_value, date):
                continue
            if later_value >= earlier_value:
                continue
            violations.append(
                _validation_build_violation(
                    RULE_DATE_ORDER,
                    entity_spec,
                    record,
                    (date_order.earlier_field, date_order.later_field),
                    (earlier_value, later_value),
                    REASON_DATE_ORDER_INVERTED,
                )
            )
    return violations


def validation_check_arithmetic_consistency(
    entity_spec: EntitySpec,
    records: Sequence[BatchRecord],
    context: RuleContext,
) -> list[Violation]:
    """Flag derived values inconsistent with their factors and invalid factors.

    Every problem found on a record is reported: a record can carry a
    `derived_mismatch` together with several factor violations.

    Args:
        entity_spec: Entity field contract.
        records: Normalized batch records.
        context: Run-scoped rule inputs.

    Returns:
        list[Violation]: `derived_mismatch`, `derived_null`, `factor_null`,
        `factor_zero`, and `factor_negative` violations.
    """

    _ = context
    derived_fields = [field_spec for field_spec in entity_spec.fields if field_spec.derived_from is not None]

    violations: list[Violation] = []
    for record in records:
        for field_spec in derived_fields:
            violations.extend(_validation_check_one_derivation(entity_spec, record, field_spec))
    return violations


VALIDATION_RULE_FAMILIES: Final[dict[str, ValidationRuleFunction]] = {
    RULE_KEY_UNIQUENESS: validation_check_key_uniqueness,
    RULE_WHITESPACE_INTEGRITY: validation_check_whitespace_integrity,
    RULE_VALUE_RANGE: validation_check_value_range,
    RULE_REQUIRED_VALUE: validation_check_required_values,
    RULE_DATE_RANGE: validation_check_date_range,
    RULE_DATE_ORDER: validation_check_date_order,
    RULE_ARITHMETIC_CONSISTENCY: validation_check_arithmetic_consistency,
}


class RecordValidator:
    """Composes the rule families configured for one entity type."""

    def __init__(self, entity_spec: EntitySpec, context: RuleContext):
        """Initialize validator for one entity spec.

        Args:
            entity_spec: Entity field contract with applicable rule names.
            context: Run-scoped rule inputs.

        Raises:
            ConfigurationError: Raised when the entity references an undefined rule family.
        """

        unknown_rules = [rule_name for rule_name in entity_spec.rules if rule_name not in VALIDATION_RULE_FAMILIES]
        if unknown_rules:
            raise ConfigurationError(
                f"entity {entity_spec.entity_type} references undefined rules: {', '.join(unknown_rules)}"
            )

        self._entity_spec = entity_spec
        self._context = context

    def validation_evaluate(self, records: Sequence[BatchRecord]) -> list[Violation]:
        """Run every configured rule family and pool all violations.

        Args:
            records: Normalized batch records.

        Returns:
            list[Violation]: Violations grouped by rule family evaluation order.
        """

        violations: list[Violation] = []
        for rule_name in self._entity_spec.rules:
            rule_function = VALIDATION_RULE_FAMILIES[rule_name]
            violations.extend(rule_function(self._entity_spec, records, self._context))
        return violations


def _validation_check_one_derivation(
    entity_spec: EntitySpec,
    record: BatchRecord,
    field_spec: FieldSpec,
) -> list[Violation]:
    derived_from = field_spec.derived_from
    violations: list[Violation] = []

    factor_values = tuple(record.values.get(factor_name) for factor_name in derived_from.factors)
    if derived_from.require_positive_factors:
        for factor_name, factor_value in zip(derived_from.factors, factor_values):
            reason = _validation_factor_reason(factor_value)
            if reason is None:
                continue
            violations.append(
                _validation_build_violation(
                    RULE_ARITHMETIC_CONSISTENCY, entity_spec, record, (factor_name,), (factor_value,), reason
                )
            )

    derived_value = record.values.get(field_spec.name)
    if derived_value is None:
        if not field_spec.nullable:
            violations.append(
                _validation_build_violation(
                    RULE_ARITHMETIC_CONSISTENCY,
                    entity_spec,
                    record,
                    (field_spec.name,),
                    (None,),
                    REASON_DERIVED_NULL,
                )
            )
        return violations

    if any(factor_value is None for factor_value in factor_values):
        return violations

    expected_value = _validation_combine_factors(derived_from.operator, factor_values)
    if _validation_to_decimal(derived_value) != expected_value:
        violations.append(
            _validation_build_violation(
                RULE_ARITHMETIC_CONSISTENCY,
                entity_spec,
                record,
                (field_spec.name, *derived_from.factors),
                (derived_value, *factor_values),
                REASON_DERIVED_MISMATCH,
                details={"expected": str(expected_value), "operator": derived_from.operator.value},
            )
        )
    return violations


def _validation_combine_factors(operator: ArithmeticOperator, factor_values: tuple[object, ...]) -> Decimal:
    decimal_values = [_validation_to_decimal(value) for value in factor_values]
    if operator is ArithmeticOperator.ADD:
        return sum(decimal_values, Decimal(0))

    product = Decimal(1)
    for value in decimal_values:
        product *= value
    return product


def _validation_factor_reason(value: object) -> str | None:
    if value is None:
        return REASON_FACTOR_NULL
    decimal_value = _validation_to_decimal(value)
    if decimal_value == 0:
        return REASON_FACTOR_ZERO
    if decimal_value < 0:
        return REASON_FACTOR_NEGATIVE
    return None


def _validation_is_invalid_compact_date(field_spec: FieldSpec, raw_value: object, context: RuleContext) -> bool:
    if not isinstance(raw_value, int) or isinstance(raw_value, bool):
        return False
    return not domain_is_null_sentinel(field_spec, raw_value, context.normalizer)


def _validation_range_reason(value: object, field_spec: FieldSpec) -> str | None:
    if value is None:
        return None if field_spec.nullable else REASON_NULL_VALUE

    value_range = field_spec.value_range
    decimal_value = _validation_to_decimal(value)
    minimum = value_range.minimum
    if minimum is not None:
        below_minimum = decimal_value < minimum or (decimal_value == minimum and not value_range.minimum_inclusive)
        if below_minimum:
            if minimum >= 0 and decimal_value < 0:
                return REASON_NEGATIVE_VALUE
            if minimum >= 0 and decimal_value == 0:
                return REASON_ZERO_VALUE
            return REASON_BELOW_MINIMUM

    maximum = value_range.maximum
    if maximum is not None:
        if decimal_value > maximum or (decimal_value == maximum and not value_range.maximum_inclusive):
            return REASON_ABOVE_MAXIMUM
    return None


def _validation_range_details(value_range: NumericRange) -> dict[str, object]:
    return {
        "minimum": str(value_range.minimum) if value_range.minimum is not None else None,
        "maximum": str(value_range.maximum) if value_range.maximum is not None else None,
        "minimum_inclusive": value_range.minimum_inclusive,
        "maximum_inclusive": value_range.maximum_inclusive,
    }


def _validation_null_checked_fields(entity_spec: EntitySpec) -> set[str]:
    covered_fields: set[str] = set(entity_spec.entity_key_fields())
    for field_spec in entity_spec.fields:
        if field_spec.value_range is not None:
            covered_fields.add(field_spec.name)
        if field_spec.derived_from is not None:
            covered_fields.add(field_spec.name)
            if field_spec.derived_from.require_positive_factors:
                covered_fields.update(field_spec.derived_from.factors)
    return covered_fields


def _validation_to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _validation_build_violation(
    rule_name: str,
    entity_spec: EntitySpec,
    record: BatchRecord,
    fields: tuple[str, ...],
    raw_values: tuple[object, ...],
    reason: str,
    details: dict[str, object] | None = None,
) -> Violation:
    return Violation(
        rule_name=rule_name,
        entity_type=entity_spec.entity_type,
        record_index=record.record_index,
        record_identity=record.record_identity,
        fields=fields,
        raw_values=raw_values,
        reason=reason,
        details=details or {},
    )


__all__ = [
    "RecordValidator",
    "VALIDATION_RULE_FAMILIES",
    "validation_check_arithmetic_consistency",
    "validation_check_date_order",
    "validation_check_date_range",
    "validation_check_key_uniqueness",
    "validation_check_required_values",
    "validation_check_value_range",
    "validation_check_whitespace_integrity",
]
