"""Typed interfaces and rule identifiers for record validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final, Protocol, Sequence

from cleansing_engine.domain import BatchRecord, EntitySpec, TextNormalizer, Violation

RULE_KEY_UNIQUENESS: Final[str] = "key_uniqueness"
RULE_WHITESPACE_INTEGRITY: Final[str] = "whitespace_integrity"
RULE_VALUE_RANGE: Final[str] = "value_range"
RULE_REQUIRED_VALUE: Final[str] = "required_value"
RULE_DATE_RANGE: Final[str] = "date_range"
RULE_DATE_ORDER: Final[str] = "date_order"
RULE_ARITHMETIC_CONSISTENCY: Final[str] = "arithmetic_consistency"

# Emitted by the orchestrator, not by a configurable rule family.
RULE_MALFORMED_RECORD: Final[str] = "malformed_record"

VALIDATION_RULE_NAMES: Final[tuple[str, ...]] = (
    RULE_KEY_UNIQUENESS,
    RULE_WHITESPACE_INTEGRITY,
    RULE_VALUE_RANGE,
    RULE_REQUIRED_VALUE,
    RULE_DATE_RANGE,
    RULE_DATE_ORDER,
    RULE_ARITHMETIC_CONSISTENCY,
)


@dataclass(frozen=True)
class RuleContext:
    """Run-scoped inputs shared by every rule family.

    Attributes:
        reference_date: Run reference date used as default upper bound for date ranges.
        normalizer: Shared text normalizer used by whitespace integrity checks.
    """

    reference_date: date
    normalizer: TextNormalizer


class ValidationRuleFunction(Protocol):
    """Callable contract shared by every rule family."""

    def __call__(
        self,
        entity_spec: EntitySpec,
        records: Sequence[BatchRecord],
        context: RuleContext,
    ) -> list[Violation]:
        """Evaluate one rule family against a batch.

        Args:
            entity_spec: Entity field contract.
            records: Coerced and normalized batch records.
            context: Run-scoped rule inputs.

        Returns:
            list[Violation]: Zero or more violations. Input records are never mutated.
        """


class RecordValidatorPort(Protocol):
    """Port definition for batch validation."""

    def validation_evaluate(self, records: Sequence[BatchRecord]) -> list[Violation]:
        """Run every applicable rule family and pool the violations.

        Args:
            records: Coerced and normalized batch records.

        Returns:
            list[Violation]: Violations from all rule families.
        """
