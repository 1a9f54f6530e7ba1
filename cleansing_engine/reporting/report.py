"""Violation aggregation into a queryable, deterministic validation report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from cleansing_engine.domain import Violation

NULL_PROFILE_KEY = "<null>"


@dataclass(frozen=True)
class ValidationReport:
    """Violations of one engine run in batch order.

    Attributes:
        violations: De-duplicated violations ordered by entity first-seen order,
            then batch position, then detection order.
    """

    violations: tuple[Violation, ...]

    def report_passed(self) -> bool:
        """Return whether the run produced no violations."""

        return not self.violations

    def report_total_count(self) -> int:
        """Return total violation count."""

        return len(self.violations)

    def report_grouped(self) -> dict[str, dict[str, tuple[Violation, ...]]]:
        """Return violations grouped by rule name, then entity type.

        Returns:
            dict[str, dict[str, tuple[Violation, ...]]]: Groups in first-seen order.
        """

        grouped: dict[str, dict[str, list[Violation]]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.rule_name, {}).setdefault(violation.entity_type, []).append(violation)
        return {
            rule_name: {entity_type: tuple(items) for entity_type, items in by_entity.items()}
            for rule_name, by_entity in grouped.items()
        }

    def report_rule_names(self) -> tuple[str, ...]:
        """Return rule names with at least one violation, in first-seen order."""

        return tuple(dict.fromkeys(violation.rule_name for violation in self.violations))

    def report_by_rule(self, rule_name: str) -> tuple[Violation, ...]:
        """Return violations for one rule family."""

        return tuple(violation for violation in self.violations if violation.rule_name == rule_name)

    def report_by_entity(self, entity_type: str) -> tuple[Violation, ...]:
        """Return violations for one entity type."""

        return tuple(violation for violation in self.violations if violation.entity_type == entity_type)

    def report_by_record(self, record_identity: str, entity_type: str | None = None) -> tuple[Violation, ...]:
        """Return violations for one record identity.

        Args:
            record_identity: Identity text built from key fields.
            entity_type: Optional entity type filter, since identities can repeat across entities.

        Returns:
            tuple[Violation, ...]: Matching violations in report order.
        """

        return tuple(
            violation
            for violation in self.violations
            if violation.record_identity == record_identity
            and (entity_type is None or violation.entity_type == entity_type)
        )

    def report_counts_by_rule(self) -> dict[str, int]:
        """Return violation counts per rule family in first-seen order."""

        return dict(Counter(violation.rule_name for violation in self.violations))

    def report_to_payload(self) -> dict[str, object]:
        """Build a JSON-compatible report payload.

        Returns:
            dict[str, object]: Summary counters and grouped violations.
        """

        groups: list[dict[str, object]] = []
        for rule_name, by_entity in self.report_grouped().items():
            for entity_type, violations in by_entity.items():
                groups.append(
                    {
                        "rule_name": rule_name,
                        "entity_type": entity_type,
                        "count": len(violations),
                        "violations": [reporting_violation_to_payload(violation) for violation in violations],
                    }
                )
        return {
            "passed": self.report_passed(),
            "total_count": self.report_total_count(),
            "counts_by_rule": self.report_counts_by_rule(),
            "groups": groups,
        }


def reporting_aggregate(violations: Iterable[Violation]) -> ValidationReport:
    """Aggregate pooled violations into a deterministic report.

    Violations are stable-sorted by batch position within each entity type, so
    the report does not depend on which rule family ran first. Exact duplicates
    of (rule, entity, record, fields, reason) are dropped.

    Args:
        violations: Violations pooled from every rule family of one run.

    Returns:
        ValidationReport: Aggregated report.
    """

    pooled = list(violations)
    entity_rank: dict[str, int] = {}
    for violation in pooled:
        entity_rank.setdefault(violation.entity_type, len(entity_rank))

    ordered = sorted(pooled, key=lambda violation: (entity_rank[violation.entity_type], violation.record_index))

    seen_keys: set[tuple[object, ...]] = set()
    unique_violations: list[Violation] = []
    for violation in ordered:
        dedup_key = violation.violation_dedup_key()
        if dedup_key in seen_keys:
            continue
        seen_keys.add(dedup_key)
        unique_violations.append(violation)
    return ValidationReport(violations=tuple(unique_violations))


def reporting_merge(reports: Iterable[ValidationReport]) -> ValidationReport:
    """Merge per-entity reports of one run into a single report."""

    merged: list[Violation] = []
    for report in reports:
        merged.extend(report.violations)
    return reporting_aggregate(merged)


def reporting_profile_values(
    records: Sequence[Mapping[str, object]],
    field_names: Sequence[str],
) -> dict[str, dict[str, int]]:
    """Build distinct-value counts for selected fields.

    Args:
        records: Normalized records.
        field_names: Fields to profile, usually the categorical fields.

    Returns:
        dict[str, dict[str, int]]: Value counts per field, most frequent first.
    """

    profile: dict[str, dict[str, int]] = {}
    for field_name in field_names:
        counts = Counter(
            NULL_PROFILE_KEY if record.get(field_name) is None else str(record.get(field_name)) for record in records
        )
        profile[field_name] = dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))
    return profile


def reporting_violation_to_payload(violation: Violation) -> dict[str, object]:
    """Convert one violation to a JSON-compatible payload."""

    return {
        "rule_name": violation.rule_name,
        "entity_type": violation.entity_type,
        "record_index": violation.record_index,
        "record_identity": violation.record_identity,
        "fields": list(violation.fields),
        "raw_values": [reporting_jsonable_value(value) for value in violation.raw_values],
        "reason": violation.reason,
        "details": {key: reporting_jsonable_value(value) for key, value in violation.details.items()},
    }


def reporting_jsonable_value(value: object) -> object:
    """Convert dates and decimals to text; keep other JSON scalars unchanged."""

    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


__all__ = [
    "NULL_PROFILE_KEY",
    "ValidationReport",
    "reporting_aggregate",
    "reporting_jsonable_value",
    "reporting_merge",
    "reporting_profile_values",
    "reporting_violation_to_payload",
]
