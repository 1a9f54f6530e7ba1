"""Missing period end date inference.

Business rule: within one series (records sharing the `group_by` values,
ordered by start date) a period ends one granularity unit before the next
period starts. Only missing end dates are inferred; explicit end dates are
kept even when they disagree with the rule, so the date-order rule can still
report them. The last period of a series has no successor and stays open.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Sequence

from cleansing_engine.domain import BatchRecord, PeriodEndSpec


def validation_infer_period_end_dates(
    records: Sequence[BatchRecord],
    period_end: PeriodEndSpec | None,
) -> tuple[list[BatchRecord], list[int]]:
    """Fill missing period end dates from the next period start in the same series.

    Args:
        records: Normalized batch records in batch order.
        period_end: Inference contract, or None when the entity has no periods.

    Returns:
        tuple[list[BatchRecord], list[int]]: Records in batch order (new objects
        where an end date was inferred) and the batch indexes that were filled.
    """

    if period_end is None:
        return list(records), []

    start_dates_by_group: dict[tuple[object, ...], list[date]] = {}
    for record in records:
        start_value = record.values.get(period_end.start_field)
        if not isinstance(start_value, date):
            continue
        group_key = tuple(record.values.get(group_field) for group_field in period_end.group_by)
        start_dates_by_group.setdefault(group_key, []).append(start_value)

    for group_key, start_dates in start_dates_by_group.items():
        start_dates_by_group[group_key] = sorted(set(start_dates))

    gap = timedelta(days=period_end.granularity_days)
    resolved_records: list[BatchRecord] = []
    inferred_indexes: list[int] = []
    for record in records:
        end_value = record.values.get(period_end.end_field)
        start_value = record.values.get(period_end.start_field)
        if end_value is not None or not isinstance(start_value, date):
            resolved_records.append(record)
            continue

        group_key = tuple(record.values.get(group_field) for group_field in period_end.group_by)
        next_start = _validation_next_start_date(start_dates_by_group.get(group_key, []), start_value)
        if next_start is None:
            resolved_records.append(record)
            continue

        resolved_values = dict(record.values)
        resolved_values[period_end.end_field] = next_start - gap
        resolved_records.append(replace(record, values=resolved_values))
        inferred_indexes.append(record.record_index)

    return resolved_records, inferred_indexes


def _validation_next_start_date(sorted_start_dates: list[date], start_value: date) -> date | None:
    """Return the first start date strictly after `start_value`."""

    for candidate in sorted_start_dates:
        if candidate > start_value:
            return candidate
    return None


__all__ = ["validation_infer_period_end_dates"]
