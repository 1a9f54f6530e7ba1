"""Regression tests for missing period end date inference."""

from __future__ import annotations

from datetime import date

from cleansing_engine.domain import BatchRecord, PeriodEndSpec
from cleansing_engine.validation import validation_infer_period_end_dates

_PERIOD_END = PeriodEndSpec(start_field="start", end_field="end", group_by=("product",))


def _build_records(rows: list[dict[str, object]]) -> list[BatchRecord]:
    """Wrap normalized rows into batch records.

    Args:
        rows: Normalized values per record.

    Returns:
        list[BatchRecord]: Batch records indexed by position.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return [
        BatchRecord(record_index=index, record_identity=f"#{index}", raw_values=row, values=row)
        for index, row in enumerate(rows)
    ]


def test_validation_infer_period_end_dates_uses_next_start_minus_one_day() -> None:
    """Infer each missing end date as the day before the next period start in the series.

    Returns:
        None: Assertions validate inferred end dates.

    Raises:
        AssertionError: Raised when inferred end dates are incorrect.
    """

    records = _build_records(
        [
            {"product": "BK-1", "start": date(2024, 2, 1), "end": None},
            {"product": "BK-1", "start": date(2024, 1, 1), "end": None},
            {"product": "BK-2", "start": date(2024, 1, 15), "end": None},
        ]
    )

    resolved_records, inferred_indexes = validation_infer_period_end_dates(records, _PERIOD_END)

    assert inferred_indexes == [1]
    assert resolved_records[1].values["end"] == date(2024, 1, 31)
    assert resolved_records[0].values["end"] is None
    assert resolved_records[2].values["end"] is None


def test_validation_infer_period_end_dates_keeps_explicit_end_dates_and_inputs() -> None:
    """Keep explicit end dates and leave the input records unchanged.

    Returns:
        None: Assertions validate non-destructive inference.

    Raises:
        AssertionError: Raised when explicit dates or inputs are modified.
    """

    records = _build_records(
        [
            {"product": "BK-1", "start": date(2024, 1, 1), "end": date(2023, 12, 31)},
            {"product": "BK-1", "start": date(2024, 2, 1), "end": None},
            {"product": "BK-1", "start": date(2024, 1, 10), "end": None},
        ]
    )

    resolved_records, inferred_indexes = validation_infer_period_end_dates(records, _PERIOD_END)

    assert inferred_indexes == [2]
    assert resolved_records[0].values["end"] == date(2023, 12, 31)
    assert resolved_records[2].values["end"] == date(2024, 1, 31)
    assert records[2].values["end"] is None


def test_validation_infer_period_end_dates_skips_duplicate_and_missing_starts() -> None:
    """Skip start dates equal to the record's own and records without a start date.

    Returns:
        None: Assertions validate duplicate and missing start handling.

    Raises:
        AssertionError: Raised when duplicate or missing starts are handled incorrectly.
    """

    records = _build_records(
        [
            {"product": "BK-1", "start": date(2024, 1, 1), "end": None},
            {"product": "BK-1", "start": date(2024, 1, 1), "end": None},
            {"product": "BK-1", "start": date(2024, 3, 1), "end": None},
            {"product": "BK-1", "start": None, "end": None},
        ]
    )

    resolved_records, inferred_indexes = validation_infer_period_end_dates(records, _PERIOD_END)

    assert inferred_indexes == [0, 1]
    assert resolved_records[0].values["end"] == date(2024, 2, 29)
    assert resolved_records[3].values["end"] is None


def test_validation_infer_period_end_dates_without_contract_returns_records_unchanged() -> None:
    """Return the same records when the entity has no period contract.

    Returns:
        None: Assertions validate passthrough behavior.

    Raises:
        AssertionError: Raised when records are changed without a contract.
    """

    records = _build_records([{"product": "BK-1", "start": date(2024, 1, 1), "end": None}])

    resolved_records, inferred_indexes = validation_infer_period_end_dates(records, None)

    assert resolved_records == records
    assert inferred_indexes == []
