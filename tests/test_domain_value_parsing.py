"""Regression tests for typed field value coercion."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from cleansing_engine.domain import (
    FieldSpec,
    FieldType,
    MalformedRecordError,
    TextNormalizer,
    domain_coerce_field_value,
    domain_parse_compact_date,
    domain_parse_local_date,
)

_NORMALIZER = TextNormalizer()


def test_domain_parse_local_date_supports_iso_slash_and_datetime_text() -> None:
    """Parse ISO, slash-separated, and datetime-suffixed date text.

    Returns:
        None: Assertions validate parsed dates.

    Raises:
        AssertionError: Raised when supported formats are not parsed.
    """

    assert domain_parse_local_date("2024-01-31") == date(2024, 1, 31)
    assert domain_parse_local_date("2024/01/31") == date(2024, 1, 31)
    assert domain_parse_local_date("2024-01-31T10:15:00") == date(2024, 1, 31)
    assert domain_parse_local_date("2024-01-31 10:15:00") == date(2024, 1, 31)
    assert domain_parse_local_date("31.01.2024") is None
    assert domain_parse_local_date("   ") is None


def test_domain_parse_compact_date_rejects_zero_and_wrong_length() -> None:
    """Parse YYYYMMDD integers and reject zero, short, and impossible values.

    Returns:
        None: Assertions validate compact date parsing.

    Raises:
        AssertionError: Raised when compact dates are parsed incorrectly.
    """

    assert domain_parse_compact_date(20101229) == date(2010, 12, 29)
    assert domain_parse_compact_date(0) is None
    assert domain_parse_compact_date(5489) is None
    assert domain_parse_compact_date(20101340) is None


def test_domain_coerce_field_value_normalizes_text_fields() -> None:
    """Normalize text values and keep blank text as an empty string.

    Returns:
        None: Assertions validate text coercion.

    Raises:
        AssertionError: Raised when text coercion is incorrect.
    """

    field_spec = FieldSpec(name="cst_firstname", field_type=FieldType.STRING)

    assert domain_coerce_field_value(field_spec, " Jon ", _NORMALIZER) == "Jon"
    assert domain_coerce_field_value(field_spec, "  ", _NORMALIZER) == ""
    assert domain_coerce_field_value(field_spec, None, _NORMALIZER) is None


def test_domain_coerce_field_value_parses_numbers() -> None:
    """Coerce integer and decimal fields from numbers and formatted text.

    Returns:
        None: Assertions validate numeric coercion.

    Raises:
        AssertionError: Raised when numeric coercion is incorrect.
    """

    integer_spec = FieldSpec(name="sls_quantity", field_type=FieldType.INTEGER)
    decimal_spec = FieldSpec(name="sls_price", field_type=FieldType.DECIMAL)

    assert domain_coerce_field_value(integer_spec, 3, _NORMALIZER) == 3
    assert domain_coerce_field_value(integer_spec, "1,200", _NORMALIZER) == 1200
    assert domain_coerce_field_value(integer_spec, 4.0, _NORMALIZER) == 4
    assert domain_coerce_field_value(integer_spec, "", _NORMALIZER) is None
    assert domain_coerce_field_value(decimal_spec, "1,234.50", _NORMALIZER) == Decimal("1234.50")
    assert domain_coerce_field_value(decimal_spec, 0.1, _NORMALIZER) == Decimal("0.1")
    assert domain_coerce_field_value(decimal_spec, 12, _NORMALIZER) == Decimal(12)


def test_domain_coerce_field_value_parses_dates_and_null_sentinels() -> None:
    """Coerce dates from text, compact integers, and datetimes, and honor null sentinels.

    Returns:
        None: Assertions validate date coercion.

    Raises:
        AssertionError: Raised when date coercion is incorrect.
    """

    field_spec = FieldSpec(name="sls_order_dt", field_type=FieldType.DATE, null_values=(0,))

    assert domain_coerce_field_value(field_spec, 20101229, _NORMALIZER) == date(2010, 12, 29)
    assert domain_coerce_field_value(field_spec, "2010-12-29", _NORMALIZER) == date(2010, 12, 29)
    assert domain_coerce_field_value(field_spec, datetime(2010, 12, 29, 8, 0), _NORMALIZER) == date(2010, 12, 29)
    assert domain_coerce_field_value(field_spec, 0, _NORMALIZER) is None
    assert domain_coerce_field_value(field_spec, " ", _NORMALIZER) is None


@pytest.mark.parametrize("raw_value", [5489, 3245, -1, 20101340])
def test_domain_coerce_field_value_nulls_implausible_integer_dates(raw_value: int) -> None:
    """Coerce integers that are not valid YYYYMMDD dates to None instead of failing the record.

    Args:
        raw_value: Integer that does not form a calendar date.

    Returns:
        None: Assertions validate date coercion.

    Raises:
        AssertionError: Raised when the value is not nulled.
    """

    field_spec = FieldSpec(name="sls_due_dt", field_type=FieldType.DATE, null_values=(0,))

    assert domain_coerce_field_value(field_spec, raw_value, _NORMALIZER) is None


@pytest.mark.parametrize(
    ("field_type", "raw_value", "reason"),
    [
        (FieldType.STRING, 12, "wrong_type"),
        (FieldType.INTEGER, "twelve", "invalid_integer"),
        (FieldType.INTEGER, 2.5, "invalid_integer"),
        (FieldType.INTEGER, True, "wrong_type"),
        (FieldType.DECIMAL, "abc", "invalid_decimal"),
        (FieldType.DECIMAL, "NaN", "invalid_decimal"),
        (FieldType.DATE, "not a date", "invalid_date"),
        (FieldType.DATE, 12.5, "wrong_type"),
    ],
)
def test_domain_coerce_field_value_raises_malformed_record_error(
    field_type: FieldType,
    raw_value: object,
    reason: str,
) -> None:
    """Raise typed malformed-record errors with stable reason codes.

    Args:
        field_type: Declared field type.
        raw_value: Unparseable raw value.
        reason: Expected reason code.

    Returns:
        None: Assertions validate error classification.

    Raises:
        AssertionError: Raised when the error or its reason is incorrect.
    """

    field_spec = FieldSpec(name="value", field_type=field_type)

    with pytest.raises(MalformedRecordError) as error_info:
        domain_coerce_field_value(field_spec, raw_value, _NORMALIZER)

    assert error_info.value.reason == reason
    assert error_info.value.field_name == "value"
    assert error_info.value.raw_value == raw_value
