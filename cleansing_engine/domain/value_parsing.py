"""Shared typed value coercion helpers.

Raw warehouse extracts encode the same semantic type several ways: dates as ISO
text, as slash-separated text, or as `YYYYMMDD` integers; decimals as numbers or
as locale-formatted text. This module coerces one raw value into its typed form
for a field spec and raises `MalformedRecordError` when it cannot.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .errors import MalformedRecordError
from .models import FieldSpec, FieldType
from .text_normalization import TextNormalizer

_DOMAIN_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%Y%m%d")
_DOMAIN_COMPACT_DATE_LENGTH = 8


def domain_parse_local_date(value: str) -> date | None:
    """Parse one local date text value into `date`.

    Args:
        value: Candidate date text.

    Returns:
        date | None: Parsed date when supported, else None.
    """

    normalized_value = value.strip()
    if not normalized_value:
        return None

    for candidate in _domain_build_date_candidates(normalized_value):
        try:
            return date.fromisoformat(candidate)
        except ValueError:
            pass

        for supported_format in _DOMAIN_DATE_FORMATS:
            try:
                return datetime.strptime(candidate, supported_format).date()
            except ValueError:
                continue

    return None


def domain_parse_compact_date(value: int) -> date | None:
    """Parse one `YYYYMMDD` integer date.

    Args:
        value: Candidate integer date.

    Returns:
        date | None: Parsed date, or None when the value is not an 8-digit valid date.
    """

    if value <= 0:
        return None
    compact_text = str(value)
    if len(compact_text) != _DOMAIN_COMPACT_DATE_LENGTH:
        return None
    try:
        return datetime.strptime(compact_text, "%Y%m%d").date()
    except ValueError:
        return None


def domain_coerce_field_value(field_spec: FieldSpec, raw_value: object, normalizer: TextNormalizer) -> object:
    """Coerce one raw value into the typed value declared by a field spec.

    Text values are normalized with the shared strip set. Numeric and date
    fields treat a blank string as null. Raw values listed in
    `field_spec.null_values` are treated as null for every type. Integer dates that are
    not a valid `YYYYMMDD` value coerce to None so the record is kept.

    Args:
        field_spec: Field contract.
        raw_value: Raw source value.
        normalizer: Shared text normalizer.

    Returns:
        object: Typed value (`str`, `int`, `Decimal`, `date`) or None.

    Raises:
        MalformedRecordError: Raised when the value has the wrong type or cannot be parsed.
    """

    if raw_value is None or domain_is_null_sentinel(field_spec, raw_value, normalizer):
        return None

    if field_spec.field_type.field_type_is_text():
        if not isinstance(raw_value, str):
            raise _domain_malformed(field_spec, raw_value, "wrong_type", "expected text")
        return normalizer.domain_text_normalize(raw_value)

    if isinstance(raw_value, bool):
        raise _domain_malformed(field_spec, raw_value, "wrong_type", f"expected {field_spec.field_type.value}")

    if field_spec.field_type is FieldType.INTEGER:
        return _domain_coerce_integer(field_spec, raw_value, normalizer)
    if field_spec.field_type is FieldType.DECIMAL:
        return _domain_coerce_decimal(field_spec, raw_value, normalizer)
    return _domain_coerce_date(field_spec, raw_value, normalizer)


def _domain_coerce_integer(field_spec: FieldSpec, raw_value: object, normalizer: TextNormalizer) -> int | None:
    if isinstance(raw_value, int):
        return raw_value

    if isinstance(raw_value, (float, Decimal)):
        decimal_value = Decimal(str(raw_value))
        if not decimal_value.is_finite() or decimal_value != decimal_value.to_integral_value():
            raise _domain_malformed(field_spec, raw_value, "invalid_integer", "expected integral value")
        return int(decimal_value)

    if isinstance(raw_value, str):
        normalized_value = normalizer.domain_text_normalize(raw_value)
        if not normalized_value:
            return None
        try:
            return int(normalized_value.replace(",", ""))
        except ValueError as error:
            raise _domain_malformed(field_spec, raw_value, "invalid_integer", "expected integer text") from error

    raise _domain_malformed(field_spec, raw_value, "wrong_type", "expected integer")


def _domain_coerce_decimal(field_spec: FieldSpec, raw_value: object, normalizer: TextNormalizer) -> Decimal | None:
    if isinstance(raw_value, Decimal):
        parsed_value = raw_value
    elif isinstance(raw_value, int):
        parsed_value = Decimal(raw_value)
    elif isinstance(raw_value, float):
        parsed_value = Decimal(str(raw_value))
    elif isinstance(raw_value, str):
        normalized_value = normalizer.domain_text_normalize(raw_value)
        if not normalized_value:
            return None
        # Comma thousands separators are stripped before parsing (1,234.56).
        try:
            parsed_value = Decimal(normalized_value.replace(",", ""))
        except (InvalidOperation, ValueError) as error:
            raise _domain_malformed(field_spec, raw_value, "invalid_decimal", "expected decimal text") from error
    else:
        raise _domain_malformed(field_spec, raw_value, "wrong_type", "expected decimal")

    if not parsed_value.is_finite():
        raise _domain_malformed(field_spec, raw_value, "invalid_decimal", "expected finite decimal")
    return parsed_value


def _domain_coerce_date(field_spec: FieldSpec, raw_value: object, normalizer: TextNormalizer) -> date | None:
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value

    if isinstance(raw_value, int):
        # Implausible compact dates (3245, -1) become null; the date range rule reports them.
        return domain_parse_compact_date(raw_value)

    if isinstance(raw_value, str):
        normalized_value = normalizer.domain_text_normalize(raw_value)
        if not normalized_value:
            return None
        parsed_date = domain_parse_local_date(normalized_value)
        if parsed_date is None:
            raise _domain_malformed(field_spec, raw_value, "invalid_date", "unsupported date format")
        return parsed_date

    raise _domain_malformed(field_spec, raw_value, "wrong_type", "expected date")


def domain_is_null_sentinel(field_spec: FieldSpec, raw_value: object, normalizer: TextNormalizer) -> bool:
    """Return whether a raw value matches one of the field's configured null sentinels."""

    if not field_spec.null_values:
        return False
    for sentinel in field_spec.null_values:
        if type(sentinel) is type(raw_value) and sentinel == raw_value:
            return True
    if isinstance(raw_value, str):
        normalized_value = normalizer.domain_text_normalize(raw_value)
        return any(isinstance(sentinel, str) and sentinel == normalized_value for sentinel in field_spec.null_values)
    return False


def _domain_malformed(field_spec: FieldSpec, raw_value: object, reason: str, detail: str) -> MalformedRecordError:
    return MalformedRecordError(
        f"malformed field {field_spec.name}: {detail} (value={raw_value!r})",
        reason=reason,
        field_name=field_spec.name,
        raw_value=raw_value,
    )


def _domain_build_date_candidates(normalized_value: str) -> list[str]:
    """Build ordered de-duplicated date candidates, dropping trailing time text."""

    candidate_values: list[str] = [normalized_value]
    for separator in ("T", " "):
        if separator in normalized_value:
            candidate_values.append(normalized_value.split(separator, maxsplit=1)[0])
    return list(dict.fromkeys(candidate_values))


__all__ = [
    "domain_coerce_field_value",
    "domain_is_null_sentinel",
    "domain_parse_compact_date",
    "domain_parse_local_date",
]
