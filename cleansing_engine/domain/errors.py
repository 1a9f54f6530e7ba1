"""Project-native typed exceptions for cleansing engine failures."""

from __future__ import annotations


class CleansingEngineError(Exception):
    """Base exception for engine-level failures."""


class ConfigurationError(CleansingEngineError, ValueError):
    """Rule-set configuration references an undefined field, mapping, or rule.

    Raised while building the rule set or wiring engine components. Never raised
    for per-record data problems.
    """


class MalformedRecordError(CleansingEngineError, ValueError):
    """One record cannot satisfy its entity field contract.

    Attributes:
        field_name: Offending field name when known.
        raw_value: Offending raw value when known.
        reason: Stable machine-readable reason code.
    """

    def __init__(
        self,
        message: str,
        reason: str,
        field_name: str | None = None,
        raw_value: object | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.field_name = field_name
        self.raw_value = raw_value


__all__ = [
    "CleansingEngineError",
    "ConfigurationError",
    "MalformedRecordError",
]
