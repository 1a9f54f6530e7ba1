"""Reporting layer package for violation aggregation."""

from .report import (
	NULL_PROFILE_KEY,
	ValidationReport,
	reporting_aggregate,
	reporting_jsonable_value,
	reporting_merge,
	reporting_profile_values,
	reporting_violation_to_payload,
)

__all__ = [
	"NULL_PROFILE_KEY",
	"ValidationReport",
	"reporting_aggregate",
	"reporting_jsonable_value",
	"reporting_merge",
	"reporting_profile_values",
	"reporting_violation_to_payload",
]
