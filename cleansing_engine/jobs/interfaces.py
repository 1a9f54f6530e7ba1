"""Typed interfaces for cleansing pipeline orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Protocol, Sequence

from cleansing_engine.reporting import ValidationReport


@dataclass(frozen=True)
class CleansingRunResult:
    """Result contract for one entity-type batch run.

    Unpacks as `(normalized_records, report)` for callers that only need the
    records and the report.

    Attributes:
        entity_type: Entity type processed.
        normalized_records: New normalized records, malformed records excluded.
        report: Validation report for the batch.
        value_profile: Distinct canonical value counts per categorical field.
        diagnostics: Stage timeline events.
    """

    entity_type: str
    normalized_records: tuple[dict[str, object], ...]
    report: ValidationReport
    value_profile: Mapping[str, Mapping[str, int]]
    diagnostics: tuple[dict[str, object], ...]

    def __iter__(self) -> Iterator[object]:
        yield self.normalized_records
        yield self.report


@dataclass(frozen=True)
class CleansingBatchesResult:
    """Result contract for several entity-type batches processed together.

    Attributes:
        results: Per-entity results in input order, keyed by configured entity type.
        report: Merged report across all entity types.
    """

    results: Mapping[str, CleansingRunResult]
    report: ValidationReport


class CleansingPipelinePort(Protocol):
    """Port definition for normalization and validation runs."""

    def job_supported_entity_types(self) -> tuple[str, ...]:
        """Return configured entity types.

        Returns:
            tuple[str, ...]: Entity types in configuration order.
        """

    def job_cleansing_run(self, entity_type: str, raw_records: Sequence[object]) -> CleansingRunResult:
        """Normalize, map, and validate one batch of raw records.

        Args:
            entity_type: Configured entity type.
            raw_records: Raw records supplied by the extraction collaborator.

        Returns:
            CleansingRunResult: Normalized records and validation report.

        Raises:
            ValueError: Raised when the entity type is not configured.
        """
