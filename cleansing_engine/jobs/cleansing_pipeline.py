"""Job-layer cleansing pipeline with deterministic stage timeline diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from cleansing_engine.domain import (
    BatchRecord,
    EntitySpec,
    FieldType,
    MalformedRecordError,
    RuleSet,
    TextNormalizer,
    Violation,
    domain_build_stage_event,
    domain_coerce_field_value,
)
from cleansing_engine.mapping import CategoricalMapper, CategoricalMapperPort
from cleansing_engine.reporting import reporting_aggregate, reporting_merge, reporting_profile_values
from cleansing_engine.validation import (
    RULE_MALFORMED_RECORD,
    RecordValidator,
    RuleContext,
    validation_infer_period_end_dates,
)

from .interfaces import CleansingBatchesResult, CleansingPipelinePort, CleansingRunResult

logger = logging.getLogger(__name__)

_JOB_NULL_IDENTITY_TOKEN = "<null>"


@dataclass(frozen=True)
class CleansingPipelineConfig:
    """Configuration values for cleansing runs.

    Attributes:
        reference_date: Fixed "today" for date-range upper bounds. None uses the
            current date at the start of each run.
    """

    reference_date: date | None = None


class CleansingPipeline(CleansingPipelinePort):
    """Data-driven orchestrator: normalize, map, validate, report."""

    def __init__(
        self,
        rule_set: RuleSet,
        normalizer: TextNormalizer | None = None,
        mapper: CategoricalMapperPort | None = None,
        config: CleansingPipelineConfig | None = None,
    ):
        """Initialize cleansing pipeline dependencies.

        Args:
            rule_set: Validated rule set.
            normalizer: Optional shared normalizer. Defaults to the default strip set.
            mapper: Optional categorical mapper override.
            config: Optional run configuration.

        Raises:
            ConfigurationError: Raised when the rule set references undefined mappings or rules.
            ValueError: Raised when rule_set is missing.
        """

        if rule_set is None:
            raise ValueError("rule_set must not be None")

        resolved_normalizer = normalizer or TextNormalizer()
        resolved_config = config or CleansingPipelineConfig()
        startup_context = RuleContext(
            reference_date=resolved_config.reference_date or date.today(),
            normalizer=resolved_normalizer,
        )
        for entity_spec in rule_set.entities.values():
            RecordValidator(entity_spec=entity_spec, context=startup_context)

        self._rule_set = rule_set
        self._normalizer = resolved_normalizer
        self._mapper = mapper or CategoricalMapper(rule_set=rule_set, normalizer=resolved_normalizer)
        self._config = resolved_config

    def job_supported_entity_types(self) -> tuple[str, ...]:
        """Return configured entity types.

        Returns:
            tuple[str, ...]: Entity types in configuration order.
        """

        return self._rule_set.rule_set_entity_types()

    def job_cleansing_run(self, entity_type: str, raw_records: Sequence[object]) -> CleansingRunResult:
        """Normalize, map, and validate one batch of raw records.

        Malformed records are excluded from the normalized output and reported;
        records with rule violations stay in the output. The run always
        completes with a full report.

        Args:
            entity_type: Configured entity type.
            raw_records: Raw records supplied by the extraction collaborator.

        Returns:
            CleansingRunResult: Normalized records, report, value profile, and diagnostics.

        Raises:
            ValueError: Raised when the entity type is not configured.
        """

        entity_spec = self._rule_set.rule_set_entity(entity_type.strip())
        context = RuleContext(
            reference_date=self._config.reference_date or date.today(),
            normalizer=self._normalizer,
        )
        diagnostics: list[dict[str, object]] = []

        batch_records, malformed_violations = self._job_normalize_batch(entity_spec, raw_records)
        diagnostics.append(
            domain_build_stage_event(
                stage="normalize",
                status="completed",
                entity_type=entity_spec.entity_type,
                details={
                    "input_count": len(raw_records),
                    "normalized_count": len(batch_records),
                    "malformed_count": len(malformed_violations),
                },
            )
        )

        resolved_records, inferred_indexes = validation_infer_period_end_dates(batch_records, entity_spec.period_end)
        if entity_spec.period_end is not None:
            diagnostics.append(
                domain_build_stage_event(
                    stage="infer_period_end",
                    status="completed",
                    entity_type=entity_spec.entity_type,
                    details={"inferred_count": len(inferred_indexes), "record_indexes": inferred_indexes},
                )
            )

        rule_violations = RecordValidator(entity_spec=entity_spec, context=context).validation_evaluate(
            resolved_records
        )
        diagnostics.append(
            domain_build_stage_event(
                stage="validate",
                status="completed",
                entity_type=entity_spec.entity_type,
                details={"rules": list(entity_spec.rules), "violation_count": len(rule_violations)},
            )
        )

        report = reporting_aggregate([*malformed_violations, *rule_violations])
        normalized_records = tuple(dict(record.values) for record in resolved_records)
        categorical_fields = [
            field_spec.name for field_spec in entity_spec.fields if field_spec.field_type is FieldType.CATEGORICAL
        ]
        value_profile = reporting_profile_values(normalized_records, categorical_fields)
        diagnostics.append(
            domain_build_stage_event(
                stage="report",
                status="passed" if report.report_passed() else "violations_found",
                entity_type=entity_spec.entity_type,
                details={"total_count": report.report_total_count(), "counts_by_rule": report.report_counts_by_rule()},
            )
        )

        logger.info(
            "cleansing run completed entity_type=%s input=%d normalized=%d violations=%d passed=%s",
            entity_spec.entity_type,
            len(raw_records),
            len(normalized_records),
            report.report_total_count(),
            report.report_passed(),
        )
        return CleansingRunResult(
            entity_type=entity_spec.entity_type,
            normalized_records=normalized_records,
            report=report,
            value_profile=value_profile,
            diagnostics=tuple(diagnostics),
        )

    def job_cleansing_run_batches(self, batches: Mapping[str, Sequence[object]]) -> CleansingBatchesResult:
        """Run several entity-type batches and merge their reports.

        Args:
            batches: Raw record batches keyed by entity type.

        Returns:
            CleansingBatchesResult: Per-entity results and the merged report.

        Raises:
            ValueError: Raised when one entity type is not configured or two keys name the same entity type.
        """

        results: dict[str, CleansingRunResult] = {}
        for entity_type, raw_records in batches.items():
            result = self.job_cleansing_run(entity_type=entity_type, raw_records=raw_records)
            if result.entity_type in results:
                raise ValueError(f"duplicate batch for entity_type={result.entity_type}")
            results[result.entity_type] = result
        merged_report = reporting_merge(result.report for result in results.values())
        return CleansingBatchesResult(results=results, report=merged_report)

    def _job_normalize_batch(
        self,
        entity_spec: EntitySpec,
        raw_records: Sequence[object],
    ) -> tuple[list[BatchRecord], list[Violation]]:
        """Coerce and normalize every raw record, separating malformed ones.

        Args:
            entity_spec: Entity field contract.
            raw_records: Raw records.

        Returns:
            tuple[list[BatchRecord], list[Violation]]: Normalized records and malformed-record violations.
        """

        batch_records: list[BatchRecord] = []
        malformed_violations: list[Violation] = []
        for record_index, raw_record in enumerate(raw_records):
            try:
                batch_records.append(self._job_normalize_record(entity_spec, record_index, raw_record))
            except MalformedRecordError as error:
                logger.debug(
                    "malformed record excluded entity_type=%s record_index=%d reason=%s",
                    entity_spec.entity_type,
                    record_index,
                    error.reason,
                )
                malformed_violations.append(
                    Violation(
                        rule_name=RULE_MALFORMED_RECORD,
                        entity_type=entity_spec.entity_type,
                        record_index=record_index,
                        record_identity=_job_build_raw_identity(entity_spec, record_index, raw_record),
                        fields=(error.field_name,) if error.field_name is not None else (),
                        raw_values=(error.raw_value,) if error.field_name is not None else (),
                        reason=error.reason,
                        details={"message": str(error)},
                    )
                )
        return batch_records, malformed_violations

    def _job_normalize_record(self, entity_spec: EntitySpec, record_index: int, raw_record: object) -> BatchRecord:
        """Build one normalized record without touching the raw record.

        Args:
            entity_spec: Entity field contract.
            record_index: Position in the raw batch.
            raw_record: Raw record.

        Returns:
            BatchRecord: Normalized record with declared fields first, extras unchanged.

        Raises:
            MalformedRecordError: Raised when the record is not a mapping, misses a field, or has a bad value.
        """

        if not isinstance(raw_record, Mapping):
            raise MalformedRecordError(
                f"record {record_index} must be a mapping, got {type(raw_record).__name__}",
                reason="not_a_mapping",
            )

        values: dict[str, object] = {}
        for field_spec in entity_spec.fields:
            if field_spec.name not in raw_record:
                raise MalformedRecordError(
                    f"record {record_index} is missing field {field_spec.name}",
                    reason="missing_field",
                    field_name=field_spec.name,
                )
            value = domain_coerce_field_value(field_spec, raw_record[field_spec.name], self._normalizer)
            if field_spec.field_type is FieldType.CATEGORICAL:
                value = self._mapper.mapping_map_value(entity_spec.entity_type, field_spec.name, value)
            values[field_spec.name] = value

        for field_name, raw_value in raw_record.items():
            if field_name not in values:
                values[field_name] = raw_value

        return BatchRecord(
            record_index=record_index,
            record_identity=_job_build_identity(entity_spec, record_index, values),
            raw_values=raw_record,
            values=values,
        )


def _job_build_identity(entity_spec: EntitySpec, record_index: int, values: Mapping[str, object]) -> str:
    """Build deterministic identity text from key field values."""

    key_fields = entity_spec.entity_key_fields()
    if not key_fields:
        return f"#{record_index}"
    return "|".join(f"{key_field}={_job_format_identity_value(values.get(key_field))}" for key_field in key_fields)


def _job_build_raw_identity(entity_spec: EntitySpec, record_index: int, raw_record: object) -> str:
    """Build identity text for a malformed record from whatever raw key values exist."""

    if not isinstance(raw_record, Mapping):
        return f"#{record_index}"
    return _job_build_identity(entity_spec, record_index, raw_record)


def _job_format_identity_value(value: object) -> str:
    if value is None:
        return _JOB_NULL_IDENTITY_TOKEN
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value).strip()


def job_cleansing_run(rule_set: RuleSet, entity_type: str, raw_records: Sequence[object]) -> CleansingRunResult:
    """Run one batch through a default-configured pipeline.

    Args:
        rule_set: Validated rule set.
        entity_type: Configured entity type.
        raw_records: Raw records.

    Returns:
        CleansingRunResult: Normalized records and validation report.

    Raises:
        ConfigurationError: Raised when the rule set is inconsistent.
        ValueError: Raised when the entity type is not configured.
    """

    pipeline = CleansingPipeline(rule_set=rule_set)
    return pipeline.job_cleansing_run(entity_type=entity_type, raw_records=raw_records)


__all__ = [
    "CleansingPipeline",
    "CleansingPipelineConfig",
    "job_cleansing_run",
]
