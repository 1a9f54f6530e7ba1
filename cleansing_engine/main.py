"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs one cleansing batch from a JSON file.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from cleansing_engine.bootstrap import bootstrap_create_application, bootstrap_create_pipeline
from cleansing_engine.config import EngineSettings, config_load_settings
from cleansing_engine.jobs import CleansingRunResult
from cleansing_engine.reporting import reporting_jsonable_value

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        ConfigurationError: Raised when the rule set is invalid.
    """

    argument_parser = argparse.ArgumentParser(description="Cleansing engine runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "validate", "entities"),
        help="Runtime command: `api` starts server, `validate` runs one batch from a JSON file, "
        "`entities` lists configured entity types",
        type=str,
    )
    argument_parser.add_argument(
        "--entity-type",
        dest="entity_type",
        type=str,
        help="Entity type for `validate`",
    )
    argument_parser.add_argument(
        "--input",
        dest="input_path",
        type=str,
        help="JSON file with a record list or an object with a `records` list for `validate`",
    )
    argument_parser.add_argument(
        "--output",
        dest="output_path",
        type=str,
        help="Optional JSON file receiving normalized records and the report",
    )
    argument_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when the report contains violations",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    main_configure_logging(settings)

    if parsed_arguments.command == "entities":
        pipeline = bootstrap_create_pipeline(settings=settings)
        for entity_type in pipeline.job_supported_entity_types():
            print(entity_type)
        return

    if parsed_arguments.command == "validate":
        if not parsed_arguments.entity_type or not parsed_arguments.input_path:
            argument_parser.error("`validate` requires --entity-type and --input")
        pipeline = bootstrap_create_pipeline(settings=settings)
        raw_records = main_read_records(Path(parsed_arguments.input_path))
        run_result = pipeline.job_cleansing_run(
            entity_type=parsed_arguments.entity_type,
            raw_records=raw_records,
        )
        main_print_summary(run_result)
        if parsed_arguments.output_path:
            Path(parsed_arguments.output_path).write_text(
                json.dumps(main_build_output_payload(run_result), indent=2),
                encoding="utf-8",
            )
        if parsed_arguments.strict and not run_result.report.report_passed():
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_level=settings.log_level.lower(),
    )


def main_configure_logging(settings: EngineSettings) -> None:
    """Configure root logging once from settings."""

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main_read_records(input_path: Path) -> list[object]:
    """Read raw records from a JSON file.

    Args:
        input_path: JSON file path.

    Returns:
        list[object]: Raw records.

    Raises:
        ValueError: Raised when the document is not a list or an object with a `records` list.
    """

    payload = json.loads(input_path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("records")
    if not isinstance(payload, list):
        raise ValueError(f"{input_path} must contain a JSON list of records or an object with a `records` list")
    return payload


def main_build_output_payload(run_result: CleansingRunResult) -> dict[str, object]:
    """Build JSON-compatible output for one run."""

    return {
        "entity_type": run_result.entity_type,
        "normalized_records": [
            {field_name: reporting_jsonable_value(value) for field_name, value in record.items()}
            for record in run_result.normalized_records
        ],
        "value_profile": run_result.value_profile,
        "report": run_result.report.report_to_payload(),
    }


def main_print_summary(run_result: CleansingRunResult) -> None:
    """Print violation counts by rule to stdout.

    Returns:
        None: Prints summary to stdout as side effect.
    """

    report = run_result.report
    status_label = "PASSED" if report.report_passed() else "VIOLATIONS"
    print(f"{run_result.entity_type}: {status_label} total={report.report_total_count()}")
    for rule_name, count in report.report_counts_by_rule().items():
        print(f"  {rule_name}: {count}")
    logger.debug("diagnostics=%s", list(run_result.diagnostics))


if __name__ == "__main__":
    main()
