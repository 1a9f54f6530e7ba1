"""Cleansing API router composition for batch normalization and validation endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cleansing_engine.config import EngineSettings
from cleansing_engine.jobs import CleansingPipeline, CleansingRunResult

_API_BATCHES_ROUTE_NAME = "batches"


class CleansingBatchRequest(BaseModel):
    """Request body for one entity-type batch."""

    records: list[Any] = Field(default_factory=list)


class CleansingBatchesRequest(BaseModel):
    """Request body for several entity-type batches."""

    batches: dict[str, list[Any]] = Field(default_factory=dict)


def api_create_cleansing_router(settings: EngineSettings, pipeline: CleansingPipeline) -> APIRouter:
    """Create cleansing router with entity listing and batch run endpoints.

    Args:
        settings: Runtime settings used for request limits.
        pipeline: Cleansing pipeline executing runs.

    Returns:
        APIRouter: Router exposing cleansing APIs.

    Raises:
        ValueError: Raised when dependencies are invalid or an entity type is named `batches`.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if pipeline is None:
        raise ValueError("pipeline must not be None")
    # `/cleansing/batches` is a literal route and would shadow an entity of that name.
    if _API_BATCHES_ROUTE_NAME in pipeline.job_supported_entity_types():
        raise ValueError(f"entity type {_API_BATCHES_ROUTE_NAME} collides with the batches route")

    router = APIRouter(prefix="/cleansing", tags=["cleansing"])

    @router.get("/entities")
    def api_cleansing_entity_list() -> JSONResponse:
        """Return configured entity types.

        Returns:
            JSONResponse: Entity type list in configuration order.
        """

        payload = {"entity_types": list(pipeline.job_supported_entity_types())}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post(f"/{_API_BATCHES_ROUTE_NAME}")
    def api_cleansing_run_batches(request: CleansingBatchesRequest) -> JSONResponse:
        """Run several entity-type batches and return a merged report.

        Args:
            request: Raw record batches keyed by entity type.

        Returns:
            JSONResponse: Per-entity results and merged report payload.
        """

        supported_entity_types = pipeline.job_supported_entity_types()
        requested_entity_types = [entity_type.strip() for entity_type in request.batches]
        unknown_entity_types = [
            entity_type for entity_type in requested_entity_types if entity_type not in supported_entity_types
        ]
        if unknown_entity_types:
            payload = {
                "status": "error",
                "message": f"unsupported entity types: {', '.join(unknown_entity_types)}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        duplicate_entity_types = sorted(
            {entity_type for entity_type in requested_entity_types if requested_entity_types.count(entity_type) > 1}
        )
        if duplicate_entity_types:
            payload = {
                "status": "error",
                "message": f"duplicate batches for entity types: {', '.join(duplicate_entity_types)}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        total_records = sum(len(records) for records in request.batches.values())
        if total_records > settings.api_max_batch_size:
            return _api_batch_too_large(total_records, settings.api_max_batch_size)

        batches_result = pipeline.job_cleansing_run_batches(batches=request.batches)
        payload = {
            "passed": batches_result.report.report_passed(),
            "total_violations": batches_result.report.report_total_count(),
            "results": {
                entity_type: _api_build_run_payload(result)
                for entity_type, result in batches_result.results.items()
            },
            "report": batches_result.report.report_to_payload(),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/{entity_type}")
    def api_cleansing_run(entity_type: str, request: CleansingBatchRequest) -> JSONResponse:
        """Normalize and validate one batch for one entity type.

        Args:
            entity_type: Configured entity type.
            request: Raw record batch.

        Returns:
            JSONResponse: Normalized records and report payload.
        """

        if len(request.records) > settings.api_max_batch_size:
            return _api_batch_too_large(len(request.records), settings.api_max_batch_size)

        try:
            run_result = pipeline.job_cleansing_run(entity_type=entity_type, raw_records=request.records)
        except ValueError as error:
            payload = {
                "status": "error",
                "message": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        return JSONResponse(content=_api_build_run_payload(run_result), status_code=status.HTTP_200_OK)

    return router


def _api_build_run_payload(run_result: CleansingRunResult) -> dict[str, object]:
    """Build JSON-compatible payload for one run result."""

    return {
        "entity_type": run_result.entity_type,
        "passed": run_result.report.report_passed(),
        "total_violations": run_result.report.report_total_count(),
        "normalized_records": jsonable_encoder(
            list(run_result.normalized_records),
            custom_encoder={Decimal: str},
        ),
        "value_profile": run_result.value_profile,
        "report": run_result.report.report_to_payload(),
        "diagnostics": list(run_result.diagnostics),
    }


def _api_batch_too_large(record_count: int, max_batch_size: int) -> JSONResponse:
    payload = {
        "status": "error",
        "message": f"batch of {record_count} records exceeds api_max_batch_size={max_batch_size}",
    }
    return JSONResponse(content=payload, status_code=413)
