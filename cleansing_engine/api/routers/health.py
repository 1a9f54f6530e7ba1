"""Health endpoint router composition for app and rule-set checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from cleansing_engine.jobs import CleansingPipelinePort


def api_create_health_router(pipeline: CleansingPipelinePort) -> APIRouter:
    """Create health-check router reporting app state and loaded entity types.

    Args:
        pipeline: Cleansing pipeline used to report configured entity types.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when pipeline is invalid.
    """

    if pipeline is None:
        raise ValueError("pipeline must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and rule-set health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.
        """

        entity_types = list(pipeline.job_supported_entity_types())
        payload = {
            "status": "ok" if entity_types else "degraded",
            "app": "up",
            "rule_set": "loaded" if entity_types else "empty",
            "entity_count": len(entity_types),
        }
        status_code = status.HTTP_200_OK if entity_types else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    return router
