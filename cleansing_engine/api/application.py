"""FastAPI application factory for the cleansing engine service."""

from fastapi import FastAPI

from cleansing_engine.config import EngineSettings
from cleansing_engine.jobs import CleansingPipeline

from .routers import api_create_cleansing_router, api_create_health_router


def create_api_application(settings: EngineSettings, pipeline: CleansingPipeline) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated engine settings used for runtime metadata and limits.
        pipeline: Cleansing pipeline executing batch runs.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """
    application = FastAPI(title="Cleansing Engine")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal foundation response for bootstrap verification.

        Returns:
            dict[str, str]: Service identification payload.
        """

        return {
            "service": "cleansing-engine",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(pipeline=pipeline))
    application.include_router(api_create_cleansing_router(settings=settings, pipeline=pipeline))

    return application
