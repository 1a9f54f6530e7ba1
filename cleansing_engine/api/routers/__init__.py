"""API router package for endpoint composition."""

from .cleansing import api_create_cleansing_router
from .health import api_create_health_router

__all__ = ["api_create_cleansing_router", "api_create_health_router"]
