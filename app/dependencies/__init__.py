from app.dependencies.services import (
    AppServices,
    get_image_pipeline,
    get_roster_service,
    get_services,
)

__all__ = [
    "AppServices",
    "get_services",
    "get_roster_service",
    "get_image_pipeline",
]
