"""
HTTP API Routes - health check and session capability flags.

The capability endpoints tell the dashboard whether image fields should be
shown, and let the admin re-probe the schema after fixing it ("reload").
"""

from fastapi import APIRouter, Depends

from app.dependencies import AppServices, get_services
from app.schemas import CapabilitiesResponse
from app.utils.logger import setup_logger

logger = setup_logger("api")

router = APIRouter(prefix="/api")


@router.get("/")
async def read_root():
    """API health check endpoint."""
    return {"message": "Roster admin API is running!"}


@router.get("/capabilities", response_model=CapabilitiesResponse)
async def get_capabilities(services: AppServices = Depends(get_services)):
    return CapabilitiesResponse.model_validate(services.capabilities.to_dict())


@router.post("/capabilities/reload", response_model=CapabilitiesResponse)
async def reload_capabilities(services: AppServices = Depends(get_services)):
    """Re-probe image column support and re-enable uploads for the session."""
    capabilities = await services.reload_capabilities()
    logger.info(f"Capabilities reloaded: {capabilities.to_dict()}")
    return CapabilitiesResponse.model_validate(capabilities.to_dict())
