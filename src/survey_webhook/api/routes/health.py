"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends

from ...config import Config
from ...database.engine import get_database
from ..dependencies import get_config
from ..schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(config: Config = Depends(get_config)) -> HealthResponse:
    """Report service status and database availability."""
    try:
        database = "connected" if get_database().ping() else "unavailable"
    except RuntimeError:
        database = "not initialized"

    return HealthResponse(
        status="healthy" if database == "connected" else "degraded",
        version=config.api_version,
        database=database,
        host_backend=config.host_backend,
    )
