"""
Health check endpoint.
Reports whether the storage backend is configured.
"""
from fastapi import APIRouter, HTTPException

from uploader.config import check_storage_settings, settings
from uploader.storage import get_s3_client

router = APIRouter()


@router.get("")
async def health_check():
    """
    Health check endpoint.
    Returns status of the storage configuration.
    """
    check = check_storage_settings(settings)
    health_status = {
        "status": "healthy",
        "storage": "configured" if check.ok and get_s3_client().is_configured else "not configured",
    }

    if health_status["storage"] != "configured":
        health_status["status"] = "unhealthy"
        health_status["missing"] = check.missing
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
