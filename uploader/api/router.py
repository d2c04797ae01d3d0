"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from uploader.api import health, uploads, downloads

api_router = APIRouter()

# Include route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(uploads.router, prefix="/upload", tags=["upload"])
api_router.include_router(downloads.router, prefix="/download", tags=["download"])
