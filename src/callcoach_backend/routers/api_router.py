"""
Main API router for the Call Coaching backend.

This module aggregates all the functional router modules and provides
a single entry point for the API endpoints.
"""

import logging

from fastapi import APIRouter

from .modules import (
    analysis_router,
    coaching_router,
    health_router,
    transcript_router,
    upload_router,
)

logger = logging.getLogger(__name__)

# Create main API router
router = APIRouter(prefix="/api", tags=["api"])

# Include all sub-routers
router.include_router(upload_router)
router.include_router(transcript_router)
router.include_router(analysis_router)
router.include_router(coaching_router)
router.include_router(health_router)


logger.info("API router initialized with all sub-modules")
