"""
Health check routes for the Call Coaching backend.

This module provides health and status endpoints for monitoring the application.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from callcoach_backend.controllers import system_controller
from callcoach_backend.llm_client import LLMClient, get_llm_client_dependency
from callcoach_backend.models.transcription import BaseTranscriptionProvider
from callcoach_backend.services.transcription import get_transcription_provider_dependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness check with a database ping."""
    return await system_controller.get_health()


@router.get("/status")
async def status_check(
    transcription_provider: Optional[BaseTranscriptionProvider] = Depends(get_transcription_provider_dependency),
    llm_client: Optional[LLMClient] = Depends(get_llm_client_dependency),
):
    """Database, STT and LLM reachability and configuration state."""
    return await system_controller.get_system_status(transcription_provider, llm_client)
