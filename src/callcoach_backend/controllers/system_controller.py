"""
System controller for the service banner, health and status endpoints.
"""

import logging
import time
from typing import Optional

from callcoach_backend import __version__
from callcoach_backend.app_config import get_app_config
from callcoach_backend.database import ping_database
from callcoach_backend.llm_client import LLMClient, async_health_check
from callcoach_backend.models.transcription import BaseTranscriptionProvider
from callcoach_backend.models.common import utc_now

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "upload": "/api/upload",
    "transcript": "/api/transcript",
    "analysis": "/api/analysis",
    "coaching": "/api/coaching",
    "health": "/api/health",
    "status": "/api/status",
}


async def get_service_info() -> dict:
    return {
        "success": True,
        "message": "Call Coaching Backend API",
        "data": {
            "version": __version__,
            "endpoints": ENDPOINTS,
            "features": [
                "Audio file upload",
                "Speech-to-text transcription",
                "Sentiment and behaviour analysis",
                "Agent coaching plan generation",
            ],
        },
    }


async def get_health() -> dict:
    """Liveness plus a database ping."""
    database_connected = await ping_database()
    return {
        "success": True,
        "message": "Service is running",
        "data": {
            "status": "healthy" if database_connected else "degraded",
            "database": "connected" if database_connected else "disconnected",
            "timestamp": utc_now(),
            "environment": get_app_config().environment,
        },
    }


async def _provider_status(check, name: Optional[str]) -> dict:
    try:
        result = await check()
    except Exception as e:
        logger.warning(f"Health check for {name} failed: {e}")
        result = {"connected": False, "error": str(e)}
    return {"provider": name, "configured": True, **result}


async def get_system_status(
    transcription_provider: Optional[BaseTranscriptionProvider],
    llm_client: Optional[LLMClient],
) -> dict:
    """Database reachability plus STT and LLM reachability and configuration state."""
    start_time = time.monotonic()
    config = get_app_config()

    database_connected = await ping_database()

    if transcription_provider is not None:
        stt = await _provider_status(transcription_provider.health_check, transcription_provider.name)
    else:
        stt = {"provider": None, "configured": False, "connected": False}

    if llm_client is not None:
        llm = await _provider_status(lambda: async_health_check(llm_client), llm_client.get_default_model())
    else:
        llm = {"provider": None, "configured": False, "connected": False}

    return {
        "success": True,
        "data": {
            "services": {
                "api": {"status": "running", "version": __version__},
                "database": {"connected": database_connected, "name": config.mongodb_database},
                "stt": stt,
                "llm": llm,
            },
            "endpoints": ENDPOINTS,
            "openai": {
                "whisper": transcription_provider is not None and transcription_provider.name == "whisper",
                "gpt": llm_client is not None,
                "configured": config.openai_configured,
            },
            "checkDuration": int((time.monotonic() - start_time) * 1000),
            "timestamp": utc_now(),
        },
    }
